class CustomBaseError(Exception):
    """Base class for all custom exceptions - controls logging behavior in @Logger.io"""

    def __init__(self, message: str, status_code: int) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class DomainError(CustomBaseError):
    """Business rule violation (self-booking, not enough seats, already cancelled...)"""

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message, status_code)


class ForbiddenError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 403)


class NotFoundError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 404)


class ConflictError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 409)


class AuthenticationError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 401)


class InternalError(CustomBaseError):
    """Storage or transaction failure"""

    def __init__(self, message: str, status_code: int = 500) -> None:
        super().__init__(message, status_code)


class DataIntegrityError(InternalError):
    """Stored state already violates a ledger invariant (e.g. seats above capacity)"""

    def __init__(self, message: str) -> None:
        super().__init__(message, 500)


class TransientStorageError(InternalError):
    """Storage failure that may succeed when the whole transaction is retried"""

    def __init__(self, message: str) -> None:
        super().__init__(message, 503)
