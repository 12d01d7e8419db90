from enum import StrEnum


class BookingStatus(StrEnum):
    PENDING = 'pending'  # never persisted: bookings are confirmed on creation
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'
    COMPLETED = 'completed'

    @property
    def is_terminal(self) -> bool:
        return self in (BookingStatus.CANCELLED, BookingStatus.COMPLETED)
