"""
Unit of Work - one database transaction per ledger operation

- The UoW opens its own session on enter and closes it on exit
- Repositories obtained from the UoW share that session (and its transaction)
- Leaving the block without commit() rolls everything back
- Storage failures leave the block as InternalError / TransientStorageError

Usage:
    async with uow:
        ride = await uow.ride_command_repo.get_by_id(ride_id=ride_id, for_update=True)
        ...
        await uow.commit()
"""

from __future__ import annotations

import abc
from types import TracebackType
from typing import TYPE_CHECKING, Optional

from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.platform.exception.exceptions import InternalError, TransientStorageError
from src.platform.logging.loguru_io import Logger


if TYPE_CHECKING:
    from src.service.ride_pool.app.interface.i_booking_command_repo import IBookingCommandRepo
    from src.service.ride_pool.app.interface.i_ride_command_repo import IRideCommandRepo


class AbstractUnitOfWork(abc.ABC):
    ride_command_repo: IRideCommandRepo
    booking_command_repo: IBookingCommandRepo

    async def __aenter__(self) -> AbstractUnitOfWork:
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        await self.rollback()

    async def commit(self) -> None:
        await self._commit()

    @abc.abstractmethod
    async def _commit(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def rollback(self) -> None:
        raise NotImplementedError


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        self.session_maker = session_maker
        self.session: Optional[AsyncSession] = None

    async def __aenter__(self) -> SqlAlchemyUnitOfWork:
        from src.service.ride_pool.driven_adapter.repo.booking_command_repo_impl import (
            BookingCommandRepoImpl,
        )
        from src.service.ride_pool.driven_adapter.repo.ride_command_repo_impl import (
            RideCommandRepoImpl,
        )

        self.session = self.session_maker()
        self.ride_command_repo = RideCommandRepoImpl(session=self.session)
        self.booking_command_repo = BookingCommandRepoImpl(session=self.session)
        await super().__aenter__()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        try:
            await super().__aexit__(exc_type, exc, tb)
        except SQLAlchemyError as rollback_error:
            Logger.base.warning(f'⚠️ [UOW] Rollback failed: {rollback_error!r}')
            exc = exc or rollback_error
        finally:
            if self.session is not None:
                await self.session.close()
                self.session = None

        # Expected integrity violations were already translated by the repositories
        if isinstance(exc, OperationalError):
            Logger.base.warning(f'⚠️ [UOW] Transient storage failure: {exc.orig!r}')
            raise TransientStorageError('Storage temporarily unavailable') from exc
        if isinstance(exc, SQLAlchemyError):
            Logger.base.opt(exception=exc).error(
                '💥 [UOW] Storage failure, transaction rolled back'
            )
            raise InternalError('Storage failure') from exc

    async def _commit(self) -> None:
        assert self.session is not None, 'commit() called outside of `async with uow`'
        await self.session.commit()

    async def rollback(self) -> None:
        if self.session is not None:
            await self.session.rollback()
