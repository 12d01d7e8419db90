import asyncio
import time
from typing import Callable, List, Optional, Self, Tuple

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace
from uuid_utils import UUID

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import NotFoundError, TransientStorageError
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ride_pool_metrics import metrics
from src.service.ride_pool.app.service.best_effort_notifier import BestEffortNotifier
from src.service.ride_pool.domain.entity.ride_entity import Ride
from src.service.ride_pool.domain.enum.booking_status import BookingStatus
from src.service.ride_pool.domain.enum.ride_status import RideStatus
from src.service.ride_pool.domain.value_object.ride_notification import (
    RideNotification,
    ride_cancelled_notice,
)


class UpdateRideStatusUseCase:
    """
    Driver moves a ride through its state machine.

    - ACTIVE: status change only
    - COMPLETED: every confirmed booking becomes completed in the same transaction
    - CANCELLED: the cascade - every confirmed booking is cancelled (seats are not restored),
      the ride is cancelled, and each passenger is notified after commit

    The whole transition is one transaction, so a failure never leaves bookings cancelled on a
    ride that is still open. A cancellation that hits a transient storage failure is re-run
    from scratch, up to RIDE_CANCEL_MAX_ATTEMPTS times.
    """

    def __init__(
        self,
        *,
        uow_factory: Callable[[], AbstractUnitOfWork],
        notifier: BestEffortNotifier,
        max_attempts: Optional[int] = None,
        retry_backoff_seconds: Optional[float] = None,
    ) -> None:
        self.uow_factory = uow_factory
        self.notifier = notifier
        self.max_attempts = max_attempts or settings.RIDE_CANCEL_MAX_ATTEMPTS
        self.retry_backoff_seconds = (
            settings.RIDE_CANCEL_RETRY_BACKOFF_SECONDS
            if retry_backoff_seconds is None
            else retry_backoff_seconds
        )
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: Callable[[], AbstractUnitOfWork] = Depends(
            Provide[Container.unit_of_work.provider]
        ),
        notifier: BestEffortNotifier = Depends(Provide[Container.notifier]),
    ) -> Self:
        return cls(uow_factory=uow_factory, notifier=notifier)

    @Logger.io
    async def cancel_ride(
        self, *, ride_id: UUID, requester_id: int, reason: Optional[str] = None
    ) -> Ride:
        return await self.update_status(
            ride_id=ride_id,
            requester_id=requester_id,
            status=RideStatus.CANCELLED,
            reason=reason,
        )

    @Logger.io
    async def update_status(
        self,
        *,
        ride_id: UUID,
        requester_id: int,
        status: RideStatus,
        reason: Optional[str] = None,
    ) -> Ride:
        started = time.perf_counter()
        attempts = self.max_attempts if status == RideStatus.CANCELLED else 1

        with self.tracer.start_as_current_span(
            'use_case.update_ride_status',
            attributes={'ride.id': str(ride_id), 'ride.status': status.value},
        ) as span:
            try:
                for attempt in range(1, attempts + 1):
                    try:
                        ride, notifications, cascaded = await self._apply(
                            ride_id=ride_id, requester_id=requester_id, status=status, reason=reason
                        )
                        break
                    except TransientStorageError:
                        if attempt == attempts:
                            Logger.base.error(
                                f'💥 [RIDE-STATUS] Giving up on ride {ride_id} -> {status.value} '
                                f'after {attempt} attempt(s)'
                            )
                            raise
                        metrics.ride_cancel_retries.inc()
                        Logger.base.warning(
                            f'🔁 [RIDE-STATUS] Transient failure on ride {ride_id}, '
                            f'retrying ({attempt}/{attempts})'
                        )
                        await asyncio.sleep(self.retry_backoff_seconds * attempt)
            finally:
                metrics.observe_duration(
                    operation='update_ride_status', seconds=time.perf_counter() - started
                )

            span.set_attribute('ride.cascaded_bookings', cascaded)
            metrics.record_ride_status_change(
                status=status.value,
                cascaded_bookings=cascaded if status == RideStatus.CANCELLED else 0,
            )
            Logger.base.info(
                f'🚦 [RIDE-STATUS] Ride {ride_id} is now {status.value} '
                f'({cascaded} booking(s) updated)'
            )

            await self.notifier.notify_all(notifications)
            return ride

    async def _apply(
        self,
        *,
        ride_id: UUID,
        requester_id: int,
        status: RideStatus,
        reason: Optional[str],
    ) -> Tuple[Ride, List[RideNotification], int]:
        async with self.uow_factory() as uow:
            ride = await uow.ride_command_repo.get_by_id(ride_id=ride_id, for_update=True)
            if not ride:
                raise NotFoundError('Ride not found')
            ride.validate_owner(requester_id)
            updated_ride = ride.transition_to(status, reason=reason)

            # Ride row is written before the bookings are read: it holds the write lock (SQLite
            # has no row locks) and closes the ride to reserve_seats, so no booking can land
            # between the read below and commit
            if not await uow.ride_command_repo.update_status(
                ride=updated_ride, expected_status=ride.status
            ):
                raise TransientStorageError(f'Ride {ride_id} changed during the status update')

            notifications: List[RideNotification] = []
            cascaded = 0
            if status in (RideStatus.CANCELLED, RideStatus.COMPLETED):
                confirmed = await uow.booking_command_repo.list_by_ride_and_status(
                    ride_id=ride_id, status=BookingStatus.CONFIRMED, for_update=True
                )
                if status == RideStatus.CANCELLED:
                    changed = [booking.cancel() for booking in confirmed]
                    notifications = [
                        ride_cancelled_notice(ride=updated_ride, booking=booking, reason=reason)
                        for booking in changed
                    ]
                else:
                    changed = [booking.complete() for booking in confirmed]

                cascaded = await uow.booking_command_repo.update_status_bulk(
                    bookings=changed, expected_status=BookingStatus.CONFIRMED
                )
                if cascaded != len(changed):
                    # A booking changed between the read and the bulk write
                    raise TransientStorageError('Ride bookings changed during the status update')

            await uow.commit()

        return updated_ride, notifications, cascaded
