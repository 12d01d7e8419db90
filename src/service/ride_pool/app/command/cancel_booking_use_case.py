import time
from typing import Callable, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace
from uuid_utils import UUID

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import (
    DataIntegrityError,
    DomainError,
    ForbiddenError,
    NotFoundError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ride_pool_metrics import metrics
from src.service.ride_pool.app.service.best_effort_notifier import BestEffortNotifier
from src.service.ride_pool.domain.entity.booking_entity import Booking
from src.service.ride_pool.domain.enum.booking_status import BookingStatus
from src.service.ride_pool.domain.value_object.ride_notification import booking_cancelled_notice


class CancelBookingUseCase:
    """
    Passenger cancels their own booking and the seats go back to the ride.

    Flow (one transaction):
    1. Validate booking exists and the requester is its passenger
    2. Lock the ride row, then re-read the booking under that lock
    3. Booking -> CANCELLED (conditional on it still being CONFIRMED)
    4. Release the seats; exceeding total_seats is a data-integrity error, never clamped
    5. Commit, then notify the driver (best effort)
    """

    def __init__(
        self,
        *,
        uow_factory: Callable[[], AbstractUnitOfWork],
        notifier: BestEffortNotifier,
    ) -> None:
        self.uow_factory = uow_factory
        self.notifier = notifier
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
    async def execute(self, *, booking_id: UUID, requester_id: int) -> Booking:
        started = time.perf_counter()
        with self.tracer.start_as_current_span(
            'use_case.cancel_booking',
            attributes={'booking.id': str(booking_id), 'requester.id': requester_id},
        ):
            try:
                async with self.uow_factory() as uow:
                    booking = await uow.booking_command_repo.get_by_id(booking_id=booking_id)
                    if not booking:
                        raise NotFoundError('Booking not found')
                    if booking.passenger_id != requester_id:
                        raise ForbiddenError('Only the passenger can cancel this booking')

                    ride = await uow.ride_command_repo.get_by_id(
                        ride_id=booking.ride_id, for_update=True
                    )
                    if not ride:
                        raise DataIntegrityError(f'Booking {booking_id} references a missing ride')

                    # Another cancel may have committed while we waited for the ride lock
                    booking = await uow.booking_command_repo.get_by_id(booking_id=booking_id)
                    if not booking:
                        raise DataIntegrityError(
                            f'Booking {booking_id} disappeared while cancelling it'
                        )
                    previous_status = booking.status
                    cancelled = booking.cancel()

                    if not await uow.booking_command_repo.update_status(
                        booking=cancelled, expected_status=previous_status
                    ):
                        raise DomainError('Booking already cancelled')

                    # Domain check first so the error carries the exact counts
                    released_ride = ride.release_seats(cancelled.seats_booked)
                    if not await uow.ride_command_repo.release_seats(
                        ride_id=ride.id, seats=cancelled.seats_booked
                    ):
                        raise DataIntegrityError(
                            f'Releasing {cancelled.seats_booked} seat(s) on ride {ride.id} '
                            'would exceed its capacity'
                        )

                    notification = booking_cancelled_notice(ride=released_ride, booking=cancelled)
                    await uow.commit()
            finally:
                metrics.observe_duration(
                    operation='cancel_booking', seconds=time.perf_counter() - started
                )

            metrics.booking_cancellations.inc()
            Logger.base.info(
                f'↩️ [CANCEL-BOOKING] Booking {booking_id} cancelled, '
                f'{cancelled.seats_booked} seat(s) back on ride {ride.id}'
            )

            await self.notifier.notify(notification)
            return cancelled
