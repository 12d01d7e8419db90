import time
from typing import Callable, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace
import uuid_utils
from uuid_utils import UUID

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import (
    ConflictError,
    CustomBaseError,
    DomainError,
    NotFoundError,
)
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ride_pool_metrics import metrics
from src.service.ride_pool.app.service.best_effort_notifier import BestEffortNotifier
from src.service.ride_pool.domain.entity.booking_entity import Booking
from src.service.ride_pool.domain.value_object.ride_notification import booking_created_notice


_RESULT_BY_ERROR = {NotFoundError: 'not_found', ConflictError: 'conflict', DomainError: 'rejected'}


class CreateBookingUseCase:
    """
    Book seats on a ride.

    Flow (one transaction):
    1. Lock the ride row
    2. Validate: ride exists -> not own ride -> ride open -> enough seats -> no active booking
    3. Reserve the seats with a conditional UPDATE on the ride
    4. Insert the booking (price fixed from the ride's current price)
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
    async def create_booking(
        self, *, passenger_id: int, ride_id: UUID, seats_booked: int
    ) -> Booking:
        started = time.perf_counter()
        with self.tracer.start_as_current_span(
            'use_case.create_booking',
            attributes={'ride.id': str(ride_id), 'passenger.id': passenger_id},
        ) as span:
            try:
                booking, notification = await self._book(
                    passenger_id=passenger_id, ride_id=ride_id, seats_booked=seats_booked
                )
            except CustomBaseError as e:
                metrics.record_booking_request(result=_RESULT_BY_ERROR.get(type(e), 'error'))
                raise
            finally:
                metrics.observe_duration(
                    operation='create_booking', seconds=time.perf_counter() - started
                )

            metrics.record_booking_request(result='confirmed')
            span.set_attribute('booking.id', str(booking.id))
            Logger.base.info(
                f'🎫 [CREATE-BOOKING] Booking {booking.id}: passenger {passenger_id} '
                f'took {seats_booked} seat(s) on ride {ride_id}'
            )

            await self.notifier.notify(notification)
            return booking

    async def _book(self, *, passenger_id: int, ride_id: UUID, seats_booked: int):
        async with self.uow_factory() as uow:
            ride = await uow.ride_command_repo.get_by_id(ride_id=ride_id, for_update=True)
            if not ride:
                raise NotFoundError('Ride not found')

            booking = Booking.create(
                id=uuid_utils.uuid7(),
                ride=ride,
                passenger_id=passenger_id,
                seats_booked=seats_booked,
            )

            existing = await uow.booking_command_repo.find_active(
                ride_id=ride_id, passenger_id=passenger_id
            )
            if existing:
                raise ConflictError('You already have a booking for this ride')

            # The ride row may have changed since it was read when the backend cannot lock
            if not await uow.ride_command_repo.reserve_seats(ride_id=ride_id, seats=seats_booked):
                raise DomainError('Not enough seats available')

            booking = await uow.booking_command_repo.create(booking=booking)
            await uow.commit()

        notification = booking_created_notice(
            ride=ride.reserve_seats(seats_booked), booking=booking
        )
        return booking, notification
