from typing import List, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from uuid_utils import UUID

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.ride_pool.app.interface.i_booking_query_repo import IBookingQueryRepo
from src.service.ride_pool.app.interface.i_ride_query_repo import IRideQueryRepo
from src.service.ride_pool.domain.entity.booking_entity import Booking
from src.service.ride_pool.domain.value_object.read_models import BookingWithRide


class ListBookingsUseCase:
    def __init__(
        self, *, booking_query_repo: IBookingQueryRepo, ride_query_repo: IRideQueryRepo
    ) -> None:
        self.booking_query_repo = booking_query_repo
        self.ride_query_repo = ride_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        booking_query_repo: IBookingQueryRepo = Depends(Provide[Container.booking_query_repo]),
        ride_query_repo: IRideQueryRepo = Depends(Provide[Container.ride_query_repo]),
    ) -> Self:
        return cls(booking_query_repo=booking_query_repo, ride_query_repo=ride_query_repo)

    @Logger.io
    async def list_passenger_bookings(self, passenger_id: int) -> List[BookingWithRide]:
        return await self.booking_query_repo.list_by_passenger_with_ride(passenger_id=passenger_id)

    @Logger.io
    async def list_ride_bookings(self, *, ride_id: UUID, requester_id: int) -> List[Booking]:
        """Bookings on a ride, visible to its driver only"""
        ride = await self.ride_query_repo.get_by_id(ride_id=ride_id)
        if not ride:
            raise NotFoundError('Ride not found')
        ride.validate_owner(requester_id)

        return await self.booking_query_repo.list_by_ride(ride_id=ride_id)
