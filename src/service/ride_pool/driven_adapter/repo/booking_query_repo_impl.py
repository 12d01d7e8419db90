from contextlib import asynccontextmanager
from typing import AsyncContextManager, AsyncIterator, Callable, List

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from uuid_utils import UUID

from src.platform.logging.loguru_io import Logger
from src.service.ride_pool.app.interface.i_booking_query_repo import IBookingQueryRepo
from src.service.ride_pool.domain.entity.booking_entity import Booking
from src.service.ride_pool.domain.enum.booking_status import BookingStatus
from src.service.ride_pool.domain.enum.ride_status import RideStatus
from src.service.ride_pool.domain.value_object.read_models import (
    BookingWithRide,
    SeatDiscrepancy,
)
from src.service.ride_pool.driven_adapter.model.booking_model import BookingModel
from src.service.ride_pool.driven_adapter.model.entity_mapper import (
    booking_to_entity,
    ride_to_summary,
    to_db_uuid,
    to_domain_uuid,
)
from src.service.ride_pool.driven_adapter.model.ride_model import RideModel


class BookingQueryRepoImpl(IBookingQueryRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @asynccontextmanager
    async def _get_session(self) -> AsyncIterator[AsyncSession]:
        async with self.session_factory() as session:
            yield session

    @Logger.io
    async def list_by_passenger_with_ride(self, *, passenger_id: int) -> List[BookingWithRide]:
        async with self._get_session() as session:
            result = await session.execute(
                select(BookingModel, RideModel)
                .join(RideModel, BookingModel.ride_id == RideModel.id)
                .where(BookingModel.passenger_id == passenger_id)
                .order_by(BookingModel.booked_at.desc(), BookingModel.id.desc())
            )
            return [
                BookingWithRide(
                    booking=booking_to_entity(db_booking), ride=ride_to_summary(db_ride)
                )
                for db_booking, db_ride in result.all()
            ]

    @Logger.io
    async def list_by_ride(self, *, ride_id: UUID) -> List[Booking]:
        async with self._get_session() as session:
            result = await session.execute(
                select(BookingModel)
                .where(BookingModel.ride_id == to_db_uuid(ride_id))
                .order_by(BookingModel.booked_at.desc(), BookingModel.id.desc())
            )
            return [booking_to_entity(db_booking) for db_booking in result.scalars().all()]

    @Logger.io
    async def find_seat_discrepancies(self) -> List[SeatDiscrepancy]:
        booked = func.coalesce(func.sum(BookingModel.seats_booked), 0)
        async with self._get_session() as session:
            result = await session.execute(
                select(
                    RideModel.id,
                    RideModel.total_seats,
                    RideModel.available_seats,
                    booked.label('booked_seats'),
                )
                .outerjoin(
                    BookingModel,
                    and_(
                        BookingModel.ride_id == RideModel.id,
                        BookingModel.status != BookingStatus.CANCELLED.value,
                    ),
                )
                .where(RideModel.status != RideStatus.CANCELLED.value)
                .group_by(RideModel.id, RideModel.total_seats, RideModel.available_seats)
                .having(RideModel.available_seats != RideModel.total_seats - booked)
            )
            return [
                SeatDiscrepancy(
                    ride_id=to_domain_uuid(row.id),
                    total_seats=row.total_seats,
                    booked_seats=int(row.booked_seats),
                    actual_available=row.available_seats,
                )
                for row in result.all()
            ]
