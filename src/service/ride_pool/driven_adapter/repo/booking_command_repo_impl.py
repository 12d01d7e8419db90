"""
Booking Command Repository Implementation

The partial unique index `uq_booking_active_ride_passenger` is the last line of defence
against two concurrent bookings of the same passenger on the same ride.
"""

from collections import defaultdict
from datetime import datetime, timezone
from typing import List

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from uuid_utils import UUID

from src.platform.exception.exceptions import ConflictError
from src.platform.logging.loguru_io import Logger
from src.service.ride_pool.app.interface.i_booking_command_repo import IBookingCommandRepo
from src.service.ride_pool.domain.entity.booking_entity import Booking
from src.service.ride_pool.domain.enum.booking_status import BookingStatus
from src.service.ride_pool.driven_adapter.model.booking_model import BookingModel
from src.service.ride_pool.driven_adapter.model.entity_mapper import (
    booking_to_entity,
    booking_to_model,
    to_db_uuid,
)


def _is_active_booking_violation(error: IntegrityError) -> bool:
    text = str(error.orig).lower()
    return 'uq_booking_active_ride_passenger' in text or (
        'unique' in text and 'booking.ride_id' in text
    )


class BookingCommandRepoImpl(IBookingCommandRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @Logger.io
    async def create(self, *, booking: Booking) -> Booking:
        db_booking = booking_to_model(booking)
        self.session.add(db_booking)
        try:
            await self.session.flush()
        except IntegrityError as e:
            if _is_active_booking_violation(e):
                raise ConflictError('You already have a booking for this ride') from e
            raise
        return booking_to_entity(db_booking)

    @Logger.io
    async def get_by_id(self, *, booking_id: UUID) -> Booking | None:
        result = await self.session.execute(
            select(BookingModel)
            .where(BookingModel.id == to_db_uuid(booking_id))
            .execution_options(populate_existing=True)
        )
        db_booking = result.scalar_one_or_none()
        return booking_to_entity(db_booking) if db_booking else None

    @Logger.io
    async def find_active(self, *, ride_id: UUID, passenger_id: int) -> Booking | None:
        result = await self.session.execute(
            select(BookingModel)
            .where(
                BookingModel.ride_id == to_db_uuid(ride_id),
                BookingModel.passenger_id == passenger_id,
                BookingModel.status != BookingStatus.CANCELLED.value,
            )
            .limit(1)
        )
        db_booking = result.scalar_one_or_none()
        return booking_to_entity(db_booking) if db_booking else None

    @Logger.io
    async def list_by_ride_and_status(
        self, *, ride_id: UUID, status: BookingStatus, for_update: bool = False
    ) -> List[Booking]:
        stmt = (
            select(BookingModel)
            .where(
                BookingModel.ride_id == to_db_uuid(ride_id),
                BookingModel.status == status.value,
            )
            .order_by(BookingModel.booked_at)
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt.execution_options(populate_existing=True))
        return [booking_to_entity(db_booking) for db_booking in result.scalars().all()]

    @Logger.io
    async def update_status(self, *, booking: Booking, expected_status: BookingStatus) -> bool:
        updated = await self.update_status_bulk(
            bookings=[booking], expected_status=expected_status
        )
        return updated == 1

    @Logger.io
    async def update_status_bulk(
        self, *, bookings: List[Booking], expected_status: BookingStatus
    ) -> int:
        ids_by_status: dict[BookingStatus, list] = defaultdict(list)
        for booking in bookings:
            ids_by_status[booking.status].append(to_db_uuid(booking.id))

        updated = 0
        now = datetime.now(timezone.utc)
        for status, ids in ids_by_status.items():
            result = await self.session.execute(
                update(BookingModel)
                .where(BookingModel.id.in_(ids), BookingModel.status == expected_status.value)
                .values(status=status.value, updated_at=now)
                .execution_options(synchronize_session=False)
            )
            updated += result.rowcount  # type: ignore[attr-defined]
        return updated
