from datetime import datetime, timezone
from typing import Optional

import attrs
from uuid_utils import UUID

from src.platform.exception.exceptions import DomainError
from src.platform.logging.loguru_io import Logger
from src.service.ride_pool.domain.entity.ride_entity import Ride
from src.service.ride_pool.domain.enum.booking_status import BookingStatus


@attrs.define
class Booking:
    id: UUID
    ride_id: UUID
    passenger_id: int
    seats_booked: int
    total_price: int  # fixed at booking time, never recomputed from the ride
    status: BookingStatus = BookingStatus.CONFIRMED
    booked_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    @Logger.io
    def create(cls, *, id: UUID, ride: Ride, passenger_id: int, seats_booked: int) -> 'Booking':
        """Book `seats_booked` seats on `ride` at the ride's current price."""
        ride.validate_bookable(passenger_id=passenger_id, seats=seats_booked)

        now = datetime.now(timezone.utc)
        return cls(
            id=id,
            ride_id=ride.id,
            passenger_id=passenger_id,
            seats_booked=seats_booked,
            total_price=seats_booked * ride.price_per_seat,
            status=BookingStatus.CONFIRMED,
            booked_at=now,
            updated_at=now,
        )

    @property
    def is_active(self) -> bool:
        return self.status != BookingStatus.CANCELLED

    def cancel(self) -> 'Booking':
        if self.status == BookingStatus.CANCELLED:
            raise DomainError('Booking already cancelled')
        if self.status == BookingStatus.COMPLETED:
            raise DomainError('Cannot cancel a completed booking')
        return attrs.evolve(
            self, status=BookingStatus.CANCELLED, updated_at=datetime.now(timezone.utc)
        )

    def complete(self) -> 'Booking':
        if self.status != BookingStatus.CONFIRMED:
            raise DomainError(f'Cannot complete a {self.status.value} booking')
        return attrs.evolve(
            self, status=BookingStatus.COMPLETED, updated_at=datetime.now(timezone.utc)
        )
