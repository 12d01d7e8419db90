from datetime import datetime
from typing import Optional

import attrs
from uuid_utils import UUID

from src.service.ride_pool.domain.entity.booking_entity import Booking
from src.service.ride_pool.domain.enum.ride_status import RideStatus, VehicleType


@attrs.frozen
class RideSummary:
    id: UUID
    pickup_address: str
    drop_address: str
    pickup_time: datetime
    vehicle_type: VehicleType
    price_per_seat: int
    status: RideStatus


@attrs.frozen
class BookingWithRide:
    booking: Booking
    ride: RideSummary


@attrs.frozen
class SeatDiscrepancy:
    ride_id: UUID
    total_seats: int
    booked_seats: int
    actual_available: int

    @property
    def expected_available(self) -> int:
        return self.total_seats - self.booked_seats


@attrs.frozen
class ConversationSummary:
    partner_id: int
    ride_id: UUID
    route: Optional[str]
    last_message: str
    last_message_time: Optional[datetime]
    unread_count: int
