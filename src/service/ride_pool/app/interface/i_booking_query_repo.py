from abc import ABC, abstractmethod
from typing import List

from uuid_utils import UUID

from src.service.ride_pool.domain.entity.booking_entity import Booking
from src.service.ride_pool.domain.value_object.read_models import (
    BookingWithRide,
    SeatDiscrepancy,
)


class IBookingQueryRepo(ABC):
    @abstractmethod
    async def list_by_passenger_with_ride(self, *, passenger_id: int) -> List[BookingWithRide]:
        """Passenger's bookings with a summary of their rides, newest first."""
        pass

    @abstractmethod
    async def list_by_ride(self, *, ride_id: UUID) -> List[Booking]:
        """Every booking on the ride, newest first."""
        pass

    @abstractmethod
    async def find_seat_discrepancies(self) -> List[SeatDiscrepancy]:
        """
        Non-cancelled rides whose available_seats differs from
        total_seats - sum(seats_booked of non-cancelled bookings).
        """
        pass
