"""
Booking Command Repository Interface

Booking writes of the ledger, used through the Unit of Work.
"""

from abc import ABC, abstractmethod
from typing import List

from uuid_utils import UUID

from src.service.ride_pool.domain.entity.booking_entity import Booking
from src.service.ride_pool.domain.enum.booking_status import BookingStatus


class IBookingCommandRepo(ABC):
    @abstractmethod
    async def create(self, *, booking: Booking) -> Booking:
        """
        Raises:
            ConflictError: The passenger already holds a non-cancelled booking on the ride
        """
        pass

    @abstractmethod
    async def get_by_id(self, *, booking_id: UUID) -> Booking | None:
        pass

    @abstractmethod
    async def find_active(self, *, ride_id: UUID, passenger_id: int) -> Booking | None:
        """The passenger's non-cancelled booking on the ride, if any."""
        pass

    @abstractmethod
    async def list_by_ride_and_status(
        self, *, ride_id: UUID, status: BookingStatus, for_update: bool = False
    ) -> List[Booking]:
        pass

    @abstractmethod
    async def update_status(self, *, booking: Booking, expected_status: BookingStatus) -> bool:
        """
        Persist booking.status only if the stored status is still `expected_status`.

        Returns:
            False when another transaction changed the booking first
        """
        pass

    @abstractmethod
    async def update_status_bulk(
        self, *, bookings: List[Booking], expected_status: BookingStatus
    ) -> int:
        """
        Conditional update_status for many bookings.

        Returns:
            Number of rows updated
        """
        pass
