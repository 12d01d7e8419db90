"""
Ride Command Repository Interface

Writes on the ride row. Always used through the Unit of Work so that every call of one
ledger operation shares the same transaction.
"""

from abc import ABC, abstractmethod

from uuid_utils import UUID

from src.service.ride_pool.domain.entity.ride_entity import Ride
from src.service.ride_pool.domain.enum.ride_status import RideStatus


class IRideCommandRepo(ABC):
    @abstractmethod
    async def get_by_id(self, *, ride_id: UUID, for_update: bool = False) -> Ride | None:
        """
        Args:
            ride_id: Ride ID
            for_update: Lock the ride row until the transaction ends (per-ride serialization)
        """
        pass

    @abstractmethod
    async def create(self, *, ride: Ride) -> Ride:
        pass

    @abstractmethod
    async def reserve_seats(self, *, ride_id: UUID, seats: int) -> bool:
        """
        Conditionally decrement available_seats.

        Returns:
            False when the ride is no longer open or has fewer than `seats` left
        """
        pass

    @abstractmethod
    async def release_seats(self, *, ride_id: UUID, seats: int) -> bool:
        """
        Conditionally increment available_seats.

        Returns:
            False when the increment would push available_seats above total_seats
        """
        pass

    @abstractmethod
    async def update_status(self, *, ride: Ride, expected_status: RideStatus) -> bool:
        """
        Persist status and cancellation_reason of `ride` only if the stored status is still
        `expected_status`.

        Returns:
            False when the ride moved to another status in the meantime
        """
        pass
