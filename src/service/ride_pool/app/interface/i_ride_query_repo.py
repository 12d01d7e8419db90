from abc import ABC, abstractmethod
from datetime import datetime
from typing import List

from uuid_utils import UUID

from src.service.ride_pool.domain.entity.ride_entity import Ride


class IRideQueryRepo(ABC):
    @abstractmethod
    async def get_by_id(self, *, ride_id: UUID) -> Ride | None:
        pass

    @abstractmethod
    async def list_available(self, *, now: datetime) -> List[Ride]:
        """Open rides with seats left and pickup after `now`, soonest first."""
        pass

    @abstractmethod
    async def list_by_driver(self, *, driver_id: int) -> List[Ride]:
        """All rides published by the driver, newest first."""
        pass
