from datetime import datetime, timezone
from typing import List, Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.ride_pool.app.interface.i_ride_query_repo import IRideQueryRepo
from src.service.ride_pool.domain.entity.ride_entity import Ride


class ListRidesUseCase:
    def __init__(self, ride_query_repo: IRideQueryRepo) -> None:
        self.ride_query_repo = ride_query_repo

    @classmethod
    @inject
    def depends(
        cls,
        ride_query_repo: IRideQueryRepo = Depends(Provide[Container.ride_query_repo]),
    ) -> Self:
        return cls(ride_query_repo=ride_query_repo)

    @Logger.io
    async def list_available(self, now: Optional[datetime] = None) -> List[Ride]:
        """Open rides with free seats that have not departed yet, soonest first"""
        now = now or datetime.now(timezone.utc)
        Logger.base.info('🌟 [LIST_AVAILABLE] Loading bookable rides')

        rides = await self.ride_query_repo.list_available(now=now)

        Logger.base.info(f'✅ [LIST_AVAILABLE] Found {len(rides)} bookable rides')
        return rides

    @Logger.io
    async def list_by_driver(self, driver_id: int) -> List[Ride]:
        """Every ride the driver has published, newest first"""
        Logger.base.info(f'📋 [LIST_BY_DRIVER] Loading rides for driver {driver_id}')

        rides = await self.ride_query_repo.list_by_driver(driver_id=driver_id)

        Logger.base.info(f'✅ [LIST_BY_DRIVER] Found {len(rides)} rides for driver {driver_id}')
        return rides
