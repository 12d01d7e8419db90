from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncContextManager, AsyncIterator, Callable, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from uuid_utils import UUID

from src.platform.logging.loguru_io import Logger
from src.service.ride_pool.app.interface.i_ride_query_repo import IRideQueryRepo
from src.service.ride_pool.domain.entity.ride_entity import Ride
from src.service.ride_pool.domain.enum.ride_status import RideStatus
from src.service.ride_pool.driven_adapter.model.entity_mapper import ride_to_entity, to_db_uuid
from src.service.ride_pool.driven_adapter.model.ride_model import RideModel


class RideQueryRepoImpl(IRideQueryRepo):
    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @asynccontextmanager
    async def _get_session(self) -> AsyncIterator[AsyncSession]:
        async with self.session_factory() as session:
            yield session

    @Logger.io
    async def get_by_id(self, *, ride_id: UUID) -> Ride | None:
        async with self._get_session() as session:
            db_ride = await session.get(RideModel, to_db_uuid(ride_id))
            return ride_to_entity(db_ride) if db_ride else None

    @Logger.io
    async def list_available(self, *, now: datetime) -> List[Ride]:
        async with self._get_session() as session:
            result = await session.execute(
                select(RideModel)
                .where(
                    RideModel.status == RideStatus.AVAILABLE.value,
                    RideModel.available_seats > 0,
                    RideModel.pickup_time > now,
                )
                .order_by(RideModel.pickup_time.asc())
            )
            return [ride_to_entity(db_ride) for db_ride in result.scalars().all()]

    @Logger.io
    async def list_by_driver(self, *, driver_id: int) -> List[Ride]:
        async with self._get_session() as session:
            result = await session.execute(
                select(RideModel)
                .where(RideModel.driver_id == driver_id)
                .order_by(RideModel.created_at.desc(), RideModel.id.desc())
            )
            return [ride_to_entity(db_ride) for db_ride in result.scalars().all()]
