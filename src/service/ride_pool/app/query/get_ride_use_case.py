from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from uuid_utils import UUID

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.ride_pool.app.interface.i_ride_query_repo import IRideQueryRepo
from src.service.ride_pool.domain.entity.ride_entity import Ride


class GetRideUseCase:
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
    async def get_ride(self, ride_id: UUID) -> Ride:
        ride = await self.ride_query_repo.get_by_id(ride_id=ride_id)

        if not ride:
            raise NotFoundError('Ride not found')

        return ride
