from datetime import datetime
from typing import Callable, Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace
import uuid_utils

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.logging.loguru_io import Logger
from src.service.ride_pool.domain.entity.ride_entity import Ride
from src.service.ride_pool.domain.enum.ride_status import VehicleType


class CreateRideUseCase:
    def __init__(self, *, uow_factory: Callable[[], AbstractUnitOfWork]) -> None:
        self.uow_factory = uow_factory
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        uow_factory: Callable[[], AbstractUnitOfWork] = Depends(
            Provide[Container.unit_of_work.provider]
        ),
    ) -> Self:
        return cls(uow_factory=uow_factory)

    @Logger.io
    async def create_ride(
        self,
        *,
        driver_id: int,
        pickup_address: str,
        drop_address: str,
        pickup_time: datetime,
        total_seats: int,
        price_per_seat: int,
        vehicle_type: VehicleType = VehicleType.CAR,
        expected_drop_time: Optional[datetime] = None,
        description: Optional[str] = None,
    ) -> Ride:
        with self.tracer.start_as_current_span(
            'use_case.create_ride', attributes={'driver.id': driver_id}
        ):
            ride = Ride.create(
                id=uuid_utils.uuid7(),
                driver_id=driver_id,
                pickup_address=pickup_address,
                drop_address=drop_address,
                pickup_time=pickup_time,
                total_seats=total_seats,
                price_per_seat=price_per_seat,
                vehicle_type=vehicle_type,
                expected_drop_time=expected_drop_time,
                description=description,
            )

            async with self.uow_factory() as uow:
                ride = await uow.ride_command_repo.create(ride=ride)
                await uow.commit()

            Logger.base.info(
                f'🚗 [CREATE-RIDE] Ride {ride.id} published by driver {driver_id}: '
                f'{ride.route}, {ride.total_seats} seat(s)'
            )
            return ride
