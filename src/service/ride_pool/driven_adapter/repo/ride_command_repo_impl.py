"""
Ride Command Repository Implementation

Seat counter writes are conditional single-statement UPDATEs (compare-and-swap), so the
capacity bounds hold even if two transactions both passed the domain checks.
"""

from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from uuid_utils import UUID

from src.platform.logging.loguru_io import Logger
from src.service.ride_pool.app.interface.i_ride_command_repo import IRideCommandRepo
from src.service.ride_pool.domain.entity.ride_entity import Ride
from src.service.ride_pool.domain.enum.ride_status import RideStatus
from src.service.ride_pool.driven_adapter.model.entity_mapper import (
    ride_to_entity,
    ride_to_model,
    to_db_uuid,
)
from src.service.ride_pool.driven_adapter.model.ride_model import RideModel


class RideCommandRepoImpl(IRideCommandRepo):
    def __init__(self, *, session: AsyncSession) -> None:
        self.session = session

    @Logger.io
    async def get_by_id(self, *, ride_id: UUID, for_update: bool = False) -> Ride | None:
        stmt = select(RideModel).where(RideModel.id == to_db_uuid(ride_id))
        if for_update:
            stmt = stmt.with_for_update()
        # populate_existing: a locked read must not be served from the identity map
        result = await self.session.execute(stmt.execution_options(populate_existing=True))
        db_ride = result.scalar_one_or_none()
        return ride_to_entity(db_ride) if db_ride else None

    @Logger.io
    async def create(self, *, ride: Ride) -> Ride:
        db_ride = ride_to_model(ride)
        self.session.add(db_ride)
        await self.session.flush()
        return ride_to_entity(db_ride)

    @Logger.io
    async def reserve_seats(self, *, ride_id: UUID, seats: int) -> bool:
        result = await self.session.execute(
            update(RideModel)
            .where(
                RideModel.id == to_db_uuid(ride_id),
                RideModel.status == RideStatus.AVAILABLE.value,
                RideModel.available_seats >= seats,
            )
            .values(
                available_seats=RideModel.available_seats - seats,
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1  # type: ignore[attr-defined]

    @Logger.io
    async def release_seats(self, *, ride_id: UUID, seats: int) -> bool:
        result = await self.session.execute(
            update(RideModel)
            .where(
                RideModel.id == to_db_uuid(ride_id),
                RideModel.available_seats + seats <= RideModel.total_seats,
            )
            .values(
                available_seats=RideModel.available_seats + seats,
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1  # type: ignore[attr-defined]

    @Logger.io
    async def update_status(self, *, ride: Ride, expected_status: RideStatus) -> bool:
        result = await self.session.execute(
            update(RideModel)
            .where(
                RideModel.id == to_db_uuid(ride.id),
                RideModel.status == expected_status.value,
            )
            .values(
                status=ride.status.value,
                cancellation_reason=ride.cancellation_reason,
                updated_at=ride.updated_at or datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1  # type: ignore[attr-defined]
