from typing import List, Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from uuid_utils import UUID

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.ride_pool.app.interface.i_ride_message_repo import IRideMessageRepo
from src.service.ride_pool.domain.entity.ride_message_entity import RideMessage
from src.service.ride_pool.domain.value_object.read_models import ConversationSummary


class ListRideMessagesUseCase:
    def __init__(self, ride_message_repo: IRideMessageRepo) -> None:
        self.ride_message_repo = ride_message_repo

    @classmethod
    @inject
    def depends(
        cls,
        ride_message_repo: IRideMessageRepo = Depends(Provide[Container.ride_message_repo]),
    ) -> Self:
        return cls(ride_message_repo=ride_message_repo)

    @Logger.io
    async def list_conversations(self, user_id: int) -> List[ConversationSummary]:
        """One entry per (partner, ride), latest conversation first"""
        return await self.ride_message_repo.list_conversations(user_id=user_id)

    @Logger.io
    async def get_conversation(
        self, *, user_id: int, partner_id: int, ride_id: Optional[UUID] = None
    ) -> List[RideMessage]:
        return await self.ride_message_repo.list_conversation(
            user_id=user_id, partner_id=partner_id, ride_id=ride_id
        )
