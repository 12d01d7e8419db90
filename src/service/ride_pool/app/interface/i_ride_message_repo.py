from abc import ABC, abstractmethod
from typing import List, Optional

from uuid_utils import UUID

from src.service.ride_pool.domain.entity.ride_message_entity import RideMessage
from src.service.ride_pool.domain.value_object.read_models import ConversationSummary


class IRideMessageRepo(ABC):
    @abstractmethod
    async def create(self, *, message: RideMessage) -> RideMessage:
        pass

    @abstractmethod
    async def get_by_id(self, *, message_id: UUID) -> RideMessage | None:
        pass

    @abstractmethod
    async def mark_read(self, *, message: RideMessage) -> RideMessage:
        pass

    @abstractmethod
    async def list_conversation(
        self, *, user_id: int, partner_id: int, ride_id: Optional[UUID] = None
    ) -> List[RideMessage]:
        """Messages exchanged between the two users, oldest first."""
        pass

    @abstractmethod
    async def list_conversations(self, *, user_id: int) -> List[ConversationSummary]:
        """One summary per (partner, ride), most recent conversation first."""
        pass
