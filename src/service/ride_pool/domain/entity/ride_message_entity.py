from datetime import datetime, timezone
from typing import Optional

import attrs
from uuid_utils import UUID

from src.platform.exception.exceptions import DomainError, ForbiddenError
from src.service.ride_pool.domain.enum.message_type import MessageType


MAX_MESSAGE_LENGTH = 2000


@attrs.define
class RideMessage:
    id: UUID
    ride_id: UUID
    sender_id: int
    receiver_id: int
    message: str
    message_type: MessageType = MessageType.TEXT
    is_read: bool = False
    sent_at: Optional[datetime] = None

    @classmethod
    def create(
        cls,
        *,
        id: UUID,
        ride_id: UUID,
        sender_id: int,
        receiver_id: int,
        message: str,
        message_type: MessageType = MessageType.TEXT,
    ) -> 'RideMessage':
        if sender_id == receiver_id:
            raise DomainError('Cannot send a message to yourself')
        if not message.strip():
            raise DomainError('Message cannot be empty')
        if len(message) > MAX_MESSAGE_LENGTH:
            raise DomainError(f'Message cannot exceed {MAX_MESSAGE_LENGTH} characters')

        return cls(
            id=id,
            ride_id=ride_id,
            sender_id=sender_id,
            receiver_id=receiver_id,
            message=message,
            message_type=message_type,
            is_read=False,
            sent_at=datetime.now(timezone.utc),
        )

    def partner_of(self, user_id: int) -> int:
        return self.receiver_id if self.sender_id == user_id else self.sender_id

    def mark_read_by(self, user_id: int) -> 'RideMessage':
        if self.receiver_id != user_id:
            raise ForbiddenError('Only the receiver can mark a message as read')
        if self.is_read:
            return self
        return attrs.evolve(self, is_read=True)
