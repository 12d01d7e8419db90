from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from src.platform.types.uuid7_utils_types import UtilsUUID7
from src.service.ride_pool.domain.entity.ride_message_entity import RideMessage
from src.service.ride_pool.domain.enum.message_type import MessageType
from src.service.ride_pool.domain.value_object.read_models import ConversationSummary


class RideMessageSendRequest(BaseModel):
    ride_id: UtilsUUID7
    receiver_id: int
    message: str
    message_type: MessageType = MessageType.TEXT

    model_config = {
        'json_schema_extra': {
            'example': {
                'ride_id': '01936d8f-5e73-7c4e-a9c5-123456789abc',
                'receiver_id': 1,
                'message': 'I am at the gate',
                'message_type': 'text',
            }
        }
    }


class RideMessageResponse(BaseModel):
    id: UtilsUUID7
    ride_id: UtilsUUID7
    sender_id: int
    receiver_id: int
    message: str
    message_type: MessageType
    is_read: bool
    sent_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, message: RideMessage) -> 'RideMessageResponse':
        return cls(
            id=message.id,
            ride_id=message.ride_id,
            sender_id=message.sender_id,
            receiver_id=message.receiver_id,
            message=message.message,
            message_type=message.message_type,
            is_read=message.is_read,
            sent_at=message.sent_at,
        )


class ConversationResponse(BaseModel):
    partner_id: int
    ride_id: UtilsUUID7
    route: Optional[str] = None
    last_message: str
    last_message_time: Optional[datetime] = None
    unread_count: int

    @classmethod
    def from_read_model(cls, conversation: ConversationSummary) -> 'ConversationResponse':
        return cls(
            partner_id=conversation.partner_id,
            ride_id=conversation.ride_id,
            route=conversation.route,
            last_message=conversation.last_message,
            last_message_time=conversation.last_message_time,
            unread_count=conversation.unread_count,
        )
