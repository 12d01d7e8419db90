from typing import List, Optional

from fastapi import APIRouter, Depends, status

from src.platform.logging.loguru_io import Logger
from src.platform.types.uuid7_utils_types import UtilsUUID7
from src.service.ride_pool.app.command.mark_message_read_use_case import MarkMessageReadUseCase
from src.service.ride_pool.app.command.send_ride_message_use_case import SendRideMessageUseCase
from src.service.ride_pool.app.query.list_ride_messages_use_case import ListRideMessagesUseCase
from src.service.ride_pool.driving_adapter.http_controller.auth.jwt_auth import (
    get_current_user_id,
)
from src.service.ride_pool.driving_adapter.http_controller.schema.ride_message_schema import (
    ConversationResponse,
    RideMessageResponse,
    RideMessageSendRequest,
)


router = APIRouter()


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def send_message(
    request: RideMessageSendRequest,
    current_user_id: int = Depends(get_current_user_id),
    use_case: SendRideMessageUseCase = Depends(SendRideMessageUseCase.depends),
) -> RideMessageResponse:
    message = await use_case.send(
        ride_id=request.ride_id,
        sender_id=current_user_id,
        receiver_id=request.receiver_id,
        message=request.message,
        message_type=request.message_type,
    )
    return RideMessageResponse.from_entity(message)


@router.get('/conversations', response_model=List[ConversationResponse])
@Logger.io
async def list_conversations(
    current_user_id: int = Depends(get_current_user_id),
    use_case: ListRideMessagesUseCase = Depends(ListRideMessagesUseCase.depends),
) -> List[ConversationResponse]:
    conversations = await use_case.list_conversations(current_user_id)
    return [ConversationResponse.from_read_model(item) for item in conversations]


@router.get('/conversation/{partner_id}', response_model=List[RideMessageResponse])
@Logger.io
async def get_conversation(
    partner_id: int,
    ride_id: Optional[UtilsUUID7] = None,
    current_user_id: int = Depends(get_current_user_id),
    use_case: ListRideMessagesUseCase = Depends(ListRideMessagesUseCase.depends),
) -> List[RideMessageResponse]:
    messages = await use_case.get_conversation(
        user_id=current_user_id, partner_id=partner_id, ride_id=ride_id
    )
    return [RideMessageResponse.from_entity(message) for message in messages]


@router.patch('/{message_id}/read', status_code=status.HTTP_200_OK)
@Logger.io
async def mark_message_read(
    message_id: UtilsUUID7,
    current_user_id: int = Depends(get_current_user_id),
    use_case: MarkMessageReadUseCase = Depends(MarkMessageReadUseCase.depends),
) -> RideMessageResponse:
    message = await use_case.execute(message_id=message_id, user_id=current_user_id)
    return RideMessageResponse.from_entity(message)
