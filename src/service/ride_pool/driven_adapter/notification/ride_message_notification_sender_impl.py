import uuid_utils

from src.platform.logging.loguru_io import Logger
from src.service.ride_pool.app.interface.i_notification_sender import INotificationSender
from src.service.ride_pool.app.interface.i_ride_message_repo import IRideMessageRepo
from src.service.ride_pool.domain.entity.ride_message_entity import RideMessage
from src.service.ride_pool.domain.enum.message_type import MessageType
from src.service.ride_pool.domain.value_object.ride_notification import RideNotification


class RideMessageNotificationSenderImpl(INotificationSender):
    """Delivers a notification as an ordinary text message in the ride's conversation."""

    def __init__(self, *, message_repo: IRideMessageRepo) -> None:
        self.message_repo = message_repo

    @Logger.io
    async def send(self, *, notification: RideNotification) -> None:
        message = RideMessage.create(
            id=uuid_utils.uuid7(),
            ride_id=notification.ride_id,
            sender_id=notification.sender_id,
            receiver_id=notification.receiver_id,
            message=notification.text,
            message_type=MessageType.TEXT,
        )
        await self.message_repo.create(message=message)
