"""
Best-effort delivery of post-commit notifications.

The ledger change is already committed when these run, so a failed delivery is logged and
counted but never reported to the caller.
"""

from typing import Iterable

from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ride_pool_metrics import metrics
from src.service.ride_pool.app.interface.i_notification_sender import INotificationSender
from src.service.ride_pool.domain.value_object.ride_notification import RideNotification


class BestEffortNotifier:
    def __init__(self, *, notification_sender: INotificationSender) -> None:
        self.notification_sender = notification_sender

    async def notify(self, notification: RideNotification) -> bool:
        try:
            await self.notification_sender.send(notification=notification)
        except Exception:
            Logger.base.exception(
                f'📭 [NOTIFY] Delivery failed: ride={notification.ride_id} '
                f'{notification.sender_id} -> {notification.receiver_id}'
            )
            metrics.record_notification(sent=False)
            return False
        metrics.record_notification(sent=True)
        return True

    async def notify_all(self, notifications: Iterable[RideNotification]) -> int:
        """Deliver each notification independently; returns how many were delivered."""
        delivered = 0
        for notification in notifications:
            delivered += await self.notify(notification)
        return delivered
