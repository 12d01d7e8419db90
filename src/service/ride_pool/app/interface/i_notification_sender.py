from abc import ABC, abstractmethod

from src.service.ride_pool.domain.value_object.ride_notification import RideNotification


class INotificationSender(ABC):
    """Delivers one notification. Implementations may raise; callers decide what is fatal."""

    @abstractmethod
    async def send(self, *, notification: RideNotification) -> None:
        pass
