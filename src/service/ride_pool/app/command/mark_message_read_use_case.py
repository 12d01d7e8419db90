from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from uuid_utils import UUID

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.ride_pool.app.interface.i_ride_message_repo import IRideMessageRepo
from src.service.ride_pool.domain.entity.ride_message_entity import RideMessage


class MarkMessageReadUseCase:
    def __init__(self, *, ride_message_repo: IRideMessageRepo) -> None:
        self.ride_message_repo = ride_message_repo

    @classmethod
    @inject
    def depends(
        cls,
        ride_message_repo: IRideMessageRepo = Depends(Provide[Container.ride_message_repo]),
    ) -> Self:
        return cls(ride_message_repo=ride_message_repo)

    @Logger.io
    async def execute(self, *, message_id: UUID, user_id: int) -> RideMessage:
        message = await self.ride_message_repo.get_by_id(message_id=message_id)
        if not message:
            raise NotFoundError('Message not found')

        read_message = message.mark_read_by(user_id)
        if read_message is message:
            return message
        return await self.ride_message_repo.mark_read(message=read_message)
