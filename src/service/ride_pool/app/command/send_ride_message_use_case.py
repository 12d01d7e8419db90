from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace
import uuid_utils
from uuid_utils import UUID

from src.platform.config.di import Container
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.ride_pool.app.interface.i_ride_message_repo import IRideMessageRepo
from src.service.ride_pool.app.interface.i_ride_query_repo import IRideQueryRepo
from src.service.ride_pool.domain.entity.ride_message_entity import RideMessage
from src.service.ride_pool.domain.enum.message_type import MessageType


class SendRideMessageUseCase:
    def __init__(
        self, *, ride_query_repo: IRideQueryRepo, ride_message_repo: IRideMessageRepo
    ) -> None:
        self.ride_query_repo = ride_query_repo
        self.ride_message_repo = ride_message_repo
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        ride_query_repo: IRideQueryRepo = Depends(Provide[Container.ride_query_repo]),
        ride_message_repo: IRideMessageRepo = Depends(Provide[Container.ride_message_repo]),
    ) -> Self:
        return cls(ride_query_repo=ride_query_repo, ride_message_repo=ride_message_repo)

    @Logger.io
    async def send(
        self,
        *,
        ride_id: UUID,
        sender_id: int,
        receiver_id: int,
        message: str,
        message_type: MessageType = MessageType.TEXT,
    ) -> RideMessage:
        with self.tracer.start_as_current_span(
            'use_case.send_ride_message',
            attributes={'ride.id': str(ride_id), 'sender.id': sender_id},
        ):
            if not await self.ride_query_repo.get_by_id(ride_id=ride_id):
                raise NotFoundError('Ride not found')

            ride_message = RideMessage.create(
                id=uuid_utils.uuid7(),
                ride_id=ride_id,
                sender_id=sender_id,
                receiver_id=receiver_id,
                message=message,
                message_type=message_type,
            )
            return await self.ride_message_repo.create(message=ride_message)
