from contextlib import asynccontextmanager
from typing import AsyncContextManager, AsyncIterator, Callable, List, Optional

from sqlalchemy import and_, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from uuid_utils import UUID

from src.platform.logging.loguru_io import Logger
from src.service.ride_pool.app.interface.i_ride_message_repo import IRideMessageRepo
from src.service.ride_pool.domain.entity.ride_message_entity import RideMessage
from src.service.ride_pool.domain.value_object.read_models import ConversationSummary
from src.service.ride_pool.driven_adapter.model.entity_mapper import (
    message_to_entity,
    message_to_model,
    to_db_uuid,
    to_domain_uuid,
)
from src.service.ride_pool.driven_adapter.model.ride_message_model import RideMessageModel
from src.service.ride_pool.driven_adapter.model.ride_model import RideModel


class RideMessageRepoImpl(IRideMessageRepo):
    """Messages are independent of the ledger transaction: every write commits on its own."""

    def __init__(self, session_factory: Callable[..., AsyncContextManager[AsyncSession]]):
        self.session_factory = session_factory

    @asynccontextmanager
    async def _get_session(self) -> AsyncIterator[AsyncSession]:
        async with self.session_factory() as session:
            yield session

    @Logger.io
    async def create(self, *, message: RideMessage) -> RideMessage:
        async with self._get_session() as session:
            db_message = message_to_model(message)
            session.add(db_message)
            await session.commit()
            return message_to_entity(db_message)

    @Logger.io
    async def get_by_id(self, *, message_id: UUID) -> RideMessage | None:
        async with self._get_session() as session:
            db_message = await session.get(RideMessageModel, to_db_uuid(message_id))
            return message_to_entity(db_message) if db_message else None

    @Logger.io
    async def mark_read(self, *, message: RideMessage) -> RideMessage:
        async with self._get_session() as session:
            await session.execute(
                update(RideMessageModel)
                .where(
                    RideMessageModel.id == to_db_uuid(message.id),
                    RideMessageModel.receiver_id == message.receiver_id,
                )
                .values(is_read=True)
            )
            await session.commit()
        return message

    @Logger.io
    async def list_conversation(
        self, *, user_id: int, partner_id: int, ride_id: Optional[UUID] = None
    ) -> List[RideMessage]:
        stmt = select(RideMessageModel).where(
            or_(
                and_(
                    RideMessageModel.sender_id == user_id,
                    RideMessageModel.receiver_id == partner_id,
                ),
                and_(
                    RideMessageModel.sender_id == partner_id,
                    RideMessageModel.receiver_id == user_id,
                ),
            )
        )
        if ride_id is not None:
            stmt = stmt.where(RideMessageModel.ride_id == to_db_uuid(ride_id))

        async with self._get_session() as session:
            result = await session.execute(
                stmt.order_by(RideMessageModel.sent_at.asc(), RideMessageModel.id.asc())
            )
            return [message_to_entity(db_message) for db_message in result.scalars().all()]

    @Logger.io
    async def list_conversations(self, *, user_id: int) -> List[ConversationSummary]:
        async with self._get_session() as session:
            result = await session.execute(
                select(RideMessageModel, RideModel.pickup_address, RideModel.drop_address)
                .outerjoin(RideModel, RideModel.id == RideMessageModel.ride_id)
                .where(
                    or_(
                        RideMessageModel.sender_id == user_id,
                        RideMessageModel.receiver_id == user_id,
                    )
                )
                .order_by(RideMessageModel.sent_at.desc(), RideMessageModel.id.desc())
            )
            rows = result.all()

        # Rows arrive newest first, so the first row of each (partner, ride) is its latest message
        summaries: dict[tuple[int, UUID], dict] = {}
        for db_message, pickup_address, drop_address in rows:
            message = message_to_entity(db_message)
            key = (message.partner_of(user_id), message.ride_id)
            unread = int(message.receiver_id == user_id and not message.is_read)
            if key in summaries:
                summaries[key]['unread_count'] += unread
                continue
            summaries[key] = {
                'partner_id': key[0],
                'ride_id': to_domain_uuid(db_message.ride_id),
                'route': f'{pickup_address} → {drop_address}' if pickup_address else None,
                'last_message': message.message,
                'last_message_time': message.sent_at,
                'unread_count': unread,
            }
        return [ConversationSummary(**summary) for summary in summaries.values()]
