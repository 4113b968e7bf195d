from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import false, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sms_relay.application.exceptions import NotFoundError, PersistenceError, ValidationError
from sms_relay.application.ports.clock import Clock, UtcClock
from sms_relay.domain.entities.message import (
    ORIGIN_TIMESTAMP_MAX_LENGTH,
    SENDER_MAX_LENGTH,
    SmsMessage,
)
from sms_relay.infrastructure.db.mappers import message as mapper
from sms_relay.infrastructure.db.models.message import SmsMessageModel

logger = logging.getLogger(__name__)


def validate_message(sender: str, body: str, origin_timestamp: str | None) -> None:
    if not sender or not sender.strip():
        raise ValidationError("sender is required")
    if len(sender) > SENDER_MAX_LENGTH:
        raise ValidationError(f"sender must be at most {SENDER_MAX_LENGTH} characters")
    if not body or not body.strip():
        raise ValidationError("text is required")
    if origin_timestamp is not None and len(origin_timestamp) > ORIGIN_TIMESTAMP_MAX_LENGTH:
        raise ValidationError(
            f"timestamp must be at most {ORIGIN_TIMESTAMP_MAX_LENGTH} characters"
        )


class SqlAlchemyMessageStore:
    """Durable message store. Every operation runs in its own short transaction."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clock: Clock | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock or UtcClock()

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_factory() as session:
                yield session
        except SQLAlchemyError as exc:
            raise PersistenceError(f"message store unavailable: {exc}") from exc

    async def append(
        self,
        sender: str,
        body: str,
        origin_timestamp: str | None,
    ) -> SmsMessage:
        validate_message(sender, body, origin_timestamp)
        model = SmsMessageModel(
            sender=sender,
            body=body,
            origin_timestamp=origin_timestamp,
            received_at=self._clock.now(),
            delivered=False,
            delivered_at=None,
        )
        async with self._session() as session:
            session.add(model)
            await session.commit()

        logger.info("SMS saved id=%d sender=%s", model.id, model.sender)
        return mapper.model_to_entity(model)

    async def find_pending(self) -> list[SmsMessage]:
        stmt = (
            select(SmsMessageModel)
            .where(SmsMessageModel.delivered == false())
            .order_by(SmsMessageModel.received_at.asc(), SmsMessageModel.id.asc())
        )
        async with self._session() as session:
            result = await session.execute(stmt)
            return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def mark_delivered(self, message_id: int) -> bool:
        """Flip a message to delivered exactly once.

        The transition is a single conditional UPDATE, so of several
        concurrent callers for the same id only one matches the row. Returns
        True for that caller; False when the message was already delivered.
        """
        stmt = (
            update(SmsMessageModel)
            .where(
                SmsMessageModel.id == message_id,
                SmsMessageModel.delivered == false(),
            )
            .values(delivered=True, delivered_at=self._clock.now())
            .returning(SmsMessageModel.id)
            .execution_options(synchronize_session=False)
        )
        async with self._session() as session:
            result = await session.execute(stmt)
            applied = result.scalar_one_or_none() is not None
            if not applied:
                exists = await session.scalar(
                    select(SmsMessageModel.id).where(SmsMessageModel.id == message_id)
                )
                await session.rollback()
                if exists is None:
                    raise NotFoundError(f"SMS {message_id} not found")
                logger.debug("SMS id=%d already delivered", message_id)
                return False
            await session.commit()

        logger.info("SMS marked as delivered id=%d", message_id)
        return True

    async def get(self, message_id: int) -> SmsMessage:
        async with self._session() as session:
            model = await session.get(SmsMessageModel, message_id)
            if model is None:
                raise NotFoundError(f"SMS {message_id} not found")
            return mapper.model_to_entity(model)

    async def count_pending(self) -> int:
        stmt = (
            select(func.count())
            .select_from(SmsMessageModel)
            .where(SmsMessageModel.delivered == false())
        )
        async with self._session() as session:
            return int(await session.scalar(stmt) or 0)
