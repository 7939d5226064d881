from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from notify_service.domain.entities.message import Message
from notify_service.domain.value_objects.enums import MessageStatus
from notify_service.infrastructure.db.mappers import message as mapper
from notify_service.infrastructure.db.models.message import MessageModel
from notify_service.infrastructure.db.repositories._cursor import decode_cursor


class MessageRepo:
    """Implements application.repositories.message.MessageStore."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_id(self, message_id: UUID) -> Message | None:
        # Re-reads after a lost conditional update must not see the identity-map copy
        model = await self._session.get(MessageModel, message_id, populate_existing=True)
        return mapper.model_to_entity(model) if model else None

    async def find_one(self, filters: Mapping[str, Any]) -> Message | None:
        stmt = (
            select(MessageModel)
            .filter_by(**filters)
            .order_by(MessageModel.created_at.desc(), MessageModel.id.desc())
            .limit(1)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None

    async def create(self, message: Message) -> Message:
        model = mapper.entity_to_model(message)
        self._session.add(model)
        await self._session.flush()
        return mapper.model_to_entity(model)

    async def update_by_id(
        self,
        message_id: UUID,
        patch: Mapping[str, Any],
        *,
        expected_status: str | None = None,
    ) -> Message | None:
        stmt = (
            update(MessageModel)
            .where(MessageModel.id == message_id)
            .values(**patch)
            .returning(MessageModel)
            .execution_options(synchronize_session="fetch")
        )
        if expected_status is not None:
            stmt = stmt.where(MessageModel.status == expected_status)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None

    async def list_for_recipient(
        self,
        recipient_id: str,
        *,
        status: str | None = None,
        cursor: str | None = None,
        limit: int = 20,
    ) -> list[Message]:
        stmt = (
            select(MessageModel)
            .where(MessageModel.recipient_id == recipient_id)
            .order_by(MessageModel.created_at.desc(), MessageModel.id.desc())
            .limit(limit)
        )
        if status is not None:
            stmt = stmt.where(MessageModel.status == status)
        if cursor:
            ts, mid = decode_cursor(cursor)
            stmt = stmt.where(
                (MessageModel.created_at < ts)
                | ((MessageModel.created_at == ts) & (MessageModel.id < mid))
            )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def count_for_recipient(self, recipient_id: str, *, status: str | None = "unread") -> int:
        stmt = (
            select(func.count())
            .select_from(MessageModel)
            .where(MessageModel.recipient_id == recipient_id)
        )
        if status is not None:
            stmt = stmt.where(MessageModel.status == status)
        result = await self._session.execute(stmt)
        return result.scalar_one()

    async def mark_read_for_recipient(self, recipient_id: str, now: datetime) -> list[Message]:
        stmt = (
            update(MessageModel)
            .where(
                MessageModel.recipient_id == recipient_id,
                MessageModel.status == MessageStatus.UNREAD.value,
            )
            .values(
                status=MessageStatus.READ.value,
                updated_at=now,
                read_at=func.coalesce(MessageModel.read_at, now),
            )
            .returning(MessageModel)
            .execution_options(synchronize_session="fetch")
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]
