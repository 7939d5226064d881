"""Seed development data: creates the messages table and a few sample messages."""
from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timedelta, timezone

from notify_service.domain.entities.message import Message
from notify_service.domain.value_objects.enums import MessagePriority, MessageStatus, MessageType
from notify_service.infrastructure.db.base import Base
from notify_service.infrastructure.db.models import MessageModel  # noqa: F401
from notify_service.infrastructure.db.session import AsyncSessionLocal, engine
from notify_service.infrastructure.db.uow import SqlAlchemyUoW

logger = logging.getLogger(__name__)

SAMPLES = [
    ("hotel-7", "Lakeside Hotel", "acct-42", "Your booking is confirmed",
     "We look forward to welcoming you on Friday.", MessageType.BOOKING, MessagePriority.MEDIUM, "bk-1001"),
    ("system", "Notifications", "acct-42", "Payment received",
     "We received your payment of K350.00.", MessageType.SYSTEM, MessagePriority.LOW, "bk-1001"),
    ("acct-42", "Mwila Banda", "pharmacy-vendor", "Prescription question",
     "Is the refill ready for pickup?", MessageType.GENERAL, MessagePriority.HIGH, None),
]


async def seed() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        uow = SqlAlchemyUoW(session)
        now = datetime.now(timezone.utc)

        for offset, (sender_id, sender_name, recipient_id, subject, content, msg_type, priority, booking) in enumerate(SAMPLES):
            created = now - timedelta(minutes=offset)
            await uow.messages.create(
                Message(
                    id=uuid.uuid4(),
                    sender_id=sender_id,
                    sender_name=sender_name,
                    sender_email=None,
                    recipient_id=recipient_id,
                    subject=subject,
                    content=content,
                    message_type=msg_type.value,
                    priority=priority.value,
                    status=MessageStatus.UNREAD.value,
                    related_booking_id=booking,
                    related_service_type="hotel" if booking else None,
                    in_reply_to=None,
                    created_at=created,
                    updated_at=created,
                )
            )

        await uow.commit()
        logger.info("Seeded %d messages", len(SAMPLES))


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed())


if __name__ == "__main__":
    main()
