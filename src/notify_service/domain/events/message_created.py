from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class MessageCreated:
    message_id: UUID
    sender_id: str
    sender_name: str
    recipient_id: str
    subject: str
    content: str
    message_type: str
    priority: str
    status: str
    related_booking_id: str | None
    in_reply_to: UUID | None
    created_at: datetime

    event_name = "message"
