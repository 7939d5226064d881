from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Message:
    id: UUID
    sender_id: str
    sender_name: str
    sender_email: str | None
    recipient_id: str
    subject: str
    content: str
    message_type: str
    priority: str
    status: str
    related_booking_id: str | None
    related_service_type: str | None
    in_reply_to: UUID | None
    created_at: datetime
    updated_at: datetime
    read_at: datetime | None = None
    replied_at: datetime | None = None

    @property
    def channels(self) -> tuple[str, ...]:
        """Channels whose live connections observe changes to this message."""
        if self.sender_id == self.recipient_id:
            return (self.recipient_id,)
        return (self.sender_id, self.recipient_id)
