from __future__ import annotations

from dataclasses import dataclass

from notify_service.domain.value_objects.enums import MessagePriority, MessageType


@dataclass(frozen=True, slots=True)
class NewMessageDTO:
    recipient_id: str
    subject: str
    content: str
    message_type: MessageType = MessageType.GENERAL
    priority: MessagePriority = MessagePriority.MEDIUM
    related_booking_id: str | None = None
    related_service_type: str | None = None


@dataclass(frozen=True, slots=True)
class InboxFilterDTO:
    channel: str
    status: str | None = None
    cursor: str | None = None
    limit: int = 20
