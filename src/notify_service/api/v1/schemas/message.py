from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from notify_service.api.v1.schemas.common import PaginatedResponse
from notify_service.domain.value_objects.enums import MessagePriority, MessageType


class SendMessageRequest(BaseModel):
    recipient_id: str = Field(min_length=1)
    subject: str = ""
    content: str
    message_type: MessageType = MessageType.GENERAL
    priority: MessagePriority = MessagePriority.MEDIUM
    related_booking_id: str | None = None
    related_service_type: str | None = None


class ReplyRequest(BaseModel):
    content: str


class StatusUpdateRequest(BaseModel):
    # Plain str: unknown values are rejected by the lifecycle, not the schema
    status: str


class MessageResponse(BaseModel):
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
    read_at: datetime | None
    replied_at: datetime | None

    model_config = {"from_attributes": True}


class InboxResponse(PaginatedResponse[MessageResponse]):
    unread_count: int


class MarkAllReadResponse(BaseModel):
    marked_count: int
