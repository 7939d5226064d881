from __future__ import annotations

from notify_service.domain.entities.message import Message
from notify_service.infrastructure.db.models.message import MessageModel


def model_to_entity(model: MessageModel) -> Message:
    return Message(
        id=model.id,
        sender_id=model.sender_id,
        sender_name=model.sender_name,
        sender_email=model.sender_email,
        recipient_id=model.recipient_id,
        subject=model.subject,
        content=model.content,
        message_type=model.message_type,
        priority=model.priority,
        status=model.status,
        related_booking_id=model.related_booking_id,
        related_service_type=model.related_service_type,
        in_reply_to=model.in_reply_to,
        created_at=model.created_at,
        updated_at=model.updated_at,
        read_at=model.read_at,
        replied_at=model.replied_at,
    )


def entity_to_model(entity: Message) -> MessageModel:
    return MessageModel(
        id=entity.id,
        sender_id=entity.sender_id,
        sender_name=entity.sender_name,
        sender_email=entity.sender_email,
        recipient_id=entity.recipient_id,
        subject=entity.subject,
        content=entity.content,
        message_type=entity.message_type,
        priority=entity.priority,
        status=entity.status,
        related_booking_id=entity.related_booking_id,
        related_service_type=entity.related_service_type,
        in_reply_to=entity.in_reply_to,
        created_at=entity.created_at,
        updated_at=entity.updated_at,
        read_at=entity.read_at,
        replied_at=entity.replied_at,
    )
