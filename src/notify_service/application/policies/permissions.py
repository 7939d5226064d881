from __future__ import annotations

from notify_service.application.dto.principal import Principal
from notify_service.application.exceptions import ForbiddenError, NotFoundError
from notify_service.domain.entities.message import Message
from notify_service.domain.value_objects.enums import PUBLIC_CHANNEL


def assert_message_found(message: Message | None) -> Message:
    if message is None:
        raise NotFoundError("Message not found")
    return message


def can_manage(principal: Principal, message: Message) -> bool:
    """Recipient, or staff scoped to the recipient channel."""
    return principal.subject_id == message.recipient_id or principal.can_act_for(message.recipient_id)


def assert_can_manage(principal: Principal, message: Message | None) -> Message:
    """Raise unless the principal may transition or answer the message."""
    message = assert_message_found(message)
    if not can_manage(principal, message):
        raise ForbiddenError("Not allowed to modify this message")
    return message


def assert_can_view(principal: Principal, message: Message | None) -> Message:
    message = assert_message_found(message)
    if principal.subject_id == message.sender_id or can_manage(principal, message):
        return message
    raise ForbiddenError("Not allowed to view this message")


def assert_channel_access(principal: Principal, channel: str) -> str:
    # Own identity and the public channel are open to every caller
    if channel in (principal.subject_id, PUBLIC_CHANNEL) or principal.can_act_for(channel):
        return channel
    raise ForbiddenError("Not allowed to subscribe to this channel")
