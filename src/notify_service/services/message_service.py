"""Message lifecycle: creation, read, reply, archive and explicit status set.

Every accepted change is committed to the store first and only then
published to the live channels of the message's sender and recipient.
"""
from __future__ import annotations

import dataclasses
import logging
import uuid
from datetime import datetime
from typing import Any, Callable

from notify_service.application.dto.message import InboxFilterDTO, NewMessageDTO
from notify_service.application.dto.principal import Principal
from notify_service.application.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from notify_service.application.policies.permissions import (
    assert_can_manage,
    assert_can_view,
    assert_channel_access,
)
from notify_service.application.ports.bus import EventPublisher
from notify_service.application.ports.clock import Clock, system_clock
from notify_service.application.uow import UnitOfWork
from notify_service.domain.entities.message import Message
from notify_service.domain.events.message_created import MessageCreated
from notify_service.domain.events.status_changed import MessageStatusChanged
from notify_service.domain.lifecycle import (
    REPLYABLE,
    InvalidStatus,
    can_transition,
    is_terminal,
    parse_status,
    status_patch,
)
from notify_service.domain.value_objects.enums import MessageStatus, MessageType

logger = logging.getLogger(__name__)

REPLY_PREFIX = "Re: "
UPDATE_ATTEMPTS = 3


async def send_message(
    data: NewMessageDTO,
    principal: Principal,
    uow: UnitOfWork,
    publisher: EventPublisher,
    clock: Clock = system_clock,
) -> Message:
    if not data.recipient_id.strip():
        raise ValidationError("Recipient is required")
    if not data.content.strip():
        raise ValidationError("Message content must not be empty")

    now = clock.now()
    msg = Message(
        id=uuid.uuid4(),
        sender_id=principal.subject_id,
        sender_name=principal.display_name,
        sender_email=principal.email,
        recipient_id=data.recipient_id,
        subject=data.subject,
        content=data.content,
        message_type=data.message_type.value,
        priority=data.priority.value,
        status=MessageStatus.UNREAD.value,
        related_booking_id=data.related_booking_id,
        related_service_type=data.related_service_type,
        in_reply_to=None,
        created_at=now,
        updated_at=now,
    )
    msg = await uow.messages.create(msg)
    await uow.commit()
    logger.info("Message %s sent from %s to %s", msg.id, msg.sender_id, msg.recipient_id)

    await _publish(publisher, msg.channels, MessageCreated.event_name, _created_payload(msg))
    return msg


async def get_message(
    message_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
) -> Message:
    message = await uow.messages.find_by_id(message_id)
    return assert_can_view(principal, message)


async def list_inbox(
    filters: InboxFilterDTO,
    principal: Principal,
    uow: UnitOfWork,
) -> list[Message]:
    assert_channel_access(principal, filters.channel)
    status = None
    if filters.status is not None:
        status = _parse_status(filters.status).value
    try:
        return await uow.messages.list_for_recipient(
            filters.channel, status=status, cursor=filters.cursor, limit=filters.limit,
        )
    except ValueError as exc:
        raise ValidationError("Invalid cursor") from exc


async def count_unread(channel: str, principal: Principal, uow: UnitOfWork) -> int:
    assert_channel_access(principal, channel)
    return await uow.messages.count_for_recipient(channel, status=MessageStatus.UNREAD.value)


async def mark_all_read(
    channel: str,
    principal: Principal,
    uow: UnitOfWork,
    publisher: EventPublisher,
    clock: Clock = system_clock,
) -> list[Message]:
    """Acknowledge every unread message addressed to ``channel``.

    Only the channel owner or staff scoped to it may do this; the public
    channel is readable by all but owned by nobody.
    """
    if channel != principal.subject_id and not principal.can_act_for(channel):
        raise ForbiddenError("Not allowed to modify this inbox")

    updated = await uow.messages.mark_read_for_recipient(channel, clock.now())
    if not updated:
        return []
    await uow.commit()
    logger.info("Marked %d messages read on %s by %s", len(updated), channel, principal.subject_id)

    for msg in updated:
        event = MessageStatusChanged(
            message_id=msg.id,
            status=msg.status,
            previous_status=MessageStatus.UNREAD.value,
            changed_by=principal.subject_id,
            read_at=msg.read_at,
            replied_at=msg.replied_at,
        )
        await _publish(publisher, msg.channels, event.event_name, dataclasses.asdict(event))
    return updated


async def find_latest_reply(
    message_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
) -> Message:
    original = await uow.messages.find_by_id(message_id)
    assert_can_view(principal, original)
    reply = await uow.messages.find_one({"in_reply_to": message_id})
    if reply is None:
        raise NotFoundError("Message has no reply")
    return reply


async def mark_read(
    message_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
    publisher: EventPublisher,
    clock: Clock = system_clock,
) -> Message:
    """Acknowledge an unread message.

    Messages already past ``unread`` are returned as they are, so reading
    twice never moves ``read_at``.
    """
    message = await uow.messages.find_by_id(message_id)
    message = assert_can_manage(principal, message)
    if not _can_read(MessageStatus(message.status)):
        return message
    return await _apply_status(message, MessageStatus.READ, principal, uow, publisher, clock, _can_read)


async def archive_message(
    message_id: uuid.UUID,
    principal: Principal,
    uow: UnitOfWork,
    publisher: EventPublisher,
    clock: Clock = system_clock,
) -> Message:
    message = await uow.messages.find_by_id(message_id)
    message = assert_can_manage(principal, message)
    if not _can_archive(MessageStatus(message.status)):
        return message
    return await _apply_status(message, MessageStatus.ARCHIVED, principal, uow, publisher, clock, _can_archive)


async def set_status(
    message_id: uuid.UUID,
    raw_status: str,
    principal: Principal,
    uow: UnitOfWork,
    publisher: EventPublisher,
    clock: Clock = system_clock,
) -> Message:
    """Set the status directly to any of the four known values.

    Any non-archived message may be moved to any status (staff can put a
    message back to ``unread``); ``archived`` cannot be left.
    """
    target = _parse_status(raw_status)
    message = await uow.messages.find_by_id(message_id)
    message = assert_can_manage(principal, message)

    current = MessageStatus(message.status)
    if current == target:
        return message
    _check_open(current)
    return await _apply_status(message, target, principal, uow, publisher, clock, _check_open)


async def reply_to_message(
    message_id: uuid.UUID,
    content: str,
    principal: Principal,
    uow: UnitOfWork,
    publisher: EventPublisher,
    clock: Clock = system_clock,
) -> Message:
    """Answer a message on behalf of its recipient.

    The reply goes from the original recipient back to the original sender
    and keeps the booking linkage. The original becomes ``replied``.
    """
    if not content or not content.strip():
        raise ValidationError("Reply content must not be empty")

    original = await uow.messages.find_by_id(message_id)
    if original is None:
        raise NotFoundError("Original message not found")
    original = assert_can_manage(principal, original)
    _check_replyable(MessageStatus(original.status))

    # The original is claimed first so a concurrent archive cannot be overwritten
    now = clock.now()
    before, updated = await _update(original, MessageStatus.REPLIED, uow, now, _check_replyable)

    reply = Message(
        id=uuid.uuid4(),
        sender_id=updated.recipient_id,
        sender_name=principal.display_name,
        sender_email=principal.email,
        recipient_id=updated.sender_id,
        subject=f"{REPLY_PREFIX}{updated.subject}",
        content=content,
        message_type=MessageType.GENERAL.value,
        priority=updated.priority,
        status=MessageStatus.UNREAD.value,
        related_booking_id=updated.related_booking_id,
        related_service_type=updated.related_service_type,
        in_reply_to=updated.id,
        created_at=now,
        updated_at=now,
    )
    reply = await uow.messages.create(reply)
    await uow.commit()
    logger.info("Message %s replied to by %s with %s", updated.id, principal.subject_id, reply.id)

    await _publish(publisher, reply.channels, MessageCreated.event_name, _created_payload(reply))
    if before.status != updated.status:
        event = _status_event(before, updated, principal)
        await _publish(publisher, updated.channels, event.event_name, dataclasses.asdict(event))
    return reply


async def _apply_status(
    message: Message,
    target: MessageStatus,
    principal: Principal,
    uow: UnitOfWork,
    publisher: EventPublisher,
    clock: Clock,
    guard: Callable[[MessageStatus], bool],
) -> Message:
    before, updated = await _update(message, target, uow, clock.now(), guard)
    if before.status == updated.status:
        return updated
    await uow.commit()
    logger.info(
        "Message %s status %s -> %s by %s",
        updated.id, before.status, updated.status, principal.subject_id,
    )

    event = _status_event(before, updated, principal)
    await _publish(publisher, updated.channels, event.event_name, dataclasses.asdict(event))
    return updated


async def _update(
    message: Message,
    target: MessageStatus,
    uow: UnitOfWork,
    now: datetime,
    guard: Callable[[MessageStatus], bool],
) -> tuple[Message, Message]:
    """Move ``message`` to ``target`` only while its stored status is unchanged.

    Returns ``(before, after)``. If another writer changed the status in the
    meantime the fresh record is checked with ``guard`` and retried; when it
    is already in ``target`` or the guard declines, ``before`` and ``after``
    are the same fresh record. Guards raise to turn a lost race into a
    conflict.
    """
    for _ in range(UPDATE_ATTEMPTS):
        patch = status_patch(message, target, now)
        updated = await uow.messages.update_by_id(message.id, patch, expected_status=message.status)
        if updated is not None:
            return message, updated

        latest = await uow.messages.find_by_id(message.id)
        if latest is None:
            raise NotFoundError("Message not found")
        current = MessageStatus(latest.status)
        if current == target or not guard(current):
            return latest, latest
        logger.debug("Message %s moved to %s concurrently, retrying", latest.id, current.value)
        message = latest
    raise ConflictError("Message is being changed concurrently, try again")


def _can_read(current: MessageStatus) -> bool:
    return can_transition(current, MessageStatus.READ)


def _can_archive(current: MessageStatus) -> bool:
    return can_transition(current, MessageStatus.ARCHIVED)


def _check_open(current: MessageStatus) -> bool:
    if is_terminal(current):
        raise ConflictError(f"Message is {current.value} and cannot change status")
    return True


def _check_replyable(current: MessageStatus) -> bool:
    if current not in REPLYABLE:
        raise ConflictError(f"Cannot reply to a message that is {current.value}")
    return True


async def _publish(
    publisher: EventPublisher,
    channels: tuple[str, ...],
    event: str,
    payload: dict[str, Any],
) -> None:
    for channel in channels:
        try:
            await publisher.publish(channel, event, payload)
        except Exception:  # noqa: BLE001
            logger.warning("Publish of %s to channel=%s failed", event, channel, exc_info=True)


def _parse_status(raw: str) -> MessageStatus:
    try:
        return parse_status(raw)
    except InvalidStatus as exc:
        allowed = ", ".join(s.value for s in MessageStatus)
        raise ValidationError(f"Invalid status {raw!r}; expected one of: {allowed}") from exc


def _created_payload(msg: Message) -> dict[str, Any]:
    return dataclasses.asdict(
        MessageCreated(
            message_id=msg.id,
            sender_id=msg.sender_id,
            sender_name=msg.sender_name,
            recipient_id=msg.recipient_id,
            subject=msg.subject,
            content=msg.content,
            message_type=msg.message_type,
            priority=msg.priority,
            status=msg.status,
            related_booking_id=msg.related_booking_id,
            in_reply_to=msg.in_reply_to,
            created_at=msg.created_at,
        )
    )


def _status_event(before: Message, after: Message, principal: Principal) -> MessageStatusChanged:
    return MessageStatusChanged(
        message_id=after.id,
        status=after.status,
        previous_status=before.status,
        changed_by=principal.subject_id,
        read_at=after.read_at,
        replied_at=after.replied_at,
    )
