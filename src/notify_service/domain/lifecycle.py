"""Status state machine for persisted messages.

    unread -> read -> replied -> archived

``archived`` is reachable from every other state and is terminal.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any

from notify_service.domain.entities.message import Message
from notify_service.domain.value_objects.enums import MessageStatus

TRANSITIONS: dict[MessageStatus, frozenset[MessageStatus]] = {
    MessageStatus.UNREAD: frozenset({MessageStatus.READ, MessageStatus.REPLIED, MessageStatus.ARCHIVED}),
    MessageStatus.READ: frozenset({MessageStatus.REPLIED, MessageStatus.ARCHIVED}),
    MessageStatus.REPLIED: frozenset({MessageStatus.ARCHIVED}),
    MessageStatus.ARCHIVED: frozenset(),
}

REPLYABLE = frozenset({MessageStatus.UNREAD, MessageStatus.READ, MessageStatus.REPLIED})


class InvalidStatus(ValueError):
    pass


def parse_status(raw: str) -> MessageStatus:
    try:
        return MessageStatus(raw)
    except ValueError:
        raise InvalidStatus(raw) from None


def can_transition(current: MessageStatus, target: MessageStatus) -> bool:
    return target in TRANSITIONS[current]


def is_terminal(status: MessageStatus) -> bool:
    return not TRANSITIONS[status]


def status_patch(message: Message, target: MessageStatus, now: datetime) -> dict[str, Any]:
    """Build the store patch for moving ``message`` into ``target``.

    ``read_at`` is only stamped the first time a message is read, and
    ``replied_at`` only when the status actually changes into ``replied``.
    """
    patch: dict[str, Any] = {"status": target.value, "updated_at": now}
    if target == MessageStatus.READ and message.read_at is None:
        patch["read_at"] = now
    elif target == MessageStatus.REPLIED and message.status != MessageStatus.REPLIED:
        patch["replied_at"] = now
    return patch
