from __future__ import annotations

import dataclasses
from datetime import datetime, timezone

import pytest

from notify_service.domain.lifecycle import (
    InvalidStatus,
    can_transition,
    is_terminal,
    parse_status,
    status_patch,
)
from notify_service.domain.value_objects.enums import MessageStatus
from tests.conftest import make_message

NOW = datetime(2026, 4, 2, 10, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize("raw", ["unread", "read", "replied", "archived"])
def test_parse_known_status(raw):
    assert parse_status(raw).value == raw


@pytest.mark.parametrize("raw", ["", "READ", "deleted", "open", " read"])
def test_parse_rejects_unknown_status(raw):
    with pytest.raises(InvalidStatus):
        parse_status(raw)


@pytest.mark.parametrize(
    "current, target, allowed",
    [
        (MessageStatus.UNREAD, MessageStatus.READ, True),
        (MessageStatus.UNREAD, MessageStatus.REPLIED, True),
        (MessageStatus.READ, MessageStatus.REPLIED, True),
        (MessageStatus.READ, MessageStatus.ARCHIVED, True),
        (MessageStatus.REPLIED, MessageStatus.ARCHIVED, True),
        (MessageStatus.READ, MessageStatus.READ, False),
        (MessageStatus.REPLIED, MessageStatus.READ, False),
        (MessageStatus.ARCHIVED, MessageStatus.UNREAD, False),
        (MessageStatus.ARCHIVED, MessageStatus.READ, False),
    ],
)
def test_transition_table(current, target, allowed):
    assert can_transition(current, target) is allowed


def test_only_archived_is_terminal():
    assert [s for s in MessageStatus if is_terminal(s)] == [MessageStatus.ARCHIVED]


def test_read_patch_stamps_read_at_once():
    unread = make_message()
    assert status_patch(unread, MessageStatus.READ, NOW)["read_at"] == NOW

    already_read = dataclasses.replace(make_message(status=MessageStatus.READ), read_at=NOW)
    assert "read_at" not in status_patch(already_read, MessageStatus.READ, NOW)


def test_replied_patch_only_on_entering_replied():
    read = make_message(status=MessageStatus.READ)
    assert status_patch(read, MessageStatus.REPLIED, NOW)["replied_at"] == NOW

    replied = make_message(status=MessageStatus.REPLIED)
    assert "replied_at" not in status_patch(replied, MessageStatus.REPLIED, NOW)


def test_archive_patch_touches_status_only():
    patch = status_patch(make_message(), MessageStatus.ARCHIVED, NOW)
    assert patch == {"status": "archived", "updated_at": NOW}
