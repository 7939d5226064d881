"""Shared test fixtures."""
from __future__ import annotations

import dataclasses
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping
from uuid import UUID

import pytest

from notify_service.application.dto.principal import Principal
from notify_service.domain.entities.message import Message
from notify_service.domain.value_objects.enums import (
    MessagePriority,
    MessageStatus,
    MessageType,
    Role,
)
from notify_service.infrastructure.db.repositories._cursor import decode_cursor

SENDER_ID = "hotel-7"
RECIPIENT_ID = "acct-42"


@pytest.fixture
def sender_principal() -> Principal:
    return Principal(subject_id=SENDER_ID, role=Role.VENDOR, name="Lakeside Hotel")


@pytest.fixture
def recipient_principal() -> Principal:
    return Principal(subject_id=RECIPIENT_ID, role=Role.CUSTOMER, name="Mwila Banda", email="mwila@example.com")


@pytest.fixture
def staff_principal() -> Principal:
    return Principal(subject_id="staff-3", role=Role.STAFF, channels=frozenset({RECIPIENT_ID}), name="Front Desk")


@pytest.fixture
def stranger_principal() -> Principal:
    return Principal(subject_id="acct-99", role=Role.CUSTOMER)


def make_message(
    *,
    sender_id: str = SENDER_ID,
    recipient_id: str = RECIPIENT_ID,
    status: str = MessageStatus.UNREAD,
    subject: str = "Your booking",
    related_booking_id: str | None = "bk-1001",
    created_at: datetime | None = None,
) -> Message:
    now = created_at or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
    return Message(
        id=uuid.uuid4(),
        sender_id=sender_id,
        sender_name="Lakeside Hotel",
        sender_email="desk@lakeside.example",
        recipient_id=recipient_id,
        subject=subject,
        content="We look forward to your stay.",
        message_type=MessageType.BOOKING,
        priority=MessagePriority.MEDIUM,
        status=status,
        related_booking_id=related_booking_id,
        related_service_type="hotel",
        in_reply_to=None,
        created_at=now,
        updated_at=now,
    )


@dataclass
class TickingClock:
    """Each call returns a strictly later instant."""

    current: datetime = field(default_factory=lambda: datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc))
    step: timedelta = timedelta(seconds=1)

    def now(self) -> datetime:
        self.current += self.step
        return self.current


@dataclass
class FakeMessageStore:
    _store: dict[UUID, Message] = field(default_factory=dict)
    updates: list[tuple[UUID, dict[str, Any]]] = field(default_factory=list)

    def add(self, message: Message) -> Message:
        self._store[message.id] = message
        return message

    async def find_by_id(self, message_id: UUID) -> Message | None:
        return self._store.get(message_id)

    async def find_one(self, filters: Mapping[str, Any]) -> Message | None:
        matches = [
            m for m in self._store.values()
            if all(getattr(m, k) == v for k, v in filters.items())
        ]
        matches.sort(key=lambda m: (m.created_at, str(m.id)), reverse=True)
        return matches[0] if matches else None

    async def create(self, message: Message) -> Message:
        return self.add(message)

    async def update_by_id(
        self,
        message_id: UUID,
        patch: Mapping[str, Any],
        *,
        expected_status: str | None = None,
    ) -> Message | None:
        current = self._store.get(message_id)
        if current is None:
            return None
        if expected_status is not None and current.status != expected_status:
            return None
        self.updates.append((message_id, dict(patch)))
        updated = dataclasses.replace(current, **patch)
        self._store[message_id] = updated
        return updated

    async def list_for_recipient(
        self,
        recipient_id: str,
        *,
        status: str | None = None,
        cursor: str | None = None,
        limit: int = 20,
    ) -> list[Message]:
        items = [
            m for m in self._store.values()
            if m.recipient_id == recipient_id and (status is None or m.status == status)
        ]
        items.sort(key=lambda m: (m.created_at, m.id), reverse=True)
        if cursor:
            ts, mid = decode_cursor(cursor)
            items = [m for m in items if (m.created_at, m.id) < (ts, mid)]
        return items[:limit]

    async def count_for_recipient(self, recipient_id: str, *, status: str | None = "unread") -> int:
        return sum(
            1 for m in self._store.values()
            if m.recipient_id == recipient_id and (status is None or m.status == status)
        )

    async def mark_read_for_recipient(self, recipient_id: str, now: datetime) -> list[Message]:
        updated = []
        for m in list(self._store.values()):
            if m.recipient_id != recipient_id or m.status != MessageStatus.UNREAD:
                continue
            patch = {"status": MessageStatus.READ.value, "updated_at": now, "read_at": m.read_at or now}
            self.updates.append((m.id, patch))
            self._store[m.id] = dataclasses.replace(m, **patch)
            updated.append(self._store[m.id])
        return updated


@dataclass
class FakeUoW:
    """In-memory UoW for unit tests."""
    messages: FakeMessageStore = field(default_factory=FakeMessageStore)
    commits: int = 0

    @property
    def committed(self) -> bool:
        return self.commits > 0

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        pass


@dataclass
class RecordingPublisher:
    events: list[tuple[str, str, dict[str, Any]]] = field(default_factory=list)

    async def publish(self, channel: str, event: str, payload: dict[str, Any]) -> None:
        self.events.append((channel, event, payload))

    def channels_for(self, event: str) -> set[str]:
        return {c for c, e, _ in self.events if e == event}


class BrokenPublisher:
    async def publish(self, channel: str, event: str, payload: dict[str, Any]) -> None:
        raise ConnectionError("bus unavailable")


@pytest.fixture
def uow() -> FakeUoW:
    return FakeUoW()


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()
