from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Protocol
from uuid import UUID

from notify_service.domain.entities.message import Message


class MessageStore(Protocol):
    async def find_by_id(self, message_id: UUID) -> Message | None: ...

    async def find_one(self, filters: Mapping[str, Any]) -> Message | None:
        """Newest message whose fields equal every item of ``filters``."""
        ...

    async def create(self, message: Message) -> Message: ...

    async def update_by_id(
        self,
        message_id: UUID,
        patch: Mapping[str, Any],
        *,
        expected_status: str | None = None,
    ) -> Message | None:
        """Atomically apply ``patch``.

        With ``expected_status`` the patch only lands while the stored status
        still equals it. Return the updated record, or None if the message is
        missing or its status moved on.
        """
        ...

    async def list_for_recipient(
        self,
        recipient_id: str,
        *,
        status: str | None = None,
        cursor: str | None = None,
        limit: int = 20,
    ) -> list[Message]: ...

    async def count_for_recipient(self, recipient_id: str, *, status: str | None = "unread") -> int: ...

    async def mark_read_for_recipient(self, recipient_id: str, now: datetime) -> list[Message]:
        """Move every unread message of ``recipient_id`` to ``read`` in one step.

        ``read_at`` is only filled where it is still empty. Returns the
        updated records.
        """
        ...
