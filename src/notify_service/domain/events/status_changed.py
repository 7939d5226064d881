from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class MessageStatusChanged:
    message_id: UUID
    status: str
    previous_status: str
    changed_by: str
    read_at: datetime | None = None
    replied_at: datetime | None = None

    event_name = "status-changed"
