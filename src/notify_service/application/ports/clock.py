from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Timezone-aware UTC wall clock used for lifecycle timestamps."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


system_clock = SystemClock()
