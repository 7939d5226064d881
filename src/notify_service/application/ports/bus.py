from __future__ import annotations

from typing import Any, Protocol


class EventPublisher(Protocol):
    """Best-effort fan-out of one event to every live subscriber of a channel.

    Implementations never raise for delivery problems.
    """

    async def publish(self, channel: str, event: str, payload: dict[str, Any]) -> None: ...
