from __future__ import annotations

import json
from typing import Any

from notify_service.infrastructure.realtime.framing import dumps


def serialize_event(channel: str, event: str, payload: dict[str, Any]) -> str:
    envelope = {"channel": channel, "event": event, "data": payload}
    return dumps(envelope)


def deserialize_event(raw: str | bytes) -> tuple[str, str, dict[str, Any]]:
    data = json.loads(raw)
    return data["channel"], data["event"], data["data"]
