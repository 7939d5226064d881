"""Text event-stream framing.

Each event is two lines followed by a blank line::

    event: <name>
    data: <compact JSON>
"""
from __future__ import annotations

import dataclasses
import json
from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

HEARTBEAT_FRAME = ": keep-alive\n\n"


class _Encoder(json.JSONEncoder):
    def default(self, o: object) -> Any:
        if isinstance(o, UUID):
            return str(o)
        if isinstance(o, datetime):
            return o.isoformat()
        if isinstance(o, Enum):
            return o.value
        if dataclasses.is_dataclass(o) and not isinstance(o, type):
            return dataclasses.asdict(o)
        return super().default(o)


def dumps(payload: Any) -> str:
    return json.dumps(payload, cls=_Encoder, separators=(",", ":"))


def encode_frame(event: str, payload: Any) -> str:
    if "\n" in event or "\r" in event:
        raise ValueError(f"Event name must be a single line: {event!r}")
    return f"event: {event}\ndata: {dumps(payload)}\n\n"
