from __future__ import annotations

from typing import Any

from notify_service.application.dto.principal import Principal
from notify_service.domain.value_objects.enums import Role


def principal_from_claims(payload: dict[str, Any]) -> Principal:
    """Build the typed caller identity once, at authentication time."""
    role_raw = payload.get("role", Role.CUSTOMER)
    role = Role(role_raw) if role_raw in Role.__members__.values() else Role.CUSTOMER

    channels = payload.get("channels") or []
    if isinstance(channels, str):
        channels = [channels]

    return Principal(
        subject_id=str(payload["sub"]),
        role=role,
        channels=frozenset(str(c) for c in channels),
        name=payload.get("name") or "",
        email=payload.get("email"),
    )
