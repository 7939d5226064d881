from __future__ import annotations

from typing import Any

from notify_service.infrastructure.realtime.registry import ChannelRegistry


class RegistryPublisher:
    """Implements application.ports.bus.EventPublisher on the local registry."""

    def __init__(self, registry: ChannelRegistry) -> None:
        self._registry = registry

    async def publish(self, channel: str, event: str, payload: dict[str, Any]) -> None:
        self._registry.publish(channel, event, payload)
