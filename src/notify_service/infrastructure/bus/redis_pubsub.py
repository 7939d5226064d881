"""Redis Pub/Sub fan-out between worker processes.

Every worker publishes to one Redis channel and runs a subscriber that
forwards what it hears into its own in-process registry.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any

import redis.asyncio as aioredis

from notify_service.infrastructure.bus.serializer import deserialize_event, serialize_event
from notify_service.infrastructure.realtime.registry import ChannelRegistry

logger = logging.getLogger(__name__)


class RedisPubSubPublisher:
    """Implements application.ports.bus.EventPublisher."""

    def __init__(self, redis: aioredis.Redis, redis_channel: str) -> None:
        self._redis = redis
        self._redis_channel = redis_channel

    async def publish(self, channel: str, event: str, payload: dict[str, Any]) -> None:
        raw = serialize_event(channel, event, payload)
        try:
            await self._redis.publish(self._redis_channel, raw)
        except Exception:  # noqa: BLE001
            logger.warning("Redis publish failed for channel=%s event=%s", channel, event, exc_info=True)


class RedisPubSubSubscriber:
    """Background task that relays Redis messages into the local registry."""

    def __init__(
        self,
        redis: aioredis.Redis,
        redis_channel: str,
        registry: ChannelRegistry,
    ) -> None:
        self._redis = redis
        self._redis_channel = redis_channel
        self._registry = registry
        self._task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        self._task = asyncio.create_task(self._listen(), name="redis-pubsub-subscriber")
        logger.info("Redis Pub/Sub subscriber started on channel=%s", self._redis_channel)

    async def stop(self) -> None:
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
            logger.info("Redis Pub/Sub subscriber stopped")

    def dispatch(self, raw: str | bytes) -> None:
        channel, event, data = deserialize_event(raw)
        self._registry.publish(channel, event, data)

    async def _listen(self) -> None:
        pubsub = self._redis.pubsub()
        await pubsub.subscribe(self._redis_channel)
        try:
            async for message in pubsub.listen():
                if message["type"] != "message":
                    continue
                try:
                    self.dispatch(message["data"])
                except Exception:
                    logger.exception("Error processing pubsub message")
        finally:
            await pubsub.unsubscribe(self._redis_channel)
            await pubsub.aclose()
