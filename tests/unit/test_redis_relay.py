from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from notify_service.infrastructure.bus.redis_pubsub import RedisPubSubPublisher, RedisPubSubSubscriber
from notify_service.infrastructure.bus.serializer import serialize_event
from notify_service.infrastructure.realtime.registry import ChannelRegistry


@pytest.mark.asyncio
async def test_publisher_wraps_channel_and_event():
    redis = MagicMock()
    redis.publish = AsyncMock()

    await RedisPubSubPublisher(redis, "notify.fanout").publish("acct-42", "message", {"id": "m1"})

    bus_channel, raw = redis.publish.await_args.args
    assert bus_channel == "notify.fanout"
    assert json.loads(raw) == {"channel": "acct-42", "event": "message", "data": {"id": "m1"}}


@pytest.mark.asyncio
async def test_publisher_swallows_redis_errors():
    redis = MagicMock()
    redis.publish = AsyncMock(side_effect=ConnectionError("redis down"))

    await RedisPubSubPublisher(redis, "notify.fanout").publish("acct-42", "message", {})


def test_subscriber_relays_into_local_registry():
    registry = ChannelRegistry()
    frames: list[str] = []
    registry.subscribe("acct-42", "a", frames.append)
    relay = RedisPubSubSubscriber(MagicMock(), "notify.fanout", registry)

    relay.dispatch(serialize_event("acct-42", "status-changed", {"status": "read"}))

    assert frames == ['event: status-changed\ndata: {"status":"read"}\n\n']
