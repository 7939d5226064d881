"""In-process channel registry: channel -> live subscribers."""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable

from notify_service.infrastructure.realtime.framing import encode_frame

logger = logging.getLogger(__name__)

SendFn = Callable[[str], None]
Unsubscribe = Callable[[], None]


@dataclass(eq=False, slots=True)
class Subscriber:
    id: str
    channel: str
    send: SendFn


class ChannelRegistry:
    """Thread-safe publish/subscribe registry keyed by channel.

    A single lock serializes subscribe, unsubscribe and the subscriber
    snapshot taken by publish. Sends run outside the lock, so a send that
    unsubscribes (or publishes) cannot deadlock.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._channels: dict[str, set[Subscriber]] = {}

    def subscribe(self, channel: str, subscriber_id: str, send: SendFn) -> Unsubscribe:
        if not channel:
            raise ValueError("channel must be non-empty")
        if not subscriber_id:
            raise ValueError("subscriber_id must be non-empty")

        sub = Subscriber(id=subscriber_id, channel=channel, send=send)
        with self._lock:
            self._channels.setdefault(channel, set()).add(sub)
        logger.debug("Subscribed %s to channel=%s", subscriber_id, channel)

        done = False

        def unsubscribe() -> None:
            nonlocal done
            with self._lock:
                if done:
                    return
                done = True
                subs = self._channels.get(channel)
                if subs is None:
                    return
                subs.discard(sub)
                if not subs:
                    del self._channels[channel]
            logger.debug("Unsubscribed %s from channel=%s", subscriber_id, channel)

        return unsubscribe

    def publish(self, channel: str, event: str, payload: Any) -> int:
        """Push one frame to every subscriber of ``channel``.

        Returns the number of subscribers the frame was handed to. A failing
        send only loses the frame for that subscriber.
        """
        with self._lock:
            subs = list(self._channels.get(channel, ()))
        if not subs:
            return 0

        frame = encode_frame(event, payload)
        delivered = 0
        for sub in subs:
            try:
                sub.send(frame)
            except Exception:  # noqa: BLE001
                logger.debug(
                    "Dropped %s event for subscriber %s on channel=%s",
                    event, sub.id, channel, exc_info=True,
                )
            else:
                delivered += 1
        return delivered

    def has_channel(self, channel: str) -> bool:
        with self._lock:
            return channel in self._channels

    def subscriber_count(self, channel: str | None = None) -> int:
        with self._lock:
            if channel is not None:
                return len(self._channels.get(channel, ()))
            return sum(len(subs) for subs in self._channels.values())


registry = ChannelRegistry()


def get_registry() -> ChannelRegistry:
    return registry
