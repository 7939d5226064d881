"""Per-connection event stream."""
from __future__ import annotations

import asyncio
import logging
import uuid
from typing import AsyncIterator

from notify_service.infrastructure.realtime.framing import HEARTBEAT_FRAME, encode_frame
from notify_service.infrastructure.realtime.registry import ChannelRegistry

logger = logging.getLogger(__name__)


class ConnectionClosedError(RuntimeError):
    pass


class SseConnection:
    """Buffers frames for one live client.

    ``send`` is what the registry holds for this subscriber. It may be called
    from any thread and never blocks; frames are handed to the connection's
    event loop and queued there.
    """

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop | None = None,
        maxsize: int = 0,
    ) -> None:
        self.id = uuid.uuid4().hex
        self._loop = loop or asyncio.get_running_loop()
        self._queue: asyncio.Queue[str] = asyncio.Queue(maxsize=maxsize)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, frame: str) -> None:
        if self._closed:
            raise ConnectionClosedError(self.id)
        self._loop.call_soon_threadsafe(self._enqueue, frame)

    def _enqueue(self, frame: str) -> None:
        if self._closed:
            return
        try:
            self._queue.put_nowait(frame)
        except asyncio.QueueFull:
            logger.warning("Queue full, dropping frame for connection %s", self.id)

    async def next_frame(self, timeout: float | None = None) -> str | None:
        """Wait for the next queued frame; None when ``timeout`` elapses."""
        try:
            return await asyncio.wait_for(self._queue.get(), timeout)
        except asyncio.TimeoutError:
            return None

    def close(self) -> None:
        self._closed = True


async def event_stream(
    registry: ChannelRegistry,
    channel: str,
    connection: SseConnection,
    heartbeat_seconds: float | None = None,
) -> AsyncIterator[str]:
    """Yield the ``open`` frame, then live frames until the consumer stops.

    Cancellation (client disconnect, shutdown) and ``aclose()`` both run the
    ``finally`` block, which releases the subscription exactly once.
    """
    unsubscribe = registry.subscribe(channel, connection.id, connection.send)
    logger.info("Stream %s opened on channel=%s", connection.id, channel)
    try:
        yield encode_frame("open", {"ok": True})
        while True:
            frame = await connection.next_frame(heartbeat_seconds)
            yield frame if frame is not None else HEARTBEAT_FRAME
    finally:
        connection.close()
        unsubscribe()
        logger.info("Stream %s closed on channel=%s", connection.id, channel)
