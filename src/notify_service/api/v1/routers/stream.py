from __future__ import annotations

import logging

from fastapi import APIRouter, Query
from fastapi.responses import StreamingResponse

from notify_service.api.deps import RegistryDep, StreamPrincipal
from notify_service.application.policies.permissions import assert_channel_access
from notify_service.config import settings
from notify_service.infrastructure.realtime.stream import SseConnection, event_stream

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["stream"])

SSE_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


@router.get("/stream")
async def stream(
    principal: StreamPrincipal,
    registry: RegistryDep,
    channel: str | None = Query(None),
) -> StreamingResponse:
    target = assert_channel_access(principal, channel or principal.subject_id)
    connection = SseConnection(maxsize=settings.SSE_QUEUE_MAXSIZE)
    logger.debug("Principal %s opening stream on channel=%s", principal.subject_id, target)
    return StreamingResponse(
        event_stream(registry, target, connection, settings.SSE_HEARTBEAT_SECONDS),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
