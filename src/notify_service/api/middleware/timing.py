"""Request timing log line per HTTP request."""
from __future__ import annotations

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)


class RequestTimingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        # Event streams stay open; only time-to-headers is meaningful
        content_type = response.headers.get("content-type", "")
        kind = "stream" if content_type.startswith("text/event-stream") else "done"
        logger.info(
            "%s %s %s %s %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            kind,
            elapsed_ms,
        )
        return response
