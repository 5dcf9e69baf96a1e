"""Request logging middleware.

Every request gets a short id, stored on request.state (router handlers copy
it into the ApiResponse envelope) and echoed back as X-Request-ID. Slow
ledger writes are logged at WARNING so lock contention shows up in the logs.

Log format:
    INFO [POST] /api/v1/loans/auto-settle → 200 (23ms) req_a1b2c3d4e5f6
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("sitefund.request")

_SLOW_REQUEST_MS = 1000


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get("x-request-id") or f"req_{uuid.uuid4().hex[:12]}"
        request.state.request_id = request_id

        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        response.headers["X-Request-ID"] = request_id

        level = logging.WARNING if elapsed_ms >= _SLOW_REQUEST_MS else logging.INFO
        logger.log(
            level,
            "[%s] %s → %d (%.0fms) %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request_id,
        )
        return response
