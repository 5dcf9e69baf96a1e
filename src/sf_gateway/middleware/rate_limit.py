"""Fixed-window rate limiting per client IP, counted in Redis.

Key pattern: "ratelimit:{ip}:{window}" where window is the current minute.
The first hit in a window sets a 60s expiry; requests beyond
settings.RATE_LIMIT_PER_MINUTE get a 429 envelope with Retry-After.

If Redis is unreachable the request is let through and a warning logged;
the ledger itself never depends on Redis.
"""

import logging
import time

from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from config.settings import settings
from src.sf_common.errors import RateLimitError
from src.sf_common.redis_client import get_redis
from src.sf_common.response import error_response

logger = logging.getLogger(__name__)

_WINDOW_SECONDS = 60
_EXEMPT_PATHS = frozenset({"/health", "/docs", "/openapi.json"})


def client_ip(request: Request) -> str:
    """Real client IP, honouring the first X-Forwarded-For hop."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in _EXEMPT_PATHS or settings.RATE_LIMIT_PER_MINUTE <= 0:
            return await call_next(request)

        now = int(time.time())
        window = now // _WINDOW_SECONDS
        key = f"ratelimit:{client_ip(request)}:{window}"
        try:
            redis = await get_redis()
            count = await redis.incr(key)
            if count == 1:
                await redis.expire(key, _WINDOW_SECONDS)
        except RedisError as exc:
            logger.warning("Rate limiter unavailable, allowing request: %s", exc)
            return await call_next(request)

        if count > settings.RATE_LIMIT_PER_MINUTE:
            exc = RateLimitError()
            resp = error_response(exc.code, exc.message)
            return JSONResponse(
                status_code=exc.http_status,
                content=resp.model_dump(),
                headers={"Retry-After": str(_WINDOW_SECONDS - now % _WINDOW_SECONDS)},
            )
        return await call_next(request)
