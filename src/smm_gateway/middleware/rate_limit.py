"""Fixed-window rate limiting backed by Redis.

Key pattern: "ratelimit:{client_ip}:{epoch_minute}". The first hit in a window
sets a 60s expiry; hits beyond RATE_LIMIT_PER_MINUTE get a 429 in the unified
ApiResponse envelope with a Retry-After header.

The real client IP is taken from the first X-Forwarded-For hop when present
(reverse proxy aware). /health is never limited.
"""

import logging
import time
from collections.abc import Awaitable, Callable

import redis.asyncio as aioredis
from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from config.settings import settings
from src.smm_common.errors import RateLimitError
from src.smm_common.redis_client import get_redis
from src.smm_common.response import error_response

logger = logging.getLogger(__name__)

_WINDOW_SECONDS = 60
_EXEMPT_PATHS = frozenset({"/health"})


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app: ASGIApp,
        limit: int | None = None,
        redis_factory: Callable[[], Awaitable[aioredis.Redis]] = get_redis,
    ) -> None:
        super().__init__(app)
        self._limit = limit if limit is not None else settings.RATE_LIMIT_PER_MINUTE
        self._redis_factory = redis_factory

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path in _EXEMPT_PATHS:
            return await call_next(request)

        now = int(time.time())
        window = now // _WINDOW_SECONDS
        key = f"ratelimit:{client_ip(request)}:{window}"
        try:
            redis = await self._redis_factory()
            count = await redis.incr(key)
            if count == 1:
                await redis.expire(key, _WINDOW_SECONDS)
        except RedisError:
            # Limiter outage must not take the API down with it
            logger.warning("Rate limiter unavailable, allowing %s", request.url.path)
            return await call_next(request)

        if count > self._limit:
            exc = RateLimitError()
            body = error_response(exc.code, exc.message)
            body.request_id = getattr(request.state, "request_id", body.request_id)
            return JSONResponse(
                status_code=exc.http_status,
                content=body.model_dump(),
                headers={"Retry-After": str(_WINDOW_SECONDS - now % _WINDOW_SECONDS)},
            )
        return await call_next(request)
