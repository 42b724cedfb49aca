"""Lazily created Redis connection used by the rate limiter.

Balances never touch Redis: every balance read and write goes through
PostgreSQL, so losing Redis only disables rate limiting.
"""

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from config.settings import settings

_client: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    global _client  # noqa: PLW0603
    if _client is None:
        _client = aioredis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=1.0,
            socket_timeout=1.0,
        )
    return _client


async def redis_available() -> bool:
    """PING the server. False (never an exception) when Redis is down."""
    try:
        return bool(await (await get_redis()).ping())
    except RedisError:
        return False


async def close_redis() -> None:
    global _client  # noqa: PLW0603
    if _client is not None:
        await _client.aclose()
        _client = None
