"""Unit tests for RateLimitMiddleware with an in-memory Redis stand-in."""

from collections.abc import Iterator
from unittest.mock import MagicMock, patch

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from redis.exceptions import ConnectionError as RedisConnectionError

from src.smm_gateway.middleware import rate_limit
from src.smm_gateway.middleware.rate_limit import RateLimitMiddleware


@pytest.fixture(autouse=True)
def frozen_clock() -> Iterator[None]:
    # Keep every request inside one fixed window
    with patch.object(rate_limit, "time", MagicMock(time=lambda: 1_700_000_030)):
        yield


class FakeRedis:
    def __init__(self) -> None:
        self.counts: dict[str, int] = {}
        self.expiries: dict[str, int] = {}

    async def incr(self, key: str) -> int:
        self.counts[key] = self.counts.get(key, 0) + 1
        return self.counts[key]

    async def expire(self, key: str, seconds: int) -> bool:
        self.expiries[key] = seconds
        return True


class BrokenRedis:
    async def incr(self, key: str) -> int:
        raise RedisConnectionError("connection refused")


def _app(redis: object, limit: int) -> FastAPI:
    app = FastAPI()

    async def factory() -> object:
        return redis

    app.add_middleware(RateLimitMiddleware, limit=limit, redis_factory=factory)

    @app.get("/ping")
    async def ping() -> dict[str, str]:
        return {"pong": "ok"}

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


async def _client(app: FastAPI) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


async def test_requests_over_limit_get_429() -> None:
    redis = FakeRedis()
    async with await _client(_app(redis, limit=2)) as client:
        assert (await client.get("/ping")).status_code == 200
        assert (await client.get("/ping")).status_code == 200
        resp = await client.get("/ping")

    assert resp.status_code == 429
    body = resp.json()
    assert body["code"] == 9001
    assert body["data"] is None
    assert 0 < int(resp.headers["Retry-After"]) <= 60
    assert list(redis.expiries.values()) == [60]


async def test_clients_are_counted_separately() -> None:
    redis = FakeRedis()
    async with await _client(_app(redis, limit=1)) as client:
        first = await client.get("/ping", headers={"X-Forwarded-For": "10.0.0.1"})
        second = await client.get("/ping", headers={"X-Forwarded-For": "10.0.0.2, 172.16.0.1"})
    assert first.status_code == 200
    assert second.status_code == 200
    assert any("10.0.0.2" in key for key in redis.counts)


async def test_health_is_exempt() -> None:
    redis = FakeRedis()
    async with await _client(_app(redis, limit=0)) as client:
        resp = await client.get("/health")
    assert resp.status_code == 200
    assert redis.counts == {}


async def test_redis_outage_fails_open() -> None:
    async with await _client(_app(BrokenRedis(), limit=1)) as client:
        resp = await client.get("/ping")
    assert resp.status_code == 200
