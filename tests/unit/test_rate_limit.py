"""Tests for the Redis-backed rate limiting middleware."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from redis.exceptions import ConnectionError as RedisConnectionError

from src.sf_gateway.middleware.rate_limit import RateLimitMiddleware, client_ip


def _app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware)

    @app.get("/ping")
    async def ping() -> dict[str, str]:
        return {"pong": "ok"}

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


@pytest.fixture
async def app_client() -> AsyncClient:
    transport = ASGITransport(app=_app())
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


class TestClientIp:
    def test_prefers_forwarded_for(self) -> None:
        request = MagicMock()
        request.headers = {"x-forwarded-for": "203.0.113.7, 10.0.0.1"}
        assert client_ip(request) == "203.0.113.7"

    def test_falls_back_to_peer(self) -> None:
        request = MagicMock()
        request.headers = {}
        request.client.host = "10.0.0.9"
        assert client_ip(request) == "10.0.0.9"


class TestRateLimitMiddleware:
    async def test_under_limit_passes(self, app_client: AsyncClient) -> None:
        redis = AsyncMock()
        redis.incr.return_value = 1
        with patch("src.sf_gateway.middleware.rate_limit.get_redis", return_value=redis):
            resp = await app_client.get("/ping")

        assert resp.status_code == 200
        redis.expire.assert_awaited_once()

    async def test_over_limit_returns_429(self, app_client: AsyncClient) -> None:
        redis = AsyncMock()
        redis.incr.return_value = 10_000
        with patch("src.sf_gateway.middleware.rate_limit.get_redis", return_value=redis):
            resp = await app_client.get("/ping")

        assert resp.status_code == 429
        body = resp.json()
        assert body["code"] == 9003
        assert body["data"] is None
        assert "Retry-After" in resp.headers

    async def test_redis_down_fails_open(self, app_client: AsyncClient) -> None:
        get_redis = AsyncMock(side_effect=RedisConnectionError("refused"))
        with patch("src.sf_gateway.middleware.rate_limit.get_redis", get_redis):
            resp = await app_client.get("/ping")

        assert resp.status_code == 200

    async def test_health_is_exempt(self, app_client: AsyncClient) -> None:
        get_redis = AsyncMock()
        with patch("src.sf_gateway.middleware.rate_limit.get_redis", get_redis):
            resp = await app_client.get("/health")

        assert resp.status_code == 200
        get_redis.assert_not_awaited()
