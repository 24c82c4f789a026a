"""
MediRate Admin Backend — Health & Middleware Tests
====================================================

What we test:
    ✅ /health reports database and blob store status
    ✅ Every response carries an X-Request-ID, reusing a client-supplied one
    ✅ Error bodies include the request ID
    ✅ The rate limiter answers 429 with Retry-After once the window is full
    ✅ Rotating X-Forwarded-For does not reset the limit
    ✅ The 429 body carries the request ID
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from medirate.middleware.rate_limit import RateLimitMiddleware
from medirate.middleware.request_id import RequestIDMiddleware


class TestHealth:

    @pytest.mark.asyncio
    async def test_unreachable_database_is_unhealthy(self, test_client):
        with patch("medirate.routes.health.engine") as mock_engine:
            mock_engine.connect.side_effect = OSError("connection refused")
            response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "unhealthy"
        assert body["database"] == "disconnected"
        assert body["blob_store"] == "configured"

    @pytest.mark.asyncio
    async def test_reachable_database_is_healthy(self, test_client):
        conn = MagicMock()
        conn.execute = AsyncMock()
        with patch("medirate.routes.health.engine") as mock_engine:
            mock_engine.connect.return_value.__aenter__ = AsyncMock(return_value=conn)
            mock_engine.connect.return_value.__aexit__ = AsyncMock(return_value=False)
            response = await test_client.get("/health")

        assert response.json()["status"] == "healthy"


class TestRequestId:

    @pytest.mark.asyncio
    async def test_generated_when_absent(self, test_client):
        response = await test_client.get("/api/documents")
        rid = response.headers["X-Request-ID"]
        assert len(rid) == 8
        assert response.json()["request_id"] == rid

    @pytest.mark.asyncio
    async def test_client_value_is_reused(self, test_client):
        response = await test_client.get("/api/documents", headers={"X-Request-ID": "trace-123"})
        assert response.headers["X-Request-ID"] == "trace-123"


class TestRateLimit:

    @pytest.mark.asyncio
    async def test_limit_exceeded(self):
        app = FastAPI()
        app.add_middleware(RateLimitMiddleware, limit=2, window=60)

        @app.get("/ping")
        async def ping():
            return {"ok": True}

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            statuses = [(await client.get("/ping")).status_code for _ in range(3)]
            blocked = await client.get("/ping")

        assert statuses == [200, 200, 429]
        assert blocked.json()["error"] == "rate_limit_exceeded"
        assert int(blocked.headers["Retry-After"]) >= 1


def limited_app(limit: int) -> FastAPI:
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, limit=limit, window=60)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/ping")
    async def ping():
        return {"ok": True}

    return app


class TestRateLimitKey:

    @pytest.mark.asyncio
    async def test_forwarded_for_does_not_bypass_limit(self):
        app = limited_app(limit=10)
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            statuses = [
                (await client.get("/ping", headers={"X-Forwarded-For": f"10.0.0.{i}"})).status_code
                for i in range(12)
            ]

        assert statuses == [200] * 10 + [429, 429]

    @pytest.mark.asyncio
    async def test_429_body_has_request_id(self):
        app = limited_app(limit=1)
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            await client.get("/ping")
            blocked = await client.get("/ping", headers={"X-Request-ID": "trace-429"})

        assert blocked.status_code == 429
        assert blocked.json()["request_id"] == "trace-429"
        assert blocked.headers["X-Request-ID"] == "trace-429"
