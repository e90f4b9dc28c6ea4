"""
Clinic Tracker Backend — Health Check and Middleware Tests
===========================================================

What:  Tests for GET /health, the request id header, the error envelope and
       the auth rate limiter.
How:   The rate limiter is mounted on a small throwaway FastAPI app so its
       limit can be tiny without affecting the main app.

What we test:
    ✅ /health reports database and mail status (healthy / degraded / unhealthy)
    ✅ X-Request-ID is generated, or echoed when the client sends one
    ✅ Error responses carry {error, message, request_id}
    ✅ The limiter only counts its path prefix and answers 429 with Retry-After
"""

from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError

from clinic_api import __version__
from clinic_api.database import get_db_session
from clinic_api.main import app
from clinic_api.middleware.logging import level_for_status
from clinic_api.middleware.rate_limit import RateLimitMiddleware


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy(self, test_client):
        response = await test_client.get("/health")

        body = response.json()
        assert response.status_code == 200
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["mail"] == "configured"
        assert body["version"] == __version__
        assert body["steatosis_formula"] == "fli_ast"

    @pytest.mark.asyncio
    async def test_degraded_without_mail(self, test_client, mail_sender):
        mail_sender.is_configured.return_value = False

        response = await test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "degraded"
        assert response.json()["mail"] == "not_configured"

    @pytest.mark.asyncio
    async def test_unhealthy_without_database(self, test_client):
        broken = AsyncMock()
        broken.execute = AsyncMock(
            side_effect=OperationalError("SELECT 1", {}, Exception("connection refused"))
        )
        broken.rollback = AsyncMock()

        async def broken_session():
            yield broken

        app.dependency_overrides[get_db_session] = broken_session

        response = await test_client.get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"
        assert response.json()["database"] == "disconnected"
        broken.rollback.assert_awaited_once()


class TestRequestId:

    @pytest.mark.asyncio
    async def test_generated(self, test_client):
        response = await test_client.get("/health")
        assert len(response.headers["X-Request-ID"]) == 8

    @pytest.mark.asyncio
    async def test_echoed_into_error_envelope(self, test_client):
        response = await test_client.get(
            "/api/users/999", headers={"X-Request-ID": "trace-42"}
        )

        body = response.json()
        assert response.status_code == 404
        assert response.headers["X-Request-ID"] == "trace-42"
        assert body["error"] == "not_found"
        assert body["message"]
        assert body["request_id"] == "trace-42"

    @pytest.mark.asyncio
    async def test_unknown_route_uses_envelope(self, test_client):
        response = await test_client.get("/api/nothing-here")
        assert response.status_code == 404
        assert response.json()["error"] == "http_error"


class TestAccessLogLevel:

    def test_levels(self):
        assert level_for_status(200) < level_for_status(404) < level_for_status(500)


def limited_app(max_requests=2):
    throwaway = FastAPI()

    @throwaway.post("/api/auth/generate-code")
    async def generate():
        return {"success": True}

    @throwaway.get("/api/other")
    async def other():
        return {"ok": True}

    throwaway.add_middleware(
        RateLimitMiddleware, max_requests=max_requests, window_seconds=60
    )
    return throwaway


class TestRateLimit:

    @pytest.mark.asyncio
    async def test_blocks_after_limit(self):
        transport = ASGITransport(app=limited_app(max_requests=2))
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            statuses = [
                (await client.post("/api/auth/generate-code")).status_code for _ in range(2)
            ]
            blocked = await client.post("/api/auth/generate-code")

        assert statuses == [200, 200]
        assert blocked.status_code == 429
        assert blocked.json()["error"] == "rate_limit_exceeded"
        assert 0 < int(blocked.headers["Retry-After"]) <= 60
        assert blocked.json()["details"]["retry_after"] == int(blocked.headers["Retry-After"])

    @pytest.mark.asyncio
    async def test_other_paths_are_not_counted(self):
        transport = ASGITransport(app=limited_app(max_requests=1))
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            others = [(await client.get("/api/other")).status_code for _ in range(5)]
            first_auth = await client.post("/api/auth/generate-code")

        assert others == [200] * 5
        assert first_auth.status_code == 200
