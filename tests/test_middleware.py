"""
Inkpress Backend - Middleware Tests
====================================

What we test:
    ✅ X-Request-ID generated, or echoed back when the client sends a sane one
    ✅ Rate limiter answers 429 with Retry-After past the limit
    ✅ /health and static cover fetches never count against the budget
"""

from contextlib import contextmanager
from unittest.mock import patch

import pytest
from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport

from inkpress.config import Settings, settings
from inkpress.middleware.rate_limit import RateLimitMiddleware
from inkpress.middleware.request_id import RequestIDMiddleware, resolve_request_id


def build_app() -> FastAPI:
    app = FastAPI()

    @app.get("/ping")
    async def ping():
        return {"ok": True}

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    @app.get(settings.upload_url_prefix + "/{name}")
    async def cover(name: str):
        return {"name": name}

    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware)
    return app


@contextmanager
def rate_limit(requests: int, window: int = 60):
    with patch.object(settings, "rate_limit_requests", requests), \
         patch.object(settings, "rate_limit_window", window):
        yield


class TestRequestID:

    @pytest.mark.asyncio
    async def test_generates_request_id(self):
        transport = ASGITransport(app=build_app())
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/ping")

        assert len(response.headers["X-Request-ID"]) == 8

    @pytest.mark.asyncio
    async def test_echoes_client_request_id(self):
        transport = ASGITransport(app=build_app())
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/ping", headers={"X-Request-ID": "abc-123_x"})

        assert response.headers["X-Request-ID"] == "abc-123_x"

    @pytest.mark.asyncio
    async def test_replaces_unusable_client_request_id(self):
        transport = ASGITransport(app=build_app())
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/ping", headers={"X-Request-ID": "x" * 200})

        assert len(response.headers["X-Request-ID"]) == 8


    @pytest.mark.parametrize("value", [None, "", "abc\n", "a b", "x" * 65, "id;DROP"])
    def test_unusable_values_replaced(self, value):
        rid = resolve_request_id(value)
        assert rid != value
        assert len(rid) == 8


class TestRateLimit:

    @pytest.mark.asyncio
    async def test_limit_exceeded(self):
        with rate_limit(2):
            transport = ASGITransport(app=build_app())
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                assert (await client.get("/ping")).status_code == 200
                assert (await client.get("/ping")).status_code == 200
                blocked = await client.get("/ping")

        assert blocked.status_code == 429
        assert blocked.json()["error"] == "rate_limit_exceeded"
        assert 1 <= int(blocked.headers["Retry-After"]) <= 61

    @pytest.mark.asyncio
    async def test_health_excluded(self):
        with rate_limit(1):
            transport = ASGITransport(app=build_app())
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                for _ in range(3):
                    assert (await client.get("/health")).status_code == 200

    @pytest.mark.asyncio
    async def test_cover_fetches_do_not_use_budget(self):
        """A reader loading a 20-post page several times keeps listing access."""
        with rate_limit(10):
            transport = ASGITransport(app=build_app())
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                for _ in range(5):
                    assert (await client.get("/ping")).status_code == 200
                    for i in range(20):
                        cover = await client.get(f"{settings.upload_url_prefix}/{i}.png")
                        assert cover.status_code == 200

                assert (await client.get("/ping")).status_code == 200

    @pytest.mark.asyncio
    async def test_prefix_match_is_on_path_segment(self):
        with rate_limit(1):
            transport = ASGITransport(app=build_app())
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                assert (await client.get("/ping")).status_code == 200
                # "/uploadsfoo" is not under the upload prefix
                assert (await client.get(settings.upload_url_prefix + "foo")).status_code == 429

    def test_default_budget_covers_browsing(self):
        assert Settings.model_fields["rate_limit_requests"].default >= 300
        assert Settings.model_fields["rate_limit_window"].default == 60
