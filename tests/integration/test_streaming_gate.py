"""Integration tests for streaming responses and mounted ASGI apps behind the gate.

Headers are final in ``http.response.start``, before the first body chunk, so
streaming responses are gated exactly like buffered ones: nothing is exempt.
"""

from __future__ import annotations

from typing import AsyncIterator
from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from fastapi.responses import StreamingResponse
from httpx import ASGITransport, AsyncClient
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.routing import Route

from routeguard.gate import (
    ResponseGateMiddleware,
    WhitelistMiddleware,
    render_rejection,
    whitelisted_router,
)
from routeguard.gate import rejection as rejection_module

pytestmark = pytest.mark.asyncio


# ─── Helpers ──────────────────────────────────────────────────────────────────


async def _chunks() -> AsyncIterator[bytes]:
    for chunk in (b"alpha-", b"beta-", b"gamma"):
        yield chunk


async def _hello(request: Request) -> PlainTextResponse:
    return PlainTextResponse("hello from sub-app")


def _sub_app() -> Starlette:
    return Starlette(routes=[Route("/", _hello)])


def _make_app() -> FastAPI:
    app = FastAPI()

    @app.get("/stream/rogue")
    async def rogue_stream() -> StreamingResponse:
        return StreamingResponse(_chunks(), media_type="text/plain")

    safe = whitelisted_router()

    @safe.get("/stream/safe")
    async def safe_stream() -> StreamingResponse:
        return StreamingResponse(_chunks(), media_type="text/plain")

    app.include_router(safe)
    app.mount("/sub", WhitelistMiddleware(_sub_app()))
    app.mount("/raw", _sub_app())
    app.add_middleware(ResponseGateMiddleware, rejection_handler=render_rejection)
    return app


def _client(app: FastAPI) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.fixture(autouse=True)
def quiet_rejection_logger(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(rejection_module, "logger", MagicMock())


# ─── Streaming ────────────────────────────────────────────────────────────────


class TestStreamingResponses:

    async def test_whitelisted_stream_passes_complete(self) -> None:
        async with _client(_make_app()) as client:
            response = await client.get("/stream/safe")
        assert response.status_code == 200
        assert response.text == "alpha-beta-gamma"
        assert "whitelisted" not in response.headers

    async def test_unmarked_stream_rejected_without_leaking_body(self) -> None:
        async with _client(_make_app()) as client:
            response = await client.get("/stream/rogue")
        assert response.status_code == 501
        assert response.text == "Request not whitelisted"
        assert "alpha" not in response.text

    async def test_whitelisted_stream_read_incrementally(self) -> None:
        app = _make_app()
        async with _client(app) as client:
            async with client.stream("GET", "/stream/safe") as response:
                assert response.status_code == 200
                assert "whitelisted" not in response.headers
                body = b"".join([chunk async for chunk in response.aiter_bytes()])
        assert body == b"alpha-beta-gamma"


# ─── Mounted sub-applications ─────────────────────────────────────────────────


class TestMountedApps:

    async def test_wrapped_mount_passes(self) -> None:
        async with _client(_make_app()) as client:
            response = await client.get("/sub/")
        assert response.status_code == 200
        assert response.text == "hello from sub-app"
        assert "whitelisted" not in response.headers

    async def test_unwrapped_mount_rejected(self) -> None:
        async with _client(_make_app()) as client:
            response = await client.get("/raw/")
        assert response.status_code == 501
        assert response.text == "Request not whitelisted"

    async def test_wrapped_mount_404_is_marked(self) -> None:
        """WhitelistMiddleware marks every response of the sub-app, errors included."""
        async with _client(_make_app()) as client:
            response = await client.get("/sub/missing")
        assert response.status_code == 404
        assert "whitelisted" not in response.headers
