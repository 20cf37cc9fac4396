"""Demonstration routes for the response gate.

  GET /rogue      — plain APIRouter route, never marked. Always rejected by the gate.
  GET /protected  — served from a protected_router(): runs the protection step,
                    then marks its response. Released with the marker stripped.

``some_protection`` is a placeholder. Replace it with the deployment's real
protection dependency (API key check, session validation, ...).
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

from routeguard.gate import protected_router


async def some_protection(request: Request) -> None:
    """Placeholder protection step; accepts every request."""
    return None


rogue_router = APIRouter(tags=["demo"])

safe_router = protected_router(some_protection, tags=["demo"])


@rogue_router.get("/rogue", response_class=PlainTextResponse)
async def rogue() -> str:
    """Unprotected route — its response never leaves the server."""
    return "OK"


@safe_router.get("/protected", response_class=PlainTextResponse)
async def protected() -> str:
    """Protected route — whitelisted together with ``some_protection``."""
    return "OK"
