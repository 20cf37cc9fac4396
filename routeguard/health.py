"""Health endpoint for routeguard.

GET /health — 503 before ``app.state.ready`` is set (during lifespan startup),
200 afterwards.

The router is whitelisted: the health probe is the one route every deployment
needs to reach, so it must pass the gate like any other protected route. The
503 raised before startup is an HTTPException inside a whitelisted route and is
released too.
"""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException, Request

from routeguard.config import Config
from routeguard.gate import whitelisted_router

router = whitelisted_router(tags=["health"])


@router.get("/health")
async def health(request: Request) -> dict[str, Any]:
    """Primary health check endpoint.

    Response body (200):
        {"status": "ok", "gate": "enforcing", "render_rejections": true}

    Response body (503):
        {"detail": {"status": "starting", "message": "routeguard is starting up..."}}
    """
    if not getattr(request.app.state, "ready", False):
        raise HTTPException(
            status_code=503,
            detail={
                "status": "starting",
                "message": "routeguard is starting up...",
            },
        )

    config: Config = request.app.state.config
    return {
        "status": "ok",
        "gate": "enforcing",
        "render_rejections": config.gate.render_rejections,
    }
