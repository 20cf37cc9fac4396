"""routeguard response gate package.

Public API:
  - mark()                  — tag a single response as whitelisted
  - WhitelistedRoute        — FastAPI route class marking all its responses
  - whitelisted_router()    — APIRouter of WhitelistedRoutes
  - protected_router()      — whitelisted router with protection dependencies
  - WhitelistMiddleware     — ASGI wrapper marking a mounted sub-application
  - enforce()               — pure marker check: Passed | Rejected
  - partition_marker_headers() — case-insensitive marker/other header split
  - ResponseGateMiddleware  — boundary middleware applying enforce() to every response
  - render_rejection()      — 501 "Request not whitelisted" renderer
  - Passed, Rejected, GateOutcome, RejectionReason — gate outcome types
  - RouteNotWhitelisted     — unhandled rejection handed to the host
"""

from __future__ import annotations

from routeguard.gate.enforce import (
    ResponseGateMiddleware,
    enforce,
    partition_marker_headers,
)
from routeguard.gate.marker import (
    WhitelistMiddleware,
    WhitelistedRoute,
    mark,
    protected_router,
    whitelisted_router,
)
from routeguard.gate.outcome import (
    GateOutcome,
    Passed,
    Rejected,
    RejectionReason,
    RouteNotWhitelisted,
)
from routeguard.gate.rejection import RejectionHandler, render_rejection

__all__ = [
    "mark",
    "WhitelistedRoute",
    "whitelisted_router",
    "protected_router",
    "WhitelistMiddleware",
    "enforce",
    "partition_marker_headers",
    "ResponseGateMiddleware",
    "render_rejection",
    "RejectionHandler",
    "GateOutcome",
    "Passed",
    "Rejected",
    "RejectionReason",
    "RouteNotWhitelisted",
]
