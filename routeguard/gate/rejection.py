"""Rejection renderer for the response gate.

Converts ``Rejected(NOT_WHITELISTED, request)`` into the client-visible
``501 Request not whitelisted`` and logs the event at ERROR level. The response
body is fixed: no path, header or route detail is echoed back to the client.

Optional. Without it, ``ResponseGateMiddleware`` raises ``RouteNotWhitelisted``
and the host's generic server-error handling produces the response.
"""

from __future__ import annotations

from typing import Awaitable, Callable

from starlette.responses import PlainTextResponse, Response

from routeguard.constants import REJECTION_BODY, REJECTION_STATUS_CODE, WHITELIST_POLICY
from routeguard.gate.outcome import Rejected
from routeguard.utils.logger import get_logger

logger = get_logger(__name__)

RejectionHandler = Callable[[Rejected], Awaitable[Response]]


async def render_rejection(rejection: Rejected) -> Response:
    """Render a gate rejection as HTTP 501.

    Args:
        rejection: The ``Rejected`` outcome produced by the gate.

    Returns:
        PlainTextResponse with status 501 and body ``Request not whitelisted``.
    """
    request = rejection.request
    logger.error(
        "Request not whitelisted",
        method=request.method,
        path=request.url.path,
        client_host=request.client.host if request.client else None,
        reason=rejection.reason.value,
        policy=WHITELIST_POLICY,
        hint="serve the route from a whitelisted_router() or WhitelistedRoute",
    )
    return PlainTextResponse(REJECTION_BODY, status_code=REJECTION_STATUS_CODE)
