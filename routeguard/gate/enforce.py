"""Enforce step of the response gate.

``ResponseGateMiddleware`` is installed once, as the outermost user middleware,
and inspects every response produced by the application beneath it:

  - Marker present  → strip every marker instance, let the response complete.
  - Marker absent   → discard the response, produce Rejected(NOT_WHITELISTED, request).

A rejection goes to the ``rejection_handler`` registered on the middleware. With
no handler registered it is raised as ``RouteNotWhitelisted`` so the host's
generic error path (Starlette ``ServerErrorMiddleware``, HTTP 500) handles it.
A rejection is never swallowed and an unmarked response is never let through.

Registration (in create_app() in routeguard/main.py):
    application.add_middleware(ResponseGateMiddleware, rejection_handler=render_rejection)

Streaming responses:
    ASGI finalizes headers in ``http.response.start`` before any body chunk, and
    ``call_next`` returns at exactly that point. The gate therefore decides on
    the final header set of every response, streaming or not. An unmarked
    streaming body is dropped unread; Starlette closes the inner stream once the
    replacement response has been sent.
"""

from __future__ import annotations

from typing import Iterable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from routeguard.constants import MARKER_HEADER_RAW_NAME
from routeguard.gate.outcome import (
    GateOutcome,
    Passed,
    Rejected,
    RejectionReason,
    RouteNotWhitelisted,
)
from routeguard.gate.rejection import RejectionHandler
from routeguard.utils.logger import get_logger, request_log_context

logger = get_logger(__name__)

RawHeaders = list[tuple[bytes, bytes]]


def partition_marker_headers(
    raw_headers: Iterable[tuple[bytes, bytes]],
) -> tuple[RawHeaders, RawHeaders]:
    """Split raw headers into (marker instances, all others).

    Name comparison is case-insensitive. Order of the remaining headers is kept.
    """
    marker: RawHeaders = []
    others: RawHeaders = []
    for name, value in raw_headers:
        if name.lower() == MARKER_HEADER_RAW_NAME:
            marker.append((name, value))
        else:
            others.append((name, value))
    return marker, others


def enforce(request: Request, response: Response) -> GateOutcome:
    """Decide whether *response* may leave the server.

    On ``Passed`` the returned response has had every marker instance removed
    (its header list is rewritten; the body is untouched). On ``Rejected`` the
    response must be discarded by the caller.
    """
    marker, others = partition_marker_headers(response.raw_headers)
    if not marker:
        return Rejected(reason=RejectionReason.NOT_WHITELISTED, request=request)

    # ASGI allows any iterable of header pairs; in-place rewrite needs a list.
    if not isinstance(response.raw_headers, list):
        response.raw_headers = list(response.raw_headers)
    # In place: response.headers (MutableHeaders) shares this list once accessed.
    response.raw_headers[:] = others
    return Passed(response=response)


class ResponseGateMiddleware(BaseHTTPMiddleware):
    """Starlette middleware rejecting every response that was not marked.

    Must be the outermost user middleware (registered last) so that it observes
    the final header set, after every other middleware and handler has run.
    Log entries emitted while a request is inside the gate, including those of
    the rejection handler, carry the request via ``request_log_context``.

    Args:
        app:               The wrapped ASGI application.
        rejection_handler: Optional async callable turning a ``Rejected`` outcome
                           into a response (see ``render_rejection``). When
                           omitted, rejections are raised as ``RouteNotWhitelisted``.
    """

    def __init__(
        self,
        app: ASGIApp,
        rejection_handler: Optional[RejectionHandler] = None,
    ) -> None:
        super().__init__(app)
        self.rejection_handler = rejection_handler

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        client_host = request.client.host if request.client else None
        with request_log_context(request.method, request.url.path, client_host):
            response = await call_next(request)
            outcome = enforce(request, response)

            if isinstance(outcome, Passed):
                logger.debug(
                    "Response whitelisted",
                    path=request.url.path,
                    status_code=outcome.response.status_code,
                )
                return outcome.response

            if isinstance(outcome, Rejected):
                if self.rejection_handler is None:
                    raise RouteNotWhitelisted(outcome)
                return await self.rejection_handler(outcome)

            raise TypeError(f"Unexpected gate outcome: {outcome!r}")
