"""Mark step of the response gate.

A protected route tags its outgoing response with ``Whitelisted: yes``. The tag
is consumed (and always removed) by ``ResponseGateMiddleware`` at the boundary;
see ``routeguard.gate.enforce``.

Ways to mark, from narrowest to widest scope:

  mark(response)                 — tag one response object.
  WhitelistedRoute               — FastAPI route class; tags everything its
                                   handler produces, including HTTPExceptions.
  whitelisted_router(...)        — APIRouter whose routes are all WhitelistedRoutes.
  protected_router(*deps, ...)   — whitelisted router that also applies the
                                   protection dependencies.
  WhitelistMiddleware(asgi_app)  — tags every response of a mounted ASGI app.

Marking never deduplicates. Applying it twice leaves two headers on the inner
response; the gate strips both, so the client sees the same output either way.
"""

from __future__ import annotations

from typing import Any, Callable, Coroutine, Sequence

from fastapi import APIRouter, Depends
from fastapi import HTTPException as FastAPIHTTPException
from fastapi.routing import APIRoute
from starlette.datastructures import MutableHeaders
from starlette.exceptions import HTTPException
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from routeguard.constants import MARKER_HEADER_NAME, MARKER_HEADER_VALUE


def mark(response: Response) -> Response:
    """Add the marker header to *response* and return it."""
    response.headers.append(MARKER_HEADER_NAME, MARKER_HEADER_VALUE)
    return response


def _marked_http_exception(exc: HTTPException) -> HTTPException:
    """Return a new, marked exception equivalent to *exc*.

    *exc* is left untouched: it may be a shared instance that unprotected routes
    raise as well.
    """
    # The host's HTTP exception handler copies exc.headers onto the error response.
    return FastAPIHTTPException(
        status_code=exc.status_code,
        detail=exc.detail,
        headers={**(exc.headers or {}), MARKER_HEADER_NAME: MARKER_HEADER_VALUE},
    )


class WhitelistedRoute(APIRoute):
    """FastAPI route whose responses are all marked.

    Route dependencies (the protection step) run inside the wrapped handler, so a
    refusal raised as ``HTTPException`` is still an output of a protected route
    and is marked on its way to the exception handler. Any other exception,
    including request validation errors, propagates unmarked.
    """

    def get_route_handler(self) -> Callable[[Request], Coroutine[Any, Any, Response]]:
        original_route_handler = super().get_route_handler()

        async def whitelisted_route_handler(request: Request) -> Response:
            try:
                response = await original_route_handler(request)
            except HTTPException as exc:
                raise _marked_http_exception(exc) from exc
            return mark(response)

        return whitelisted_route_handler


def whitelisted_router(**kwargs: Any) -> APIRouter:
    """Return an ``APIRouter`` whose routes are all ``WhitelistedRoute``s.

    Keyword arguments are passed through to ``APIRouter``; ``route_class`` is
    fixed and may not be overridden.
    """
    if "route_class" in kwargs:
        raise TypeError("whitelisted_router() fixes route_class; do not pass it")
    return APIRouter(route_class=WhitelistedRoute, **kwargs)


def protected_router(
    *protections: Callable[..., Any],
    dependencies: Sequence[Any] | None = None,
    **kwargs: Any,
) -> APIRouter:
    """Return a whitelisted router that applies *protections* to every route.

    Each protection is a FastAPI dependency callable (authentication,
    authorization, ...). A route is only whitelisted together with its
    protection, so the two cannot drift apart.
    """
    deps = list(dependencies or [])
    deps.extend(Depends(protection) for protection in protections)
    return whitelisted_router(dependencies=deps, **kwargs)


class WhitelistMiddleware:
    """Pure ASGI wrapper that marks every HTTP response of *app*.

    For sub-applications mounted into the routing tree that are not FastAPI
    routes (static files, third-party ASGI apps)::

        application.mount("/static", WhitelistMiddleware(StaticFiles(directory="static")))

    Headers are final in ``http.response.start``, so streaming bodies are marked
    before their first chunk.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_marked(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                headers.append(MARKER_HEADER_NAME, MARKER_HEADER_VALUE)
            await send(message)

        await self.app(scope, receive, send_marked)
