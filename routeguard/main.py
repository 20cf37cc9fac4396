"""routeguard FastAPI application factory + lifespan lifecycle.

This module implements:
  - create_app() — testable application factory
  - lifespan — @asynccontextmanager startup/shutdown sequence
  - /health router — delegated to routeguard/health.py
  - demo routers — /rogue and /protected from routeguard/routes.py
  - app = create_app() — module-level instance for uvicorn

Middleware order matters: ResponseGateMiddleware is registered LAST, which makes
it the outermost user middleware. It observes every response after all other
middleware and handlers have run, including router 404/405 responses and
responses rendered by exception handlers.

The interactive docs and OpenAPI schema are disabled: they are not whitelisted
and would only ever be rejected by the gate.

Uvicorn:
  uvicorn routeguard.main:app --host 127.0.0.1 --port 8080
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI

from routeguard.config import Config, load_config
from routeguard.gate import ResponseGateMiddleware, render_rejection
from routeguard.health import router as health_router
from routeguard.routes import rogue_router, safe_router
from routeguard.utils.logger import configure_logging, get_logger

# ─── Logging Setup ────────────────────────────────────────────────────────────
# Configure logging at module import time (before any other imports that may log).
DEBUG = os.getenv("DEBUG", "false").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO" if not DEBUG else "DEBUG")
JSON_LOGS = os.getenv("JSON_LOGS", "true").lower() == "true"

configure_logging(log_level=LOG_LEVEL, json_output=JSON_LOGS)
logger = get_logger(__name__)


# ─── Lifespan ─────────────────────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan — flips ``app.state.ready`` around the serving period."""
    config: Config = app.state.config
    logger.info(
        "routeguard starting up...",
        host=config.server.host,
        port=config.server.port,
        render_rejections=config.gate.render_rejections,
    )

    app.state.ready = True
    logger.info("routeguard ready — response gate enforcing")

    try:
        yield
    finally:
        app.state.ready = False
        logger.info("routeguard shut down")


# ─── Application Factory ──────────────────────────────────────────────────────


def create_app(config: Optional[Config] = None) -> FastAPI:
    """Build the routeguard application.

    Args:
        config: Configuration to use. When omitted, ``load_config()`` is called.
                The gate's rejection handler is chosen here, at construction
                time, from ``config.gate.render_rejections``.

    Returns:
        FastAPI application with the response gate installed.
    """
    if config is None:
        config = load_config()

    application = FastAPI(
        title="routeguard",
        description="Response gate: only whitelisted routes may answer",
        version="0.1.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    application.state.config = config
    application.state.ready = False

    application.include_router(health_router)
    application.include_router(rogue_router)
    application.include_router(safe_router)

    # Registered last → outermost.
    rejection_handler = render_rejection if config.gate.render_rejections else None
    application.add_middleware(
        ResponseGateMiddleware,
        rejection_handler=rejection_handler,
    )

    return application


app = create_app()
