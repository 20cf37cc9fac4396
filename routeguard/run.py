"""Programmatic uvicorn entry point for routeguard.

Reads host and port from the loaded config (127.0.0.1:8080 by default) and starts
uvicorn with hardened defaults:

  --limit-concurrency 100  Max 100 concurrent connections; HTTP 503 when exceeded
  --backlog 50             OS connection queue depth
  --timeout-keep-alive 5   Reduces the Slow Loris attack window

Usage:
    python -m routeguard.run
    routeguard                 # via pyproject.toml [project.scripts]
"""

from __future__ import annotations

import uvicorn

from routeguard.config import load_config

# ─── Uvicorn hardened defaults ────────────────────────────────────────────────

UVICORN_LIMIT_CONCURRENCY: int = 100

UVICORN_BACKLOG: int = 50

UVICORN_TIMEOUT_KEEP_ALIVE: int = 5


def main() -> None:
    """Start the routeguard server with hardened uvicorn defaults.

    Raises:
        SystemExit: Propagated from load_config() on config parse errors.
    """
    config = load_config()

    uvicorn.run(
        "routeguard.main:app",
        host=config.server.host,
        port=config.server.port,
        limit_concurrency=UVICORN_LIMIT_CONCURRENCY,
        backlog=UVICORN_BACKLOG,
        timeout_keep_alive=UVICORN_TIMEOUT_KEEP_ALIVE,
    )


if __name__ == "__main__":
    main()
