"""Structured logging utilities for routeguard.

This module provides async-safe structured logging using structlog.
Gate decisions and rejections are logged with request context as keyword fields.
"""

import logging
import sys
import time
from contextlib import contextmanager
from typing import Iterator, Optional

import structlog
from structlog.types import EventDict, Processor


def add_timestamp(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add epoch timestamp to log entries."""
    event_dict["timestamp"] = time.time()
    return event_dict


def configure_logging(
    log_level: str = "INFO",
    json_output: bool = True
) -> None:
    """Configure structured logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, output JSON format. If False, use console format.
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_timestamp,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        # Pretty console output for development
        processors.extend([
            structlog.dev.ConsoleRenderer(colors=True),
        ])

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


@contextmanager
def request_log_context(
    method: str,
    path: str,
    client_host: Optional[str] = None,
) -> Iterator[None]:
    """Bind the current request to every log entry emitted inside the block.

    Fields land under ``http_method``, ``http_path`` and ``http_client`` via
    ``merge_contextvars`` and are unbound on exit, including on error.
    """
    with structlog.contextvars.bound_contextvars(
        http_method=method,
        http_path=path,
        http_client=client_host,
    ):
        yield


def get_logger(name: str = "routeguard") -> structlog.stdlib.BoundLogger:
    """Get a configured logger instance.

    Args:
        name: Logger name (typically module name)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


# Initialize logging with sensible defaults
# This will be reconfigured by main.py based on environment
configure_logging()
