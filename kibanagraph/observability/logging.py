"""Structured logging configuration using structlog.

The server logs JSON lines; the CLI switches to the console renderer so
humans reading a terminal get aligned, coloured output instead.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from kibanagraph.errors import ConfigError

LOG_FORMATS = ("json", "console")


def setup_logging(level: str = "info", fmt: str = "json") -> None:
    """Configure structlog to write to stderr at *level*.

    stdout is left alone so CLI commands can print graph/export JSON there.
    """
    if fmt not in LOG_FORMATS:
        raise ConfigError(f"Unknown log format {fmt!r}; expected one of {', '.join(LOG_FORMATS)}")
    log_level = getattr(logging, level.upper(), logging.INFO)
    renderer: Any = structlog.dev.ConsoleRenderer() if fmt == "console" else structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(component: str, **bindings: Any) -> structlog.stdlib.BoundLogger:
    """Get a logger bound with a component name and optional extra context."""
    return structlog.get_logger(component=component, **bindings)  # type: ignore[return-value]
