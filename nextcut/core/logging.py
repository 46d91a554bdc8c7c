"""Structured logging setup."""

from __future__ import annotations

import logging

import structlog

from nextcut.config import settings


def setup_logging(level: str | None = None, fmt: str | None = None) -> None:
    """Configure structlog from settings, with optional overrides."""
    level = level or settings.log_level
    fmt = fmt or settings.log_format

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if fmt == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper()),
        ),
    )
