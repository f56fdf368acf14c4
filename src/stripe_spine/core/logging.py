"""
Logging configuration.

Single entry point for structured logging with structlog. Configuration
is read from arguments or environment variables:

- STRIPE_SPINE_LOG_LEVEL: DEBUG | INFO | WARNING | ERROR (default: INFO)
- STRIPE_SPINE_LOG_FORMAT: json | console (default: console)

Usage:
    from stripe_spine.core.logging import configure_logging, get_logger

    configure_logging()
    log = get_logger(__name__)
    log.info("scan_started", resource="customers", page_budget=1)
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any, Literal

import structlog
from structlog.types import Processor

_configured = False


def configure_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] | None = None,
    format: Literal["json", "console"] | None = None,
    force: bool = False,
) -> None:
    """
    Configure structured logging for the process.

    Subsequent calls are no-ops unless ``force=True``.

    Args:
        level: Log level (overrides STRIPE_SPINE_LOG_LEVEL)
        format: Output format (overrides STRIPE_SPINE_LOG_FORMAT)
        force: Reconfigure even if already configured
    """
    global _configured

    if _configured and not force:
        return

    log_level = (level or os.environ.get("STRIPE_SPINE_LOG_LEVEL", "INFO")).upper()
    log_format = (format or os.environ.get("STRIPE_SPINE_LOG_FORMAT", "console")).lower()

    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
        structlog.processors.StackInfoRenderer(),
    ]

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=sys.stderr.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            )
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, log_level, logging.INFO),
        force=True,
    )
    logging.getLogger("stripe_spine").setLevel(getattr(logging, log_level, logging.INFO))
    # httpx logs every request at INFO, including the full URL
    logging.getLogger("httpx").setLevel(logging.WARNING)

    _configured = True


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger (typically ``get_logger(__name__)``)."""
    return structlog.get_logger(name)


def is_configured() -> bool:
    """Check if logging has been configured."""
    return _configured


__all__ = ["configure_logging", "get_logger", "is_configured"]
