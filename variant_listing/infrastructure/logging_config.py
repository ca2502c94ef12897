"""Logging setup.

Routes structlog through the standard library so log level filtering
follows the configured ``log_level``.
"""

import logging
import sys

import structlog

from variant_listing.infrastructure.config import settings


def configure_logging(level: str | None = None, json_logs: bool | None = None) -> None:
    """Configure structlog and the standard library root logger.

    Args:
        level: Log level name, defaults to ``settings.log_level``.
        json_logs: Render JSON lines, defaults to ``not settings.debug``.
    """
    level = (level or settings.log_level).upper()
    if json_logs is None:
        json_logs = not settings.debug

    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(message)s",
        stream=sys.stderr,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
