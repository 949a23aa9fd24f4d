"""
structlog setup shared by the API service and the command-line scripts.
"""

import logging
import sys
from typing import Optional

import structlog

from .config import get_settings


def configure_logging(log_level: Optional[str] = None, json_format: Optional[bool] = None) -> None:
    """Route structlog through stdlib logging on stderr.

    Missing arguments come from ``PAGEPRESS_LOG_LEVEL`` and ``PAGEPRESS_LOG_JSON``.
    Per-conversion fields such as ``url`` are bound with
    ``structlog.contextvars.bound_contextvars`` and merged into every line.
    """
    settings = get_settings()
    level = (log_level or settings.log_level).upper()
    if json_format is None:
        json_format = settings.log_json

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level, logging.INFO),
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )

    if json_format:
        renderer = [structlog.processors.format_exc_info, structlog.processors.JSONRenderer(ensure_ascii=False)]
    else:
        renderer = [structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            *renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
