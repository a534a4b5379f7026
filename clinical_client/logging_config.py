"""
Logging setup for the clinical client.

Uses structlog; JSON output for services, console output for local work.
"""

import logging
import sys
from typing import Optional

import structlog
from structlog.types import Processor

from clinical_client.config import get_settings


def configure_logging(
    log_level: Optional[str] = None,
    json_format: Optional[bool] = None,
) -> None:
    """
    Configure structlog and the standard library root logger.

    Args:
        log_level: Override log level (defaults to settings.log_level)
        json_format: Render JSON (True) or console lines (False);
            defaults to settings.log_json
    """
    settings = get_settings()
    level = log_level or settings.log_level
    if json_format is None:
        json_format = settings.log_json

    numeric_level = getattr(logging, level.upper(), logging.INFO)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_format:
        processors: list[Processor] = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=False),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=numeric_level,
    )
