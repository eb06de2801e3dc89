"""
Structured logging setup.

Stdlib loggers used by the backends and structlog loggers used by the
cache facade end up in the same handler.
"""

import logging
import sys
from typing import Any, Dict, Optional

import structlog

from ..constants import APP_NAME
from .config import get_settings


def add_app_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Tag every event with the library name."""
    event_dict.setdefault("app", APP_NAME)
    return event_dict


def configure_logging(
    log_level: Optional[str] = None, json_output: Optional[bool] = None
) -> None:
    """
    Configure structlog and the stdlib root logger.

    JSON output is the default in production, console output elsewhere.
    """
    settings = get_settings()
    level = (log_level or settings.LOG_LEVEL).upper()
    if json_output is None:
        json_output = settings.is_production

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            add_app_context,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level),
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
