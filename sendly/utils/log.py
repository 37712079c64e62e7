from __future__ import annotations

import logging
import sys

import structlog

from sendly.utils.config import get_settings


def configure_logging(level: str | None = None) -> None:
    """Configure structlog for JSON logs and forward stdlib logs to stdout.

    Opt-in: the client never calls this on its own. ``level`` defaults to
    SENDLY_LOG_LEVEL.
    """
    level = level or get_settings().log_level
    timestamper = structlog.processors.TimeStamper(fmt="iso")

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            timestamper,
            structlog.processors.add_log_level,
            structlog.processors.EventRenamer("message"),
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
