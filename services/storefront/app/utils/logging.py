"""Logging configuration for the storefront service."""

import logging
import os
import sys

import structlog

logger = structlog.get_logger(__name__)

_TRUTHY = {"1", "true", "yes", "y"}


def configure_logging() -> None:
    level_name = os.getenv("STOREFRONT_LOG_LEVEL", "INFO").strip().upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        raise ValueError(f"Unknown STOREFRONT_LOG_LEVEL={level_name!r}")

    json_logs = os.getenv("STOREFRONT_LOG_JSON", "false").strip().lower() in _TRUTHY
    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )

    # Suppress noisy library loggers
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    logger.debug("Logging configured", level=level_name, json=json_logs)
