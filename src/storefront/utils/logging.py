"""Logging configuration for the Storefront domain."""

import logging
import os

import structlog


def configure_logging(level: str | None = None, json_logs: bool | None = None) -> None:
    """Configure structlog for the storefront.

    ``STOREFRONT_LOG_LEVEL`` and ``STOREFRONT_LOG_JSON`` override the
    defaults when the arguments are omitted.
    """
    level_name = (level or os.environ.get("STOREFRONT_LOG_LEVEL", "INFO")).upper()
    if json_logs is None:
        json_logs = os.environ.get("STOREFRONT_LOG_JSON", "").lower() in ("1", "true", "yes")

    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level_name, logging.INFO)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )

    # Suppress noisy library loggers
    logging.getLogger("protean").setLevel(logging.WARNING)


def get_logger(name: str):
    return structlog.get_logger(name)
