"""Structured logging setup."""

import logging
import sys

import structlog


def configure_logging(fmt: str = "console", level: str = "INFO") -> None:
    """
    Configure structlog for diffscope.

    Log events go to stderr so command output on stdout stays parseable.

    Args:
        fmt: "console" for human-readable output, "json" for log shippers
        level: Minimum level name (DEBUG, INFO, WARNING, ...)
    """
    renderer = (
        structlog.processors.JSONRenderer()
        if fmt == "json"
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    min_level = getattr(logging, level.upper(), logging.INFO)
    if not isinstance(min_level, int):
        min_level = logging.INFO

    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
