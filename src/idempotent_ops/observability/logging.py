"""Structured logging configuration for the idempotency primitives.

This module provides structured logging using structlog. Events use dotted
names (``file.write.completed``, ``fetch.retry.scheduled``) and carry the
path or URL, the operation, attempt numbers and delays as bound fields.
Idempotency key values are never logged.

Examples:
    Configure logging::

        from idempotent_ops.observability.logging import configure_logging

        configure_logging(level="INFO", stream=sys.stderr)

    Use the logger::

        from idempotent_ops.observability.logging import get_logger

        logger = get_logger(__name__)
        logger.info("file.write.completed", path="out/report.json", operation="updated")

    Output (JSON)::

        {
            "event": "file.write.completed",
            "path": "out/report.json",
            "operation": "updated",
            "timestamp": "2024-01-01T00:00:00.000000Z",
            "level": "info"
        }
"""

import logging
import sys
from collections.abc import Sequence
from typing import Any, TextIO

import structlog
from structlog.typing import Processor


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
    *,
    stream: TextIO | None = None,
    extra_processors: Sequence[Processor] = (),
) -> None:
    """Route the library's structured events to a stream.

    Nothing is configured on import; call this once from the host
    application if the structlog defaults are not wanted. Events below
    ``level`` are dropped before any processor runs.

    Args:
        level: Minimum level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Render one JSON object per line instead of the
            human-readable console format
        stream: Destination for rendered lines, stdout when omitted
        extra_processors: Run after the timestamp is added and before
            rendering, e.g. to bind a service name or drop fields

    Raises:
        ValueError: If ``level`` is not a known level name.
    """
    numeric_level = logging.getLevelNamesMapping().get(level.upper())
    if numeric_level is None:
        raise ValueError(f"Unknown log level: {level!r}")

    renderer: Processor = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            *extra_processors,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stdout),
        # Loggers created before reconfiguration must pick up the new stream.
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> Any:
    """Get a structured logger instance.

    Args:
        name: Logger name (typically __name__ from the calling module)

    Returns:
        A structlog logger instance
    """
    return structlog.get_logger(name)
