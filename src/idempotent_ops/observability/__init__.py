"""Observability utilities for the idempotency primitives.

This package provides monitoring and debugging capabilities:
- Prometheus metrics for writes, attempts, retries and backoff
- Structured logging with contextual information
"""

from idempotent_ops.observability.logging import configure_logging, get_logger
from idempotent_ops.observability.metrics import (
    record_backoff,
    record_fetch_attempt,
    record_fetch_result,
    record_file_write,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "record_file_write",
    "record_fetch_attempt",
    "record_fetch_result",
    "record_backoff",
]
