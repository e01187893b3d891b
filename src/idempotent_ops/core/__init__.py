"""Core logic of the idempotency primitives.

This package contains the two independent engines:
- File ops: hash-compare-then-atomic-replace writes
- Network ops: requests retried with exponential backoff under one idempotency key
- Retry: status classification and backoff computation
"""

from idempotent_ops.core.file_ops import (
    atomic_write_bytes,
    idempotent_write_file,
    idempotent_write_file_sync,
)
from idempotent_ops.core.network_ops import idempotent_fetch
from idempotent_ops.core.retry import compute_backoff_ms, is_retryable_status

__all__ = [
    "atomic_write_bytes",
    "idempotent_write_file",
    "idempotent_write_file_sync",
    "idempotent_fetch",
    "compute_backoff_ms",
    "is_retryable_status",
]
