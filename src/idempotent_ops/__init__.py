"""
Idempotency primitives for Python applications.

This package provides a content-addressed file write that only touches disk
when content differs, and an HTTP request wrapper that attaches an
idempotency key and retries transient failures with exponential backoff.
"""

from idempotent_ops.config import RetryConfig
from idempotent_ops.core.file_ops import idempotent_write_file, idempotent_write_file_sync
from idempotent_ops.core.network_ops import idempotent_fetch
from idempotent_ops.exceptions import FileSystemError, IdempotencyError, NetworkError
from idempotent_ops.models import WriteOperation, WriteOptions, WriteResult

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "idempotent_write_file",
    "idempotent_write_file_sync",
    "idempotent_fetch",
    "RetryConfig",
    "WriteOperation",
    "WriteOptions",
    "WriteResult",
    "IdempotencyError",
    "FileSystemError",
    "NetworkError",
]
