"""Content-addressed idempotent file writes.

A write only touches disk when the new content differs from what is already
there:

    1. Normalize the data into the canonical byte buffer
    2. Hash the existing file and the new buffer as independent tasks
    3. Equal digests: return NO_CHANGE without any filesystem mutation
    4. Otherwise create the parent directory, write a temporary file beside
       the target and rename it over the target
    5. Return CREATED if no file existed before, UPDATED otherwise

Readers of the target always see either the previous complete content or the
new complete content. Concurrent writers of the same path are not serialized;
the last rename wins.

Examples:
    Writing a rendered config::

        from idempotent_ops.core.file_ops import idempotent_write_file

        result = await idempotent_write_file("build/app.conf", rendered)
        if result.operation is WriteOperation.NO_CHANGE:
            return  # nothing to reload

    Writing UTF-16 text::

        await idempotent_write_file("out.txt", "héllo", encoding="utf-16-le")
"""

import asyncio
import os
import secrets
import time
from typing import Any

from idempotent_ops.exceptions import FileSystemError
from idempotent_ops.hashing import compute_digest, hash_file, to_bytes
from idempotent_ops.models import WriteOperation, WriteOptions, WriteResult
from idempotent_ops.observability.logging import get_logger
from idempotent_ops.observability.metrics import record_file_write

logger = get_logger(__name__)

DEFAULT_FILE_MODE = 0o644


def _temp_path_for(path: str) -> str:
    """Build a unique temporary file name in the target's directory."""
    directory, name = os.path.split(path)
    suffix = f"{os.getpid()}.{time.time_ns() // 1_000_000}-{secrets.token_hex(6)}"
    return os.path.join(directory, f".{name}.{suffix}.tmp")


def atomic_write_bytes(path: str | os.PathLike[str], data: bytes, mode: int = DEFAULT_FILE_MODE) -> None:
    """Atomically replace ``path`` with ``data``.

    The bytes go to a temporary file in the same directory, which is then
    renamed onto the target. On failure the temporary file is removed and
    the target is left untouched.

    Args:
        path: Target file path. Its directory must exist.
        data: Complete new content.
        mode: Permission bits for a newly created file (subject to umask).

    Raises:
        FileSystemError: If writing or renaming fails.
    """
    target = os.fspath(path)
    temp_path = _temp_path_for(target)

    try:
        fd = os.open(temp_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, mode)
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp_path, target)
    except OSError as e:
        try:
            os.unlink(temp_path)
        except OSError as cleanup_error:
            # Not fatal: the write error below is what the caller needs
            logger.debug(
                "file.temp_cleanup_failed",
                path=target,
                temp_path=temp_path,
                error=str(cleanup_error),
            )
        raise FileSystemError(
            message=f"Atomic write to {target} failed",
            path=target,
            cause=e,
        ) from e


def _ensure_parent_dir(path: str) -> None:
    parent = os.path.dirname(path)
    if not parent:
        return
    try:
        os.makedirs(parent, exist_ok=True)
    except OSError as e:
        raise FileSystemError(
            message=f"Failed to create directory {parent} for {path}",
            path=path,
            cause=e,
        ) from e


async def idempotent_write_file(
    path: str | os.PathLike[str],
    data: str | bytes | bytearray | memoryview,
    options: WriteOptions | None = None,
    **overrides: Any,
) -> WriteResult:
    """Write ``data`` to ``path`` only if the content differs.

    Args:
        path: Target file path.
        data: Text (encoded with ``options.encoding``) or bytes (taken verbatim).
        options: Hash algorithm and text encoding. Built from ``overrides``
            (``algorithm=``, ``encoding=``) when omitted.

    Returns:
        WriteResult with the operation performed and the target path.

    Raises:
        FileSystemError: On any I/O fault other than the target not existing.
        ValidationError: If the options are invalid.
        TypeError: If data is neither text nor bytes-like.
        UnicodeEncodeError: If text cannot be represented in the chosen
            encoding. Raised before the target is touched.
    """
    if options is None:
        options = WriteOptions(**overrides)
    elif overrides:
        options = WriteOptions(**{**options.model_dump(), **overrides})

    target = os.fspath(path)
    content = to_bytes(data, options.encoding)

    try:
        current_hash, new_hash = await asyncio.gather(
            asyncio.to_thread(hash_file, target, options.algorithm),
            asyncio.to_thread(compute_digest, content, options.algorithm),
        )

        if current_hash == new_hash:
            logger.debug("file.write.no_change", path=target, algorithm=options.algorithm)
            record_file_write(WriteOperation.NO_CHANGE.value)
            return WriteResult(operation=WriteOperation.NO_CHANGE, path=target)

        await asyncio.to_thread(_ensure_parent_dir, target)
        await asyncio.to_thread(atomic_write_bytes, target, content)
    except FileSystemError:
        raise
    except OSError as e:
        raise FileSystemError(
            message=f"An unexpected error occurred during idempotent write to {target}",
            path=target,
            cause=e,
        ) from e

    operation = WriteOperation.CREATED if current_hash is None else WriteOperation.UPDATED
    logger.info(
        "file.write.completed",
        path=target,
        operation=operation.value,
        size_bytes=len(content),
    )
    record_file_write(operation.value)
    return WriteResult(operation=operation, path=target)


def idempotent_write_file_sync(
    path: str | os.PathLike[str],
    data: str | bytes | bytearray | memoryview,
    options: WriteOptions | None = None,
    **overrides: Any,
) -> WriteResult:
    """Blocking wrapper around :func:`idempotent_write_file`.

    Must not be called from a running event loop.
    """
    return asyncio.run(idempotent_write_file(path, data, options, **overrides))
