"""Content hashing for idempotent writes.

Hashing always operates on the canonical byte buffer, never on the caller's
input representation. Two inputs that normalize to the same bytes therefore
produce the same digest.
"""

import hashlib
import os
from typing import Any

from idempotent_ops.exceptions import FileSystemError

SUPPORTED_ALGORITHMS = frozenset({"sha256", "sha512", "md5"})

# Read size used when streaming an existing file through the digest
_CHUNK_SIZE = 64 * 1024


def _new_hash(algorithm: str) -> Any:
    if algorithm not in SUPPORTED_ALGORITHMS:
        raise ValueError(
            f"Unsupported hash algorithm: {algorithm}. "
            f"Supported algorithms are: {', '.join(sorted(SUPPORTED_ALGORITHMS))}"
        )
    # md5 compares content here, it does not protect anything
    return hashlib.new(algorithm, usedforsecurity=False)


def to_bytes(data: str | bytes | bytearray | memoryview, encoding: str = "utf-8") -> bytes:
    """Normalize write input into the canonical byte buffer.

    Text is encoded with ``encoding``. Bytes-like input is taken verbatim and
    the encoding is ignored.

    Args:
        data: Text or bytes-like content.
        encoding: Codec applied to text.

    Returns:
        The bytes that will be hashed and written.

    Raises:
        TypeError: If data is neither text nor bytes-like.

    Examples:
        >>> to_bytes("hi", "utf-16-le")
        b'h\\x00i\\x00'
    """
    if isinstance(data, str):
        return data.encode(encoding)
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    raise TypeError(f"data must be str or bytes-like, got {type(data).__name__}")


def compute_digest(data: bytes, algorithm: str = "sha256") -> str:
    """Compute the lowercase hexadecimal digest of a byte buffer.

    Args:
        data: Content to hash.
        algorithm: One of ``sha256``, ``sha512`` or ``md5``.

    Returns:
        Hexadecimal digest string.

    Raises:
        ValueError: If the algorithm is not supported.

    Examples:
        >>> compute_digest(b"", "md5")
        'd41d8cd98f00b204e9800998ecf8427e'
    """
    digest = _new_hash(algorithm)
    digest.update(data)
    return digest.hexdigest()


def hash_file(path: str | os.PathLike[str], algorithm: str = "sha256") -> str | None:
    """Hash the current content of a file.

    Args:
        path: File to hash.
        algorithm: One of ``sha256``, ``sha512`` or ``md5``.

    Returns:
        Hexadecimal digest, or None if the file does not exist.

    Raises:
        FileSystemError: If the file exists but cannot be read.
        ValueError: If the algorithm is not supported.
    """
    digest = _new_hash(algorithm)
    try:
        with open(path, "rb") as f:
            for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
                digest.update(chunk)
    except FileNotFoundError:
        return None
    except OSError as e:
        raise FileSystemError(
            message=f"Failed to read file for hashing: {os.fspath(path)}",
            path=os.fspath(path),
            cause=e,
        ) from e
    return digest.hexdigest()
