"""Custom exceptions for the idempotency primitives.

This module defines the exception hierarchy raised across the component
boundary. Raw primitive errors (``OSError`` from the filesystem, transport
faults from ``httpx``) are always wrapped into one of these before they reach
the caller, with the original exception preserved as ``cause``.

Examples:
    Handling a filesystem error::

        from idempotent_ops.exceptions import FileSystemError

        try:
            await idempotent_write_file("/etc/app.conf", rendered)
        except FileSystemError as e:
            logger.error("config.write_failed", path=e.path, error=str(e.cause))
            raise

    Handling an exhausted request::

        from idempotent_ops.exceptions import NetworkError

        try:
            response = await idempotent_fetch(url, idempotency_key=key, method="POST")
        except NetworkError as e:
            logger.warning("payment.submit_failed", url=e.url, status=e.status)
"""


class IdempotencyError(Exception):
    """Base exception for all idempotency-related errors.

    Attributes:
        message: Human-readable error description.
        cause: The underlying exception, if any.

    Examples:
        Catching all idempotency errors::

            try:
                await idempotent_write_file(path, data)
            except IdempotencyError as e:
                logger.error("idempotent_op.failed", error=str(e))
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        """Initialize the exception with a message.

        Args:
            message: Human-readable error description.
            cause: The underlying exception that triggered this error.
        """
        self.message = message
        self.cause = cause
        super().__init__(message)


class FileSystemError(IdempotencyError):
    """A filesystem operation failed during an idempotent write.

    Raised for read failures other than "not found" while hashing the
    existing file, for directory creation failures, and for failures while
    writing or renaming the temporary file.

    Attributes:
        message: Human-readable error description.
        path: The target path of the write.
        cause: The underlying ``OSError``.

    Examples:
        Raising a filesystem error::

            try:
                os.replace(temp_path, path)
            except OSError as e:
                raise FileSystemError(
                    message=f"Atomic write to {path} failed",
                    path=path,
                    cause=e,
                ) from e
    """

    def __init__(
        self,
        message: str,
        path: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        """Initialize the filesystem error with details.

        Args:
            message: Human-readable error description.
            path: The affected path.
            cause: The underlying exception.
        """
        super().__init__(message, cause)
        self.path = path


class NetworkError(IdempotencyError):
    """A request could not be completed.

    Raised when every attempt ended in a retryable status or a transport
    fault, or when the request could not be issued at all. A terminal HTTP
    response (e.g. 400 or 404) is returned to the caller, never raised.

    Attributes:
        message: Human-readable error description.
        url: The target URL.
        status: HTTP status of the last retryable response, or None when the
            last failure was a transport fault.
        cause: The last observed failure.
    """

    def __init__(
        self,
        message: str,
        url: str,
        status: int | None = None,
        cause: BaseException | None = None,
    ) -> None:
        """Initialize the network error with details.

        Args:
            message: Human-readable error description.
            url: The target URL.
            status: Last retryable HTTP status, if known.
            cause: The last observed failure.
        """
        super().__init__(message, cause)
        self.url = url
        self.status = status
