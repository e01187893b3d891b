"""Retry classification and backoff for idempotent requests.

A response status is retryable iff it is >= 500, 409 (conflict) or 429
(rate limited). Every other status is terminal and goes back to the caller
unchanged.
"""

import random

from idempotent_ops.config import RetryConfig

RETRYABLE_CLIENT_STATUSES = frozenset({409, 429})


def is_retryable_status(status: int) -> bool:
    """Return True if a response with this status should be retried.

    Examples:
        >>> [is_retryable_status(s) for s in (200, 400, 409, 429, 500, 503)]
        [False, False, True, True, True, True]
    """
    return status >= 500 or status in RETRYABLE_CLIENT_STATUSES


def compute_backoff_ms(
    attempt: int,
    config: RetryConfig,
    rng: random.Random | None = None,
) -> float:
    """Compute the delay to wait after a failed attempt.

    ``min(min_timeout_ms * factor ** attempt + jitter, max_timeout_ms)``,
    where jitter is uniform in ``[0, min_timeout_ms)`` when ``randomize`` is
    set and 0 otherwise.

    Args:
        attempt: Zero-based index of the attempt that just failed.
        config: Resolved retry configuration.
        rng: Random source for jitter. Defaults to the module RNG.

    Returns:
        Delay in milliseconds.

    Examples:
        >>> config = RetryConfig(randomize=False)
        >>> [compute_backoff_ms(n, config) for n in range(5)]
        [1000.0, 2000.0, 4000.0, 8000.0, 15000.0]
    """
    timeout = config.min_timeout_ms * config.factor**attempt
    if config.randomize:
        timeout += (rng or random).random() * config.min_timeout_ms
    return float(min(timeout, config.max_timeout_ms))


class AttemptState:
    """Per-call attempt bookkeeping for idempotent_fetch.

    Attributes:
        attempt: Zero-based index of the current attempt.
        last_failure: Marker error for a retryable response, or the
            transport exception, from the most recent failed attempt.
        last_status: Status of the most recent retryable response, or None
            if the most recent failure was a transport fault.
    """

    def __init__(self) -> None:
        self.attempt = 0
        self.last_failure: BaseException | None = None
        self.last_status: int | None = None

    @property
    def attempts_made(self) -> int:
        return self.attempt + 1

    def record_status(self, failure: BaseException, status: int) -> None:
        self.last_failure = failure
        self.last_status = status

    def record_error(self, error: BaseException) -> None:
        self.last_failure = error
        self.last_status = None
