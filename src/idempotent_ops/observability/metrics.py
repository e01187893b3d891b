"""Prometheus metrics for the idempotency primitives.

Metrics include:

- File writes by operation (created, updated, no-change)
- Request attempts by outcome (response, retryable, transport_error)
- Request calls by final result (success, exhausted)
- Backoff delay histogram

Examples:
    Recording a skipped write::

        from idempotent_ops.observability.metrics import record_file_write

        record_file_write("no-change")

    Recording a backoff::

        from idempotent_ops.observability.metrics import record_backoff

        record_backoff(delay_seconds=2.0)
"""

from prometheus_client import Counter, Histogram

# Labels: operation (created, updated, no-change)
file_writes_total = Counter(
    "idempotent_file_writes_total",
    "Total number of idempotent file writes by operation",
    ["operation"],
)

# Labels: outcome (response, retryable, transport_error)
fetch_attempts_total = Counter(
    "idempotent_fetch_attempts_total",
    "Total number of HTTP attempts issued by idempotent_fetch",
    ["outcome"],
)

# Labels: result (success, exhausted)
fetch_calls_total = Counter(
    "idempotent_fetch_calls_total",
    "Total number of idempotent_fetch calls by final result",
    ["result"],
)

fetch_backoff_seconds = Histogram(
    "idempotent_fetch_backoff_seconds",
    "Backoff delay slept between attempts in seconds",
    buckets=[0.1, 0.25, 0.5, 1, 2, 4, 8, 15, 30],
)


def record_file_write(operation: str) -> None:
    """Record a completed idempotent write.

    Args:
        operation: created, updated or no-change

    Examples:
        >>> record_file_write("created")
    """
    file_writes_total.labels(operation=operation).inc()


def record_fetch_attempt(outcome: str) -> None:
    """Record a single HTTP attempt.

    Args:
        outcome: response (terminal), retryable or transport_error
    """
    fetch_attempts_total.labels(outcome=outcome).inc()


def record_fetch_result(result: str) -> None:
    """Record the final result of an idempotent_fetch call.

    Args:
        result: success or exhausted
    """
    fetch_calls_total.labels(result=result).inc()


def record_backoff(delay_seconds: float) -> None:
    """Record a backoff delay.

    Args:
        delay_seconds: Delay slept before the next attempt
    """
    fetch_backoff_seconds.observe(delay_seconds)
