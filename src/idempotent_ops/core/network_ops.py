"""Retrying HTTP requests carrying an idempotency key.

Each attempt goes through the same small state machine:

    Attempting(n) -> Success          terminal response, returned as-is
    Attempting(n) -> Attempting(n+1)  retryable status or transport fault,
                                      n < retries, after a backoff sleep
    Attempting(n) -> Exhausted        retryable outcome and n == retries

The idempotency key header is identical on every attempt, so the server can
deduplicate retries of a request it already processed.

Examples:
    Submitting a payment::

        from idempotent_ops.core.network_ops import idempotent_fetch

        response = await idempotent_fetch(
            "https://api.example.com/payments",
            idempotency_key=str(uuid.uuid4()),
            method="POST",
            json={"amount": 1000},
            retry={"retries": 5},
        )
        if response.status_code >= 400:
            ...  # terminal client error, not retried

    Reusing a client with a custom timeout::

        async with httpx.AsyncClient(timeout=5.0) as client:
            await idempotent_fetch(url, idempotency_key=key, client=client)
"""

import asyncio
import random
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

import httpx

from idempotent_ops.config import RetryConfig
from idempotent_ops.core.retry import AttemptState, compute_backoff_ms, is_retryable_status
from idempotent_ops.exceptions import NetworkError
from idempotent_ops.observability.logging import get_logger
from idempotent_ops.observability.metrics import (
    record_backoff,
    record_fetch_attempt,
    record_fetch_result,
)
from idempotent_ops.utils.headers import HeaderInput, apply_idempotency_key

logger = get_logger(__name__)

SleepFn = Callable[[float], Awaitable[Any]]


async def idempotent_fetch(
    url: str,
    *,
    idempotency_key: str,
    method: str = "GET",
    headers: HeaderInput = None,
    retry: RetryConfig | Mapping[str, Any] | None = None,
    client: httpx.AsyncClient | None = None,
    sleep: SleepFn = asyncio.sleep,
    rng: random.Random | None = None,
    **request_kwargs: Any,
) -> httpx.Response:
    """Issue a request, retrying transient failures with exponential backoff.

    Args:
        url: Target URL.
        idempotency_key: Opaque key sent verbatim as ``Idempotency-Key`` on
            every attempt, replacing any caller value for that header.
        method: HTTP method.
        headers: Caller headers.
        retry: Full or partial retry configuration, overlaid on defaults.
        client: Client to issue requests with. A temporary client is created
            and closed when omitted; a given client is left open.
        sleep: Awaitable delay taking seconds.
        rng: Random source for backoff jitter.
        **request_kwargs: Passed to ``client.request`` (content, json, data,
            params, timeout, ...).

    Returns:
        The first response with a terminal status, including 4xx responses
        other than 409 and 429.

    Raises:
        NetworkError: If every attempt failed with a retryable status or a
            transport fault, or the URL is invalid.
    """
    config = RetryConfig.resolve(retry)
    request_headers = apply_idempotency_key(headers, idempotency_key)

    if client is not None:
        return await _fetch_with_retries(
            client, url, method, request_headers, config, sleep, rng, request_kwargs
        )

    async with httpx.AsyncClient() as owned_client:
        return await _fetch_with_retries(
            owned_client, url, method, request_headers, config, sleep, rng, request_kwargs
        )


async def _fetch_with_retries(
    client: httpx.AsyncClient,
    url: str,
    method: str,
    headers: httpx.Headers,
    config: RetryConfig,
    sleep: SleepFn,
    rng: random.Random | None,
    request_kwargs: dict[str, Any],
) -> httpx.Response:
    state = AttemptState()

    while True:
        try:
            response = await client.request(method, url, headers=headers, **request_kwargs)
        except httpx.InvalidURL as e:
            raise NetworkError(message=f"Invalid request URL: {url}", url=url, cause=e) from e
        except httpx.RequestError as e:
            record_fetch_attempt("transport_error")
            logger.warning(
                "fetch.attempt.transport_error",
                url=url,
                method=method,
                attempt=state.attempts_made,
                error_type=type(e).__name__,
                error=str(e),
            )
            state.record_error(e)
        else:
            if not is_retryable_status(response.status_code):
                record_fetch_attempt("response")
                record_fetch_result("success")
                logger.debug(
                    "fetch.completed",
                    url=url,
                    method=method,
                    status=response.status_code,
                    attempts=state.attempts_made,
                )
                return response

            record_fetch_attempt("retryable")
            logger.warning(
                "fetch.attempt.retryable_status",
                url=url,
                method=method,
                attempt=state.attempts_made,
                status=response.status_code,
            )
            await response.aclose()
            state.record_status(
                NetworkError(
                    message=f"Received retryable status code: {response.status_code}",
                    url=url,
                    status=response.status_code,
                ),
                response.status_code,
            )

        if state.attempt >= config.retries:
            break

        delay_ms = compute_backoff_ms(state.attempt, config, rng)
        logger.info(
            "fetch.retry.scheduled",
            url=url,
            method=method,
            attempt=state.attempts_made,
            delay_ms=round(delay_ms, 1),
        )
        record_backoff(delay_ms / 1000)
        await sleep(delay_ms / 1000)
        state.attempt += 1

    record_fetch_result("exhausted")
    if state.last_status is not None:
        detail = f"last status: {state.last_status}"
    else:
        detail = f"last error: {type(state.last_failure).__name__}"
    message = f"Request to {url} failed after {state.attempts_made} attempts ({detail})"
    logger.error(
        "fetch.exhausted",
        url=url,
        method=method,
        attempts=state.attempts_made,
        status=state.last_status,
    )
    raise NetworkError(
        message=message,
        url=url,
        status=state.last_status,
        cause=state.last_failure,
    ) from state.last_failure
