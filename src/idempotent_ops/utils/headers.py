"""Idempotency key header handling for outgoing requests.

Caller headers are carried over as an ``httpx.Headers`` multi-dict, so a
name given several times (two ``Accept`` pairs, say) keeps every value.
Only the idempotency header itself is replaced.
"""

from collections.abc import Iterable, Mapping

import httpx

IDEMPOTENCY_KEY_HEADER = "Idempotency-Key"

HeaderInput = Mapping[str, str] | httpx.Headers | Iterable[tuple[str, str]] | None


def apply_idempotency_key(headers: HeaderInput, idempotency_key: str) -> httpx.Headers:
    """Return a copy of the caller headers carrying the idempotency key.

    Every caller entry for the idempotency header, in any letter case, is
    dropped before the key is set. The input is not mutated.

    Args:
        headers: Caller headers (mapping, httpx.Headers, pairs or None)
        idempotency_key: Opaque key passed through verbatim

    Returns:
        New case-insensitive headers container

    Example:
        >>> headers = apply_idempotency_key([("Accept", "a/b"), ("Accept", "c/d")], "k1")
        >>> headers.get_list("accept"), headers["idempotency-key"]
        (['a/b', 'c/d'], 'k1')
    """
    result = httpx.Headers(headers)
    if IDEMPOTENCY_KEY_HEADER in result:
        del result[IDEMPOTENCY_KEY_HEADER]
    result[IDEMPOTENCY_KEY_HEADER] = idempotency_key
    return result
