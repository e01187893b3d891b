"""Utility modules for the idempotency primitives."""

from .headers import IDEMPOTENCY_KEY_HEADER, apply_idempotency_key

__all__ = [
    "IDEMPOTENCY_KEY_HEADER",
    "apply_idempotency_key",
]
