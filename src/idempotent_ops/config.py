"""Retry configuration for the idempotent request engine.

This module provides the RetryConfig class controlling how many times a
request is re-issued and how long to back off between attempts.

Example:
    Basic usage with defaults:

        >>> config = RetryConfig()
        >>> config.retries
        3

    Overlaying a partial configuration:

        >>> config = RetryConfig.resolve({"retries": 5, "randomize": False})
        >>> (config.retries, config.min_timeout_ms, config.randomize)
        (5, 1000.0, False)

    Loading from environment:

        >>> import os
        >>> os.environ['IDEMPOTENT_RETRY_RETRIES'] = '5'
        >>> config = RetryConfig.from_env()
"""

import os
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field, field_validator

# Alternate spellings accepted by RetryConfig.resolve()
_FIELD_ALIASES = {
    "minTimeout": "min_timeout_ms",
    "maxTimeout": "max_timeout_ms",
    "min_timeout": "min_timeout_ms",
    "max_timeout": "max_timeout_ms",
}


class RetryConfig(BaseModel):
    """Configuration for retrying idempotent requests.

    Attributes:
        retries: Number of retries after the first attempt. A request is
            attempted at most ``retries + 1`` times. Default is 3.
        factor: Exponential growth factor of the backoff delay. Default is 2.
        min_timeout_ms: Base delay before the first retry, in milliseconds.
            Also bounds the random jitter. Default is 1000.
        max_timeout_ms: Upper bound on any single delay, in milliseconds.
            Default is 15000.
        randomize: Add uniform jitter in ``[0, min_timeout_ms)`` to each delay.
            Default is True.

    Note:
        This class is immutable (frozen=True). Use ``resolve`` to derive a
        config with different settings.
    """

    retries: int = Field(default=3, description="Retries after the first attempt (>= 0)")
    factor: float = Field(default=2.0, description="Backoff multiplier (> 0)")
    min_timeout_ms: float = Field(default=1000.0, description="Base backoff delay in ms")
    max_timeout_ms: float = Field(default=15000.0, description="Cap on any single delay in ms")
    randomize: bool = Field(default=True, description="Add random jitter to each delay")

    model_config = {"frozen": True, "extra": "forbid"}

    @field_validator("retries")
    @classmethod
    def validate_retries(cls, v: int) -> int:
        """Validate retries is non-negative.

        Raises:
            ValueError: If retries is negative.
        """
        if v < 0:
            raise ValueError(f"retries must be >= 0, got {v}")
        return v

    @field_validator("factor")
    @classmethod
    def validate_factor(cls, v: float) -> float:
        """Validate the multiplier is positive.

        A factor below 1 shrinks the delay from one attempt to the next.

        Raises:
            ValueError: If factor is zero or negative.
        """
        if v <= 0:
            raise ValueError(f"factor must be > 0, got {v}")
        return v

    @field_validator("min_timeout_ms", "max_timeout_ms")
    @classmethod
    def validate_timeouts(cls, v: float) -> float:
        """Validate timeouts are non-negative.

        ``max_timeout_ms`` may be smaller than ``min_timeout_ms``; it then
        caps every delay.

        Raises:
            ValueError: If the timeout is negative.
        """
        if v < 0:
            raise ValueError(f"timeouts must be >= 0, got {v}")
        return v

    @classmethod
    def resolve(cls, overrides: "RetryConfig | Mapping[str, Any] | None" = None) -> "RetryConfig":
        """Build a fully-resolved config from a partial one.

        Fields present in ``overrides`` replace the defaults one by one;
        missing fields keep their default value.

        Args:
            overrides: None, a complete RetryConfig, or a partial mapping.

        Returns:
            A RetryConfig with every field set.

        Raises:
            TypeError: If overrides is of an unsupported type.
            ValidationError: If a key is unknown (after alias mapping) or the
                merged values are invalid.

        Example:
            >>> RetryConfig.resolve({"maxTimeout": 500, "minTimeout": 100}).max_timeout_ms
            500.0
        """
        if overrides is None:
            return cls()
        if isinstance(overrides, RetryConfig):
            return overrides
        if not isinstance(overrides, Mapping):
            raise TypeError(
                f"retry must be a RetryConfig or a mapping, got {type(overrides).__name__}"
            )

        merged: dict[str, Any] = {}
        for key, value in overrides.items():
            merged[_FIELD_ALIASES.get(key, key)] = value
        return cls(**merged)

    @classmethod
    def from_env(cls, prefix: str = "IDEMPOTENT_RETRY_") -> "RetryConfig":
        """Create configuration from environment variables.

        Variable names are uppercase field names with the prefix, e.g.
        ``IDEMPOTENT_RETRY_MAX_TIMEOUT_MS``. Missing variables keep defaults.

        Args:
            prefix: Prefix for environment variable names.

        Returns:
            RetryConfig populated from the environment.
        """
        config_dict: dict[str, Any] = {}

        for field_name in cls.model_fields:
            env_value = os.environ.get(f"{prefix}{field_name.upper()}")
            if env_value is not None:
                # pydantic coerces "5", "2.5" and "false"
                config_dict[field_name] = env_value

        return cls(**config_dict)

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> "RetryConfig":
        """Create configuration from a dictionary.

        Args:
            config_dict: Dictionary with configuration values.

        Returns:
            RetryConfig populated from the dictionary.

        Raises:
            ValidationError: If the dictionary contains invalid values.
        """
        return cls(**config_dict)
