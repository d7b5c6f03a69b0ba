"""Centralized configuration loading for the HTTP storage adapter."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Mapping


@dataclass(frozen=True)
class StorageSettings:
    """Immutable container for remote storage connection settings."""

    service_url: str
    username: str
    password: str = field(repr=False)
    bucket: str | None = None

    # Transport knobs; defaults leave requests' own behaviour untouched
    timeout_seconds: float | None = None
    verify_ssl: bool = True
    retries: int = 1  # Total attempts, 1 disables retrying
    retry_backoff_seconds: float = 0.5

    @staticmethod
    def from_mapping(mapping: Mapping[str, object]) -> "StorageSettings":
        """Build settings from a raw adapter config mapping.

        The mapping uses the short keys of a disk definition
        (``url``, ``username``, ``password``, ``bucket``).
        """

        missing = [key for key in ("url", "username", "password") if mapping.get(key) in (None, "")]
        if missing:
            raise ValueError(f"Missing required storage config keys: {', '.join(missing)}")

        bucket = mapping.get("bucket")
        timeout = mapping.get("timeout_seconds")
        return StorageSettings(
            service_url=str(mapping["url"]),
            username=str(mapping["username"]),
            password=str(mapping["password"]),
            bucket=str(bucket) if bucket not in (None, "") else None,
            timeout_seconds=(
                _get_float("timeout_seconds", str(timeout), min_value=0.001, max_value=3600.0)
                if timeout is not None
                else None
            ),
            verify_ssl=_get_bool(
                None if mapping.get("verify_ssl") is None else str(mapping.get("verify_ssl")),
                default=True,
            ),
            retries=_get_positive_int("retries", str(mapping.get("retries", 1)), min_value=1),
            retry_backoff_seconds=_get_float(
                "retry_backoff_seconds",
                str(mapping.get("retry_backoff_seconds", 0.5)),
                min_value=0.0,
                max_value=60.0,
            ),
        )


def _get_bool(value: str | None, default: bool = False) -> bool:
    """Interpret an env flag or mapping value; unset falls back to ``default``."""
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_positive_int(key: str, value: str, min_value: int = 1) -> int:
    """Parse and validate a positive integer setting.

    Args:
        key: Environment variable or mapping key (for error messages)
        value: Raw value, stringified when it came from a config mapping
        min_value: Minimum allowed value (default: 1)

    Returns:
        Validated positive integer

    Raises:
        ValueError: If value is not an integer or below min_value
    """
    try:
        parsed = int(value)
    except ValueError as e:
        raise ValueError(f"{key} must be an integer, got: {value}") from e

    if parsed < min_value:
        raise ValueError(f"{key} must be >= {min_value}, got: {parsed}")

    return parsed


def _get_float(key: str, value: str, min_value: float = 0.0, max_value: float = 1.0) -> float:
    """Parse and validate a float setting from the environment or a config mapping.

    Raises:
        ValueError: If value is not a float or outside allowed range
    """
    try:
        parsed = float(value)
    except ValueError as e:
        raise ValueError(f"{key} must be a float, got: {value}") from e

    if not (min_value <= parsed <= max_value):
        raise ValueError(f"{key} must be between {min_value} and {max_value}, got: {parsed}")

    return parsed


@lru_cache(maxsize=1)
def get_settings() -> StorageSettings:
    """Load settings once per process."""

    required_keys = (
        "HTTPFS_URL",
        "HTTPFS_USERNAME",
        "HTTPFS_PASSWORD",
    )
    missing = [key for key in required_keys if not os.getenv(key)]
    if missing:
        raise RuntimeError(f"Missing required environment variables: {', '.join(missing)}")

    timeout = os.environ.get("HTTPFS_TIMEOUT")
    return StorageSettings(
        service_url=os.environ["HTTPFS_URL"],
        username=os.environ["HTTPFS_USERNAME"],
        password=os.environ["HTTPFS_PASSWORD"],
        bucket=os.environ.get("HTTPFS_BUCKET") or None,
        # Unset means no client-side timeout
        timeout_seconds=(
            _get_float("HTTPFS_TIMEOUT", timeout, min_value=0.001, max_value=3600.0)
            if timeout
            else None
        ),
        verify_ssl=_get_bool(os.environ.get("HTTPFS_VERIFY_SSL"), default=True),
        retries=_get_positive_int(
            "HTTPFS_RETRIES", os.environ.get("HTTPFS_RETRIES", "1"), min_value=1
        ),
        retry_backoff_seconds=_get_float(
            "HTTPFS_RETRY_BACKOFF",
            os.environ.get("HTTPFS_RETRY_BACKOFF", "0.5"),
            min_value=0.0,
            max_value=60.0,
        ),
    )
