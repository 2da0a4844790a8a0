"""
Core Utilities.

Shared utility functions used across the backend.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """
    Return current UTC time as timezone-naive datetime.

    All datetime values in the application are timezone-naive and
    assumed to be UTC.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def normalize_username(value: str | None) -> str | None:
    """Strip whitespace and a leading '@' from a Telegram username."""
    if value is None:
        return None
    cleaned = value.strip().lstrip("@")
    return cleaned or None
