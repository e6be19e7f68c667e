"""
Time-related utilities for the application.

All timestamps are generated in UTC and serialized using
ISO-8601 format with timezone information.
"""

from datetime import datetime, timezone


def utc_now_iso() -> str:
    """Return current UTC time in ISO-8601 format.

    Example:
        2024-01-15T10:42:31.123456+00:00
    """
    return datetime.now(timezone.utc).isoformat()


def utc_now_compact() -> str:
    """Return current UTC time as ``YYYYmmdd-HHMMSS`` for generated file names."""
    return datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
