"""Datetime utilities for timezone-aware operations."""

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Return current UTC time with timezone info.

    Replacement for the deprecated ``datetime.utcnow()``; the returned
    value always carries ``tzinfo=timezone.utc``.
    """
    return datetime.now(timezone.utc)
