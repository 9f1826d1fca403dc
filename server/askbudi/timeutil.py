"""Datetime helpers.

Timestamps are stored as naive UTC datetimes.
"""
from datetime import datetime, timezone


def utcnow() -> datetime:
    """Return current UTC time as a naive datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
