"""
Shared datetime helpers.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional


def ensure_utc(dt: datetime) -> datetime:
    """Return a timezone-aware UTC datetime."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: str) -> Optional[datetime]:
    """Parse an npm ISO 8601 timestamp (e.g. `2011-03-21T21:49:35.151Z`) to UTC."""
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    return ensure_utc(parsed)


def days(value: float) -> timedelta:
    """Convert a (possibly fractional) number of days into a timedelta."""
    if value < 0:
        raise ValueError(f"Age in days must not be negative: {value}")
    return timedelta(days=value)


def is_old_enough(published: str, min_age: timedelta, now: datetime) -> bool:
    """True if `published` lies at least `min_age` before `now`."""
    published_at = parse_timestamp(published)
    if published_at is None:
        return False
    return ensure_utc(now) - published_at >= min_age
