"""Clock helpers — UTC wall-clock reads and expiry comparison.

Invariants:
    - All persisted timestamps are UTC
    - Naive datetimes read back from SQLite are interpreted as UTC
"""

from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes; convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_expired(expires_at: datetime, now: datetime) -> bool:
    """A deadline is expired once wall-clock time reaches it."""
    return ensure_utc(expires_at) <= ensure_utc(now)
