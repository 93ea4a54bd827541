"""Shared date/time helpers.

parse_date:      lenient date parsing (returns None on bad input)
parse_datetime:  lenient ISO-8601 datetime parsing, always UTC-aware
ensure_aware:    normalise naive datetimes (SQLite round-trips) to UTC
iso:             null-safe isoformat for to_dict() payloads
"""
import logging
from datetime import date, datetime, time, timezone

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime | None) -> datetime | None:
    """Return ``value`` as a timezone-aware UTC datetime.

    SQLite drops tzinfo on the way back out of the database, so every
    datetime read from a model goes through here before comparisons.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_date(value):
    """Parse a date string (ISO or DD.MM.YYYY) to a date object.

    Returns None for empty/invalid input. Supports:
    - YYYY-MM-DD (ISO format)
    - YYYY-MM-DDTHH:MM:SS (datetime ISO → .date())
    - DD.MM.YYYY
    """
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text)
    except (ValueError, TypeError):
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except (ValueError, TypeError):
        pass
    try:
        return datetime.strptime(text, "%d.%m.%Y").date()
    except (ValueError, TypeError):
        return None


def parse_datetime(value):
    """Parse an ISO-8601 timestamp into an aware UTC datetime.

    A bare date is read as midnight UTC. A trailing ``Z`` is accepted.
    Returns None for empty/invalid input.
    """
    if not value:
        return None
    if isinstance(value, datetime):
        return ensure_aware(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    text = str(value).strip()
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except (ValueError, TypeError):
        return None
    return ensure_aware(parsed)


def iso(value):
    """isoformat() for date/datetime columns, None-safe."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return ensure_aware(value).isoformat()
    return value.isoformat()
