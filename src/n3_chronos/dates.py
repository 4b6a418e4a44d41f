"""Day-granularity date helpers. All times are naive local datetimes."""
from datetime import datetime, timedelta


def is_same_day(a: datetime, b: datetime) -> bool:
    return a.date() == b.date()


def is_yesterday(value: datetime, now: datetime) -> bool:
    return value.date() == (now - timedelta(days=1)).date()


def add_days(value: datetime, days: int) -> datetime:
    return value + timedelta(days=days)


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO 8601 string, returning None for empty or invalid input."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, TypeError, ValueError):
        return None
    if parsed.tzinfo is not None:
        # Stored by a UTC-aware writer; compare in local time.
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed
