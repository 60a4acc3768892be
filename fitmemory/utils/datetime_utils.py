"""Timezone-aware datetime utilities for the memory store."""

from datetime import datetime, timezone

from dateutil import parser as date_parser


def now_utc() -> datetime:
    """Get current UTC time."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_datetime(dt_str: str) -> datetime:
    """Parse a datetime string to a timezone-aware UTC datetime."""
    if not dt_str:
        return now_utc()

    try:
        return ensure_utc(date_parser.parse(dt_str))
    except (ValueError, TypeError, OverflowError):
        return now_utc()


def format_datetime(dt: datetime, format_str: str = "%Y-%m-%d %H:%M:%S") -> str:
    """Format a datetime to a string."""
    return ensure_utc(dt).strftime(format_str)
