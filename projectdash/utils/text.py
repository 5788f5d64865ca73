"""Text helpers for lenient date handling and tag lists."""

from datetime import datetime, timezone
from typing import Optional

from dateutil import parser as dtparser

# Missing date parts become the first day of the month at midnight
_DEFAULT_PARTS = datetime(1900, 1, 1)


def parse_date(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-like or locale date string into a naive UTC datetime.

    Form timestamps (``1/15/2024 10:30:00``), ISO strings and month-name
    dates are all accepted.

    Returns:
        The parsed datetime, or None when *value* is empty or unparsable
    """
    if not value or not value.strip():
        return None
    try:
        dt = dtparser.parse(value.strip(), default=_DEFAULT_PARTS)
    except (ValueError, OverflowError):
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def format_date(value: Optional[str]) -> str:
    """Format date text to 'Feb 11, 2026' style.

    Unparsable text is returned unchanged; empty text becomes "Unknown".
    """
    if not value:
        return "Unknown"
    dt = parse_date(value)
    if dt is None:
        return value
    return format_datetime(dt)


def format_datetime(dt: datetime) -> str:
    return f"{dt:%b} {dt.day}, {dt.year}"


def split_keywords(text: Optional[str]) -> list[str]:
    """Split a comma-separated tag list, dropping blanks."""
    if not text:
        return []
    return [k.strip() for k in text.split(",") if k.strip()]
