"""Date utilities for consistent calendar handling."""

import re
from datetime import UTC, date, datetime

MONTH_RE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def utc_now() -> datetime:
    """Get current UTC datetime.

    Returns:
        Current datetime in UTC timezone.
    """
    return datetime.now(UTC)


def today() -> date:
    """Get the current calendar date (UTC)."""
    return utc_now().date()


def parse_date(value: str | date) -> date:
    """Parse an ISO 8601 calendar date.

    Args:
        value: "YYYY-MM-DD" string or an existing date.

    Returns:
        Parsed date.

    Raises:
        ValueError: If the string is not a valid ISO date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value.strip())


def format_month(d: date) -> str:
    """Format a date as its "YYYY-MM" month key."""
    return f"{d.year:04d}-{d.month:02d}"


def is_month_key(value: str) -> bool:
    """Check whether a string is a well-formed "YYYY-MM" key."""
    return bool(MONTH_RE.match(value))


def in_month(d: date, month: str) -> bool:
    """Check whether a date falls within a "YYYY-MM" month."""
    return d.isoformat().startswith(month)


def start_of_month(d: date) -> date:
    """First day of the month containing ``d``."""
    return d.replace(day=1)
