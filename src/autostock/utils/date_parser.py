"""Date parsing utilities."""

from datetime import datetime, UTC
from typing import Optional
from dateutil import parser as date_parser


def parse_timestamp(date_str: str) -> datetime:
    """Parse a date or datetime string into an aware datetime.

    Dates without a time are taken as midnight; values without a timezone are
    taken as UTC.

    Raises:
        ValueError: If the string cannot be parsed
    """
    if not date_str or not date_str.strip():
        raise ValueError("Empty date string")
    try:
        value = date_parser.parse(date_str.strip())
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}'") from e
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value


def parse_timestamp_or(date_str: Optional[str], default: datetime) -> datetime:
    """Parse ``date_str``, returning ``default`` when it is blank or invalid."""
    if not date_str:
        return default
    try:
        return parse_timestamp(date_str)
    except ValueError:
        return default


def days_between(start: datetime, end: datetime) -> int:
    """Whole days from ``start`` to ``end`` (negative if ``end`` is earlier)."""
    return (end - start).days
