"""Helpers for UTC instants and calendar-day keys."""

from datetime import date, datetime, timedelta, timezone
from typing import Iterator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_instant(value: str) -> datetime:
    """
    Parse an ISO-8601 date or datetime string into a UTC instant.

    Raises:
        ValueError: if the string is not a valid ISO-8601 value
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return ensure_utc(datetime.fromisoformat(text))


def format_instant(value: datetime) -> str:
    """Format as e.g. 2024-03-01T12:00:00.000Z"""
    return ensure_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every calendar day from start to end, inclusive"""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)
