"""Calendar helpers shared by the parser, the store and the bot replies."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Callable

Clock = Callable[[], datetime]

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def utc_now() -> datetime:
    """Current instant as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_millis(moment: datetime) -> int:
    """Epoch milliseconds for an aware datetime."""
    return (moment - _EPOCH) // timedelta(milliseconds=1)


def from_millis(millis: int) -> datetime:
    return _EPOCH + timedelta(milliseconds=millis)


def to_iso(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat(timespec="seconds")


def calendar_date(year: int, month: int, day: int) -> date:
    """Build a date, rolling an overflowing day into the following month.

    ``calendar_date(2025, 2, 30)`` is 2025-03-02. Callers only range-check
    month 1-12 and day 1-31, so the day may not exist in that month.
    """
    return date(year, month, 1) + timedelta(days=day - 1)


def parse_full_date(value: str) -> date:
    """Parse ``YYYY-MM-DD``; raises ``ValueError`` on anything else."""
    parts = value.split("-")
    if len(parts) != 3 or not all(part.isdigit() for part in parts):
        raise ValueError(f"Invalid date format: {value}. Expected YYYY-MM-DD.")
    year, month, day = (int(part) for part in parts)
    return date(year, month, day)


def date_to_instant(value: str) -> datetime:
    """``YYYY-MM-DD`` as UTC midnight."""
    parsed = parse_full_date(value)
    return datetime(parsed.year, parsed.month, parsed.day, tzinfo=timezone.utc)


def compare_dates(date_a: str, date_b: str) -> int:
    """Chronological comparison of two ``YYYY-MM-DD`` strings.

    Returns a negative number, zero or a positive number.
    """
    delta = date_to_instant(date_a) - date_to_instant(date_b)
    return (delta > timedelta(0)) - (delta < timedelta(0))


def to_mmdd(full_date: str) -> str:
    """``2025-11-15`` -> ``1115``."""
    _, month, day = full_date.split("-")
    return f"{month}{day}"


def example_date(now: datetime, days_ahead: int = 2) -> str:
    """MMDD a couple of days from ``now``, for usage and help texts."""
    target = now + timedelta(days=days_ahead)
    return f"{target.month:02d}{target.day:02d}"
