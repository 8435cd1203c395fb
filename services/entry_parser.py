"""Turns command text into validated, dated entries."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Optional, Pattern, Tuple

from core.constants import EntryLimits
from database.models import Entry
from services.airport_timezone import AirportTimezoneResolver
from utils.dates import Clock, calendar_date, to_iso, to_millis, utc_now

logger = logging.getLogger(__name__)


# Tried in order against the lower-cased text; the first match wins
ENTRY_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(r"^(\d{4})\s+([a-z]{3})\s+([a-z]{3})$", re.ASCII),
    re.compile(r"^(\d{4})\s+([a-z]{3})\s*/\s*([a-z]{3})$", re.ASCII),
    re.compile(r"^(\d{4})\s+([a-z]{3})-([a-z]{3})$", re.ASCII),
)
DATE_ONLY_PATTERN = re.compile(r"^(\d{4})$", re.ASCII)
IMPORT_LINE_PATTERN = re.compile(r"^(\d{4})\s+([a-z]{3})\s*/\s*([a-z]{3})\s+@(\w+)$", re.IGNORECASE | re.ASCII)


class ParseError(str, Enum):
    FORMAT = "format"
    DATE_LIMIT = "date_limit"


@dataclass(frozen=True)
class ParseResult:
    entry: Optional[Entry] = None
    error: Optional[ParseError] = None

    @property
    def success(self) -> bool:
        return self.entry is not None


@dataclass(frozen=True)
class RemoveTarget:
    """Arguments of ``/remove``; airports are absent for a date-only removal."""

    mmdd: str
    date: str
    departure: Optional[str] = None
    arrival: Optional[str] = None

    @property
    def date_only(self) -> bool:
        return self.departure is None


@dataclass(frozen=True)
class ImportLineResult:
    line: str
    entry: Optional[Entry] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.entry is not None


def is_valid_month_day(mmdd: str) -> bool:
    month, day = int(mmdd[:2]), int(mmdd[2:])
    return 1 <= month <= 12 and 1 <= day <= 31


class EntryParser:
    """Validates one line of user input representing an availability claim."""

    def __init__(
        self,
        resolver: AirportTimezoneResolver,
        clock: Clock = utc_now,
        max_past_days: int = EntryLimits.MAX_PAST_DAYS,
        max_future_days: int = EntryLimits.MAX_FUTURE_DAYS,
    ) -> None:
        self.resolver = resolver
        self._clock = clock
        self.max_past_days = max_past_days
        self.max_future_days = max_future_days

    def now(self) -> datetime:
        return self._clock()

    def resolve_year(self, month: int, day: int, today: Optional[date] = None) -> int:
        """Pick the year a bare MMDD most plausibly refers to.

        Intentionally approximate: year-boundary months get special
        treatment, otherwise dates within the window around today stay in
        the current year and dates well in the past roll to next year.
        """
        today = today or self.now().date()
        current_year = today.year

        this_year_diff = (calendar_date(current_year, month, day) - today).days
        last_year_diff = (calendar_date(current_year - 1, month, day) - today).days

        is_early_year = today.month <= 2
        is_late_year = today.month >= 11

        if is_early_year and month == 12 and abs(last_year_diff) < abs(this_year_diff):
            return current_year - 1

        if is_late_year and month <= 2 and abs(this_year_diff + 365) < abs(this_year_diff):
            return current_year + 1

        window = EntryLimits.YEAR_WINDOW_DAYS
        if abs(this_year_diff) <= window:
            return current_year

        if this_year_diff < -window:
            return current_year + 1

        return current_year

    def resolve_date(self, mmdd: str, now: Optional[datetime] = None) -> date:
        month, day = int(mmdd[:2]), int(mmdd[2:])
        now = now or self.now()
        return calendar_date(self.resolve_year(month, day, now.date()), month, day)

    def is_within_range(self, resolved: date, now: datetime) -> bool:
        """Fractional days from ``now`` to the date's start must be in the window."""
        start = datetime(resolved.year, resolved.month, resolved.day, tzinfo=now.tzinfo)
        diff_days = (start - now) / timedelta(days=1)
        return -self.max_past_days <= diff_days <= self.max_future_days

    def parse(
        self,
        text: str,
        user_id: Optional[int],
        username: str,
        full_command: Optional[str] = None,
    ) -> ParseResult:
        """Parse ``MMDD DEP ARR`` (space, slash or hyphen separated).

        Format problems are reported before range problems, even when the
        stated date would also be out of range.
        """
        normalized = text.strip().lower()

        for pattern in ENTRY_PATTERNS:
            match = pattern.match(normalized)
            if not match:
                continue

            mmdd, departure, arrival = match.groups()
            if not is_valid_month_day(mmdd):
                return ParseResult(error=ParseError.FORMAT)

            now = self.now()
            resolved = self.resolve_date(mmdd, now)
            if not self.is_within_range(resolved, now):
                return ParseResult(error=ParseError.DATE_LIMIT)

            return ParseResult(entry=self._build_entry(
                user_id=user_id,
                username=username,
                resolved=resolved,
                departure=departure.upper(),
                arrival=arrival.upper(),
                original_text=(full_command if full_command else text).strip(),
                now=now,
            ))

        return ParseResult(error=ParseError.FORMAT)

    def parse_import_line(self, line: str) -> ImportLineResult:
        """Parse ``MMDD DEP / ARR @username`` into an unclaimed entry.

        Imports are entered by administrators, so only the month/day range
        is checked, not the booking window.
        """
        line = line.strip()
        match = IMPORT_LINE_PATTERN.match(line)
        if not match:
            return ImportLineResult(line=line, error="Invalid format")

        mmdd, departure, arrival, username = match.groups()
        if not is_valid_month_day(mmdd):
            return ImportLineResult(line=line, error="Invalid date")

        now = self.now()
        return ImportLineResult(line=line, entry=self._build_entry(
            user_id=None,
            username=username,
            resolved=self.resolve_date(mmdd, now),
            departure=departure.upper(),
            arrival=arrival.upper(),
            original_text=line,
            now=now,
        ))

    def parse_remove_args(self, args: str) -> Optional[RemoveTarget]:
        """Accepts the same shapes as ``parse`` plus a bare ``MMDD``."""
        normalized = args.strip().lower()

        for pattern in ENTRY_PATTERNS:
            match = pattern.match(normalized)
            if match:
                mmdd, departure, arrival = match.groups()
                return self._remove_target(mmdd, departure.upper(), arrival.upper())

        match = DATE_ONLY_PATTERN.match(normalized)
        if match:
            return self._remove_target(match.group(1))
        return None

    def _remove_target(
        self, mmdd: str, departure: Optional[str] = None, arrival: Optional[str] = None
    ) -> Optional[RemoveTarget]:
        if not is_valid_month_day(mmdd):
            return None
        return RemoveTarget(
            mmdd=mmdd,
            date=self.resolve_date(mmdd).isoformat(),
            departure=departure,
            arrival=arrival,
        )

    def _build_entry(
        self,
        user_id: Optional[int],
        username: str,
        resolved: date,
        departure: str,
        arrival: str,
        original_text: str,
        now: datetime,
    ) -> Entry:
        expiry = self.resolver.midnight_after_date(departure, resolved)
        return Entry(
            user_id=user_id,
            username=username,
            date=resolved.isoformat(),
            departure=departure,
            arrival=arrival,
            original_text=original_text,
            expiry_timestamp=to_millis(expiry),
            created_at=to_iso(now),
        )
