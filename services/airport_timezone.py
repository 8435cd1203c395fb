"""Airport code to timezone resolution and local-midnight arithmetic.

Airport coordinates come from an OurAirports ``airports.csv`` loaded once at
construction. Coordinates are mapped to an IANA zone with ``timezonefinder``.
Anything that cannot be resolved falls back to UTC-12, the zone in which a
calendar day ends last, so an entry never disappears earlier than it would
anywhere on earth.
"""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from pathlib import Path
from typing import Dict, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from timezonefinder import TimezoneFinder

from core.constants import AirportData
from utils.dates import Clock, calendar_date, parse_full_date, utc_now

logger = logging.getLogger(__name__)

FALLBACK_TIMEZONE = AirportData.FALLBACK_TIMEZONE


@dataclass(frozen=True, slots=True)
class Airport:
    iata_code: str
    latitude: float
    longitude: float
    name: str


@dataclass(frozen=True, slots=True)
class AirportInfo:
    found: bool
    name: Optional[str] = None
    timezone: Optional[str] = None


class AirportTimezoneResolver:
    """Resolves airport codes to timezones and end-of-day instants.

    The airport table is immutable after construction. A missing or
    unreadable CSV leaves the table empty and every lookup falls back.
    """

    def __init__(
        self,
        csv_path: Optional[Union[str, Path]] = AirportData.CSV_PATH,
        finder: Optional[TimezoneFinder] = None,
        clock: Clock = utc_now,
    ) -> None:
        self._clock = clock
        self._finder = finder
        self._airports: Dict[str, Airport] = {}
        self._timezones: Dict[str, str] = {}
        if csv_path is not None:
            self._airports = self._load_airports(Path(csv_path))

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    @staticmethod
    def _load_airports(path: Path) -> Dict[str, Airport]:
        if not path.exists():
            logger.warning(f"Airports data file not found at {path}, timezone detection will fall back to UTC-12")
            return {}

        airports: Dict[str, Airport] = {}
        try:
            with path.open(newline="", encoding="utf-8") as handle:
                reader = csv.reader(handle)
                next(reader, None)  # header
                for fields in reader:
                    airport = AirportTimezoneResolver._parse_fields(fields)
                    if airport is not None:
                        airports[airport.iata_code] = airport
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            logger.warning(f"Failed to load airports data from {path}: {e}")
            return {}

        logger.info(f"Loaded {len(airports)} airports with IATA codes")
        return airports

    @staticmethod
    def _parse_fields(fields: list) -> Optional[Airport]:
        if len(fields) < AirportData.MIN_COLUMNS:
            return None

        name = fields[AirportData.NAME_COLUMN].strip()
        iata_code = fields[AirportData.IATA_COLUMN].strip().upper()
        if not name or not iata_code:
            return None

        try:
            latitude = float(fields[AirportData.LATITUDE_COLUMN])
            longitude = float(fields[AirportData.LONGITUDE_COLUMN])
        except ValueError:
            return None

        return Airport(iata_code=iata_code, latitude=latitude, longitude=longitude, name=name)

    def _get_finder(self) -> TimezoneFinder:
        if self._finder is None:
            self._finder = TimezoneFinder()
        return self._finder

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    @property
    def airport_count(self) -> int:
        return len(self._airports)

    def airport_info(self, code: str) -> AirportInfo:
        airport = self._airports.get(code.upper())
        if airport is None:
            return AirportInfo(found=False)
        return AirportInfo(found=True, name=airport.name, timezone=self.timezone_for(code))

    def timezone_for(self, code: str) -> str:
        """IANA zone of the airport, or ``FALLBACK_TIMEZONE``. Never raises."""
        code = code.upper()
        cached = self._timezones.get(code)
        if cached is not None:
            return cached

        airport = self._airports.get(code)
        if airport is None:
            return FALLBACK_TIMEZONE

        zone_name = FALLBACK_TIMEZONE
        try:
            found = self._get_finder().timezone_at(lng=airport.longitude, lat=airport.latitude)
            if found:
                ZoneInfo(found)
                zone_name = found
            else:
                logger.warning(f"No timezone at coordinates of {code} ({airport.latitude}, {airport.longitude})")
        except (ValueError, ZoneInfoNotFoundError) as e:
            logger.warning(f"Failed to get timezone for {code}: {e}")

        self._timezones[code] = zone_name
        return zone_name

    # ------------------------------------------------------------------
    # Midnight arithmetic
    # ------------------------------------------------------------------
    def local_midnight_after(
        self,
        code: str,
        month: int,
        day: int,
        year: Optional[int] = None,
    ) -> datetime:
        """Instant at which the given calendar day ends at the airport.

        That is local midnight at the start of the following day, as an
        aware UTC datetime. The offset is the one in force on that date,
        so DST is honoured. ``year`` defaults to the current year.
        """
        if year is None:
            year = self._clock().year
        next_day = calendar_date(year, month, day) + timedelta(days=1)
        zone_name = self.timezone_for(code)

        if zone_name == FALLBACK_TIMEZONE:
            return datetime.combine(
                next_day, time(0), tzinfo=timezone.utc
            ) - timedelta(hours=AirportData.FALLBACK_OFFSET_HOURS)

        local_midnight = datetime.combine(next_day, time(0), tzinfo=ZoneInfo(zone_name))
        return local_midnight.astimezone(timezone.utc)

    def midnight_after_date(self, code: str, day: date) -> datetime:
        return self.local_midnight_after(code, day.month, day.day, day.year)

    def has_expired(self, code: str, full_date: str, now: Optional[datetime] = None) -> bool:
        """Whether the ``YYYY-MM-DD`` departure day has ended at the airport.

        Raises:
            ValueError: If ``full_date`` is not ``YYYY-MM-DD``
        """
        parsed = parse_full_date(full_date)
        now = now or self._clock()
        return now >= self.midnight_after_date(code, parsed)
