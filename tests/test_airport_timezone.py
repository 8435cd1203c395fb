"""Tests for airport timezone resolution and local midnight arithmetic."""

from datetime import date
from unittest.mock import MagicMock

import pytest

from services.airport_timezone import FALLBACK_TIMEZONE, AirportTimezoneResolver
from helpers import utc


def test_loads_airports_with_iata_codes(resolver):
    # Rows without a code, with bad coordinates or too few columns are skipped
    assert resolver.airport_count == 5


@pytest.mark.parametrize(
    ("code", "zone"),
    [
        ("BER", "Europe/Berlin"),
        ("FRA", "Europe/Berlin"),
        ("IST", "Europe/Istanbul"),
        ("NRT", "Asia/Tokyo"),
        ("LAX", "America/Los_Angeles"),
        ("ber", "Europe/Berlin"),
    ],
)
def test_timezone_for_known_airports(resolver, code, zone):
    assert resolver.timezone_for(code) == zone


def test_unknown_airport_falls_back(resolver):
    assert resolver.timezone_for("XYZ") == FALLBACK_TIMEZONE
    assert resolver.timezone_for("BRK") == FALLBACK_TIMEZONE


def test_missing_csv_degrades_to_fallback(tmp_path, finder):
    resolver = AirportTimezoneResolver(tmp_path / "missing.csv", finder=finder)

    assert resolver.airport_count == 0
    assert resolver.timezone_for("BER") == FALLBACK_TIMEZONE


def test_unreadable_csv_degrades_to_fallback(tmp_path, finder):
    path = tmp_path / "airports.csv"
    path.write_bytes(b"\xff\xfe\x00garbage")

    resolver = AirportTimezoneResolver(path, finder=finder)

    assert resolver.airport_count == 0


def test_coordinates_without_timezone_fall_back(resolver, caplog):
    finder = MagicMock()
    finder.timezone_at.return_value = None
    resolver._finder = finder

    assert resolver.timezone_for("NRT") == FALLBACK_TIMEZONE
    assert "No timezone at coordinates of NRT" in caplog.text


def test_finder_error_falls_back(resolver):
    finder = MagicMock()
    finder.timezone_at.side_effect = ValueError("bad coordinates")
    resolver._finder = finder

    assert resolver.timezone_for("IST") == FALLBACK_TIMEZONE


def test_timezone_lookup_is_cached(resolver):
    finder = MagicMock()
    finder.timezone_at.return_value = "Europe/Berlin"
    resolver._finder = finder

    resolver.timezone_for("BER")
    resolver.timezone_for("BER")

    finder.timezone_at.assert_called_once()


def test_midnight_after_berlin_winter(resolver):
    assert resolver.local_midnight_after("BER", 11, 15, 2024) == utc("2024-11-15T23:00:00")


def test_midnight_after_berlin_summer(resolver):
    assert resolver.local_midnight_after("BER", 7, 15, 2024) == utc("2024-07-15T22:00:00")


def test_dst_shifts_expiry_by_one_hour(resolver):
    winter = resolver.local_midnight_after("BER", 1, 15, 2025)
    summer = resolver.local_midnight_after("BER", 7, 15, 2025)

    # Both are the evening before the next UTC day; summer is one hour earlier
    assert winter.hour - summer.hour == 1
    assert winter.date() == date(2025, 1, 15)
    assert summer.date() == date(2025, 7, 15)


def test_midnight_uses_offset_of_that_date(resolver):
    # US clocks went forward on 2025-03-09
    assert resolver.local_midnight_after("LAX", 3, 8, 2025) == utc("2025-03-09T08:00:00")
    assert resolver.local_midnight_after("LAX", 3, 9, 2025) == utc("2025-03-10T07:00:00")


def test_midnight_east_of_utc(resolver):
    assert resolver.local_midnight_after("NRT", 11, 15, 2024) == utc("2024-11-15T15:00:00")


def test_fallback_midnight_is_noon_utc_next_day(resolver):
    assert resolver.local_midnight_after("XYZ", 11, 15, 2024) == utc("2024-11-16T12:00:00")


def test_year_defaults_to_current_year(resolver):
    assert resolver.local_midnight_after("BER", 11, 15) == utc("2025-11-15T23:00:00")


def test_year_end_rolls_into_next_year(resolver):
    assert resolver.midnight_after_date("BER", date(2025, 12, 31)) == utc("2025-12-31T23:00:00")


def test_has_expired_boundary(resolver):
    assert not resolver.has_expired("BER", "2024-11-15", now=utc("2024-11-15T22:59:59"))
    assert resolver.has_expired("BER", "2024-11-15", now=utc("2024-11-15T23:00:00"))


def test_has_expired_rejects_malformed_date(resolver):
    with pytest.raises(ValueError):
        resolver.has_expired("BER", "15.11.2024")


def test_airport_info(resolver):
    info = resolver.airport_info("nrt")

    assert info.found
    assert info.name == "Narita International Airport"
    assert info.timezone == "Asia/Tokyo"
    assert not resolver.airport_info("XYZ").found
