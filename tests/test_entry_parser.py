"""Tests for entry parsing, year resolution and the booking window."""

from datetime import date

import pytest

from helpers import utc
from services.entry_parser import EntryParser, ParseError
from utils.dates import to_millis


@pytest.mark.parametrize(
    "text",
    ["1115 ber ist", "1115 ber/ist", "1115 BER / IST", "1115 ber-ist", "1115 BeR   iSt", "  1115 ber ist  "],
)
def test_separator_variants_yield_same_entry(parser, text):
    result = parser.parse(text, 1, "alice")

    assert result.success
    assert result.entry.date == "2025-11-15"
    assert result.entry.departure == "BER"
    assert result.entry.arrival == "IST"
    assert result.entry.user_id == 1
    assert result.entry.username == "alice"


def test_expiry_is_local_midnight_at_departure(parser):
    result = parser.parse("1115 ber ist", 1, "alice")

    assert result.entry.expiry_timestamp == to_millis(utc("2025-11-15T23:00:00"))


def test_original_text_prefers_full_command(parser):
    plain = parser.parse("1115 ber ist", 1, "alice")
    full = parser.parse("1115 ber ist", 1, "alice", full_command="/add 1115 ber ist")

    assert plain.entry.original_text == "1115 ber ist"
    assert full.entry.original_text == "/add 1115 ber ist"


@pytest.mark.parametrize(
    "text",
    [
        "invalid format",
        "1115 berl ist",
        "1115 be ist",
        "115 ber ist",
        "1115 b3r ist",
        "1115 ber ist fra",
        "1115 ber_ist",
        "\u0661\u0661\u0661\u0665 ber ist",  # Arabic-Indic digits
        "\uff11\uff11\uff11\uff15 ber ist",  # fullwidth digits
        "",
    ],
)
def test_malformed_input_is_format_error(parser, text):
    result = parser.parse(text, 1, "alice")

    assert not result.success
    assert result.error == ParseError.FORMAT


@pytest.mark.parametrize("text", ["1332 ber ist", "0015 ber ist", "0132 ber ist", "1100 ber ist", "3112 ist ber"])
def test_out_of_range_month_or_day_is_format_error(parser, text):
    # Never reported as date_limit even though no year would make them valid
    assert parser.parse(text, 1, "alice").error == ParseError.FORMAT


@pytest.mark.parametrize(
    ("mmdd", "expected"),
    [
        ("1113", "2025-11-13"),  # today
        ("1114", "2025-11-14"),
        ("1112", "2025-11-12"),  # yesterday
        ("1120", "2025-11-20"),  # 7 days
        ("1121", "2025-11-21"),  # 8 days, timezone tolerance
    ],
)
def test_dates_inside_window_are_accepted(parser, mmdd, expected):
    result = parser.parse(f"{mmdd} ber ist", 1, "alice")

    assert result.success
    assert result.entry.date == expected


@pytest.mark.parametrize("mmdd", ["1122", "1213", "1110", "1111"])
def test_dates_outside_window_are_date_limit(parser, mmdd):
    # Window is measured from now (10:00 UTC) to the start of the date
    assert parser.parse(f"{mmdd} ber ist", 1, "alice").error == ParseError.DATE_LIMIT


def test_window_is_inclusive_at_both_ends(parser, clock):
    clock.set("2025-11-13T00:00:00")

    assert parser.parse("1121 ber ist", 1, "alice").success
    assert parser.parse("1111 ber ist", 1, "alice").success
    assert parser.parse("1122 ber ist", 1, "alice").error == ParseError.DATE_LIMIT


def test_december_entry_on_new_year(parser, clock):
    clock.set("2025-01-01T12:00:00")

    result = parser.parse("1231 ber ist", 1, "alice")

    assert result.success
    assert result.entry.date == "2024-12-31"


def test_january_entry_on_new_years_eve(parser, clock):
    clock.set("2024-12-31T12:00:00")

    result = parser.parse("0101 ber ist", 1, "alice")

    assert result.success
    assert result.entry.date == "2025-01-01"


@pytest.mark.parametrize(
    ("today", "month", "day", "year"),
    [
        (date(2025, 1, 1), 12, 31, 2024),
        (date(2025, 2, 20), 12, 1, 2024),
        (date(2024, 12, 29), 1, 2, 2025),
        (date(2024, 11, 20), 2, 10, 2025),
        (date(2025, 11, 13), 11, 15, 2025),
        (date(2025, 6, 15), 6, 1, 2025),  # within 15 days back
        (date(2025, 6, 15), 5, 1, 2026),  # well in the past rolls forward
        (date(2025, 6, 15), 9, 1, 2025),  # far future stays this year
    ],
)
def test_resolve_year(parser, today, month, day, year):
    assert parser.resolve_year(month, day, today) == year


def test_nonexistent_day_rolls_into_next_month(parser, clock):
    clock.set("2025-02-27T10:00:00")

    result = parser.parse("0230 ber ist", 1, "alice")

    assert result.success
    assert result.entry.date == "2025-03-02"


def test_unknown_departure_uses_fallback_expiry(parser):
    result = parser.parse("1115 xyz ist", 1, "alice")

    assert result.entry.expiry_timestamp == to_millis(utc("2025-11-16T12:00:00"))


def test_custom_window(resolver, clock):
    strict = EntryParser(resolver, clock=clock, max_past_days=0, max_future_days=3)

    assert strict.parse("1115 ber ist", 1, "alice").success
    assert strict.parse("1118 ber ist", 1, "alice").error == ParseError.DATE_LIMIT


class TestImportLine:
    def test_valid_line(self, parser):
        result = parser.parse_import_line("1115 BER / IST @Alice")

        assert result.success
        assert result.entry.user_id is None
        assert result.entry.username == "Alice"
        assert result.entry.date == "2025-11-15"
        assert result.entry.original_text == "1115 BER / IST @Alice"

    def test_lowercase_codes_are_uppercased(self, parser):
        result = parser.parse_import_line("1115 ber/ist @bob")

        assert result.entry.departure == "BER"
        assert result.entry.arrival == "IST"

    def test_requires_slash_and_username(self, parser):
        assert parser.parse_import_line("1115 BER IST @Alice").error == "Invalid format"
        assert parser.parse_import_line("1115 BER / IST").error == "Invalid format"

    def test_non_ascii_digits_and_names(self, parser):
        assert parser.parse_import_line("\u0661\u0661\u0661\u0665 BER / IST @Alice").error == "Invalid format"
        assert parser.parse_import_line("1115 BER / IST @Jos\u00e9").error == "Invalid format"

    def test_invalid_month(self, parser):
        assert parser.parse_import_line("1315 BER / IST @Alice").error == "Invalid date"

    def test_no_booking_window(self, parser):
        assert parser.parse_import_line("1225 BER / IST @Alice").success


class TestRemoveArgs:
    def test_full_target(self, parser):
        target = parser.parse_remove_args("1115 ber-ist")

        assert not target.date_only
        assert target.date == "2025-11-15"
        assert (target.departure, target.arrival) == ("BER", "IST")

    def test_date_only(self, parser):
        target = parser.parse_remove_args("1115")

        assert target.date_only
        assert target.mmdd == "1115"
        assert target.date == "2025-11-15"

    @pytest.mark.parametrize("args", ["abc", "1115 ber", "1399", "1399 ber ist", "\u0661\u0661\u0661\u0665"])
    def test_invalid(self, parser, args):
        assert parser.parse_remove_args(args) is None
