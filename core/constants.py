"""Application-wide constants and configuration values."""

from __future__ import annotations

from enum import Enum


# Telegram limits
class TelegramLimits:
    """Telegram API limits."""
    MESSAGE_MAX_LENGTH = 4096
    SEND_RATE_LIMIT = 25  # messages per second


# Entry rules
class EntryLimits:
    """Business rules for availability entries."""
    MAX_ENTRIES_PER_USER = 3
    ADVERTISED_DAYS_AHEAD = 7
    MAX_PAST_DAYS = 2  # one day of timezone slack over "yesterday"
    MAX_FUTURE_DAYS = 8  # one day of timezone slack over the advertised 7
    YEAR_WINDOW_DAYS = 15
    EXAMPLE_DAYS_AHEAD = 2


# Scheduler constants
class SchedulerDefaults:
    """Expiry scheduler configuration."""
    INTERVAL_MINUTES = 5.0


# Cache constants
class CacheDefaults:
    """Membership cache configuration."""
    POSITIVE_TTL = 3600  # seconds
    NEGATIVE_TTL = 300  # seconds
    MAX_SIZE = 10000


# Database constants
class DatabaseDefaults:
    """Default database configuration."""
    PATH = "data/availability.sqlite"
    POOL_SIZE = 1
    BUSY_TIMEOUT = 5000  # milliseconds


# Airport data
class AirportData:
    """OurAirports CSV layout and timezone fallback."""
    CSV_PATH = "data/airports.csv"
    NAME_COLUMN = 3
    LATITUDE_COLUMN = 4
    LONGITUDE_COLUMN = 5
    IATA_COLUMN = 13
    MIN_COLUMNS = 14
    # Not a real IANA zone; handled without zoneinfo.
    FALLBACK_TIMEZONE = "Etc/UTC-12"
    FALLBACK_OFFSET_HOURS = -12


# Display
class Messages:
    """Fixed user-facing strings."""
    NO_ENTRIES = "No availability entries yet."
    SUMMARY_TITLE = "OBC One-Way Availability"
    USERNAME_REQUIRED = (
        "Sorry, you need a Telegram username (@username) to use this bot. "
        "Please set one in your Telegram settings and try again."
    )
    NOT_A_MEMBER = "Sorry, you must be a member of the OBC group to use this bot."
    ADMIN_ONLY = "This command is only available to group administrators."
    NO_ENTRIES_TO_CLEAR = "No entries to clear."
    IMPORT_USAGE = "Usage: /import\n1122 HOT / DOG @Alice\n1123 HEL / YES @Bob"
    UNEXPECTED_ERROR = "Something went wrong. Please try again later."


# Status enums
class DeletionReason(str, Enum):
    """Why an entry was soft-deleted."""
    MANUAL = "manual"
    EXPIRED = "expired"
    DUPLICATE = "duplicate"


class MemberStatus(str, Enum):
    """Chat member statuses reported by Telegram."""
    CREATOR = "creator"
    ADMINISTRATOR = "administrator"
    MEMBER = "member"
    RESTRICTED = "restricted"
    LEFT = "left"
    KICKED = "kicked"


ALLOWED_MEMBER_STATUSES = frozenset({
    MemberStatus.MEMBER.value,
    MemberStatus.ADMINISTRATOR.value,
    MemberStatus.CREATOR.value,
})

ADMIN_MEMBER_STATUSES = frozenset({
    MemberStatus.ADMINISTRATOR.value,
    MemberStatus.CREATOR.value,
})
