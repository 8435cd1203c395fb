"""Services package."""

from .airport_timezone import AirportInfo, AirportTimezoneResolver
from .entry_parser import EntryParser, ParseError, ParseResult
from .entry_store import AddResult, EntryStore
from .expiry_scheduler import ExpiryScheduler
from .membership_cache import MembershipCache
from .publisher import SummaryPublisher

__all__ = [
    "AirportInfo",
    "AirportTimezoneResolver",
    "EntryParser",
    "ParseError",
    "ParseResult",
    "AddResult",
    "EntryStore",
    "ExpiryScheduler",
    "MembershipCache",
    "SummaryPublisher",
]
