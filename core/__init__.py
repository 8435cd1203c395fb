"""Core application components."""

# Import in correct order to avoid circular dependencies
from core.logger import setup_logger, get_logger
from core.constants import (
    TelegramLimits,
    EntryLimits,
    SchedulerDefaults,
    CacheDefaults,
    DatabaseDefaults,
    AirportData,
    Messages,
    DeletionReason,
    MemberStatus,
)
from core.exceptions import (
    ApplicationError,
    ConfigurationError,
    DatabaseError,
    ConnectionPoolError,
    TransportError,
    EntryError,
    QuotaExceededError,
    DuplicateEntryError,
    EntryNotFoundError,
    AmbiguousEntryError,
    StorageFaultError,
)

__all__ = [
    # Logging
    'setup_logger',
    'get_logger',
    # Constants
    'TelegramLimits',
    'EntryLimits',
    'SchedulerDefaults',
    'CacheDefaults',
    'DatabaseDefaults',
    'AirportData',
    'Messages',
    'DeletionReason',
    'MemberStatus',
    # Exceptions
    'ApplicationError',
    'ConfigurationError',
    'DatabaseError',
    'ConnectionPoolError',
    'TransportError',
    'EntryError',
    'QuotaExceededError',
    'DuplicateEntryError',
    'EntryNotFoundError',
    'AmbiguousEntryError',
    'StorageFaultError',
]
