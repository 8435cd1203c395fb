"""Application-wide exception classes."""

from __future__ import annotations

from typing import Optional


class ApplicationError(Exception):
    """Base exception for all application errors."""
    pass


class ConfigurationError(ApplicationError):
    """Raised when configuration is invalid."""
    pass


class DatabaseError(ApplicationError):
    """Base exception for database-related errors."""
    pass


class ConnectionPoolError(DatabaseError):
    """Raised when database connection pool has issues."""
    pass


class TransportError(ApplicationError):
    """Raised when the chat transport fails to deliver a message."""
    pass


class EntryError(ApplicationError):
    """Base class for rejected entry operations.

    Every subclass is a distinct category the command layer can branch on
    without inspecting message text. ``shows_entries`` marks the categories
    whose reply should include the user's current entries.
    """

    kind: str = "entry_error"
    shows_entries: bool = False

    def __init__(self, original_text: Optional[str] = None, detail: Optional[str] = None) -> None:
        self.original_text = original_text
        self.detail = detail
        super().__init__(self.user_message)

    @property
    def user_message(self) -> str:
        return self.detail or "Unknown error"


class QuotaExceededError(EntryError):
    """Raised when a user already holds the maximum number of active entries."""

    kind = "quota_exceeded"
    shows_entries = True

    def __init__(self, original_text: Optional[str] = None, limit: int = 3) -> None:
        self.limit = limit
        super().__init__(original_text)

    @property
    def user_message(self) -> str:
        return f'Maximum {self.limit} entries per user allowed: "{self.original_text}"'


class DuplicateEntryError(EntryError):
    """Raised when the same active (user, date, departure, arrival) exists."""

    kind = "duplicate_entry"
    shows_entries = True

    @property
    def user_message(self) -> str:
        return f'Entry already exists: "{self.original_text}"'


class EntryNotFoundError(EntryError):
    """Raised when a removal matches no active entry."""

    kind = "not_found"

    def __init__(self, original_text: Optional[str] = None, date_code: Optional[str] = None) -> None:
        self.date_code = date_code
        super().__init__(original_text)

    @property
    def user_message(self) -> str:
        if self.date_code:
            return f"No entries found for {self.date_code}."
        return "Entry not found. Make sure the date and airports match exactly."


class AmbiguousEntryError(EntryError):
    """Raised when a date-only removal matches more than one entry."""

    kind = "ambiguous"
    shows_entries = True

    def __init__(self, original_text: Optional[str] = None, date_code: Optional[str] = None) -> None:
        self.date_code = date_code
        super().__init__(original_text)

    @property
    def user_message(self) -> str:
        return f"Multiple entries found for {self.date_code}. Please specify departure and arrival."


class StorageFaultError(EntryError, DatabaseError):
    """Raised when persistence fails unexpectedly."""

    kind = "storage_fault"

    @property
    def user_message(self) -> str:
        return "Database error"
