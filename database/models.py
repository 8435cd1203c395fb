"""Data access layer models implemented with handcrafted queries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from utils.dates import to_mmdd


@dataclass(slots=True)
class Entry:
    """One user's availability claim."""

    user_id: Optional[int]
    username: str
    date: str  # YYYY-MM-DD
    departure: str
    arrival: str
    original_text: str
    expiry_timestamp: int  # epoch milliseconds
    id: Optional[int] = None
    created_at: Optional[str] = None
    deleted_at: Optional[str] = None
    deletion_reason: Optional[str] = None

    @property
    def mmdd(self) -> str:
        return to_mmdd(self.date)

    @property
    def route(self) -> str:
        return f"{self.mmdd} {self.departure} / {self.arrival}"

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Entry":
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            username=row["username"],
            date=row["date"],
            departure=row["departure"],
            arrival=row["arrival"],
            original_text=row["original_text"],
            expiry_timestamp=row["expiry_timestamp"],
            created_at=row["created_at"],
            deleted_at=row["deleted_at"],
            deletion_reason=row["deletion_reason"],
        )


@dataclass(slots=True)
class LastMessage:
    chat_id: int
    message_id: int
    updated_at: Optional[str] = None
