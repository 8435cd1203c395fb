"""Database access layer helpers."""

from __future__ import annotations

from typing import List, Optional

import aiosqlite

from database.base_repository import BaseRepository
from database.models import Entry, LastMessage


_ENTRY_COLUMNS = (
    "id, user_id, username, date, departure, arrival, original_text, "
    "created_at, expiry_timestamp, deleted_at, deletion_reason"
)


class EntryRepository(BaseRepository):
    """Repository for availability entries.

    Every read excludes soft-deleted rows. Methods that take ``conn`` run
    inside a caller-owned transaction.
    """

    @staticmethod
    async def count_active(conn: aiosqlite.Connection, user_id: int) -> int:
        cursor = await conn.execute(
            "SELECT COUNT(*) FROM entries WHERE user_id = ? AND deleted_at IS NULL",
            (user_id,)
        )
        row = await cursor.fetchone()
        return row[0] if row else 0

    @staticmethod
    async def insert(conn: aiosqlite.Connection, entry: Entry) -> int:
        cursor = await conn.execute(
            """
            INSERT INTO entries
            (user_id, username, date, departure, arrival, original_text,
             created_at, expiry_timestamp)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                entry.user_id,
                entry.username,
                entry.date,
                entry.departure,
                entry.arrival,
                entry.original_text,
                entry.created_at,
                entry.expiry_timestamp,
            )
        )
        return cursor.lastrowid

    async def get_active(self, user_id: Optional[int] = None) -> List[Entry]:
        """Active rows, optionally restricted to one user."""
        query = f"SELECT {_ENTRY_COLUMNS} FROM entries WHERE deleted_at IS NULL"
        params: tuple = ()
        if user_id is not None:
            query += " AND user_id = ?"
            params = (user_id,)
        query += " ORDER BY date, departure"
        rows = await self.fetch_all(query, params)
        return [Entry.from_row(row) for row in rows]

    async def count_all_active(self) -> int:
        value = await self.fetch_value("SELECT COUNT(*) FROM entries WHERE deleted_at IS NULL")
        return value or 0

    async def soft_delete(
        self,
        user_id: int,
        date: str,
        departure: str,
        arrival: str,
        reason: str,
        deleted_at: str,
    ) -> int:
        return await self.execute(
            """
            UPDATE entries SET deleted_at = ?, deletion_reason = ?
            WHERE user_id = ? AND date = ? AND departure = ? AND arrival = ?
              AND deleted_at IS NULL
            """,
            (deleted_at, reason, user_id, date, departure, arrival)
        )

    async def soft_delete_for_user(self, user_id: int, reason: str, deleted_at: str) -> int:
        return await self.execute(
            """
            UPDATE entries SET deleted_at = ?, deletion_reason = ?
            WHERE user_id = ? AND deleted_at IS NULL
            """,
            (deleted_at, reason, user_id)
        )

    async def soft_delete_expired(self, now_millis: int, reason: str, deleted_at: str) -> int:
        """Expire owned rows whose expiry instant is at or before ``now_millis``.

        Unclaimed imports (``user_id IS NULL``) are left in place.
        """
        return await self.execute(
            """
            UPDATE entries SET deleted_at = ?, deletion_reason = ?
            WHERE deleted_at IS NULL AND user_id IS NOT NULL
              AND expiry_timestamp <= ?
            """,
            (deleted_at, reason, now_millis)
        )

    @staticmethod
    async def get_unclaimed_ids(conn: aiosqlite.Connection, username: str) -> List[int]:
        cursor = await conn.execute(
            """
            SELECT id FROM entries
            WHERE user_id IS NULL AND LOWER(username) = LOWER(?) AND deleted_at IS NULL
            ORDER BY id
            """,
            (username,)
        )
        return [row[0] for row in await cursor.fetchall()]

    @staticmethod
    async def assign_owner(conn: aiosqlite.Connection, entry_id: int, user_id: int) -> None:
        await conn.execute("UPDATE entries SET user_id = ? WHERE id = ?", (user_id, entry_id))

    @staticmethod
    async def mark_deleted(conn: aiosqlite.Connection, entry_id: int, reason: str, deleted_at: str) -> None:
        await conn.execute(
            "UPDATE entries SET deleted_at = ?, deletion_reason = ? WHERE id = ?",
            (deleted_at, reason, entry_id)
        )

    async def get_all_rows(self) -> List[Entry]:
        """Every row including soft-deleted ones (audit trail)."""
        rows = await self.fetch_all(f"SELECT {_ENTRY_COLUMNS} FROM entries ORDER BY id")
        return [Entry.from_row(row) for row in rows]


class LastMessageRepository(BaseRepository):
    """Repository for the last summary message posted per chat."""

    async def upsert(self, chat_id: int, message_id: int, updated_at: str) -> None:
        await self.execute(
            """
            INSERT INTO last_messages (chat_id, message_id, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(chat_id) DO UPDATE SET
                message_id = excluded.message_id,
                updated_at = excluded.updated_at
            """,
            (chat_id, message_id, updated_at)
        )

    async def get(self, chat_id: int) -> Optional[LastMessage]:
        row = await self.fetch_one(
            "SELECT chat_id, message_id, updated_at FROM last_messages WHERE chat_id = ?",
            (chat_id,)
        )
        if row is None:
            return None
        return LastMessage(chat_id=row["chat_id"], message_id=row["message_id"], updated_at=row["updated_at"])

    async def delete(self, chat_id: int) -> None:
        await self.execute("DELETE FROM last_messages WHERE chat_id = ?", (chat_id,))
