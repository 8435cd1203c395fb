"""Entry store: the single authority on entry invariants.

Enforces the per-user quota and uniqueness of active entries, soft-deletes
instead of removing rows, attributes imported rows to users on first
contact and remembers the last summary message posted per chat.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import cmp_to_key
from typing import List, Optional

import aiosqlite

from core.constants import DeletionReason, EntryLimits, Messages
from core.exceptions import (
    DuplicateEntryError,
    EntryError,
    QuotaExceededError,
    StorageFaultError,
)
from database.connection import SQLitePool
from database.models import Entry, LastMessage
from database.repositories import EntryRepository, LastMessageRepository
from utils.dates import Clock, compare_dates, to_iso, to_millis, utc_now
from utils.metrics import (
    database_operations_total,
    entries_active,
    entries_expired_total,
    errors_total,
    track_query,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AddResult:
    error: Optional[EntryError] = None

    @property
    def success(self) -> bool:
        return self.error is None


def compare_entries(a: Entry, b: Entry) -> int:
    """Date ascending, then departure code ascending."""
    if a.date != b.date:
        return compare_dates(a.date, b.date)
    return (a.departure > b.departure) - (a.departure < b.departure)


def sort_entries(entries: List[Entry]) -> List[Entry]:
    return sorted(entries, key=cmp_to_key(compare_entries))


def format_entry_line(entry: Entry) -> str:
    return f"{entry.route} @{entry.username}"


def format_listing(entries: List[Entry]) -> str:
    """Canonical rendering of a listing; the sentinel when empty."""
    if not entries:
        return Messages.NO_ENTRIES
    return "\n".join(format_entry_line(entry) for entry in sort_entries(entries))


class EntryStore:
    """Persistence and invariant enforcement for availability entries."""

    def __init__(
        self,
        pool: SQLitePool,
        clock: Clock = utc_now,
        max_entries_per_user: int = EntryLimits.MAX_ENTRIES_PER_USER,
    ) -> None:
        self.pool = pool
        self.entries = EntryRepository(pool)
        self.last_messages = LastMessageRepository(pool)
        self.max_entries_per_user = max_entries_per_user
        self._clock = clock

    def _now_iso(self) -> str:
        return to_iso(self._clock())

    async def _refresh_active_gauge(self) -> None:
        entries_active.set(await self.entries.count_all_active())

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    async def add(self, entry: Entry) -> AddResult:
        """Insert an entry, enforcing quota and uniqueness atomically.

        Entries without a user (imports) skip the quota check. Expired rows
        are swept first so they count toward neither quota nor uniqueness.
        """
        if entry.created_at is None:
            entry.created_at = self._now_iso()

        try:
            await self.cleanup_expired()
        except StorageFaultError:
            database_operations_total.labels(operation="add", status="error").inc()
            return AddResult(error=StorageFaultError(entry.original_text))

        try:
            with track_query("add"):
                async with self.entries.transaction() as conn:
                    if entry.user_id is not None:
                        count = await self.entries.count_active(conn, entry.user_id)
                        if count >= self.max_entries_per_user:
                            raise QuotaExceededError(entry.original_text, limit=self.max_entries_per_user)
                    entry.id = await self.entries.insert(conn, entry)
        except QuotaExceededError as e:
            database_operations_total.labels(operation="add", status="error").inc()
            logger.debug(f"Quota reached for user {entry.user_id}: {entry.original_text!r}")
            return AddResult(error=e)
        except aiosqlite.IntegrityError as e:
            database_operations_total.labels(operation="add", status="error").inc()
            if "UNIQUE" in str(e).upper():
                logger.debug(f"Duplicate entry rejected for user {entry.user_id}: {entry.original_text!r}")
                return AddResult(error=DuplicateEntryError(entry.original_text))
            errors_total.labels(type="database_error").inc()
            logger.error(f"Integrity error adding entry for user {entry.user_id}: {e}", exc_info=True)
            return AddResult(error=StorageFaultError(entry.original_text))
        except aiosqlite.Error as e:
            database_operations_total.labels(operation="add", status="error").inc()
            errors_total.labels(type="database_error").inc()
            logger.error(f"Database error adding entry for user {entry.user_id}: {e}", exc_info=True)
            return AddResult(error=StorageFaultError(entry.original_text))

        database_operations_total.labels(operation="add", status="success").inc()
        logger.debug(
            f"Entry added: user={entry.user_id} username={entry.username} "
            f"{entry.date} {entry.departure}-{entry.arrival}"
        )
        await self._refresh_active_gauge()
        return AddResult()

    async def remove(
        self,
        user_id: int,
        date: str,
        departure: str,
        arrival: str,
        reason: DeletionReason = DeletionReason.MANUAL,
    ) -> bool:
        """Soft-delete the user's matching active entry; ``True`` if one was affected."""
        changed = await self._write(
            "remove",
            self.entries.soft_delete(
                user_id, date, departure.upper(), arrival.upper(), reason.value, self._now_iso()
            ),
        )
        if changed:
            logger.debug(f"Entry removed: user={user_id} {date} {departure}-{arrival} reason={reason.value}")
            await self._refresh_active_gauge()
        return changed > 0

    async def clear_all(self, user_id: int) -> int:
        """Soft-delete all of a user's active entries; returns the count."""
        count = await self._write(
            "clear",
            self.entries.soft_delete_for_user(user_id, DeletionReason.MANUAL.value, self._now_iso()),
        )
        if count:
            await self._refresh_active_gauge()
        logger.debug(f"Cleared {count} entries for user {user_id}")
        return count

    async def cleanup_expired(self) -> int:
        """Soft-delete owned entries whose expiry instant has passed."""
        now = self._clock()
        count = await self._write(
            "cleanup_expired",
            self.entries.soft_delete_expired(to_millis(now), DeletionReason.EXPIRED.value, to_iso(now)),
        )
        if count:
            entries_expired_total.inc(count)
            await self._refresh_active_gauge()
        return count

    async def claim_imports(self, user_id: int, username: str) -> int:
        """Attribute unclaimed imported rows with a matching username to ``user_id``.

        Claimed rows may push the user above the quota; only later adds are
        affected. A claimed row identical to one the user already holds is
        soft-deleted as a duplicate instead.
        """
        claimed = 0
        try:
            with track_query("claim_imports"):
                async with self.entries.transaction() as conn:
                    for entry_id in await self.entries.get_unclaimed_ids(conn, username):
                        try:
                            await self.entries.assign_owner(conn, entry_id, user_id)
                            claimed += 1
                        except aiosqlite.IntegrityError:
                            await self.entries.mark_deleted(
                                conn, entry_id, DeletionReason.DUPLICATE.value, self._now_iso()
                            )
        except aiosqlite.Error as e:
            database_operations_total.labels(operation="claim_imports", status="error").inc()
            errors_total.labels(type="database_error").inc()
            logger.error(f"Database error claiming imports for {username}: {e}", exc_info=True)
            raise StorageFaultError() from e

        database_operations_total.labels(operation="claim_imports", status="success").inc()
        if claimed:
            logger.info(f"Claimed {claimed} imported entries for @{username} ({user_id})")
        return claimed

    async def _write(self, operation: str, statement) -> int:
        try:
            with track_query(operation):
                count = await statement
        except aiosqlite.Error as e:
            database_operations_total.labels(operation=operation, status="error").inc()
            errors_total.labels(type="database_error").inc()
            logger.error(f"Database error in {operation}: {e}", exc_info=True)
            raise StorageFaultError() from e
        database_operations_total.labels(operation=operation, status="success").inc()
        return count

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    async def list_active(self, user_id: Optional[int] = None) -> List[Entry]:
        """Active, unexpired entries sorted by date then departure.

        Runs an expiry sweep first so stale rows never leak through a read,
        even between scheduler runs.
        """
        await self.cleanup_expired()
        now_millis = to_millis(self._clock())
        try:
            with track_query("list_active"):
                rows = await self.entries.get_active(user_id)
        except aiosqlite.Error as e:
            database_operations_total.labels(operation="list_active", status="error").inc()
            errors_total.labels(type="database_error").inc()
            logger.error(f"Database error listing entries: {e}", exc_info=True)
            raise StorageFaultError() from e
        database_operations_total.labels(operation="list_active", status="success").inc()
        # Unclaimed imports are not expired by the sweep but are hidden once past
        return sort_entries([row for row in rows if row.expiry_timestamp > now_millis])

    async def count_active(self, user_id: int) -> int:
        return len(await self.list_active(user_id))

    async def format_entries(self) -> str:
        return format_listing(await self.list_active())

    async def audit_trail(self) -> List[Entry]:
        """All rows ever stored, soft-deleted ones included."""
        return await self.entries.get_all_rows()

    # ------------------------------------------------------------------
    # Last published message
    # ------------------------------------------------------------------
    async def set_last_message(self, chat_id: int, message_id: int) -> None:
        await self._write_last("set_last_message", self.last_messages.upsert(chat_id, message_id, self._now_iso()))

    async def get_last_message(self, chat_id: int) -> Optional[LastMessage]:
        try:
            return await self.last_messages.get(chat_id)
        except aiosqlite.Error as e:
            logger.error(f"Database error reading last message for {chat_id}: {e}", exc_info=True)
            raise StorageFaultError() from e

    async def clear_last_message(self, chat_id: int) -> None:
        await self._write_last("clear_last_message", self.last_messages.delete(chat_id))

    async def _write_last(self, operation: str, statement) -> None:
        try:
            await statement
        except aiosqlite.Error as e:
            errors_total.labels(type="database_error").inc()
            logger.error(f"Database error in {operation}: {e}", exc_info=True)
            raise StorageFaultError() from e

    async def ping(self) -> bool:
        """Cheap responsiveness probe for health checks."""
        await self.entries.fetch_value("SELECT 1")
        return True
