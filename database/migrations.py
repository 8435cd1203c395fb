"""Database schema migrations."""

from __future__ import annotations

from .connection import SQLitePool


SCHEMA_SQL: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS entries (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id INTEGER,
        username TEXT NOT NULL,
        date TEXT NOT NULL,
        departure TEXT NOT NULL,
        arrival TEXT NOT NULL,
        original_text TEXT NOT NULL,
        created_at TEXT NOT NULL,
        expiry_timestamp INTEGER NOT NULL,
        deleted_at TEXT DEFAULT NULL,
        deletion_reason TEXT DEFAULT NULL
    );
    """,
    # Uniqueness only among active rows that belong to a real user
    """
    CREATE UNIQUE INDEX IF NOT EXISTS idx_entries_unique_active
    ON entries(user_id, date, departure, arrival)
    WHERE deleted_at IS NULL AND user_id IS NOT NULL;
    """,
    "CREATE INDEX IF NOT EXISTS idx_entries_active_user ON entries(user_id, deleted_at);",
    "CREATE INDEX IF NOT EXISTS idx_entries_expiry ON entries(deleted_at, expiry_timestamp);",
    "CREATE INDEX IF NOT EXISTS idx_entries_username ON entries(LOWER(username)) WHERE user_id IS NULL;",
    """
    CREATE TABLE IF NOT EXISTS last_messages (
        chat_id INTEGER PRIMARY KEY,
        message_id INTEGER NOT NULL,
        updated_at TEXT NOT NULL
    );
    """,
)


async def run_migrations(pool: SQLitePool) -> None:
    """Create tables and indexes if they do not exist yet."""
    async with pool.connection() as conn:
        for statement in SCHEMA_SQL:
            await conn.execute(statement)
        await conn.commit()
