"""Base repository pattern for database operations."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, List, Optional, Sequence

import aiosqlite

from database.connection import SQLitePool


class BaseRepository:
    """Base repository with common database operations."""

    def __init__(self, pool: SQLitePool) -> None:
        self.pool = pool

    async def execute(self, query: str, params: Sequence[Any] = ()) -> int:
        """Execute a write query and return the number of affected rows."""
        async with self.pool.connection() as conn:
            try:
                cursor = await conn.execute(query, params)
                await conn.commit()
            except Exception:
                await conn.rollback()
                raise
            return cursor.rowcount

    async def fetch_one(self, query: str, params: Sequence[Any] = ()) -> Optional[aiosqlite.Row]:
        """Fetch a single row."""
        async with self.pool.connection() as conn:
            cursor = await conn.execute(query, params)
            return await cursor.fetchone()

    async def fetch_all(self, query: str, params: Sequence[Any] = ()) -> List[aiosqlite.Row]:
        """Fetch all rows."""
        async with self.pool.connection() as conn:
            cursor = await conn.execute(query, params)
            return list(await cursor.fetchall())

    async def fetch_value(self, query: str, params: Sequence[Any] = ()) -> Optional[Any]:
        """Fetch a single value from a single row."""
        row = await self.fetch_one(query, params)
        return row[0] if row else None

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """Hold the write lock for several statements.

        ``BEGIN IMMEDIATE`` takes the lock before the first read, so a
        count followed by an insert cannot interleave with another writer.
        """
        async with self.pool.connection() as conn:
            await conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                await conn.rollback()
                raise
            else:
                await conn.commit()
