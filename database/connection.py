"""SQLite connection pool for the entry store."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, List

import aiosqlite

from core.exceptions import ConnectionPoolError

MEMORY_DATABASE = ":memory:"


class SQLitePool:
    """Small fixed-size pool of aiosqlite connections.

    Each ``:memory:`` connection is its own database, so an in-memory pool
    is always a single connection.
    """

    def __init__(self, database_path: str, pool_size: int = 1, busy_timeout_ms: int = 5000) -> None:
        self.database_path = database_path
        self.in_memory = database_path == MEMORY_DATABASE
        self.pool_size = 1 if self.in_memory else max(1, pool_size)
        self.busy_timeout_ms = busy_timeout_ms
        self._connections: List[aiosqlite.Connection] = []
        self._idle: asyncio.Queue[aiosqlite.Connection] = asyncio.Queue()
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def init_pool(self) -> None:
        if self._initialized:
            return

        if not self.in_memory:
            Path(self.database_path).parent.mkdir(parents=True, exist_ok=True)

        for _ in range(self.pool_size):
            conn = await aiosqlite.connect(self.database_path)
            conn.row_factory = aiosqlite.Row
            await self._apply_pragma(conn)
            self._connections.append(conn)
            self._idle.put_nowait(conn)

        self._initialized = True

    async def close(self) -> None:
        while self._connections:
            conn = self._connections.pop()
            await conn.close()
        self._idle = asyncio.Queue()
        self._initialized = False

    async def _apply_pragma(self, conn: aiosqlite.Connection) -> None:
        if not self.in_memory:
            await conn.execute("PRAGMA journal_mode=WAL")
        await conn.execute("PRAGMA synchronous=NORMAL")
        await conn.execute("PRAGMA temp_store=MEMORY")
        await conn.execute(f"PRAGMA busy_timeout={int(self.busy_timeout_ms)}")

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[aiosqlite.Connection]:
        if not self._initialized:
            await self.init_pool()
        if not self._connections:
            raise ConnectionPoolError("Database pool has no connections")
        conn = await self._idle.get()
        try:
            yield conn
        finally:
            self._idle.put_nowait(conn)


async def init_db_pool(database_path: str, pool_size: int = 1, busy_timeout_ms: int = 5000) -> SQLitePool:
    pool = SQLitePool(database_path=database_path, pool_size=pool_size, busy_timeout_ms=busy_timeout_ms)
    await pool.init_pool()
    return pool
