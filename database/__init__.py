"""Database package public API."""

from .connection import SQLitePool, init_db_pool
from .migrations import run_migrations
from .models import Entry, LastMessage
from .repositories import EntryRepository, LastMessageRepository

__all__ = [
    "SQLitePool",
    "init_db_pool",
    "run_migrations",
    "Entry",
    "LastMessage",
    "EntryRepository",
    "LastMessageRepository",
]
