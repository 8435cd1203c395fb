"""Performance monitoring utilities using Prometheus metrics."""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Iterator

import psutil
from prometheus_client import Counter, Gauge, Histogram


commands_total = Counter(
    "bot_commands_total", "Total number of commands processed", labelnames=("command", "status")
)
errors_total = Counter("bot_errors_total", "Total number of errors", labelnames=("type",))
database_operations_total = Counter(
    "bot_database_operations_total",
    "Total number of database operations",
    labelnames=("operation", "status"),
)
api_calls_total = Counter(
    "bot_api_calls_total", "Total number of Telegram API calls", labelnames=("method", "status")
)
entries_expired_total = Counter(
    "bot_entries_expired_total", "Total number of entries expired and removed"
)
entries_active = Gauge("bot_entries_active", "Current number of active entries in database")
command_duration = Histogram(
    "bot_command_duration_seconds",
    "Command processing time in seconds",
    labelnames=("command",),
    buckets=(0.01, 0.05, 0.1, 0.5, 1, 2, 5),
)
database_query_duration = Histogram(
    "bot_database_query_duration_seconds",
    "Database query duration in seconds",
    labelnames=("operation",),
    buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5),
)
cache_total = Counter("bot_cache_total", "Cache hits and misses", labelnames=("result",))


@contextmanager
def track_command(command: str) -> Iterator[None]:
    start = time.perf_counter()
    try:
        yield
    finally:
        command_duration.labels(command=command).observe(time.perf_counter() - start)


@contextmanager
def track_query(operation: str) -> Iterator[None]:
    start = time.perf_counter()
    try:
        yield
    finally:
        database_query_duration.labels(operation=operation).observe(time.perf_counter() - start)


def gather_host_metrics() -> dict:
    process = psutil.Process()
    memory_info = process.memory_info()
    return {
        "memory_rss": memory_info.rss,
        "cpu_percent": process.cpu_percent(interval=None),
    }
