"""Application configuration module.

Reads settings from environment variables with sane defaults. The target
group and topic have no defaults: the bot refuses to start without them.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from core.constants import (
    AirportData,
    CacheDefaults,
    DatabaseDefaults,
    EntryLimits,
    Messages,
    SchedulerDefaults,
)
from core.exceptions import ConfigurationError


def _get_bool(name: str, default: bool = False) -> bool:
    """Get boolean from environment variable."""
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "on"}


def _get_int(name: str, default: int) -> int:
    """Get integer from environment variable with fallback."""
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float(name: str, default: float) -> float:
    """Get float from environment variable with fallback."""
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_str(name: str, default: str = "") -> str:
    """Get string from environment variable."""
    return os.getenv(name, default)


def _get_required_id(name: str) -> int:
    """Get a mandatory non-zero chat identifier."""
    raw = os.getenv(name, "").strip()
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} environment variable is required") from None
    if value == 0:
        raise ConfigurationError(f"{name} environment variable is required")
    return value


@dataclass(frozen=True)
class Config:
    bot_token: str
    group_id: int
    topic_id: int
    database_path: str
    db_pool_size: int
    db_busy_timeout: int
    airports_csv_path: str
    expiry_interval_minutes: float
    membership_positive_ttl: int
    membership_negative_ttl: int
    max_entries_per_user: int
    summary_title: str
    metrics_enabled: bool
    metrics_host: str
    metrics_port: int
    log_level: str
    log_file: Optional[str]


def load_config(env_file: Optional[str] = None) -> Config:
    """Load application configuration from environment variables.

    Returns:
        Config: Application configuration with validated values

    Raises:
        ConfigurationError: If GROUP_ID or TOPIC_ID is missing or invalid
    """
    load_dotenv(env_file)

    return Config(
        bot_token=_get_str("BOT_TOKEN"),
        group_id=_get_required_id("GROUP_ID"),
        topic_id=_get_required_id("TOPIC_ID"),
        database_path=_get_str("DATABASE_PATH", DatabaseDefaults.PATH),
        db_pool_size=_get_int("DB_POOL_SIZE", DatabaseDefaults.POOL_SIZE),
        db_busy_timeout=_get_int("DB_BUSY_TIMEOUT", DatabaseDefaults.BUSY_TIMEOUT),
        airports_csv_path=_get_str("AIRPORTS_CSV_PATH", AirportData.CSV_PATH),
        expiry_interval_minutes=_get_float(
            "EXPIRY_INTERVAL_MINUTES", SchedulerDefaults.INTERVAL_MINUTES
        ),
        membership_positive_ttl=_get_int("MEMBERSHIP_CACHE_POSITIVE_TTL", CacheDefaults.POSITIVE_TTL),
        membership_negative_ttl=_get_int("MEMBERSHIP_CACHE_NEGATIVE_TTL", CacheDefaults.NEGATIVE_TTL),
        max_entries_per_user=_get_int("MAX_ENTRIES_PER_USER", EntryLimits.MAX_ENTRIES_PER_USER),
        summary_title=_get_str("SUMMARY_TITLE", Messages.SUMMARY_TITLE),
        metrics_enabled=_get_bool("METRICS_ENABLED", True),
        metrics_host=_get_str("METRICS_HOST", "0.0.0.0"),
        metrics_port=_get_int("METRICS_PORT", 9090),
        log_level=_get_str("LOG_LEVEL", "INFO"),
        log_file=_get_str("LOG_FILE", "logs/app.log") or None,
    )
