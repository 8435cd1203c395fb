"""Tests for environment-driven configuration."""

import pytest

from config import load_config
from core.exceptions import ConfigurationError

CONFIG_VARS = (
    "BOT_TOKEN",
    "GROUP_ID",
    "TOPIC_ID",
    "DATABASE_PATH",
    "DB_POOL_SIZE",
    "EXPIRY_INTERVAL_MINUTES",
    "MAX_ENTRIES_PER_USER",
    "METRICS_ENABLED",
    "METRICS_PORT",
    "LOG_LEVEL",
    "LOG_FILE",
)


@pytest.fixture
def env(monkeypatch, tmp_path):
    for name in CONFIG_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("GROUP_ID", "-1001234567890")
    monkeypatch.setenv("TOPIC_ID", "42")
    env_file = tmp_path / ".env"
    env_file.write_text("")
    return str(env_file)


def test_defaults(env):
    config = load_config(env)

    assert config.group_id == -1001234567890
    assert config.topic_id == 42
    assert config.database_path == "data/availability.sqlite"
    assert config.expiry_interval_minutes == 5.0
    assert config.max_entries_per_user == 3
    assert config.membership_positive_ttl == 3600
    assert config.membership_negative_ttl == 300
    assert config.metrics_enabled is True
    assert config.log_file == "logs/app.log"


def test_overrides(env, monkeypatch):
    monkeypatch.setenv("EXPIRY_INTERVAL_MINUTES", "0.5")
    monkeypatch.setenv("MAX_ENTRIES_PER_USER", "5")
    monkeypatch.setenv("METRICS_ENABLED", "false")
    monkeypatch.setenv("LOG_FILE", "")

    config = load_config(env)

    assert config.expiry_interval_minutes == 0.5
    assert config.max_entries_per_user == 5
    assert config.metrics_enabled is False
    assert config.log_file is None


def test_malformed_numbers_fall_back(env, monkeypatch):
    monkeypatch.setenv("DB_POOL_SIZE", "many")
    monkeypatch.setenv("EXPIRY_INTERVAL_MINUTES", "soon")

    config = load_config(env)

    assert config.db_pool_size == 1
    assert config.expiry_interval_minutes == 5.0


@pytest.mark.parametrize("name", ["GROUP_ID", "TOPIC_ID"])
def test_missing_target_chat(env, monkeypatch, name):
    monkeypatch.delenv(name)

    with pytest.raises(ConfigurationError, match=name):
        load_config(env)


@pytest.mark.parametrize("value", ["0", "abc", ""])
def test_invalid_group_id(env, monkeypatch, value):
    monkeypatch.setenv("GROUP_ID", value)

    with pytest.raises(ConfigurationError, match="GROUP_ID"):
        load_config(env)


def test_env_file_is_loaded(env, monkeypatch, tmp_path):
    # Registered first so teardown removes what load_dotenv sets
    monkeypatch.setenv("BOT_TOKEN", "")
    monkeypatch.delenv("BOT_TOKEN")
    monkeypatch.delenv("TOPIC_ID")
    env_file = tmp_path / "custom.env"
    env_file.write_text("TOPIC_ID=7\nBOT_TOKEN=123:abc\n")

    config = load_config(str(env_file))

    assert config.topic_id == 7
    assert config.bot_token == "123:abc"
