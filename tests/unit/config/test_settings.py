"""
Test suite for configuration settings
"""

from datetime import timezone

import pytest

from auditchain.config import settings as config_settings
from auditchain.config.settings import (
    BlockConfig,
    DevelopmentSettings,
    ProductionSettings,
    Settings,
    get_settings,
    resolve_timezone
)
from auditchain.core.exceptions import ConfigurationError


def test_block_config_defaults():
    config = BlockConfig()

    assert config.interval_minutes == 15
    assert config.block_size == 1000
    assert config.timezone is None
    assert config.interval_millis == 900_000


@pytest.mark.parametrize("kwargs", [
    {"interval_minutes": 0},
    {"interval_minutes": -5},
    {"block_size": 0},
    {"block_size": "10"},
    {"block_size": True},
    {"interval_minutes": 1.5},
])
def test_block_config_rejects_invalid_values(kwargs):
    with pytest.raises(ConfigurationError):
        BlockConfig(**kwargs)


def test_block_config_is_immutable():
    config = BlockConfig()
    with pytest.raises(AttributeError):
        config.block_size = 5


def test_block_config_from_testing_settings():
    config = BlockConfig.from_settings(config_settings.TestingSettings())

    assert config.block_size == 10
    assert config.interval_minutes == 1
    assert config.timezone is not None


def test_resolve_timezone():
    assert resolve_timezone(None) is None
    with pytest.raises(ConfigurationError):
        resolve_timezone("Nowhere/Atlantis")


@pytest.mark.parametrize("env, expected", [
    ("production", ProductionSettings),
    ("testing", config_settings.TestingSettings),
    ("development", DevelopmentSettings),
    ("anything-else", DevelopmentSettings),
])
def test_get_settings_by_environment(monkeypatch, env, expected):
    monkeypatch.setenv("AUDITCHAIN_ENV", env)
    assert type(get_settings()) is expected


def test_storage_config_shape():
    config = config_settings.TestingSettings.get_storage_config()

    assert config["backend"] == "memory"
    assert set(config) == {"backend", "scope", "state_file", "database_url", "redis"}
    assert set(config["redis"]) == {"host", "port", "db"}


def test_validate_config_accepts_defaults():
    assert config_settings.TestingSettings.validate_config() == []


def test_validate_config_reports_errors():
    class Broken(Settings):
        BLOCK_SIZE = 0
        STATE_BACKEND = "etcd"
        TIMEZONE = "Nowhere/Atlantis"

    errors = Broken.validate_config()

    assert "BLOCK_SIZE must be positive" in errors
    assert any("STATE_BACKEND" in e for e in errors)
    assert any("Nowhere/Atlantis" in e for e in errors)


def test_explicit_utc_config():
    assert BlockConfig(timezone=timezone.utc).timezone is timezone.utc
