"""
Configuration settings for the AuditChain ledger.

This module provides configuration management for block creation: the size and
time triggers, the time zone used to render block timestamps, the chain state
backend and the block output directory. Settings are read from environment
variables and can be specialised per environment (development, production,
testing).

`BlockConfig` is the validated value object handed to the block controller on
every invocation.
"""

import os
from dataclasses import dataclass
from datetime import tzinfo
from typing import Dict, Any, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from auditchain.core.exceptions import ConfigurationError

STATE_BACKENDS = ["memory", "file", "redis", "sql"]


class Settings:
    """Ledger configuration settings"""

    FRAMEWORK_NAME = "auditchain"

    # Block creation triggers
    BLOCK_INTERVAL_MINUTES = int(os.getenv("AUDITCHAIN_INTERVAL", "15"))
    BLOCK_SIZE = int(os.getenv("AUDITCHAIN_BLOCKSIZE", "1000"))  # pending events
    TIMEZONE = os.getenv("AUDITCHAIN_TIMEZONE") or None  # None = system local time

    # Chain state storage
    STATE_BACKEND = os.getenv("AUDITCHAIN_STATE_BACKEND", "file")
    STATE_SCOPE = os.getenv("AUDITCHAIN_STATE_SCOPE", "default")
    STATE_FILE = os.getenv("AUDITCHAIN_STATE_FILE", "data/chain_state.json")
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///auditchain.db")
    REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
    REDIS_PORT = int(os.getenv("REDIS_PORT", "6379"))
    REDIS_DB = int(os.getenv("REDIS_DB", "0"))
    REDIS_EVENTS_KEY = os.getenv("AUDITCHAIN_REDIS_EVENTS_KEY", "auditchain:events")

    # Block output
    OUTPUT_DIR = os.getenv("AUDITCHAIN_OUTPUT_DIR", "data/blocks")

    # Host scheduling
    SCHEDULER_PERIOD_SECONDS = 1.0

    # Logging settings
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @classmethod
    def get_storage_config(cls) -> Dict[str, Any]:
        """Get chain state storage configuration"""
        return {
            "backend": cls.STATE_BACKEND,
            "scope": cls.STATE_SCOPE,
            "state_file": cls.STATE_FILE,
            "database_url": cls.DATABASE_URL,
            "redis": {
                "host": cls.REDIS_HOST,
                "port": cls.REDIS_PORT,
                "db": cls.REDIS_DB
            }
        }

    @classmethod
    def get_block_config(cls) -> Dict[str, Any]:
        """Get block trigger configuration"""
        return {
            "interval": cls.BLOCK_INTERVAL_MINUTES,
            "blocksize": cls.BLOCK_SIZE,
            "timezone": cls.TIMEZONE
        }

    @classmethod
    def validate_config(cls) -> List[str]:
        """Validate configuration and return list of errors"""
        errors = []

        if cls.BLOCK_INTERVAL_MINUTES <= 0:
            errors.append("BLOCK_INTERVAL_MINUTES must be positive")

        if cls.BLOCK_SIZE <= 0:
            errors.append("BLOCK_SIZE must be positive")

        if cls.STATE_BACKEND not in STATE_BACKENDS:
            errors.append(f"STATE_BACKEND must be one of: {', '.join(STATE_BACKENDS)}")

        if cls.SCHEDULER_PERIOD_SECONDS <= 0:
            errors.append("SCHEDULER_PERIOD_SECONDS must be positive")

        if cls.TIMEZONE is not None:
            try:
                resolve_timezone(cls.TIMEZONE)
            except ConfigurationError as e:
                errors.append(str(e))

        return errors


# Environment-specific settings
class DevelopmentSettings(Settings):
    """Development environment settings"""
    LOG_LEVEL = "DEBUG"
    STATE_BACKEND = "file"


class ProductionSettings(Settings):
    """Production environment settings"""
    LOG_LEVEL = "WARNING"
    STATE_BACKEND = "redis"


class TestingSettings(Settings):
    """Testing environment settings"""
    LOG_LEVEL = "DEBUG"
    STATE_BACKEND = "memory"
    BLOCK_SIZE = 10  # Smaller blocks for testing
    BLOCK_INTERVAL_MINUTES = 1
    TIMEZONE = "UTC"


def get_settings() -> Settings:
    """Get settings based on environment variable"""
    env = os.getenv("AUDITCHAIN_ENV", "development").lower()

    if env == "production":
        return ProductionSettings()
    elif env == "testing":
        return TestingSettings()
    else:
        return DevelopmentSettings()


def resolve_timezone(name: Optional[str]) -> Optional[tzinfo]:
    """
    Resolve an IANA time zone name.

    Args:
        name: Zone name such as "Europe/Brussels", or None for system local time

    Returns:
        tzinfo instance, or None for system local time
    """
    if name is None:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigurationError(f"Unknown time zone '{name}'") from e


@dataclass(frozen=True)
class BlockConfig:
    """
    Per-invocation block creation options.

    Attributes:
        interval_minutes: Elapsed time (minutes) after which a block is sealed
            even if the size threshold was not exceeded
        block_size: Pending-event count that must be exceeded to seal a block
        timezone: Time zone for rendered timestamps (None = system local time)
    """
    interval_minutes: int = 15
    block_size: int = 1000
    timezone: Optional[tzinfo] = None

    def __post_init__(self):
        for name in ("interval_minutes", "block_size"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(f"{name} must be an integer, got {value!r}")
            if value <= 0:
                raise ConfigurationError(f"{name} must be positive, got {value}")

    @property
    def interval_millis(self) -> int:
        return self.interval_minutes * 60_000

    @classmethod
    def from_settings(cls, settings: Settings) -> "BlockConfig":
        """Build a validated config from a Settings object."""
        return cls(
            interval_minutes=settings.BLOCK_INTERVAL_MINUTES,
            block_size=settings.BLOCK_SIZE,
            timezone=resolve_timezone(settings.TIMEZONE)
        )


settings = get_settings()
