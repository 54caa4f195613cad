"""
Service configuration loaded from environment variables.

Uses Pydantic BaseSettings for automatic env var loading and validation.
All configuration values come from environment variables or .env files;
no hardcoded URLs or credentials.

CHANGELOG:
- 2026-10-17: Initial creation

TODO:
- None
"""

from __future__ import annotations

import datetime
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings

from pqmonitor.core.thresholds import Thresholds

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


class Settings(BaseSettings):
    """Power-quality service configuration.

    Attributes:
        database_url: Async SQLAlchemy URL (postgresql+asyncpg://...).
        redis_url: Redis URL for the latest-sample cache.
        api_tokens: Bearer tokens for write endpoints ("token:client,...").
        timezone: IANA zone that defines calendar days for aggregation.
        sampling_interval_s: Nominal sensor sampling interval, used as the
            denominator of data completeness.
        store_invalid_samples: Persist samples that fail validation, flagged
            ``is_valid=false``.
        aggregate_invalid_samples: Include samples flagged ``is_valid=false``
            in daily stats. When True, samples with validation errors still
            feed the event counters.
        aggregation_scheduler_enabled: Run the daily trigger in the API process.
        aggregation_run_time: Local time of the daily trigger, HH:MM.
        cache_ttl_s: Latest-sample cache TTL in seconds.
        nominal_voltage_v: Declared supply voltage.
        nominal_frequency_hz: Declared supply frequency.
        log_level: Root log level.
    """

    database_url: str
    redis_url: str
    api_tokens: str
    timezone: str = "UTC"
    sampling_interval_s: float = 3.0
    store_invalid_samples: bool = True
    aggregate_invalid_samples: bool = True
    aggregation_scheduler_enabled: bool = True
    aggregation_run_time: str = "00:05"
    cache_ttl_s: int = 5
    nominal_voltage_v: float = 230.0
    nominal_frequency_hz: float = 50.0
    log_level: str = "INFO"

    @field_validator("timezone")
    @classmethod
    def timezone_must_exist(cls, v: str) -> str:
        """Validate that TIMEZONE names a known IANA zone."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"TIMEZONE '{v}' is not a known IANA time zone") from None
        return v

    @field_validator("sampling_interval_s")
    @classmethod
    def sampling_interval_must_be_positive(cls, v: float) -> float:
        """Validate the sampling interval is > 0."""
        if v <= 0:
            raise ValueError("SAMPLING_INTERVAL_S must be > 0")
        return v

    @field_validator("aggregation_run_time")
    @classmethod
    def run_time_must_be_hh_mm(cls, v: str) -> str:
        """Validate AGGREGATION_RUN_TIME is a valid HH:MM time."""
        try:
            datetime.datetime.strptime(v, "%H:%M")
        except ValueError:
            raise ValueError("AGGREGATION_RUN_TIME must be HH:MM (e.g. 00:05)") from None
        return v

    @field_validator("cache_ttl_s")
    @classmethod
    def cache_ttl_must_be_positive(cls, v: int) -> int:
        """Validate cache TTL is >= 1 second."""
        if v < 1:
            raise ValueError("CACHE_TTL_S must be >= 1")
        return v

    @field_validator("nominal_voltage_v", "nominal_frequency_hz")
    @classmethod
    def nominal_must_be_positive(cls, v: float) -> float:
        """Validate nominal values are > 0."""
        if v <= 0:
            raise ValueError("nominal values must be > 0")
        return v

    @field_validator("log_level")
    @classmethod
    def log_level_must_be_known(cls, v: str) -> str:
        """Normalise and validate LOG_LEVEL."""
        level = v.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {sorted(_LOG_LEVELS)}")
        return level

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @property
    def run_at(self) -> datetime.time:
        """AGGREGATION_RUN_TIME parsed into a time of day."""
        return datetime.datetime.strptime(self.aggregation_run_time, "%H:%M").time()

    def thresholds(self) -> Thresholds:
        """Compliance thresholds with the configured nominal values."""
        return Thresholds(
            nominal_voltage_v=self.nominal_voltage_v,
            nominal_frequency_hz=self.nominal_frequency_hz,
        )

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide Settings, loaded once from the environment."""
    return Settings()
