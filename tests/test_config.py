"""
Tests for environment-based Settings.

CHANGELOG:
- 2026-10-17: Initial creation
"""

import datetime
from zoneinfo import ZoneInfo

import pytest
from pydantic import ValidationError

from pqmonitor.config import Settings, get_settings
from pqmonitor.core.thresholds import Thresholds


class TestDefaults:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("AGGREGATION_SCHEDULER_ENABLED")

        settings = Settings()

        assert settings.timezone == "UTC"
        assert settings.sampling_interval_s == 3.0
        assert settings.store_invalid_samples is True
        assert settings.aggregate_invalid_samples is True
        assert settings.aggregation_scheduler_enabled is True
        assert settings.run_at == datetime.time(0, 5)
        assert settings.cache_ttl_s == 5
        assert settings.log_level == "INFO"

    def test_thresholds_follow_nominal_values(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NOMINAL_VOLTAGE_V", "240")
        monkeypatch.setenv("NOMINAL_FREQUENCY_HZ", "60")

        thresholds = Settings().thresholds()

        assert thresholds == Thresholds(nominal_voltage_v=240.0, nominal_frequency_hz=60.0)
        assert thresholds.voltage_band_v == 24.0

    def test_tzinfo(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TIMEZONE", "Europe/Warsaw")
        assert Settings().tzinfo == ZoneInfo("Europe/Warsaw")

    def test_get_settings_is_cached(self) -> None:
        assert get_settings() is get_settings()


class TestRequired:
    @pytest.mark.parametrize("name", ["DATABASE_URL", "REDIS_URL", "API_TOKENS"])
    def test_missing_required_variable(self, monkeypatch: pytest.MonkeyPatch, name: str) -> None:
        monkeypatch.delenv(name)
        with pytest.raises(ValidationError):
            Settings()


class TestValidators:
    @pytest.mark.parametrize(
        ("name", "value"),
        [
            ("TIMEZONE", "Mars/Olympus_Mons"),
            ("SAMPLING_INTERVAL_S", "0"),
            ("AGGREGATION_RUN_TIME", "25:00"),
            ("AGGREGATION_RUN_TIME", "midnight"),
            ("CACHE_TTL_S", "0"),
            ("NOMINAL_VOLTAGE_V", "-230"),
            ("LOG_LEVEL", "LOUD"),
        ],
    )
    def test_rejects_invalid_value(
        self, monkeypatch: pytest.MonkeyPatch, name: str, value: str
    ) -> None:
        monkeypatch.setenv(name, value)
        with pytest.raises(ValidationError):
            Settings()

    def test_log_level_is_uppercased(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert Settings().log_level == "DEBUG"

    def test_run_time_parsed(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AGGREGATION_RUN_TIME", "02:30")
        assert Settings().run_at == datetime.time(2, 30)
