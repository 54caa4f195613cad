"""
Tests for the PN-EN 50160 power-quality evaluator.

CHANGELOG:
- 2026-10-17: Initial creation
"""

import pytest
from conftest import make_sample

from pqmonitor.core.quality import COMPLIANT_MESSAGE, evaluate
from pqmonitor.core.thresholds import Thresholds


class TestVoltageIndicator:
    def test_deviation_percent(self) -> None:
        indicators = evaluate(make_sample(voltage_rms=241.5))
        assert indicators.voltage_deviation_percent == pytest.approx(5.0)
        assert indicators.voltage_within_limits is True

    @pytest.mark.parametrize("voltage", [207.0, 253.0])
    def test_band_limits_are_within(self, voltage: float) -> None:
        assert evaluate(make_sample(voltage_rms=voltage)).voltage_within_limits is True

    @pytest.mark.parametrize("voltage", [206.9, 253.1])
    def test_outside_band_is_violation(self, voltage: float) -> None:
        indicators = evaluate(make_sample(voltage_rms=voltage))
        assert indicators.voltage_within_limits is False
        assert indicators.overall_compliant is False


class TestFrequencyIndicator:
    @pytest.mark.parametrize("frequency", [49.5, 50.5])
    def test_limits_are_within(self, frequency: float) -> None:
        assert evaluate(make_sample(frequency=frequency)).frequency_within_limits is True

    def test_deviation_hz_is_signed(self) -> None:
        indicators = evaluate(make_sample(frequency=49.2))
        assert indicators.frequency_deviation_hz == pytest.approx(-0.8)
        assert indicators.frequency_within_limits is False


class TestThdIndicator:
    def test_exactly_at_limit_is_within(self) -> None:
        assert evaluate(make_sample(thd_voltage=8.0)).thd_within_limits is True

    def test_just_above_limit_is_violation(self) -> None:
        assert evaluate(make_sample(thd_voltage=8.01)).thd_within_limits is False

    def test_missing_thd_is_unknown_and_not_a_violation(self) -> None:
        indicators = evaluate(make_sample(thd_voltage=None))
        assert indicators.thd_within_limits is None
        assert indicators.overall_compliant is True


class TestOverallStatus:
    def test_compliant_sample(self) -> None:
        indicators = evaluate(make_sample())
        assert indicators.overall_compliant is True
        assert indicators.status_message == COMPLIANT_MESSAGE

    def test_message_names_every_violation(self) -> None:
        indicators = evaluate(make_sample(voltage_rms=200.0, frequency=51.0, thd_voltage=9.5))
        assert indicators.overall_compliant is False
        assert indicators.status_message.startswith("Non-compliant: ")
        assert "Voltage deviation -13.0%" in indicators.status_message
        assert "Frequency deviation +1.00 Hz" in indicators.status_message
        assert "THD 9.5%" in indicators.status_message

    def test_single_violation_message(self) -> None:
        indicators = evaluate(make_sample(frequency=50.8))
        assert indicators.status_message == "Non-compliant: Frequency deviation +0.80 Hz"

    def test_harmonics_copied_and_capped(self) -> None:
        indicators = evaluate(make_sample(harmonics_voltage=tuple(range(1, 11))))
        assert indicators.harmonics_voltage == [1, 2, 3, 4, 5, 6, 7, 8]

    def test_missing_harmonics_give_empty_list(self) -> None:
        assert evaluate(make_sample(harmonics_voltage=None)).harmonics_voltage == []

    def test_custom_nominal_voltage(self) -> None:
        thresholds = Thresholds(nominal_voltage_v=120.0)
        indicators = evaluate(make_sample(voltage_rms=120.0), thresholds)
        assert indicators.voltage_deviation_percent == 0.0
        assert indicators.voltage_within_limits is True
