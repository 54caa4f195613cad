"""
PN-EN 50160 power-quality indicators for a single sample.

Computes voltage deviation (Group 1), frequency deviation (Group 2) and the
partial voltage distortion figures (Group 4, THD and H1..H8), each with a
within-limits flag, plus an overall compliance flag and a status line.

Limits are inclusive: a sample exactly at +/- 10 % voltage, +/- 0.5 Hz or
8.0 % THD is compliant.

CHANGELOG:
- 2026-10-17: Initial creation
"""

from __future__ import annotations

from pqmonitor.core.models import PowerQualityIndicators, Sample
from pqmonitor.core.thresholds import DEFAULT_THRESHOLDS, HARMONIC_COUNT, Thresholds

COMPLIANT_MESSAGE = "All indicators within PN-EN 50160 limits"


def voltage_deviation_percent(voltage_rms: float, thresholds: Thresholds = DEFAULT_THRESHOLDS) -> float:
    """(U - U_nominal) / U_nominal * 100."""
    nominal = thresholds.nominal_voltage_v
    return (voltage_rms - nominal) / nominal * 100.0


def frequency_deviation_hz(frequency: float, thresholds: Thresholds = DEFAULT_THRESHOLDS) -> float:
    """f - f_nominal."""
    return frequency - thresholds.nominal_frequency_hz


def _status_message(
    indicators: dict[str, object],
    voltage_ok: bool,
    frequency_ok: bool,
    thd_ok: bool | None,
) -> str:
    violations: list[str] = []
    if not voltage_ok:
        violations.append(
            f"Voltage deviation {indicators['voltage_deviation_percent']:.1f}%"
        )
    if not frequency_ok:
        violations.append(
            f"Frequency deviation {indicators['frequency_deviation_hz']:+.2f} Hz"
        )
    if thd_ok is False:
        violations.append(f"THD {indicators['thd_voltage']:.1f}% (partial measurement)")

    if not violations:
        return COMPLIANT_MESSAGE
    return "Non-compliant: " + ", ".join(violations)


def evaluate(sample: Sample, thresholds: Thresholds = DEFAULT_THRESHOLDS) -> PowerQualityIndicators:
    """Derive the compliance indicators of one sample.

    Args:
        sample: The sample to evaluate.
        thresholds: Limits to evaluate against.

    Returns:
        PowerQualityIndicators: Deviations, per-indicator flags, overall
        compliance and a status message. A sample without THD gets
        ``thd_within_limits=None`` and is judged on voltage and frequency.
    """
    voltage_dev = voltage_deviation_percent(sample.voltage_rms, thresholds)
    frequency_dev = frequency_deviation_hz(sample.frequency, thresholds)

    voltage_ok = abs(sample.voltage_rms - thresholds.nominal_voltage_v) <= thresholds.voltage_band_v
    frequency_ok = abs(frequency_dev) <= thresholds.frequency_tolerance_hz
    thd_ok: bool | None = None
    if sample.thd_voltage is not None:
        thd_ok = sample.thd_voltage <= thresholds.thd_voltage_limit_pct

    values: dict[str, object] = {
        "voltage_deviation_percent": voltage_dev,
        "frequency_deviation_hz": frequency_dev,
        "thd_voltage": sample.thd_voltage,
    }

    return PowerQualityIndicators(
        timestamp=sample.timestamp,
        voltage_rms=sample.voltage_rms,
        voltage_deviation_percent=voltage_dev,
        voltage_within_limits=voltage_ok,
        frequency=sample.frequency,
        frequency_deviation_hz=frequency_dev,
        frequency_within_limits=frequency_ok,
        thd_voltage=sample.thd_voltage,
        thd_within_limits=thd_ok,
        harmonics_voltage=list(sample.harmonics_voltage or ())[:HARMONIC_COUNT],
        overall_compliant=voltage_ok and frequency_ok and thd_ok is not False,
        status_message=_status_message(values, voltage_ok, frequency_ok, thd_ok),
    )
