"""
Rule-based validator for incoming samples.

Each rule is a ``(name, severity, predicate, message)`` entry in a fixed
table. Every rule is evaluated for every sample; violations are collected
into two ordered lists (errors, warnings). A rule violation is data, not a
fault, so nothing here raises.

Rules:
- voltage above the safety ceiling (360 V): error.
- voltage outside nominal +/- 10 % but not above the ceiling: warning.
- current above the safety ceiling (40 A): error.
- frequency outside the safe band (45-55 Hz): error.
- frequency outside nominal +/- 0.5 Hz: warning, independent of the above.
- power factor below 0.85: error.
- voltage THD above 8 %: warning.
- reported S differs from sqrt(P^2 + Q^2) by more than 5 % of S: error.
- reported S differs from U * I by more than 5 % of S: warning.

All comparisons are strict, so a value exactly at a limit passes.

CHANGELOG:
- 2026-10-17: Initial creation

TODO:
- None
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal

from pqmonitor.core.models import Sample, ValidationResult
from pqmonitor.core.thresholds import DEFAULT_THRESHOLDS, Thresholds

Severity = Literal["error", "warning"]


@dataclass(frozen=True)
class Rule:
    """A single validation rule.

    Attributes:
        name: Short identifier, used in logs and tests.
        severity: Whether a violation is an error or a warning.
        violated: Predicate returning True when the sample breaks the rule.
        message: Builds the human-readable finding for a violating sample.
    """

    name: str
    severity: Severity
    violated: Callable[[Sample, Thresholds], bool]
    message: Callable[[Sample, Thresholds], str]


# ---------------------------------------------------------------------------
# Apparent power consistency helpers
# ---------------------------------------------------------------------------


def _pq_apparent_diff(sample: Sample) -> float | None:
    """|S_reported - sqrt(P^2 + Q^2)|, or None when S, P or Q is missing."""
    if sample.power_apparent is None:
        return None
    if sample.power_active is None or sample.power_reactive is None:
        return None
    calculated = math.hypot(sample.power_active, sample.power_reactive)
    return abs(sample.power_apparent - calculated)


def _ui_apparent_diff(sample: Sample) -> float | None:
    """|S_reported - U * I|, or None when S is missing."""
    if sample.power_apparent is None:
        return None
    return abs(sample.power_apparent - sample.voltage_rms * sample.current_rms)


def _apparent_tolerance(sample: Sample, thresholds: Thresholds) -> float:
    return thresholds.apparent_power_tolerance * (sample.power_apparent or 0.0)


def _exceeds(diff: float | None, tolerance: float) -> bool:
    return diff is not None and diff > tolerance


# ---------------------------------------------------------------------------
# Rule table
# ---------------------------------------------------------------------------


RULES: tuple[Rule, ...] = (
    Rule(
        name="voltage_safety",
        severity="error",
        violated=lambda s, t: s.voltage_rms > t.voltage_safety_max_v,
        message=lambda s, t: (
            f"Voltage {s.voltage_rms} V exceeds safety threshold "
            f"({t.voltage_safety_max_v} V)."
        ),
    ),
    Rule(
        name="voltage_standard",
        severity="warning",
        violated=lambda s, t: (
            s.voltage_rms <= t.voltage_safety_max_v
            and abs(s.voltage_rms - t.nominal_voltage_v) > t.voltage_band_v
        ),
        message=lambda s, t: (
            f"Voltage {s.voltage_rms} V outside PN-EN 50160 range "
            f"({t.nominal_voltage_v} V +/- {t.voltage_tolerance_pct}%)."
        ),
    ),
    Rule(
        name="current_safety",
        severity="error",
        violated=lambda s, t: s.current_rms > t.current_safety_max_a,
        message=lambda s, t: (
            f"Current {s.current_rms} A exceeds safety threshold "
            f"({t.current_safety_max_a} A)."
        ),
    ),
    Rule(
        name="frequency_safety",
        severity="error",
        violated=lambda s, t: (
            s.frequency < t.frequency_safety_min_hz
            or s.frequency > t.frequency_safety_max_hz
        ),
        message=lambda s, t: (
            f"Frequency {s.frequency} Hz outside safe range "
            f"({t.frequency_safety_min_hz}-{t.frequency_safety_max_hz} Hz)."
        ),
    ),
    Rule(
        name="frequency_standard",
        severity="warning",
        violated=lambda s, t: (
            abs(s.frequency - t.nominal_frequency_hz) > t.frequency_tolerance_hz
        ),
        message=lambda s, t: (
            f"Frequency {s.frequency} Hz outside PN-EN 50160 range "
            f"({t.nominal_frequency_hz} Hz +/- {t.frequency_tolerance_hz} Hz)."
        ),
    ),
    Rule(
        name="power_factor",
        severity="error",
        violated=lambda s, t: s.cos_phi is not None and s.cos_phi < t.min_power_factor,
        message=lambda s, t: (
            f"Power factor {s.cos_phi} below minimum {t.min_power_factor}."
        ),
    ),
    Rule(
        name="thd_voltage",
        severity="warning",
        violated=lambda s, t: (
            s.thd_voltage is not None and s.thd_voltage > t.thd_voltage_limit_pct
        ),
        message=lambda s, t: (
            f"Voltage THD {s.thd_voltage}% exceeds limit ({t.thd_voltage_limit_pct}%)."
        ),
    ),
    Rule(
        name="apparent_power_pq",
        severity="error",
        violated=lambda s, t: _exceeds(_pq_apparent_diff(s), _apparent_tolerance(s, t)),
        message=lambda s, t: (
            "Power inconsistency (P,Q vs S): difference "
            f"{_pq_apparent_diff(s):.2f} VA."
        ),
    ),
    Rule(
        name="apparent_power_ui",
        severity="warning",
        violated=lambda s, t: _exceeds(_ui_apparent_diff(s), _apparent_tolerance(s, t)),
        message=lambda s, t: (
            "Measurement inconsistency (U,I vs S): difference "
            f"{_ui_apparent_diff(s):.2f} VA."
        ),
    ),
)


def validate(sample: Sample, thresholds: Thresholds = DEFAULT_THRESHOLDS) -> ValidationResult:
    """Evaluate every rule against a sample.

    This is a pure function: no I/O, no logging, no clock.

    Args:
        sample: The parsed sample.
        thresholds: Limits to validate against.

    Returns:
        ValidationResult: Errors and warnings in rule-table order.
    """
    errors: list[str] = []
    warnings: list[str] = []

    for rule in RULES:
        if not rule.violated(sample, thresholds):
            continue
        finding = rule.message(sample, thresholds)
        if rule.severity == "error":
            errors.append(finding)
        else:
            warnings.append(finding)

    return ValidationResult(warnings=warnings, errors=errors)
