"""
Pydantic domain models for power-quality samples and derived records.

Defines the immutable Sample read from a sensor, the ValidationResult and
PowerQualityIndicators computed per sample, the reconstructed Waveform, and
the DailyAggregate produced by the daily aggregation job.

Inbound payloads are parsed with :func:`parse_sample`, which turns pydantic
validation failures (missing required fields, implausible values) into a
:class:`MalformedSampleError` so callers can tell rejected input apart from a
sample that parsed but failed the compliance rules.

CHANGELOG:
- 2026-10-17: Initial creation

TODO:
- None
"""

from __future__ import annotations

import datetime
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, computed_field, field_validator

from pqmonitor.core.thresholds import HARMONIC_COUNT


class MalformedSampleError(ValueError):
    """Raised when an inbound payload cannot be turned into a Sample.

    Attributes:
        errors: pydantic error details (``ValidationError.errors()``).
    """

    def __init__(self, errors: list[dict[str, Any]]) -> None:
        self.errors = errors
        fields = sorted({".".join(str(p) for p in err.get("loc", ())) for err in errors})
        super().__init__(f"Malformed sample payload: invalid fields {', '.join(fields)}")


# ---------------------------------------------------------------------------
# Sample
# ---------------------------------------------------------------------------


class Sample(BaseModel):
    """One electrical measurement from the remote sensor.

    ``timestamp``, ``voltage_rms``, ``current_rms`` and ``frequency`` are
    required; everything else is optional. The device firmware field names
    (``harmonics_v``, ``harmonics_i``) are accepted as aliases. Plausibility
    bounds reject physically impossible readings at parse time; compliance
    limits are checked later by the validator.

    Attributes:
        timestamp: Measurement instant (timezone-aware, UTC if none given).
        voltage_rms: RMS voltage in volts.
        current_rms: RMS current in amperes.
        frequency: Supply frequency in hertz.
        power_active: Active power P in watts.
        power_apparent: Apparent power S in VA.
        power_reactive: Reactive power Q in var (may be negative).
        cos_phi: Displacement power factor.
        thd_voltage: Voltage THD in percent.
        thd_current: Current THD in percent.
        harmonics_voltage: RMS voltage harmonic amplitudes H1..H8.
        harmonics_current: RMS current harmonic amplitudes H1..H8.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    timestamp: datetime.datetime
    voltage_rms: float = Field(ge=0.0, le=500.0)
    current_rms: float = Field(ge=0.0, le=100.0)
    frequency: float = Field(ge=45.0, le=65.0)
    power_active: float | None = Field(default=None, ge=0.0)
    power_apparent: float | None = Field(default=None, ge=0.0)
    power_reactive: float | None = None
    cos_phi: float | None = Field(default=None, ge=-1.0, le=1.0)
    thd_voltage: float | None = Field(default=None, ge=0.0, le=100.0)
    thd_current: float | None = Field(default=None, ge=0.0, le=100.0)
    harmonics_voltage: tuple[float | None, ...] | None = Field(
        default=None, alias="harmonics_v"
    )
    harmonics_current: tuple[float | None, ...] | None = Field(
        default=None, alias="harmonics_i"
    )

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, v: datetime.datetime) -> datetime.datetime:
        """Treat naive timestamps as UTC."""
        if v.tzinfo is None:
            return v.replace(tzinfo=datetime.UTC)
        return v

    @field_validator("harmonics_voltage", "harmonics_current")
    @classmethod
    def _truncate_harmonics(
        cls, v: tuple[float | None, ...] | None
    ) -> tuple[float | None, ...] | None:
        """Keep at most HARMONIC_COUNT amplitudes."""
        if v is None:
            return None
        return v[:HARMONIC_COUNT]


def parse_sample(payload: Mapping[str, Any] | str | bytes) -> Sample:
    """Build a Sample from a decoded mapping or a raw JSON document.

    Args:
        payload: Decoded JSON object, or the JSON text / bytes itself.

    Returns:
        Sample: The parsed, immutable sample.

    Raises:
        MalformedSampleError: If a required field is missing, a value has the
            wrong type, or a value is outside its plausibility bounds.
    """
    try:
        if isinstance(payload, str | bytes):
            return Sample.model_validate_json(payload)
        return Sample.model_validate(payload)
    except ValidationError as exc:
        raise MalformedSampleError(exc.errors(include_url=False)) from exc


# ---------------------------------------------------------------------------
# Derived, per-sample records
# ---------------------------------------------------------------------------


class ValidationResult(BaseModel):
    """Outcome of the rule-based sample validator.

    ``valid`` is derived from ``errors`` so the two can never disagree;
    warnings never invalidate a sample.
    """

    warnings: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def valid(self) -> bool:
        return not self.errors


class PowerQualityIndicators(BaseModel):
    """PN-EN 50160 indicators of one sample.

    Covers Group 1 (supply voltage magnitude), Group 2 (supply frequency) and
    the partial Group 4 distortion figures (THD and H1..H8).
    ``thd_within_limits`` is None when the sample carries no THD value.
    """

    timestamp: datetime.datetime
    voltage_rms: float
    voltage_deviation_percent: float
    voltage_within_limits: bool
    frequency: float
    frequency_deviation_hz: float
    frequency_within_limits: bool
    thd_voltage: float | None = None
    thd_within_limits: bool | None = None
    harmonics_voltage: list[float | None] = Field(default_factory=list)
    overall_compliant: bool
    status_message: str


class Waveform(BaseModel):
    """One reconstructed fundamental cycle of voltage and current."""

    voltage: list[float]
    current: list[float]


class DailyAggregate(BaseModel):
    """Daily statistics and power-quality event counters for one date.

    Every numeric field defaults to zero, which is also the result returned
    for a day without samples.
    """

    date: datetime.date

    avg_voltage: float = 0.0
    min_voltage: float = 0.0
    max_voltage: float = 0.0
    std_dev_voltage: float = 0.0

    avg_power_active: float = 0.0
    min_power: float = 0.0
    peak_power: float = 0.0
    total_energy_kwh: float = 0.0

    avg_power_factor: float = 0.0
    min_power_factor: float = 0.0

    avg_frequency: float = 0.0
    min_frequency: float = 0.0
    max_frequency: float = 0.0

    voltage_sag_count: int = 0
    voltage_swell_count: int = 0
    interruption_count: int = 0
    thd_violations_count: int = 0
    frequency_dev_count: int = 0
    power_factor_penalty_count: int = 0

    measurement_count: int = 0
    data_completeness: float = 0.0
