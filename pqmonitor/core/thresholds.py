"""
Power-quality limits used by the validator, the evaluator and the aggregator.

Values follow PN-EN 50160 / IEC 61000 for a 230 V / 50 Hz low-voltage supply,
plus the installation's own safety ceilings. Percentage-based limits are
stored as percentages and converted to absolute values by multiplying the
nominal value first, so that 230 V +/- 10 % resolves to exactly 207.0 V and
253.0 V.

CHANGELOG:
- 2026-10-17: Initial creation
"""

from dataclasses import dataclass

HARMONIC_COUNT = 8
"""Number of harmonic amplitudes carried per sample (index 0 = fundamental)."""

WAVEFORM_SAMPLES = 200
"""Points per reconstructed fundamental cycle."""

SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True)
class Thresholds:
    """Configured compliance and safety thresholds.

    Attributes:
        nominal_voltage_v: Declared supply voltage.
        voltage_tolerance_pct: Allowed deviation from nominal voltage.
        voltage_safety_max_v: Hard ceiling above which a sample is unsafe.
        current_safety_max_a: Hard current ceiling.
        frequency_safety_min_hz: Lower bound of the safe frequency band.
        frequency_safety_max_hz: Upper bound of the safe frequency band.
        nominal_frequency_hz: Declared supply frequency.
        frequency_tolerance_hz: Allowed deviation from nominal frequency.
        thd_voltage_limit_pct: Voltage THD limit.
        min_power_factor: Power factor below which a penalty applies.
        apparent_power_tolerance: Relative tolerance of the S consistency
            checks (0.05 = 5 % of the reported apparent power).
        sag_pct: Sag threshold as percent of nominal voltage.
        swell_pct: Swell threshold as percent of nominal voltage.
        interruption_pct: Interruption threshold as percent of nominal voltage.
    """

    nominal_voltage_v: float = 230.0
    voltage_tolerance_pct: float = 10.0
    voltage_safety_max_v: float = 360.0
    current_safety_max_a: float = 40.0
    frequency_safety_min_hz: float = 45.0
    frequency_safety_max_hz: float = 55.0
    nominal_frequency_hz: float = 50.0
    frequency_tolerance_hz: float = 0.5
    thd_voltage_limit_pct: float = 8.0
    min_power_factor: float = 0.85
    apparent_power_tolerance: float = 0.05
    sag_pct: float = 90.0
    swell_pct: float = 110.0
    interruption_pct: float = 10.0

    @property
    def voltage_band_v(self) -> float:
        """Allowed absolute voltage deviation (23 V for 230 V +/- 10 %)."""
        return self.nominal_voltage_v * self.voltage_tolerance_pct / 100.0

    @property
    def sag_threshold_v(self) -> float:
        return self.nominal_voltage_v * self.sag_pct / 100.0

    @property
    def swell_threshold_v(self) -> float:
        return self.nominal_voltage_v * self.swell_pct / 100.0

    @property
    def interruption_threshold_v(self) -> float:
        return self.nominal_voltage_v * self.interruption_pct / 100.0

    @property
    def frequency_min_hz(self) -> float:
        return self.nominal_frequency_hz - self.frequency_tolerance_hz

    @property
    def frequency_max_hz(self) -> float:
        return self.nominal_frequency_hz + self.frequency_tolerance_hz


DEFAULT_THRESHOLDS = Thresholds()
