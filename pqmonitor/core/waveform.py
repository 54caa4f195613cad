"""
Waveform reconstruction from harmonic amplitudes.

The sensor sends eight RMS harmonic amplitudes instead of raw samples to save
bandwidth. This module rebuilds one fundamental cycle by Fourier synthesis:

    x(t) = sum_n  H[n] * sqrt(2) * sin(2*pi*n*t + phi_n),   t in [0, 1)

where phi_1 is the requested phase shift and phi_n = 0 for n > 1. The sqrt(2)
factor turns an RMS amplitude into a peak amplitude.

CHANGELOG:
- 2026-10-17: Initial creation
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from pqmonitor.core.models import Sample, Waveform
from pqmonitor.core.thresholds import HARMONIC_COUNT, WAVEFORM_SAMPLES

_SQRT2 = math.sqrt(2.0)


def reconstruct(
    harmonics: Sequence[float | None] | None,
    fundamental_hz: float,
    sample_count: int,
    phase_shift_rad: float = 0.0,
) -> list[float]:
    """Synthesize one fundamental period from harmonic amplitudes.

    Sample ``i`` sits at the fraction ``i / sample_count`` of the period, so
    the output always covers exactly one cycle. *fundamental_hz* only fixes
    the time axis of that cycle (period = 1 / f) and does not change values.

    Args:
        harmonics: RMS amplitudes [H1, H2, ...]; None or empty yields zeros.
            Entries beyond HARMONIC_COUNT are ignored, None entries skipped.
        fundamental_hz: Fundamental frequency in Hz.
        sample_count: Number of output points.
        phase_shift_rad: Phase offset applied to the fundamental only.

    Returns:
        list[float]: Exactly ``sample_count`` instantaneous values.
    """
    if not harmonics:
        return [0.0] * max(sample_count, 0)

    amplitudes = list(harmonics)[:HARMONIC_COUNT]
    waveform: list[float] = []

    for i in range(sample_count):
        t = i / sample_count
        total = 0.0
        for index, amplitude in enumerate(amplitudes):
            if amplitude is None:
                continue
            order = index + 1
            phase = phase_shift_rad if order == 1 else 0.0
            total += amplitude * _SQRT2 * math.sin(2.0 * math.pi * order * t + phase)
        waveform.append(total)

    return waveform


def current_phase_shift(cos_phi: float | None) -> float:
    """Phase angle of current relative to voltage, arccos(cos_phi).

    A missing power factor is treated as 1.0 (in phase); out-of-range values
    are clamped to [-1, 1].
    """
    value = 1.0 if cos_phi is None else min(1.0, max(-1.0, cos_phi))
    return math.acos(value)


def reconstruct_waveforms(
    sample: Sample,
    *,
    nominal_frequency_hz: float = 50.0,
    sample_count: int = WAVEFORM_SAMPLES,
) -> Waveform:
    """Build the voltage/current waveform pair shown for a sample."""
    frequency = sample.frequency or nominal_frequency_hz
    return Waveform(
        voltage=reconstruct(sample.harmonics_voltage, frequency, sample_count, 0.0),
        current=reconstruct(
            sample.harmonics_current,
            frequency,
            sample_count,
            current_phase_shift(sample.cos_phi),
        ),
    )
