"""
Pure numeric helpers for daily statistics.

Mean, minimum, maximum and population standard deviation over plain float
sequences, plus trapezoidal integration of power over time. Every function
returns 0.0 for an empty input instead of raising, because an empty series is
a normal outcome for optional measurements.

CHANGELOG:
- 2026-10-17: Initial creation
"""

from __future__ import annotations

import statistics
from collections.abc import Sequence
from datetime import datetime

WATT_SECONDS_PER_KWH = 3_600_000.0


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean, or 0.0 for an empty sequence."""
    if not values:
        return 0.0
    return statistics.fmean(values)


def minimum(values: Sequence[float]) -> float:
    """Smallest value, or 0.0 for an empty sequence."""
    if not values:
        return 0.0
    return min(values)


def maximum(values: Sequence[float]) -> float:
    """Largest value, or 0.0 for an empty sequence."""
    if not values:
        return 0.0
    return max(values)


def standard_deviation(values: Sequence[float], mean_value: float | None = None) -> float:
    """Population standard deviation: sqrt(sum((x - mu)^2) / n).

    Args:
        values: The series.
        mean_value: Precomputed mean of *values*; computed when omitted.

    Returns:
        float: The standard deviation, or 0.0 for an empty sequence.
    """
    if not values:
        return 0.0
    return statistics.pstdev(values, mean_value)


def trapezoidal_energy_kwh(points: Sequence[tuple[datetime, float]]) -> float:
    """Integrate power over time with the trapezoidal rule.

    E = sum((P[i] + P[i+1]) / 2 * dt) in watt-seconds, converted to kWh.

    Args:
        points: ``(timestamp, power_w)`` pairs sorted by timestamp ascending.

    Returns:
        float: Energy in kWh; 0.0 for fewer than two points.
    """
    if len(points) < 2:
        return 0.0

    watt_seconds = 0.0
    for (t0, p0), (t1, p1) in zip(points, points[1:]):
        dt = (t1 - t0).total_seconds()
        watt_seconds += (p0 + p1) / 2.0 * dt

    return watt_seconds / WATT_SECONDS_PER_KWH
