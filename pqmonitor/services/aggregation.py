"""
Daily aggregation of power-quality samples.

DailyAggregator reads one calendar day of samples from the sample store,
computes trend statistics and power-quality event counters, and upserts the
resulting DailyAggregate by date. A day without samples yields a zero-valued
aggregate and writes nothing.

The statistics themselves are computed by :func:`summarize_day`, a pure
function over an already-loaded sample list.

Event counters are per sample: each sample adds at most one to each
counter, and one sample can count towards several counters (a 20 V reading
is both a sag and an interruption). No duration-based event classification
is done.

The read and the upsert are not isolated from concurrent ingestion for the
same day; a later manual re-run recomputes and replaces the row.

CHANGELOG:
- 2026-10-17: Initial creation

TODO:
- None
"""

import datetime
import logging
from collections.abc import Sequence

from pqmonitor.core import numeric
from pqmonitor.core.models import DailyAggregate, Sample
from pqmonitor.core.thresholds import DEFAULT_THRESHOLDS, SECONDS_PER_DAY, Thresholds
from pqmonitor.db.stores import AggregateStore, SampleStore

logger = logging.getLogger(__name__)

LOW_COMPLETENESS_RATIO = 0.95
"""Completeness below this ratio is logged as a warning."""


def day_bounds(
    day: datetime.date, tz: datetime.tzinfo
) -> tuple[datetime.datetime, datetime.datetime]:
    """Return the half-open ``[start, end)`` instants of *day* in *tz*.

    The end is the start of the next calendar day, so days of 23 or 25 hours
    around DST changes are covered exactly.
    """
    start = datetime.datetime.combine(day, datetime.time.min, tzinfo=tz)
    end = datetime.datetime.combine(
        day + datetime.timedelta(days=1), datetime.time.min, tzinfo=tz
    )
    return start, end


def expected_sample_count(sampling_interval_s: float) -> float:
    """Number of samples a complete day holds at the given interval."""
    return SECONDS_PER_DAY / sampling_interval_s


def summarize_day(
    day: datetime.date,
    samples: Sequence[Sample],
    *,
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
    sampling_interval_s: float = 3.0,
) -> DailyAggregate:
    """Compute the DailyAggregate of one day's samples.

    Args:
        day: Calendar date the samples belong to.
        samples: The day's samples, in any order.
        thresholds: Limits for the event counters.
        sampling_interval_s: Nominal sampling interval for data completeness.

    Returns:
        DailyAggregate: Zero-valued apart from ``date`` when *samples* is
        empty. Optional series (P, cos phi, THD) skip samples lacking the
        value; an empty series yields 0.0.
    """
    if not samples:
        return DailyAggregate(date=day)

    ordered = sorted(samples, key=lambda s: s.timestamp)

    voltages = [s.voltage_rms for s in ordered]
    frequencies = [s.frequency for s in ordered]
    powers = [s.power_active for s in ordered if s.power_active is not None]
    power_factors = [s.cos_phi for s in ordered if s.cos_phi is not None]
    energy_points = [
        (s.timestamp, s.power_active) for s in ordered if s.power_active is not None
    ]

    avg_voltage = numeric.mean(voltages)
    count = len(ordered)
    completeness = min(1.0, count / expected_sample_count(sampling_interval_s))

    return DailyAggregate(
        date=day,
        avg_voltage=avg_voltage,
        min_voltage=numeric.minimum(voltages),
        max_voltage=numeric.maximum(voltages),
        std_dev_voltage=numeric.standard_deviation(voltages, avg_voltage),
        avg_power_active=numeric.mean(powers),
        min_power=numeric.minimum(powers),
        peak_power=numeric.maximum(powers),
        total_energy_kwh=numeric.trapezoidal_energy_kwh(energy_points),
        avg_power_factor=numeric.mean(power_factors),
        min_power_factor=numeric.minimum(power_factors),
        avg_frequency=numeric.mean(frequencies),
        min_frequency=numeric.minimum(frequencies),
        max_frequency=numeric.maximum(frequencies),
        voltage_sag_count=sum(
            1 for v in voltages if v < thresholds.sag_threshold_v
        ),
        voltage_swell_count=sum(
            1 for v in voltages if v > thresholds.swell_threshold_v
        ),
        interruption_count=sum(
            1 for v in voltages if v < thresholds.interruption_threshold_v
        ),
        thd_violations_count=sum(
            1
            for s in ordered
            if s.thd_voltage is not None and s.thd_voltage > thresholds.thd_voltage_limit_pct
        ),
        frequency_dev_count=sum(
            1
            for f in frequencies
            if f < thresholds.frequency_min_hz or f > thresholds.frequency_max_hz
        ),
        power_factor_penalty_count=sum(
            1 for pf in power_factors if pf < thresholds.min_power_factor
        ),
        measurement_count=count,
        data_completeness=completeness,
    )


class DailyAggregator:
    """Aggregates one calendar day of samples into the aggregate store.

    Args:
        sample_store: Source of samples.
        aggregate_store: Destination of daily aggregates.
        thresholds: Limits for the event counters.
        tz: Time zone that defines the calendar day.
        sampling_interval_s: Nominal sampling interval for data completeness.
        include_invalid: Aggregate samples flagged ``is_valid=false`` too;
            False restricts the day to valid samples.
    """

    def __init__(
        self,
        sample_store: SampleStore,
        aggregate_store: AggregateStore,
        *,
        thresholds: Thresholds = DEFAULT_THRESHOLDS,
        tz: datetime.tzinfo = datetime.UTC,
        sampling_interval_s: float = 3.0,
        include_invalid: bool = True,
    ) -> None:
        self.sample_store = sample_store
        self.aggregate_store = aggregate_store
        self.thresholds = thresholds
        self.tz = tz
        self.sampling_interval_s = sampling_interval_s
        self.include_invalid = include_invalid

    async def aggregate(self, day: datetime.date) -> DailyAggregate:
        """Compute and persist the aggregate for *day*.

        Args:
            day: Calendar date to aggregate.

        Returns:
            DailyAggregate: The computed aggregate (zero-valued when the day
            has no samples, in which case nothing is written).

        Raises:
            Exception: Any error from the sample or aggregate store.
        """
        start, end = day_bounds(day, self.tz)
        logger.info("Aggregating %s (%s to %s)", day, start.isoformat(), end.isoformat())

        samples = await self.sample_store.query_by_time_range(
            start, end, valid_only=not self.include_invalid
        )
        if not samples:
            logger.warning("No samples found for %s, skipping aggregate write", day)
            return DailyAggregate(date=day)

        aggregate = summarize_day(
            day,
            samples,
            thresholds=self.thresholds,
            sampling_interval_s=self.sampling_interval_s,
        )
        await self.aggregate_store.upsert_by_date(aggregate)

        if aggregate.data_completeness < LOW_COMPLETENESS_RATIO:
            logger.warning(
                "Low data completeness for %s: %.1f%% (%d samples)",
                day,
                aggregate.data_completeness * 100.0,
                aggregate.measurement_count,
            )

        events = {
            "sags": aggregate.voltage_sag_count,
            "swells": aggregate.voltage_swell_count,
            "interruptions": aggregate.interruption_count,
            "thd_violations": aggregate.thd_violations_count,
            "frequency_deviations": aggregate.frequency_dev_count,
            "power_factor_penalties": aggregate.power_factor_penalty_count,
        }
        nonzero = {name: value for name, value in events.items() if value}
        if nonzero:
            logger.info("Power-quality events on %s: %s", day, nonzero)

        logger.info(
            "Aggregated %s: %d samples, avg %.1f V, %.3f kWh",
            day,
            aggregate.measurement_count,
            aggregate.avg_voltage,
            aggregate.total_energy_kwh,
        )
        return aggregate
