"""
Sample and aggregate stores.

The services depend on the two narrow store interfaces defined here as
Protocols (a time-ordered sample store and a by-date aggregate store).
SqlSampleStore and SqlAggregateStore implement them on top of the async
SQLAlchemy session factory; tests substitute in-memory fakes.

Store calls are awaited once with no retry; database errors propagate.

CHANGELOG:
- 2026-10-17: Initial creation

TODO:
- None
"""

import datetime
import logging
from typing import Protocol

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pqmonitor.core.models import DailyAggregate, PowerQualityIndicators, Sample
from pqmonitor.db.models import DailyStats, Measurement

logger = logging.getLogger(__name__)

# DailyAggregate fields written on upsert, in model order.
AGGREGATE_COLUMNS: tuple[str, ...] = tuple(
    name for name in DailyAggregate.model_fields if name != "date"
)


# ---------------------------------------------------------------------------
# Interfaces
# ---------------------------------------------------------------------------


class SampleStore(Protocol):
    """Append-only, time-ordered store of samples."""

    async def save(
        self,
        sample: Sample,
        *,
        is_valid: bool = True,
        indicators: PowerQualityIndicators | None = None,
    ) -> None: ...

    async def query_by_time_range(
        self,
        start: datetime.datetime,
        end: datetime.datetime,
        *,
        valid_only: bool = False,
    ) -> list[Sample]: ...

    async def history(
        self,
        start: datetime.datetime,
        end: datetime.datetime,
        limit: int,
    ) -> list[Sample]: ...

    async def latest(self) -> Sample | None: ...

    async def latest_n(self, n: int) -> list[Sample]: ...


class AggregateStore(Protocol):
    """Store of daily aggregates keyed by calendar date."""

    async def upsert_by_date(self, aggregate: DailyAggregate) -> None: ...

    async def find_by_date(self, day: datetime.date) -> DailyAggregate | None: ...

    async def find_by_date_range(
        self, start: datetime.date, end: datetime.date
    ) -> list[DailyAggregate]: ...


# ---------------------------------------------------------------------------
# Row conversion
# ---------------------------------------------------------------------------


def measurement_to_sample(row: Measurement) -> Sample:
    """Convert a Measurement row back into an immutable Sample."""
    return Sample(
        timestamp=row.ts,
        voltage_rms=row.voltage_rms,
        current_rms=row.current_rms,
        frequency=row.frequency,
        power_active=row.power_active,
        power_apparent=row.power_apparent,
        power_reactive=row.power_reactive,
        cos_phi=row.cos_phi,
        thd_voltage=row.thd_voltage,
        thd_current=row.thd_current,
        harmonics_voltage=row.harmonics_v,
        harmonics_current=row.harmonics_i,
    )


def sample_to_measurement(
    sample: Sample,
    *,
    is_valid: bool = True,
    indicators: PowerQualityIndicators | None = None,
) -> Measurement:
    """Build a Measurement row for *sample*.

    Args:
        sample: The sample to persist.
        is_valid: Whether the validator accepted the sample.
        indicators: Indicators computed at ingest; deviations stay NULL
            when omitted.

    Returns:
        Measurement: A transient ORM instance.
    """
    return Measurement(
        ts=sample.timestamp,
        voltage_rms=sample.voltage_rms,
        current_rms=sample.current_rms,
        frequency=sample.frequency,
        power_active=sample.power_active,
        power_apparent=sample.power_apparent,
        power_reactive=sample.power_reactive,
        cos_phi=sample.cos_phi,
        thd_voltage=sample.thd_voltage,
        thd_current=sample.thd_current,
        harmonics_v=list(sample.harmonics_voltage) if sample.harmonics_voltage else None,
        harmonics_i=list(sample.harmonics_current) if sample.harmonics_current else None,
        voltage_deviation_percent=(
            indicators.voltage_deviation_percent if indicators else None
        ),
        frequency_deviation_hz=indicators.frequency_deviation_hz if indicators else None,
        is_valid=is_valid,
    )


def stats_to_aggregate(row: DailyStats) -> DailyAggregate:
    """Convert a DailyStats row into a DailyAggregate."""
    values = {name: getattr(row, name) for name in AGGREGATE_COLUMNS}
    return DailyAggregate(date=row.date, **values)


# ---------------------------------------------------------------------------
# SQL implementations
# ---------------------------------------------------------------------------


class SqlSampleStore:
    """SampleStore backed by the ``measurements`` table.

    Args:
        session_factory: Factory producing AsyncSession instances.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def save(
        self,
        sample: Sample,
        *,
        is_valid: bool = True,
        indicators: PowerQualityIndicators | None = None,
    ) -> None:
        """Insert one sample row."""
        row = sample_to_measurement(sample, is_valid=is_valid, indicators=indicators)
        async with self._session_factory() as session:
            session.add(row)
            await session.commit()

    async def query_by_time_range(
        self,
        start: datetime.datetime,
        end: datetime.datetime,
        *,
        valid_only: bool = False,
    ) -> list[Sample]:
        """Return samples with ``start <= ts < end``, oldest first.

        Args:
            start: Inclusive lower bound.
            end: Exclusive upper bound.
            valid_only: Skip rows flagged ``is_valid=false``.

        Returns:
            list[Sample]: Samples ordered by timestamp ascending.
        """
        stmt = (
            select(Measurement)
            .where(Measurement.ts >= start, Measurement.ts < end)
            .order_by(Measurement.ts.asc())
        )
        if valid_only:
            stmt = stmt.where(Measurement.is_valid.is_(True))

        async with self._session_factory() as session:
            result = await session.execute(stmt)
            rows = result.scalars().all()
        return [measurement_to_sample(row) for row in rows]

    async def history(
        self,
        start: datetime.datetime,
        end: datetime.datetime,
        limit: int,
    ) -> list[Sample]:
        """Return at most *limit* samples with ``start <= ts <= end``, newest first."""
        stmt = (
            select(Measurement)
            .where(Measurement.ts >= start, Measurement.ts <= end)
            .order_by(Measurement.ts.desc())
            .limit(limit)
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            rows = result.scalars().all()
        return [measurement_to_sample(row) for row in rows]

    async def latest(self) -> Sample | None:
        """Return the most recent sample, or None when the store is empty."""
        samples = await self.latest_n(1)
        return samples[0] if samples else None

    async def latest_n(self, n: int) -> list[Sample]:
        """Return the *n* most recent samples, newest first."""
        stmt = select(Measurement).order_by(Measurement.ts.desc()).limit(n)
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            rows = result.scalars().all()
        return [measurement_to_sample(row) for row in rows]


class SqlAggregateStore:
    """AggregateStore backed by the ``daily_stats`` table.

    Args:
        session_factory: Factory producing AsyncSession instances.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def upsert_by_date(self, aggregate: DailyAggregate) -> None:
        """Insert or replace the row for ``aggregate.date`` in one statement.

        Uses PostgreSQL INSERT ... ON CONFLICT (date) DO UPDATE so a re-run
        for the same date overwrites every statistic atomically.
        """
        values = aggregate.model_dump()
        update_set = {name: values[name] for name in AGGREGATE_COLUMNS}
        update_set["updated_at"] = func.now()

        stmt = (
            pg_insert(DailyStats)
            .values(**values)
            .on_conflict_do_update(index_elements=["date"], set_=update_set)
        )
        async with self._session_factory() as session:
            await session.execute(stmt)
            await session.commit()

        logger.debug("Upserted daily_stats row for %s", aggregate.date)

    async def find_by_date(self, day: datetime.date) -> DailyAggregate | None:
        stmt = select(DailyStats).where(DailyStats.date == day)
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            row = result.scalar_one_or_none()
        return stats_to_aggregate(row) if row is not None else None

    async def find_by_date_range(
        self, start: datetime.date, end: datetime.date
    ) -> list[DailyAggregate]:
        """Return aggregates with ``start <= date <= end``, oldest first."""
        stmt = (
            select(DailyStats)
            .where(DailyStats.date >= start, DailyStats.date <= end)
            .order_by(DailyStats.date.asc())
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            rows = result.scalars().all()
        return [stats_to_aggregate(row) for row in rows]
