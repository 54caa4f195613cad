"""
Tests for the SQL-backed sample and aggregate stores.

The async session is mocked; statements passed to ``session.execute`` are
compiled with the PostgreSQL dialect and inspected.

CHANGELOG:
- 2026-10-17: Initial creation
"""

from contextlib import asynccontextmanager
from datetime import UTC, date, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from conftest import make_sample
from sqlalchemy.dialects import postgresql

from pqmonitor.core.models import DailyAggregate
from pqmonitor.core.quality import evaluate
from pqmonitor.db.models import DailyStats, Measurement
from pqmonitor.db.stores import (
    SqlAggregateStore,
    SqlSampleStore,
    measurement_to_sample,
    sample_to_measurement,
    stats_to_aggregate,
)

START = datetime(2026, 10, 16, tzinfo=UTC)
END = START + timedelta(days=1)


def _mock_session(rows: list | None = None, one: object | None = None) -> AsyncMock:
    """Mock AsyncSession whose execute() result yields *rows* / *one*."""
    result = MagicMock()
    result.scalars.return_value.all.return_value = rows or []
    result.scalar_one_or_none.return_value = one
    session = AsyncMock()
    session.execute = AsyncMock(return_value=result)
    session.add = MagicMock()
    session.commit = AsyncMock()
    return session


def _factory(session: AsyncMock):
    """Session factory yielding *session* as an async context manager."""

    @asynccontextmanager
    async def _session():
        yield session

    return _session


def _sql(session: AsyncMock) -> str:
    stmt = session.execute.call_args.args[0]
    return str(stmt.compile(dialect=postgresql.dialect()))


class TestRowConversion:
    def test_sample_round_trips_through_row(self) -> None:
        sample = make_sample()
        assert measurement_to_sample(sample_to_measurement(sample)) == sample

    def test_row_carries_validity_and_deviations(self) -> None:
        sample = make_sample(voltage_rms=241.5)
        row = sample_to_measurement(sample, is_valid=False, indicators=evaluate(sample))
        assert row.is_valid is False
        assert row.voltage_deviation_percent == pytest.approx(5.0)
        assert row.harmonics_v == list(sample.harmonics_voltage)

    def test_row_without_harmonics(self) -> None:
        row = sample_to_measurement(make_sample(harmonics_voltage=None))
        assert row.harmonics_v is None
        assert row.voltage_deviation_percent is None

    def test_stats_row_to_aggregate(self) -> None:
        row = DailyStats(date=date(2026, 10, 16))
        for name in DailyAggregate.model_fields:
            if name != "date":
                setattr(row, name, 0)
        row.voltage_sag_count = 3
        aggregate = stats_to_aggregate(row)
        assert aggregate.date == date(2026, 10, 16)
        assert aggregate.voltage_sag_count == 3


class TestSqlSampleStore:
    @pytest.mark.asyncio
    async def test_save_adds_row_and_commits(self) -> None:
        session = _mock_session()
        store = SqlSampleStore(_factory(session))

        await store.save(make_sample(), is_valid=False)

        row = session.add.call_args.args[0]
        assert isinstance(row, Measurement)
        assert row.is_valid is False
        session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_time_range_is_half_open_and_ascending(self) -> None:
        session = _mock_session()
        await SqlSampleStore(_factory(session)).query_by_time_range(START, END)

        sql = _sql(session)
        assert "measurements.ts >= " in sql
        assert "measurements.ts < " in sql
        assert "ORDER BY measurements.ts ASC" in sql
        assert "is_valid" not in sql.split("WHERE", 1)[1]

    @pytest.mark.asyncio
    async def test_valid_only_filters_invalid_rows(self) -> None:
        session = _mock_session()
        await SqlSampleStore(_factory(session)).query_by_time_range(
            START, END, valid_only=True
        )
        assert "measurements.is_valid IS true" in _sql(session)

    @pytest.mark.asyncio
    async def test_time_range_converts_rows(self) -> None:
        rows = [sample_to_measurement(make_sample(timestamp=START + timedelta(minutes=i))) for i in range(3)]
        session = _mock_session(rows=rows)

        samples = await SqlSampleStore(_factory(session)).query_by_time_range(START, END)

        assert [s.timestamp for s in samples] == [r.ts for r in rows]

    @pytest.mark.asyncio
    async def test_latest_returns_none_when_empty(self) -> None:
        session = _mock_session(rows=[])
        assert await SqlSampleStore(_factory(session)).latest() is None

    @pytest.mark.asyncio
    async def test_latest_n_orders_newest_first(self) -> None:
        session = _mock_session()
        await SqlSampleStore(_factory(session)).latest_n(100)
        sql = _sql(session)
        assert "ORDER BY measurements.ts DESC" in sql
        assert "LIMIT" in sql

    @pytest.mark.asyncio
    async def test_history_is_bounded_and_newest_first(self) -> None:
        session = _mock_session()
        await SqlSampleStore(_factory(session)).history(START, END, 50)
        sql = _sql(session)
        assert "measurements.ts <= " in sql
        assert "ORDER BY measurements.ts DESC" in sql


class TestSqlAggregateStore:
    @pytest.mark.asyncio
    async def test_upsert_uses_on_conflict_date(self) -> None:
        session = _mock_session()
        store = SqlAggregateStore(_factory(session))

        await store.upsert_by_date(DailyAggregate(date=date(2026, 10, 16), measurement_count=5))

        sql = _sql(session)
        assert "INSERT INTO daily_stats" in sql
        assert "ON CONFLICT (date) DO UPDATE" in sql
        assert "updated_at = now()" in sql
        session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_find_by_date_missing_returns_none(self) -> None:
        session = _mock_session(one=None)
        assert await SqlAggregateStore(_factory(session)).find_by_date(date(2026, 1, 1)) is None

    @pytest.mark.asyncio
    async def test_find_by_date_range_is_inclusive_and_ascending(self) -> None:
        session = _mock_session()
        await SqlAggregateStore(_factory(session)).find_by_date_range(
            date(2026, 10, 1), date(2026, 10, 7)
        )
        sql = _sql(session)
        assert "daily_stats.date >= " in sql
        assert "daily_stats.date <= " in sql
        assert "ORDER BY daily_stats.date ASC" in sql
