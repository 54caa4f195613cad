"""
Read services for stored daily aggregates.

Dates are calendar dates in the configured time zone. Only stored rows are
returned; nothing here triggers an aggregation.

CHANGELOG:
- 2026-10-17: Initial creation
"""

import datetime

from pqmonitor.core.models import DailyAggregate
from pqmonitor.db.stores import AggregateStore

MAX_RANGE_DAYS = 365


def today(tz: datetime.tzinfo, now: datetime.datetime | None = None) -> datetime.date:
    """Current calendar date in *tz*."""
    current = now or datetime.datetime.now(tz=datetime.UTC)
    return current.astimezone(tz).date()


async def get_stats_for_date(
    store: AggregateStore, day: datetime.date
) -> DailyAggregate | None:
    return await store.find_by_date(day)


async def get_today_stats(
    store: AggregateStore,
    tz: datetime.tzinfo,
    now: datetime.datetime | None = None,
) -> DailyAggregate | None:
    return await store.find_by_date(today(tz, now))


async def get_last_days_stats(
    store: AggregateStore,
    days: int,
    tz: datetime.tzinfo,
    now: datetime.datetime | None = None,
) -> list[DailyAggregate]:
    """Stored aggregates of the last *days* days including today, oldest first.

    Raises:
        ValueError: If *days* is less than 1.
    """
    if days < 1:
        raise ValueError("days must be >= 1")
    end = today(tz, now)
    start = end - datetime.timedelta(days=days - 1)
    return await store.find_by_date_range(start, end)


async def get_stats_in_range(
    store: AggregateStore,
    start: datetime.date,
    end: datetime.date,
) -> list[DailyAggregate]:
    """Stored aggregates with ``start <= date <= end``, oldest first.

    Raises:
        ValueError: If *start* is after *end* or the range spans more than
            365 days.
    """
    if start > end:
        raise ValueError("'from' date must not be after 'to' date")
    if (end - start).days > MAX_RANGE_DAYS:
        raise ValueError(f"date range must not exceed {MAX_RANGE_DAYS} days")
    return await store.find_by_date_range(start, end)
