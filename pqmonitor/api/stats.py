"""
Daily statistics endpoints.

Read endpoints serve stored DailyAggregate rows. POST /api/stats/recalculate
(Bearer auth) re-runs the aggregation for one date through the health
tracker, so the outcome is visible on /health/scheduled-jobs.

CHANGELOG:
- 2026-10-17: Initial creation

TODO:
- None
"""

import logging
from datetime import date
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query

from pqmonitor.api.deps import AggregateStoreDep, ClientIdDep, SettingsDep, TrackerDep
from pqmonitor.core.models import DailyAggregate
from pqmonitor.services.health import error_message
from pqmonitor.services.stats import (
    get_last_days_stats,
    get_stats_for_date,
    get_stats_in_range,
    get_today_stats,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/stats", tags=["stats"])


@router.get("/daily", response_model=DailyAggregate)
async def daily(store: AggregateStoreDep, settings: SettingsDep) -> DailyAggregate:
    """Today's stored aggregate.

    Raises:
        HTTPException: 404 if today has not been aggregated.
    """
    result = await get_today_stats(store, settings.tzinfo)
    if result is None:
        raise HTTPException(status_code=404, detail="No statistics for today.")
    return result


@router.get("/last-7-days", response_model=list[DailyAggregate])
async def last_7_days(store: AggregateStoreDep, settings: SettingsDep) -> list[DailyAggregate]:
    return await get_last_days_stats(store, 7, settings.tzinfo)


@router.get("/last-30-days", response_model=list[DailyAggregate])
async def last_30_days(store: AggregateStoreDep, settings: SettingsDep) -> list[DailyAggregate]:
    return await get_last_days_stats(store, 30, settings.tzinfo)


@router.get("/range", response_model=list[DailyAggregate])
async def date_range(
    store: AggregateStoreDep,
    from_date: Annotated[date, Query(alias="from")],
    to_date: Annotated[date, Query(alias="to")],
) -> list[DailyAggregate]:
    """Stored aggregates between ``from`` and ``to`` inclusive, oldest first.

    Raises:
        HTTPException: 400 if the range is reversed or exceeds 365 days.
    """
    try:
        return await get_stats_in_range(store, from_date, to_date)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from None


@router.get("/date", response_model=DailyAggregate)
async def for_date(
    store: AggregateStoreDep,
    day: Annotated[date, Query(alias="date")],
) -> DailyAggregate:
    result = await get_stats_for_date(store, day)
    if result is None:
        raise HTTPException(status_code=404, detail=f"No statistics for {day.isoformat()}.")
    return result


@router.post("/recalculate", response_model=DailyAggregate)
async def recalculate(
    client_id: ClientIdDep,
    tracker: TrackerDep,
    day: Annotated[date, Query(alias="date")],
) -> DailyAggregate:
    """Re-run the daily aggregation for one date.

    Raises:
        HTTPException: 500 with the failure message if aggregation fails.
    """
    logger.info("Recalculation of %s requested by %s", day, client_id)
    try:
        return await tracker.run_manual(day)
    except Exception as exc:
        raise HTTPException(
            status_code=500,
            detail=f"Aggregation for {day.isoformat()} failed: {error_message(exc)}",
        ) from exc
