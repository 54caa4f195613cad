"""
Health check endpoints.

GET /health is a plain liveness probe. GET /health/scheduled-jobs reports
the state of the daily aggregation job from the health tracker snapshot;
its ``status`` is DOWN while the most recent run failed. No authentication
is required.

CHANGELOG:
- 2026-10-17: Initial creation

TODO:
- None
"""

from datetime import UTC, datetime

from fastapi import APIRouter

from pqmonitor.api.deps import SettingsDep, TrackerDep

router = APIRouter(prefix="/health", tags=["health"])

SERVICE_NAME = "pq-monitor"
AGGREGATION_JOB_NAME = "DailyStatsAggregation"


@router.get("")
async def health() -> dict[str, str]:
    """Return a simple liveness status.

    Returns:
        dict: ``{"status": "UP", "service": ..., "timestamp": ...}``.
    """
    return {
        "status": "UP",
        "service": SERVICE_NAME,
        "timestamp": datetime.now(tz=UTC).isoformat(),
    }


@router.get("/scheduled-jobs")
async def scheduled_jobs(tracker: TrackerDep, settings: SettingsDep) -> dict:
    """Return the status of the daily aggregation job.

    All job fields are read from one tracker snapshot, so they always
    describe the same run.
    """
    state = tracker.snapshot()
    return {
        "status": "UP" if state.last_run_success else "DOWN",
        "aggregation_job": {
            "name": AGGREGATION_JOB_NAME,
            "schedule": f"every day at {settings.aggregation_run_time} ({settings.timezone})",
            "enabled": settings.aggregation_scheduler_enabled,
            "last_run_time": (
                state.last_run_time.isoformat() if state.last_run_time else None
            ),
            "last_processed_date": (
                state.last_processed_date.isoformat()
                if state.last_processed_date
                else None
            ),
            "last_run_success": state.last_run_success,
            "last_error": state.last_error,
        },
        "timestamp": datetime.now(tz=UTC).isoformat(),
    }
