"""
Health tracking for the scheduled daily aggregation.

ScheduledHealthTracker wraps DailyAggregator with last-run bookkeeping
(run time, processed date, success flag, error message). The state lives in
one immutable AggregationRunState snapshot; every completed run builds a new
snapshot and swaps the reference under a lock, so readers always see all
four fields from the same run and never block.

States: Idle (never run, healthy, all fields unset), then Healthy or
Unhealthy depending on the outcome of the most recent run. There is no
observable "running" state.

The scheduled path swallows failures after recording them; the manual path
records them and re-raises to the caller. A failed run never blocks a later
run for the same or any other date.

CHANGELOG:
- 2026-10-17: Initial creation

TODO:
- None
"""

from __future__ import annotations

import datetime
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass

from pqmonitor.core.models import DailyAggregate
from pqmonitor.services.aggregation import DailyAggregator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AggregationRunState:
    """Snapshot of the most recent aggregation run.

    Attributes:
        last_run_time: When the run completed; None before the first run.
        last_processed_date: Date the run aggregated.
        last_run_success: Outcome; True before the first run.
        last_error: Failure message, None on success.
    """

    last_run_time: datetime.datetime | None = None
    last_processed_date: datetime.date | None = None
    last_run_success: bool = True
    last_error: str | None = None


IDLE_STATE = AggregationRunState()


def error_message(exc: BaseException) -> str:
    """Text recorded for a failed run: the message, or the exception type."""
    return str(exc) or type(exc).__name__


class ScheduledHealthTracker:
    """Runs daily aggregations and records the outcome for health checks.

    Args:
        aggregator: The aggregator to invoke.
        tz: Time zone that defines "today" for the scheduled run.
        clock: Returns the current aware datetime; injectable for tests.
    """

    def __init__(
        self,
        aggregator: DailyAggregator,
        *,
        tz: datetime.tzinfo = datetime.UTC,
        clock: Callable[[], datetime.datetime] | None = None,
    ) -> None:
        self._aggregator = aggregator
        self._tz = tz
        self._clock = clock or (lambda: datetime.datetime.now(tz=datetime.UTC))
        self._state = IDLE_STATE
        self._write_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    def yesterday(self) -> datetime.date:
        """Yesterday's date in the configured time zone."""
        return self._clock().astimezone(self._tz).date() - datetime.timedelta(days=1)

    async def run_scheduled(self) -> None:
        """Aggregate yesterday and record the outcome; never raises."""
        day = self.yesterday()
        logger.info("Scheduled aggregation started for %s", day)
        try:
            await self._aggregator.aggregate(day)
        except Exception as exc:
            logger.error("Scheduled aggregation failed for %s", day, exc_info=True)
            self._record(day, error=error_message(exc))
            return
        self._record(day, error=None)
        logger.info("Scheduled aggregation finished for %s", day)

    async def run_manual(self, day: datetime.date) -> DailyAggregate:
        """Aggregate *day* on request and record the outcome.

        Args:
            day: Date to (re)aggregate.

        Returns:
            DailyAggregate: The computed aggregate.

        Raises:
            Exception: Whatever the aggregator raised, after it is recorded.
        """
        logger.info("Manual aggregation requested for %s", day)
        try:
            aggregate = await self._aggregator.aggregate(day)
        except Exception as exc:
            logger.error("Manual aggregation failed for %s", day, exc_info=True)
            self._record(day, error=error_message(exc))
            raise
        self._record(day, error=None)
        return aggregate

    def _record(self, day: datetime.date, *, error: str | None) -> None:
        state = AggregationRunState(
            last_run_time=self._clock(),
            last_processed_date=day,
            last_run_success=error is None,
            last_error=error,
        )
        with self._write_lock:
            self._state = state

    # ------------------------------------------------------------------
    # Readers
    # ------------------------------------------------------------------

    def snapshot(self) -> AggregationRunState:
        """Return the current state; all fields come from the same run."""
        return self._state

    def is_healthy(self) -> bool:
        return self._state.last_run_success

    @property
    def last_run_time(self) -> datetime.datetime | None:
        return self._state.last_run_time

    @property
    def last_processed_date(self) -> datetime.date | None:
        return self._state.last_processed_date

    @property
    def last_run_success(self) -> bool:
        return self._state.last_run_success

    @property
    def last_error(self) -> str | None:
        return self._state.last_error
