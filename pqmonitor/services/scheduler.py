"""
Daily trigger loop for the scheduled aggregation.

Sleeps until the next configured local run time, calls
``ScheduledHealthTracker.run_scheduled()``, and repeats until the shutdown
event is set. Sleeping is done by waiting on the shutdown event with a
timeout so shutdown interrupts the wait immediately.

CHANGELOG:
- 2026-10-17: Initial creation

TODO:
- None
"""

from __future__ import annotations

import asyncio
import contextlib
import datetime
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pqmonitor.services.health import ScheduledHealthTracker

logger = logging.getLogger(__name__)


def next_run(
    run_at: datetime.time, now: datetime.datetime, tz: datetime.tzinfo
) -> datetime.datetime:
    """Return the first local *run_at* in *tz* strictly after *now*."""
    local_now = now.astimezone(tz)
    candidate = datetime.datetime.combine(local_now.date(), run_at, tzinfo=tz)
    if candidate <= local_now:
        candidate = datetime.datetime.combine(
            local_now.date() + datetime.timedelta(days=1), run_at, tzinfo=tz
        )
    return candidate


def seconds_until(
    run_at: datetime.time, now: datetime.datetime, tz: datetime.tzinfo
) -> float:
    """Seconds from *now* until the next local *run_at*.

    The difference is taken in UTC so DST transitions are accounted for.
    """
    target = next_run(run_at, now, tz)
    return (target.astimezone(datetime.UTC) - now.astimezone(datetime.UTC)).total_seconds()


async def run_daily_loop(
    *,
    tracker: ScheduledHealthTracker,
    shutdown_event: asyncio.Event,
    run_at: datetime.time,
    tz: datetime.tzinfo,
    clock: Callable[[], datetime.datetime] | None = None,
) -> None:
    """Run the scheduled aggregation once per day until shutdown.

    Args:
        tracker: Health tracker that performs and records the run.
        shutdown_event: Event to signal graceful shutdown.
        run_at: Local time of day to run at.
        tz: Time zone of *run_at*.
        clock: Returns the current aware datetime; injectable for tests.
    """
    now_fn = clock or (lambda: datetime.datetime.now(tz=datetime.UTC))
    logger.info("Aggregation scheduler started (daily at %s %s)", run_at, tz)

    while not shutdown_event.is_set():
        delay = seconds_until(run_at, now_fn(), tz)
        logger.debug("Next scheduled aggregation in %.0f s", delay)

        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(shutdown_event.wait(), timeout=delay)
        if shutdown_event.is_set():
            break

        await tracker.run_scheduled()

    logger.info("Aggregation scheduler stopped")
