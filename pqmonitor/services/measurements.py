"""
Read services for samples: latest sample, latest indicators, waveforms,
dashboard and history.

The latest sample is served from the Redis cache when a Redis URL is given,
falling back to the sample store on miss or cache failure. A refill after a
miss only fills an empty key, so it never replaces a sample that ingestion
wrote in the meantime.

CHANGELOG:
- 2026-10-17: Initial creation

TODO:
- None
"""

import datetime
import logging

from pydantic import BaseModel

from pqmonitor.cache.redis_client import cache_latest, get_cached_latest
from pqmonitor.core.models import PowerQualityIndicators, Sample, Waveform
from pqmonitor.core.quality import evaluate
from pqmonitor.core.thresholds import DEFAULT_THRESHOLDS, Thresholds
from pqmonitor.core.waveform import reconstruct_waveforms
from pqmonitor.db.stores import SampleStore

logger = logging.getLogger(__name__)

DASHBOARD_HISTORY_SIZE = 100
MAX_HISTORY_LIMIT = 1000
DEFAULT_HISTORY_WINDOW = datetime.timedelta(hours=1)


class Dashboard(BaseModel):
    """Latest sample, its waveforms and the most recent samples."""

    latest: Sample
    waveforms: Waveform
    recent_history: list[Sample]


async def get_latest(
    store: SampleStore,
    *,
    redis_url: str | None = None,
    cache_ttl_s: int = 5,
) -> Sample | None:
    """Return the most recent sample, or None when none is stored.

    Args:
        store: Sample store.
        redis_url: Redis URL for the latest-sample cache; None skips caching.
        cache_ttl_s: TTL of a freshly cached entry.
    """
    if redis_url:
        cached = await get_cached_latest(redis_url)
        if cached is not None:
            return cached

    sample = await store.latest()
    if sample is not None and redis_url:
        await cache_latest(redis_url, sample, cache_ttl_s, only_if_absent=True)
    return sample


async def get_latest_indicators(
    store: SampleStore,
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
    *,
    redis_url: str | None = None,
    cache_ttl_s: int = 5,
) -> PowerQualityIndicators | None:
    """PN-EN 50160 indicators of the latest sample, or None."""
    sample = await get_latest(store, redis_url=redis_url, cache_ttl_s=cache_ttl_s)
    if sample is None:
        return None
    return evaluate(sample, thresholds)


async def get_latest_waveform(
    store: SampleStore,
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
    *,
    redis_url: str | None = None,
    cache_ttl_s: int = 5,
) -> Waveform | None:
    """Reconstructed waveforms of the latest sample, or None."""
    sample = await get_latest(store, redis_url=redis_url, cache_ttl_s=cache_ttl_s)
    if sample is None:
        return None
    return reconstruct_waveforms(sample, nominal_frequency_hz=thresholds.nominal_frequency_hz)


async def get_dashboard(
    store: SampleStore,
    thresholds: Thresholds = DEFAULT_THRESHOLDS,
    *,
    redis_url: str | None = None,
    cache_ttl_s: int = 5,
) -> Dashboard | None:
    """Latest sample with its waveforms and the last 100 samples, or None."""
    latest = await get_latest(store, redis_url=redis_url, cache_ttl_s=cache_ttl_s)
    if latest is None:
        return None
    history = await store.latest_n(DASHBOARD_HISTORY_SIZE)
    return Dashboard(
        latest=latest,
        waveforms=reconstruct_waveforms(
            latest, nominal_frequency_hz=thresholds.nominal_frequency_hz
        ),
        recent_history=history,
    )


async def get_history(
    store: SampleStore,
    *,
    start: datetime.datetime | None = None,
    end: datetime.datetime | None = None,
    limit: int = 100,
    now: datetime.datetime | None = None,
) -> list[Sample]:
    """Samples between *start* and *end*, newest first.

    Args:
        store: Sample store.
        start: Lower bound; defaults to one hour before *end*.
        end: Upper bound; defaults to now.
        limit: Maximum number of samples, 1..1000.
        now: Current time, injectable for tests.

    Returns:
        list[Sample]: At most *limit* samples, newest first.

    Raises:
        ValueError: If *limit* is out of range or *start* is after *end*.
    """
    if not 1 <= limit <= MAX_HISTORY_LIMIT:
        raise ValueError(f"limit must be between 1 and {MAX_HISTORY_LIMIT}")

    end = end or now or datetime.datetime.now(tz=datetime.UTC)
    start = start or end - DEFAULT_HISTORY_WINDOW
    if start > end:
        raise ValueError("'from' must not be after 'to'")

    return await store.history(start, end, limit)
