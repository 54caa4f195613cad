"""
Redis cache for the latest sample.

The most recent sample is cached as JSON under a single key with a short
TTL so dashboard polling does not hit the database on every request. All
cache operations are best-effort: connection failures are logged and never
propagate, callers fall back to the database.

CHANGELOG:
- 2026-10-17: Initial creation
"""

import logging

import redis.asyncio as redis

from pqmonitor.core.models import Sample

logger = logging.getLogger(__name__)

LATEST_SAMPLE_KEY = "pq:latest"


async def get_redis(redis_url: str) -> redis.Redis:
    """Create an async Redis client for *redis_url*."""
    return redis.from_url(redis_url)


async def get_cached_latest(redis_url: str) -> Sample | None:
    """Return the cached latest sample, or None on miss or Redis failure.

    Args:
        redis_url: Redis connection URL.

    Returns:
        Sample | None: The cached sample, if present and decodable.
    """
    try:
        client = await get_redis(redis_url)
        try:
            cached = await client.get(LATEST_SAMPLE_KEY)
        finally:
            await client.aclose()
    except Exception:
        logger.warning(
            "Redis read failed for key %s, falling back to DB",
            LATEST_SAMPLE_KEY,
            exc_info=True,
        )
        return None

    if cached is None:
        return None
    try:
        return Sample.model_validate_json(cached)
    except ValueError:
        logger.warning("Discarding undecodable cache entry %s", LATEST_SAMPLE_KEY)
        return None


async def cache_latest(
    redis_url: str,
    sample: Sample,
    ttl_s: int,
    *,
    only_if_absent: bool = False,
) -> None:
    """Store *sample* as the latest sample for *ttl_s* seconds (best effort).

    Ingestion writes unconditionally. Readers that refill the cache from the
    database pass ``only_if_absent=True`` (SET NX), so a sample read before a
    concurrent ingest can never replace the one that ingest wrote.

    Args:
        redis_url: Redis connection URL.
        sample: Sample to cache.
        ttl_s: Entry lifetime in seconds.
        only_if_absent: Leave an existing entry untouched.
    """
    try:
        client = await get_redis(redis_url)
        try:
            await client.set(
                LATEST_SAMPLE_KEY,
                sample.model_dump_json(by_alias=True),
                ex=ttl_s,
                nx=only_if_absent,
            )
        finally:
            await client.aclose()
    except Exception:
        logger.warning(
            "Redis write failed for key %s",
            LATEST_SAMPLE_KEY,
            exc_info=True,
        )
