"""
Tests for the best-effort Redis latest-sample cache.

CHANGELOG:
- 2026-10-17: Initial creation
"""

from unittest.mock import AsyncMock, patch

import pytest
from conftest import make_sample

from pqmonitor.cache.redis_client import (
    LATEST_SAMPLE_KEY,
    cache_latest,
    get_cached_latest,
)

REDIS_URL = "redis://localhost:6379/0"


def _mock_redis_client(
    cached_value: str | bytes | None = None,
    side_effect: Exception | None = None,
) -> AsyncMock:
    client = AsyncMock()
    client.get = AsyncMock(return_value=cached_value, side_effect=side_effect)
    client.set = AsyncMock(side_effect=side_effect)
    client.delete = AsyncMock(side_effect=side_effect)
    client.aclose = AsyncMock()
    return client


def _patch_redis(client: AsyncMock):
    return patch(
        "pqmonitor.cache.redis_client.get_redis",
        new_callable=AsyncMock,
        return_value=client,
    )


class TestGetCachedLatest:
    @pytest.mark.asyncio
    async def test_hit_returns_sample(self) -> None:
        sample = make_sample()
        client = _mock_redis_client(sample.model_dump_json(by_alias=True).encode())

        with _patch_redis(client):
            cached = await get_cached_latest(REDIS_URL)

        assert cached == sample
        client.get.assert_awaited_once_with(LATEST_SAMPLE_KEY)
        client.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_miss_returns_none(self) -> None:
        with _patch_redis(_mock_redis_client(None)):
            assert await get_cached_latest(REDIS_URL) is None

    @pytest.mark.asyncio
    async def test_redis_failure_returns_none(self) -> None:
        client = _mock_redis_client(side_effect=ConnectionError("refused"))
        with _patch_redis(client):
            assert await get_cached_latest(REDIS_URL) is None
        client.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_corrupt_entry_is_ignored(self) -> None:
        with _patch_redis(_mock_redis_client(b"not json")):
            assert await get_cached_latest(REDIS_URL) is None


class TestCacheWrites:
    @pytest.mark.asyncio
    async def test_cache_latest_sets_ttl(self) -> None:
        client = _mock_redis_client()
        with _patch_redis(client):
            await cache_latest(REDIS_URL, make_sample(), 5)

        args, kwargs = client.set.call_args
        assert args[0] == LATEST_SAMPLE_KEY
        assert kwargs["ex"] == 5
        assert kwargs["nx"] is False

    @pytest.mark.asyncio
    async def test_refill_only_when_absent(self) -> None:
        client = _mock_redis_client()
        with _patch_redis(client):
            await cache_latest(REDIS_URL, make_sample(), 5, only_if_absent=True)

        assert client.set.call_args.kwargs["nx"] is True

    @pytest.mark.asyncio
    async def test_cache_write_failure_is_swallowed(self) -> None:
        with _patch_redis(_mock_redis_client(side_effect=ConnectionError("refused"))):
            await cache_latest(REDIS_URL, make_sample(), 5)
