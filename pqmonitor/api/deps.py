"""
FastAPI dependency injection providers.

Stores, the health tracker, settings and the cache URL are created once in
the application lifespan and kept on ``app.state``; these providers hand
them to route handlers via Depends() so tests can override each one.

CHANGELOG:
- 2026-10-17: Initial creation
"""

from typing import Annotated

from fastapi import Depends, Request

from pqmonitor.config import Settings
from pqmonitor.db.stores import AggregateStore, SampleStore
from pqmonitor.services.health import ScheduledHealthTracker


def get_sample_store(request: Request) -> SampleStore:
    return request.app.state.sample_store


def get_aggregate_store(request: Request) -> AggregateStore:
    return request.app.state.aggregate_store


def get_tracker(request: Request) -> ScheduledHealthTracker:
    return request.app.state.tracker


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_redis_url(request: Request) -> str | None:
    """Redis URL of the latest-sample cache, or None to bypass the cache."""
    return request.app.state.settings.redis_url


async def get_client_id(request: Request) -> str:
    """Extract the authenticated client name via BearerAuth on app.state.

    This thin wrapper exists so that FastAPI's Depends() mechanism
    can call the BearerAuth.verify method stored on app.state.auth.
    """
    return await request.app.state.auth.verify(request)


SampleStoreDep = Annotated[SampleStore, Depends(get_sample_store)]
AggregateStoreDep = Annotated[AggregateStore, Depends(get_aggregate_store)]
TrackerDep = Annotated[ScheduledHealthTracker, Depends(get_tracker)]
SettingsDep = Annotated[Settings, Depends(get_app_settings)]
RedisUrlDep = Annotated[str | None, Depends(get_redis_url)]
ClientIdDep = Annotated[str, Depends(get_client_id)]
