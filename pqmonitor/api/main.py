"""
FastAPI application entry point for the power-quality API.

The lifespan loads Settings, configures logging, parses API_TOKENS into a
BearerAuth instance, creates the database engine, the stores, the daily
aggregator and its health tracker, and stores them on app.state for the
dependency providers. When AGGREGATION_SCHEDULER_ENABLED is set, the daily
trigger loop runs as a background task until shutdown.

CHANGELOG:
- 2026-10-17: Initial creation
"""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pqmonitor.api.dashboard import router as dashboard_router
from pqmonitor.api.health import router as health_router
from pqmonitor.api.measurements import router as measurements_router
from pqmonitor.api.stats import router as stats_router
from pqmonitor.auth.bearer import BearerAuth, parse_api_tokens
from pqmonitor.config import Settings, get_settings
from pqmonitor.db.session import create_engine, create_session_factory
from pqmonitor.db.stores import SqlAggregateStore, SqlSampleStore
from pqmonitor.logging_config import configure_logging
from pqmonitor.services.aggregation import DailyAggregator
from pqmonitor.services.health import ScheduledHealthTracker
from pqmonitor.services.scheduler import run_daily_loop

logger = logging.getLogger(__name__)


def build_tracker(
    settings: Settings,
    sample_store: SqlSampleStore,
    aggregate_store: SqlAggregateStore,
) -> ScheduledHealthTracker:
    """Wire a DailyAggregator and its health tracker from settings."""
    aggregator = DailyAggregator(
        sample_store,
        aggregate_store,
        thresholds=settings.thresholds(),
        tz=settings.tzinfo,
        sampling_interval_s=settings.sampling_interval_s,
        include_invalid=settings.aggregate_invalid_samples,
    )
    return ScheduledHealthTracker(aggregator, tz=settings.tzinfo)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: wire services on startup, stop them on shutdown.

    Raises:
        RuntimeError: If API_TOKENS contains no valid token:client entries.
    """
    settings = get_settings()
    configure_logging(settings.log_level)
    app.state.settings = settings

    token_map = parse_api_tokens(settings.api_tokens)
    if not token_map:
        raise RuntimeError("API_TOKENS parsed but contains no valid token:client entries")
    app.state.auth = BearerAuth(token_map)
    logger.info("Parsed %d API token(s) from API_TOKENS", len(token_map))

    engine = create_engine(settings.database_url)
    session_factory = create_session_factory(engine)
    app.state.sample_store = SqlSampleStore(session_factory)
    app.state.aggregate_store = SqlAggregateStore(session_factory)
    app.state.tracker = build_tracker(
        settings, app.state.sample_store, app.state.aggregate_store
    )

    shutdown_event = asyncio.Event()
    scheduler_task: asyncio.Task[None] | None = None
    if settings.aggregation_scheduler_enabled:
        scheduler_task = asyncio.create_task(
            run_daily_loop(
                tracker=app.state.tracker,
                shutdown_event=shutdown_event,
                run_at=settings.run_at,
                tz=settings.tzinfo,
            )
        )
    else:
        logger.info("Aggregation scheduler disabled")

    logger.info("Power-quality API ready")
    try:
        yield
    finally:
        logger.info("Power-quality API shutting down")
        shutdown_event.set()
        if scheduler_task is not None:
            await scheduler_task
        await engine.dispose()


app = FastAPI(
    title="Power Quality Monitor API",
    description="PN-EN 50160 power-quality measurements, waveforms and daily statistics.",
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST"],
    allow_headers=["Authorization", "Content-Type"],
)

app.include_router(health_router)
app.include_router(measurements_router)
app.include_router(dashboard_router)
app.include_router(stats_router)
