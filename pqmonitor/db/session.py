"""
Engine and session factory for the PostgreSQL sample and aggregate stores.

The API lifespan and the ``aggregate`` CLI command build one engine from
DATABASE_URL, hand a session factory to SqlSampleStore/SqlAggregateStore and
dispose the engine when they exit. Alembic reuses :func:`create_engine` with
a NullPool so migrations never keep connections open.

CHANGELOG:
- 2026-10-17: Initial creation
"""

from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)


def create_engine(database_url: str, **engine_options: Any) -> AsyncEngine:
    """Build the asyncpg-backed engine for *database_url*.

    Connections are checked with a pre-ping on checkout unless a custom
    ``poolclass`` is given.

    Args:
        database_url: postgresql+asyncpg:// URL.
        **engine_options: Extra ``create_async_engine`` keyword arguments.
    """
    if "poolclass" not in engine_options:
        engine_options.setdefault("pool_pre_ping", True)
    return create_async_engine(database_url, **engine_options)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory used by the SQL stores.

    Objects stay readable after commit, since the stores convert rows to
    domain models once the session is closed.
    """
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
