"""
Alembic environment for the measurements and daily_stats schema.

The database URL comes from ``alembic -x database_url=...`` when given,
otherwise from DATABASE_URL. Online migrations run over the service's own
async engine factory with a NullPool; offline mode renders SQL only.

    alembic upgrade head
    alembic -x database_url=postgresql+asyncpg://... upgrade head

CHANGELOG:
- 2026-10-17: Initial creation
"""

import asyncio
import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection

from pqmonitor.db.models import Base
from pqmonitor.db.session import create_engine

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def _database_url() -> str:
    url = context.get_x_argument(as_dictionary=True).get("database_url") or os.environ.get(
        "DATABASE_URL"
    )
    if not url:
        raise RuntimeError("Set DATABASE_URL or pass -x database_url=... to alembic")
    return url


def _configure(**options) -> None:
    context.configure(target_metadata=Base.metadata, compare_type=True, **options)


def _migrate(connection: Connection) -> None:
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def _migrate_online() -> None:
    engine = create_engine(_database_url(), poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    _configure(url=_database_url(), literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()
else:
    asyncio.run(_migrate_online())
