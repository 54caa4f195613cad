"""
Command-line entry point.

    python -m pqmonitor serve [--host HOST] [--port PORT]
    python -m pqmonitor aggregate --date YYYY-MM-DD

``serve`` runs the API under uvicorn. ``aggregate`` runs one manual daily
aggregation against the configured database, prints the aggregate as JSON
and exits non-zero on failure.

CHANGELOG:
- 2026-10-17: Initial creation

TODO:
- None
"""

from __future__ import annotations

import argparse
import asyncio
import datetime
import logging
import sys

from pqmonitor.config import get_settings
from pqmonitor.logging_config import configure_logging

logger = logging.getLogger(__name__)


def _parse_date(value: str) -> datetime.date:
    try:
        return datetime.date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date '{value}', expected YYYY-MM-DD") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pqmonitor",
        description="Power-quality monitoring service.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API.")
    serve.add_argument("--host", default="0.0.0.0", help="Bind address (default: 0.0.0.0).")
    serve.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000).")

    aggregate = sub.add_parser("aggregate", help="Aggregate one day of samples.")
    aggregate.add_argument(
        "--date",
        type=_parse_date,
        required=True,
        help="Calendar date to aggregate (YYYY-MM-DD).",
    )
    return parser


async def run_aggregate(day: datetime.date) -> int:
    """Run one manual aggregation and print the result.

    Returns:
        int: Process exit code (0 on success, 1 on failure).
    """
    from pqmonitor.api.main import build_tracker
    from pqmonitor.db.session import create_engine, create_session_factory
    from pqmonitor.db.stores import SqlAggregateStore, SqlSampleStore

    settings = get_settings()
    engine = create_engine(settings.database_url)
    session_factory = create_session_factory(engine)
    tracker = build_tracker(
        settings,
        SqlSampleStore(session_factory),
        SqlAggregateStore(session_factory),
    )
    try:
        aggregate = await tracker.run_manual(day)
    except Exception:
        logger.error("Aggregation for %s failed", day)
        return 1
    finally:
        await engine.dispose()

    print(aggregate.model_dump_json(indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level)

    if args.command == "serve":
        import uvicorn

        uvicorn.run("pqmonitor.api.main:app", host=args.host, port=args.port)
        return 0

    return asyncio.run(run_aggregate(args.date))


if __name__ == "__main__":
    sys.exit(main())
