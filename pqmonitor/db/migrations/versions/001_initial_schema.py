"""
Initial schema: create the measurements and daily_stats tables.

measurements holds every ingested sample (append-only) with an index on ts
for the time-range queries of the daily aggregation and history endpoints.
daily_stats holds one row per calendar date, unique on date so the
aggregation can upsert with ON CONFLICT (date).

Revision ID: 001
Revises: None
Create Date: 2026-10-17

CHANGELOG:
- 2026-10-17: Initial creation
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

_DAILY_FLOAT_COLUMNS = (
    "avg_voltage",
    "min_voltage",
    "max_voltage",
    "std_dev_voltage",
    "avg_power_active",
    "min_power",
    "peak_power",
    "total_energy_kwh",
    "avg_power_factor",
    "min_power_factor",
    "avg_frequency",
    "min_frequency",
    "max_frequency",
)

_DAILY_COUNT_COLUMNS = (
    "voltage_sag_count",
    "voltage_swell_count",
    "interruption_count",
    "thd_violations_count",
    "frequency_dev_count",
    "power_factor_penalty_count",
    "measurement_count",
)


def upgrade() -> None:
    """Create measurements (indexed on ts) and daily_stats (unique date)."""
    op.create_table(
        "measurements",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("ts", sa.DateTime(timezone=True), nullable=False),
        sa.Column("voltage_rms", sa.Double(), nullable=False),
        sa.Column("current_rms", sa.Double(), nullable=False),
        sa.Column("frequency", sa.Double(), nullable=False),
        sa.Column("power_active", sa.Double(), nullable=True),
        sa.Column("power_apparent", sa.Double(), nullable=True),
        sa.Column("power_reactive", sa.Double(), nullable=True),
        sa.Column("cos_phi", sa.Double(), nullable=True),
        sa.Column("thd_voltage", sa.Double(), nullable=True),
        sa.Column("thd_current", sa.Double(), nullable=True),
        sa.Column("harmonics_v", postgresql.ARRAY(sa.Double()), nullable=True),
        sa.Column("harmonics_i", postgresql.ARRAY(sa.Double()), nullable=True),
        sa.Column("voltage_deviation_percent", sa.Double(), nullable=True),
        sa.Column("frequency_deviation_hz", sa.Double(), nullable=True),
        sa.Column(
            "is_valid", sa.Boolean(), nullable=False, server_default=sa.text("true")
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_measurements_ts", "measurements", ["ts"])

    op.create_table(
        "daily_stats",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        *[
            sa.Column(name, sa.Double(), nullable=False, server_default=sa.text("0"))
            for name in _DAILY_FLOAT_COLUMNS
        ],
        *[
            sa.Column(name, sa.Integer(), nullable=False, server_default=sa.text("0"))
            for name in _DAILY_COUNT_COLUMNS
        ],
        sa.Column(
            "data_completeness",
            sa.Double(),
            nullable=False,
            server_default=sa.text("0"),
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("date", name="uq_daily_stats_date"),
    )


def downgrade() -> None:
    op.drop_table("daily_stats")
    op.drop_index("ix_measurements_ts", table_name="measurements")
    op.drop_table("measurements")
