"""
SQLAlchemy ORM models for the power-quality database.

Defines the Measurement model (one row per ingested sample, append-only) and
the DailyStats model (one row per calendar date, unique on ``date`` so the
daily aggregation can upsert idempotently).

CHANGELOG:
- 2026-10-17: Initial creation

TODO:
- None
"""

import datetime

from sqlalchemy import BigInteger, Boolean, Date, DateTime, Double, Integer, func
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all power-quality ORM models."""

    pass


class Measurement(Base):
    """One electrical measurement sample as stored.

    Attributes:
        id: Surrogate key.
        ts: Measurement timestamp (timezone-aware).
        voltage_rms: RMS voltage in volts.
        current_rms: RMS current in amperes.
        frequency: Supply frequency in hertz.
        power_active: Active power in watts (nullable).
        power_apparent: Apparent power in VA (nullable).
        power_reactive: Reactive power in var (nullable).
        cos_phi: Power factor (nullable).
        thd_voltage: Voltage THD in percent (nullable).
        thd_current: Current THD in percent (nullable).
        harmonics_v: Voltage harmonic amplitudes H1..H8 (nullable).
        harmonics_i: Current harmonic amplitudes H1..H8 (nullable).
        voltage_deviation_percent: Deviation from nominal voltage at ingest.
        frequency_deviation_hz: Deviation from nominal frequency at ingest.
        is_valid: False when the validator reported errors.
        created_at: Row insertion time.
    """

    __tablename__ = "measurements"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    ts: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    voltage_rms: Mapped[float] = mapped_column(Double, nullable=False)
    current_rms: Mapped[float] = mapped_column(Double, nullable=False)
    frequency: Mapped[float] = mapped_column(Double, nullable=False)
    power_active: Mapped[float | None] = mapped_column(Double, nullable=True)
    power_apparent: Mapped[float | None] = mapped_column(Double, nullable=True)
    power_reactive: Mapped[float | None] = mapped_column(Double, nullable=True)
    cos_phi: Mapped[float | None] = mapped_column(Double, nullable=True)
    thd_voltage: Mapped[float | None] = mapped_column(Double, nullable=True)
    thd_current: Mapped[float | None] = mapped_column(Double, nullable=True)
    harmonics_v: Mapped[list[float] | None] = mapped_column(
        ARRAY(Double), nullable=True
    )
    harmonics_i: Mapped[list[float] | None] = mapped_column(
        ARRAY(Double), nullable=True
    )
    voltage_deviation_percent: Mapped[float | None] = mapped_column(
        Double, nullable=True
    )
    frequency_deviation_hz: Mapped[float | None] = mapped_column(Double, nullable=True)
    is_valid: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default="true"
    )
    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    def __repr__(self) -> str:
        """Return string representation of the Measurement."""
        return (
            f"Measurement(id={self.id!r}, ts={self.ts!r}, "
            f"voltage_rms={self.voltage_rms!r}, is_valid={self.is_valid!r})"
        )


class DailyStats(Base):
    """Daily aggregate statistics for one calendar date.

    Column names match the fields of
    :class:`pqmonitor.core.models.DailyAggregate`.
    """

    __tablename__ = "daily_stats"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False, unique=True)

    avg_voltage: Mapped[float] = mapped_column(Double, nullable=False, default=0.0)
    min_voltage: Mapped[float] = mapped_column(Double, nullable=False, default=0.0)
    max_voltage: Mapped[float] = mapped_column(Double, nullable=False, default=0.0)
    std_dev_voltage: Mapped[float] = mapped_column(Double, nullable=False, default=0.0)

    avg_power_active: Mapped[float] = mapped_column(Double, nullable=False, default=0.0)
    min_power: Mapped[float] = mapped_column(Double, nullable=False, default=0.0)
    peak_power: Mapped[float] = mapped_column(Double, nullable=False, default=0.0)
    total_energy_kwh: Mapped[float] = mapped_column(Double, nullable=False, default=0.0)

    avg_power_factor: Mapped[float] = mapped_column(Double, nullable=False, default=0.0)
    min_power_factor: Mapped[float] = mapped_column(Double, nullable=False, default=0.0)

    avg_frequency: Mapped[float] = mapped_column(Double, nullable=False, default=0.0)
    min_frequency: Mapped[float] = mapped_column(Double, nullable=False, default=0.0)
    max_frequency: Mapped[float] = mapped_column(Double, nullable=False, default=0.0)

    voltage_sag_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    voltage_swell_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    interruption_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    thd_violations_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    frequency_dev_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    power_factor_penalty_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )

    measurement_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    data_completeness: Mapped[float] = mapped_column(Double, nullable=False, default=0.0)

    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    def __repr__(self) -> str:
        """Return string representation of the DailyStats row."""
        return (
            f"DailyStats(date={self.date!r}, "
            f"measurement_count={self.measurement_count!r})"
        )
