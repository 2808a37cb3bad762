"""
SQLAlchemy ORM models for the GeoStar database.

Defines the EnergyReadingRow model (one row per gateway and 15-minute
interval) and the single-row PortalSessionRow that holds the shared portal
session. The UNIQUE (gateway_id, ts) constraint is the conflict target for
both skip and replace insert modes.

CHANGELOG:
- 2026-10-04: Add single-row sessions table (STORY-004)
- 2026-10-03: Initial creation (STORY-005)

TODO:
- None
"""

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Double,
    Index,
    Integer,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all GeoStar ORM models."""

    pass


class EnergyReadingRow(Base):
    """A stored interval reading for one gateway.

    Attributes:
        id: Surrogate row id.
        gateway_id: Portal gateway id (gwid).
        ts: Interval timestamp in UTC epoch milliseconds.
        total_heat_1 .. total_power: The sixteen metrics, in the same order
            as :data:`geostar.models.METRIC_FIELDS`.
    """

    __tablename__ = "energy_readings"
    __table_args__ = (
        UniqueConstraint("gateway_id", "ts", name="uq_energy_readings_gateway_ts"),
        Index("idx_energy_ts", "ts"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    gateway_id: Mapped[str] = mapped_column(Text, nullable=False)
    ts: Mapped[int] = mapped_column(BigInteger, nullable=False)
    total_heat_1: Mapped[float] = mapped_column(Double, nullable=False, default=0.0)
    total_heat_2: Mapped[float] = mapped_column(Double, nullable=False, default=0.0)
    total_cool_1: Mapped[float] = mapped_column(Double, nullable=False, default=0.0)
    total_cool_2: Mapped[float] = mapped_column(Double, nullable=False, default=0.0)
    total_electric_heat: Mapped[float] = mapped_column(Double, nullable=False, default=0.0)
    total_fan_only: Mapped[float] = mapped_column(Double, nullable=False, default=0.0)
    total_loop_pump: Mapped[float] = mapped_column(Double, nullable=False, default=0.0)
    total_dehumidification: Mapped[float] = mapped_column(
        Double, nullable=False, default=0.0
    )
    runtime_heat_1: Mapped[float] = mapped_column(Double, nullable=False, default=0.0)
    runtime_heat_2: Mapped[float] = mapped_column(Double, nullable=False, default=0.0)
    runtime_cool_1: Mapped[float] = mapped_column(Double, nullable=False, default=0.0)
    runtime_cool_2: Mapped[float] = mapped_column(Double, nullable=False, default=0.0)
    runtime_electric_heat: Mapped[float] = mapped_column(
        Double, nullable=False, default=0.0
    )
    runtime_fan_only: Mapped[float] = mapped_column(Double, nullable=False, default=0.0)
    runtime_dehumidification: Mapped[float] = mapped_column(
        Double, nullable=False, default=0.0
    )
    total_power: Mapped[float] = mapped_column(Double, nullable=False, default=0.0)

    def __repr__(self) -> str:
        """Return string representation of the EnergyReadingRow."""
        return (
            f"EnergyReadingRow(gateway_id={self.gateway_id!r}, "
            f"ts={self.ts!r}, total_power={self.total_power!r})"
        )


class PortalSessionRow(Base):
    """The one persisted portal session (row id is always 1)."""

    __tablename__ = "sessions"
    __table_args__ = (CheckConstraint("id = 1", name="ck_sessions_single_row"),)

    SINGLETON_ID = 1

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    session_id: Mapped[str] = mapped_column(Text, nullable=False)
    user_key: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
