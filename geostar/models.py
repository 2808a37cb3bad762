"""
Pydantic models for portal sessions, gateways and energy readings.

An EnergyReading is one row of the portal's columnar energy response: a UTC
millisecond timestamp plus sixteen numeric metrics. Readings carry no
gateway id; the gateway is supplied by the caller when they are persisted.

CHANGELOG:
- 2026-10-07: Add aggregate view models (DailyTotal, HourlyTotal) (STORY-009)
- 2026-10-05: Add job result models (STORY-007)
- 2026-10-02: Initial creation (STORY-002)

TODO:
- None
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class PortalSession(BaseModel):
    """An authenticated GeoStar portal session.

    Attributes:
        session_id: Value of the ``sessionid`` cookie issued at login.
        user_key: The account's AWL user key, required by every data call.
        created_at: Login time in UTC epoch milliseconds.
    """

    model_config = ConfigDict(frozen=True)

    session_id: str
    user_key: str
    created_at: int


class Gateway(BaseModel):
    """A heat-pump gateway as listed by the portal."""

    gwid: str
    name: str
    location: str | None = None


class Metrics(BaseModel):
    """The sixteen energy and runtime metrics reported per interval.

    Field order matches the portal column names and the database columns.
    """

    total_heat_1: float = 0.0
    total_heat_2: float = 0.0
    total_cool_1: float = 0.0
    total_cool_2: float = 0.0
    total_electric_heat: float = 0.0
    total_fan_only: float = 0.0
    total_loop_pump: float = 0.0
    total_dehumidification: float = 0.0
    runtime_heat_1: float = 0.0
    runtime_heat_2: float = 0.0
    runtime_cool_1: float = 0.0
    runtime_cool_2: float = 0.0
    runtime_electric_heat: float = 0.0
    runtime_fan_only: float = 0.0
    runtime_dehumidification: float = 0.0
    total_power: float = 0.0


METRIC_FIELDS: tuple[str, ...] = tuple(Metrics.model_fields)
"""Metric names in column order."""


class EnergyReading(Metrics):
    """One interval reading; ``timestamp`` is UTC epoch milliseconds."""

    timestamp: int


class StoredEnergyReading(EnergyReading):
    """A persisted reading with its row id and gateway."""

    id: int
    gateway_id: str


class DailyTotal(Metrics):
    """Metric sums for one gateway over one civil date."""

    date: str
    gateway_id: str
    reading_count: int


class HourlyTotal(Metrics):
    """Metric sums for one gateway over one local hour (0-23)."""

    hour: int
    gateway_id: str
    reading_count: int


class GatewayResult(BaseModel):
    """Outcome of fetching and storing one gateway's readings."""

    gwid: str
    inserted: int = 0
    skipped: int = 0
    error: str | None = None


class JobResult(BaseModel):
    """Outcome of a daily fetch or backfill run.

    ``success`` is False when the job aborted (``error`` set) or when any
    gateway recorded an error.
    """

    success: bool = True
    gateways: list[GatewayResult] = Field(default_factory=list)
    error: str | None = None
    login_refreshed: bool = Field(default=False, serialization_alias="loginRefreshed")

    def to_payload(self) -> dict:
        """Serialise to the JSON shape returned by the job endpoints."""
        return self.model_dump(by_alias=True, exclude_none=True)
