"""
Read endpoints over stored energy readings.

- GET /api/energy/daily?start&end[&timezone]  -> {"data": [DailyTotal]}
- GET /api/energy/hourly?date[&timezone]      -> {"data": [HourlyTotal]}
- GET /api/energy/raw?start&end[&gateway][&timezone]
                                              -> {"data": [...], "count": n}
- GET /api/gateways                           -> {"gateways": [gwid]}

Dates are civil dates (YYYY-MM-DD) in the requested timezone, defaulting to
the configured TIMEZONE. Missing or malformed dates yield HTTP 400.

CHANGELOG:
- 2026-10-08: Accept an optional timezone override (STORY-010)
- 2026-10-07: Initial creation (STORY-009)

TODO:
- None
"""

import logging

from fastapi import APIRouter, HTTPException

from geostar.api.deps import AppSettings, DbSession
from geostar.services.aggregation import (
    daily_totals,
    hourly_totals,
    known_gateways,
    raw_readings,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["energy"])

MISSING_RANGE = "Missing start or end parameter"
MISSING_DATE = "Missing date parameter"


@router.get("/energy/daily")
async def get_daily(
    db: DbSession,
    settings: AppSettings,
    start: str | None = None,
    end: str | None = None,
    timezone: str | None = None,
) -> dict:
    """Return per-gateway metric totals for each civil date in [start, end].

    Raises:
        HTTPException: 400 if a date is missing or malformed.
    """
    if not start or not end:
        raise HTTPException(status_code=400, detail=MISSING_RANGE)
    try:
        data = await daily_totals(db, start, end, timezone or settings.timezone)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"data": [row.model_dump() for row in data]}


@router.get("/energy/hourly")
async def get_hourly(
    db: DbSession,
    settings: AppSettings,
    date: str | None = None,
    timezone: str | None = None,
) -> dict:
    """Return per-gateway metric totals for each local hour of *date*."""
    if not date:
        raise HTTPException(status_code=400, detail=MISSING_DATE)
    try:
        data = await hourly_totals(db, date, timezone or settings.timezone)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"data": [row.model_dump() for row in data]}


@router.get("/energy/raw")
async def get_raw(
    db: DbSession,
    settings: AppSettings,
    start: str | None = None,
    end: str | None = None,
    gateway: str | None = None,
    timezone: str | None = None,
) -> dict:
    """Return up to 1000 stored readings in [start, end], newest first."""
    if not start or not end:
        raise HTTPException(status_code=400, detail=MISSING_RANGE)
    try:
        data = await raw_readings(
            db, start, end, timezone or settings.timezone, gateway_id=gateway
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"data": [row.model_dump() for row in data], "count": len(data)}


@router.get("/gateways")
async def get_gateways(db: DbSession) -> dict:
    """Return the distinct gateway ids that have stored readings."""
    return {"gateways": await known_gateways(db)}
