"""
Manual job triggers.

- GET /cron, GET /__scheduled: run the daily fetch now.
- GET /backfill?start&end[&override][&timezone]: fetch an explicit range.

Both answer HTTP 200 with the structured job result even when the job
failed in-band. Missing portal credentials are a deployment error and yield
HTTP 500 before any portal call is made.

CHANGELOG:
- 2026-10-08: Add override and timezone to /backfill (STORY-010)
- 2026-10-08: Initial creation (STORY-010)

TODO:
- None
"""

import logging

from fastapi import APIRouter, HTTPException

from geostar.api.deps import AppSettings, DbSession, VendorClient
from geostar.config import Settings
from geostar.services.jobs import backfill_data, run_daily_fetch
from geostar.services.session_store import DbSessionStore
from geostar.timezones import parse_civil_date
from geostar.vendor.auth import SessionManager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["jobs"])

MISSING_CREDENTIALS = "Missing GEOSTAR_EMAIL or GEOSTAR_PASSWORD secrets"
MISSING_BACKFILL_RANGE = "Missing start or end parameter (YYYY-MM-DD)"


def _require_credentials(settings: Settings) -> None:
    if not settings.has_credentials:
        logger.error("Job requested but portal credentials are not configured")
        raise HTTPException(status_code=500, detail=MISSING_CREDENTIALS)


@router.get("/cron")
@router.get("/__scheduled")
async def trigger_daily_fetch(
    db: DbSession,
    settings: AppSettings,
    client: VendorClient,
) -> dict:
    """Run the daily fetch for yesterday and today and return its result."""
    _require_credentials(settings)
    logger.info("Manual daily fetch for %s (password [set])", settings.geostar_email)

    result = await run_daily_fetch(
        db=db,
        manager=SessionManager(client, settings.session_max_age_s),
        store=DbSessionStore(db),
        email=settings.geostar_email,
        password=settings.geostar_password,
        timezone=settings.timezone,
    )
    logger.info("Daily fetch finished (success=%s)", result.success)
    return result.to_payload()


@router.get("/backfill")
async def trigger_backfill(
    db: DbSession,
    settings: AppSettings,
    client: VendorClient,
    start: str | None = None,
    end: str | None = None,
    override: bool = False,
    timezone: str | None = None,
) -> dict:
    """Fetch and store every gateway's readings for [start, end].

    Args:
        start: First civil date, YYYY-MM-DD.
        end: End civil date, YYYY-MM-DD.
        override: Replace stored rows instead of skipping them.
        timezone: Zone for the portal query; defaults to TIMEZONE.

    Raises:
        HTTPException: 400 on a missing or malformed date, 500 when
            credentials are not configured.
    """
    if not start or not end:
        raise HTTPException(status_code=400, detail=MISSING_BACKFILL_RANGE)
    try:
        parse_civil_date(start)
        parse_civil_date(end)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    _require_credentials(settings)

    result = await backfill_data(
        db=db,
        manager=SessionManager(client, settings.session_max_age_s),
        store=DbSessionStore(db),
        email=settings.geostar_email,
        password=settings.geostar_password,
        start=start,
        end=end,
        timezone=timezone or settings.timezone,
        override=override,
    )
    logger.info("Backfill %s..%s finished (success=%s)", start, end, result.success)
    return result.to_payload()
