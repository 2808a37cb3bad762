"""
Daily fetch and backfill jobs.

Both jobs acquire a valid portal session, list the account's gateways and
then process each gateway sequentially and in isolation: a failure while
fetching or storing one gateway is recorded in that gateway's result slot
and never aborts its siblings. Job-level failures (session acquisition,
gateway listing, no gateways) abort the run and set the job-level error.
No exception escapes either job.

The only automatic retry is a single forced re-login when gateway listing
raises :class:`~geostar.vendor.errors.AuthError`.

CHANGELOG:
- 2026-10-08: Add override flag to backfill (STORY-010)
- 2026-10-06: Roll back the gateway's transaction on failure (STORY-008)
- 2026-10-05: Initial creation (STORY-007)

TODO:
- None
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from geostar.models import Gateway, GatewayResult, JobResult, PortalSession
from geostar.services.ingestion import InsertResult, reconcile, store_range
from geostar.services.session_store import SessionStore
from geostar.timezones import civil_window, day_start_ms, utc_offset_ms
from geostar.vendor.auth import SessionManager
from geostar.vendor.errors import AuthError

logger = logging.getLogger(__name__)

DEFAULT_GRANULARITY = "15min"

GatewayWork = Callable[[PortalSession, Gateway], Awaitable[InsertResult]]


async def run_daily_fetch(
    *,
    db: AsyncSession,
    manager: SessionManager,
    store: SessionStore,
    email: str,
    password: str,
    timezone: str,
    now: datetime | None = None,
) -> JobResult:
    """Fetch yesterday and today for every gateway and reconcile them.

    The window is (yesterday, today) in *timezone*. Readings before local
    midnight of today are stored with skip semantics, later ones with
    replace semantics.

    Args:
        db: Async database session used for readings.
        manager: Session manager wrapping the portal client.
        store: Where the shared portal session is persisted.
        email: Portal login email.
        password: Portal login password.
        timezone: IANA zone that defines "yesterday" and "today".
        now: Reference instant; defaults to the current time.

    Returns:
        JobResult: Per-gateway counts or errors.
    """
    start, end = civil_window(timezone, now)
    boundary_ts = day_start_ms(end, utc_offset_ms(timezone, end))
    logger.info(
        "Starting daily fetch for %s to %s (%s), today starts at %d",
        start,
        end,
        timezone,
        boundary_ts,
    )

    async def _work(session: PortalSession, gateway: Gateway) -> InsertResult:
        readings = await manager.client.get_energy_data(
            session, gateway.gwid, start, end, DEFAULT_GRANULARITY, timezone
        )
        logger.info("Got %d readings for gateway %s", len(readings), gateway.gwid)
        if not readings:
            return InsertResult()
        return await reconcile(db, gateway.gwid, readings, boundary_ts)

    return await _run_job(
        db=db,
        manager=manager,
        store=store,
        email=email,
        password=password,
        work=_work,
    )


async def backfill_data(
    *,
    db: AsyncSession,
    manager: SessionManager,
    store: SessionStore,
    email: str,
    password: str,
    start: str,
    end: str,
    timezone: str,
    override: bool = False,
) -> JobResult:
    """Fetch an explicit civil date range for every gateway and store it.

    There is no day-boundary split: without *override* every reading is
    inserted with skip semantics, with it every reading replaces whatever
    is stored for its key.

    Args:
        start: First civil date, YYYY-MM-DD.
        end: End civil date, YYYY-MM-DD, passed to the portal as-is.
        override: Replace stored rows across the whole range.

    Returns:
        JobResult: Per-gateway counts or errors.
    """
    logger.info(
        "Starting backfill for %s to %s (%s, override=%s)", start, end, timezone, override
    )

    async def _work(session: PortalSession, gateway: Gateway) -> InsertResult:
        readings = await manager.client.get_energy_data(
            session, gateway.gwid, start, end, DEFAULT_GRANULARITY, timezone
        )
        logger.info("Got %d readings for gateway %s", len(readings), gateway.gwid)
        if not readings:
            return InsertResult()
        return await store_range(db, gateway.gwid, readings, override=override)

    return await _run_job(
        db=db,
        manager=manager,
        store=store,
        email=email,
        password=password,
        work=_work,
    )


async def _run_job(
    *,
    db: AsyncSession,
    manager: SessionManager,
    store: SessionStore,
    email: str,
    password: str,
    work: GatewayWork,
) -> JobResult:
    """Shared session/gateway loop behind both jobs."""
    result = JobResult()

    try:
        auth = await manager.get_valid_session(store, email, password)
        session = auth.session
        result.login_refreshed = auth.fresh
        logger.info("Session obtained (fresh=%s)", auth.fresh)

        try:
            gateways = await manager.client.get_gateways(session)
        except AuthError:
            logger.info("Session rejected while listing gateways, logging in again")
            session = await manager.login(email, password)
            await store.put(session)
            result.login_refreshed = True
            gateways = await manager.client.get_gateways(session)

        if not gateways:
            result.success = False
            result.error = "No gateways found"
            return result

        logger.info(
            "Found %d gateways: %s",
            len(gateways),
            ", ".join(gw.gwid for gw in gateways),
        )

        for gateway in gateways:
            gw_result = GatewayResult(gwid=gateway.gwid)
            try:
                counts = await work(session, gateway)
                gw_result.inserted = counts.inserted
                gw_result.skipped = counts.skipped
            except Exception as exc:
                logger.warning("Gateway %s failed: %s", gateway.gwid, exc, exc_info=True)
                await db.rollback()
                gw_result.error = str(exc) or type(exc).__name__
                result.success = False
            result.gateways.append(gw_result)

    except Exception as exc:
        logger.error("Job failed: %s", exc, exc_info=True)
        result.success = False
        result.error = str(exc) or type(exc).__name__

    return result
