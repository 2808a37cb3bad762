"""
In-process scheduler for the recurring daily fetch.

When FETCH_INTERVAL_S is positive the API lifespan starts
:func:`run_schedule` as a background task. Each tick opens its own database
session and portal client, runs the daily fetch and logs the structured
result. A failing tick is logged and never stops the loop; shutdown is
signalled through a shared :class:`asyncio.Event` so the loop finishes its
current tick before exiting.

CHANGELOG:
- 2026-10-09: Initial creation, modelled on the edge daemon loops (STORY-011)

TODO:
- None
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
from collections.abc import Awaitable, Callable

from geostar.config import Settings
from geostar.db.session import get_session_factory
from geostar.services.jobs import run_daily_fetch
from geostar.services.session_store import DbSessionStore
from geostar.vendor.auth import SessionManager
from geostar.vendor.client import GeoStarClient

logger = logging.getLogger(__name__)


async def run_schedule(
    interval_s: float,
    job: Callable[[], Awaitable[None]],
    shutdown_event: asyncio.Event,
) -> None:
    """Run *job* every *interval_s* seconds until *shutdown_event* is set.

    The first run happens immediately. Exceptions raised by *job* are
    logged and the loop continues with the next tick.

    Args:
        interval_s: Seconds to wait between the end of one run and the
            start of the next.
        job: Coroutine function to invoke on each tick.
        shutdown_event: Event that signals graceful shutdown.
    """
    logger.info("Scheduler started (interval=%ss)", interval_s)
    while not shutdown_event.is_set():
        try:
            await job()
        except Exception:
            logger.exception("Scheduled job failed")

        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(shutdown_event.wait(), timeout=interval_s)

    logger.info("Scheduler stopped")


async def scheduled_daily_fetch(settings: Settings) -> None:
    """Run one daily fetch with its own DB session and portal client."""
    if not settings.has_credentials:
        logger.error("Missing GEOSTAR_EMAIL or GEOSTAR_PASSWORD secrets")
        return

    logger.info(
        "Scheduled daily fetch for %s (password [set])",
        settings.geostar_email,
    )
    async with (
        get_session_factory()() as db,
        GeoStarClient(settings.geostar_base_url) as client,
    ):
        result = await run_daily_fetch(
            db=db,
            manager=SessionManager(client, settings.session_max_age_s),
            store=DbSessionStore(db),
            email=settings.geostar_email,
            password=settings.geostar_password,
            timezone=settings.timezone,
        )
    logger.info("Daily fetch result: %s", json.dumps(result.to_payload()))
