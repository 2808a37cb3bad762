"""
Aggregation service for the daily, hourly and raw read views.

Civil-date parameters are converted to UTC millisecond bounds with a single
timezone offset taken from the first date of the request (see
:mod:`geostar.timezones` for the DST caveat). Buckets are computed in SQL by
integer division of the shifted timestamp, which behaves identically on
PostgreSQL and SQLite for BIGINT columns.

CHANGELOG:
- 2026-10-07: Initial creation (STORY-009)

TODO:
- None
"""

import logging

from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import AsyncSession

from geostar.db.models import EnergyReadingRow
from geostar.models import (
    METRIC_FIELDS,
    DailyTotal,
    HourlyTotal,
    StoredEnergyReading,
)
from geostar.timezones import (
    MS_PER_DAY,
    MS_PER_HOUR,
    date_from_day_number,
    range_bounds_ms,
)

logger = logging.getLogger(__name__)

RAW_READING_LIMIT = 1000

_METRIC_SUMS = ", ".join(f"SUM({field}) AS {field}" for field in METRIC_FIELDS)


async def daily_totals(
    db: AsyncSession,
    start: str,
    end: str,
    timezone: str,
) -> list[DailyTotal]:
    """Sum every metric per (local date, gateway) over an inclusive date range.

    Args:
        db: Async database session.
        start: First civil date, YYYY-MM-DD.
        end: Last civil date, YYYY-MM-DD.
        timezone: IANA zone the dates are expressed in.

    Returns:
        Totals ordered by date descending, then gateway id.

    Raises:
        ValueError: If a date is not YYYY-MM-DD.
    """
    start_ts, end_ts, offset = range_bounds_ms(start, end, timezone)
    sql = (
        f"SELECT (ts + :offset_ms) / {MS_PER_DAY} AS day_number, gateway_id, "
        f"{_METRIC_SUMS}, COUNT(*) AS reading_count "
        f"FROM energy_readings "
        f"WHERE ts >= :start_ts AND ts <= :end_ts "
        f"GROUP BY day_number, gateway_id "
        f"ORDER BY day_number DESC, gateway_id ASC"
    )
    result = await db.execute(
        text(sql),
        {"offset_ms": offset, "start_ts": start_ts, "end_ts": end_ts},
    )
    rows = result.mappings().all()
    logger.debug("Daily totals %s..%s (%s): %d rows", start, end, timezone, len(rows))

    return [
        DailyTotal(
            date=date_from_day_number(int(row["day_number"])),
            gateway_id=row["gateway_id"],
            reading_count=row["reading_count"],
            **{field: row[field] or 0.0 for field in METRIC_FIELDS},
        )
        for row in rows
    ]


async def hourly_totals(
    db: AsyncSession,
    date: str,
    timezone: str,
) -> list[HourlyTotal]:
    """Sum every metric per (local hour, gateway) for one civil date.

    Returns:
        Totals ordered by hour, then gateway id.

    Raises:
        ValueError: If *date* is not YYYY-MM-DD.
    """
    start_ts, end_ts, offset = range_bounds_ms(date, date, timezone)
    sql = (
        f"SELECT ((ts + :offset_ms) / {MS_PER_HOUR}) % 24 AS hour_of_day, gateway_id, "
        f"{_METRIC_SUMS}, COUNT(*) AS reading_count "
        f"FROM energy_readings "
        f"WHERE ts >= :start_ts AND ts <= :end_ts "
        f"GROUP BY hour_of_day, gateway_id "
        f"ORDER BY hour_of_day ASC, gateway_id ASC"
    )
    result = await db.execute(
        text(sql),
        {"offset_ms": offset, "start_ts": start_ts, "end_ts": end_ts},
    )
    return [
        HourlyTotal(
            hour=int(row["hour_of_day"]),
            gateway_id=row["gateway_id"],
            reading_count=row["reading_count"],
            **{field: row[field] or 0.0 for field in METRIC_FIELDS},
        )
        for row in result.mappings().all()
    ]


async def raw_readings(
    db: AsyncSession,
    start: str,
    end: str,
    timezone: str,
    gateway_id: str | None = None,
) -> list[StoredEnergyReading]:
    """Return up to RAW_READING_LIMIT stored rows, newest first.

    Raises:
        ValueError: If a date is not YYYY-MM-DD.
    """
    start_ts, end_ts, _ = range_bounds_ms(start, end, timezone)
    stmt = select(EnergyReadingRow).where(
        EnergyReadingRow.ts >= start_ts,
        EnergyReadingRow.ts <= end_ts,
    )
    if gateway_id:
        stmt = stmt.where(EnergyReadingRow.gateway_id == gateway_id)
    stmt = stmt.order_by(EnergyReadingRow.ts.desc()).limit(RAW_READING_LIMIT)

    result = await db.execute(stmt)
    return [_to_stored(row) for row in result.scalars().all()]


async def known_gateways(db: AsyncSession) -> list[str]:
    """Return the distinct gateway ids present in storage, ascending."""
    stmt = (
        select(EnergyReadingRow.gateway_id)
        .distinct()
        .order_by(EnergyReadingRow.gateway_id)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


def _to_stored(row: EnergyReadingRow) -> StoredEnergyReading:
    return StoredEnergyReading(
        id=row.id,
        gateway_id=row.gateway_id,
        timestamp=row.ts,
        **{field: getattr(row, field) for field in METRIC_FIELDS},
    )
