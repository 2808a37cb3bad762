"""
Ingestion service: batch insert of energy readings with reconciliation.

Two conflict policies on the (gateway_id, ts) unique key:

- skip:    INSERT ... ON CONFLICT DO NOTHING. Settled history is never
           overwritten by a later or duplicate fetch.
- replace: INSERT ... ON CONFLICT DO UPDATE of every metric. Used for
           readings of the current local day, which the portal keeps
           revising until the day is over, and for explicit override
           backfills.

:func:`reconcile` splits a fetched window at the local midnight that starts
"today": readings before it go in with skip, readings at or after it with
replace. Each gateway's writes are committed as one transaction.

CHANGELOG:
- 2026-10-08: Chunk multi-row inserts to stay under bind-parameter limits (STORY-010)
- 2026-10-05: Add replace mode and boundary reconciliation (STORY-006)
- 2026-10-05: Initial creation, adapted from the ON CONFLICT DO NOTHING ingest (STORY-006)

TODO:
- None
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from geostar.db.models import EnergyReadingRow
from geostar.models import METRIC_FIELDS, EnergyReading

logger = logging.getLogger(__name__)

INSERT_CHUNK_SIZE = 500
"""Rows per INSERT statement (18 bind parameters per row)."""

_DIALECT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


@dataclass(frozen=True)
class InsertResult:
    """Rows written vs. rows left untouched because they already existed."""

    inserted: int = 0
    skipped: int = 0

    def __add__(self, other: InsertResult) -> InsertResult:
        return InsertResult(
            inserted=self.inserted + other.inserted,
            skipped=self.skipped + other.skipped,
        )


def split_at_boundary(
    readings: Sequence[EnergyReading],
    boundary_ts: int,
) -> tuple[list[EnergyReading], list[EnergyReading]]:
    """Partition readings into ``(historical, provisional)``.

    Historical readings have ``timestamp < boundary_ts``; provisional ones
    have ``timestamp >= boundary_ts``. Every reading lands in exactly one
    partition and input order is preserved within each.
    """
    historical = [r for r in readings if r.timestamp < boundary_ts]
    provisional = [r for r in readings if r.timestamp >= boundary_ts]
    return historical, provisional


def _row(gateway_id: str, reading: EnergyReading) -> dict:
    row = {"gateway_id": gateway_id, "ts": reading.timestamp}
    for field in METRIC_FIELDS:
        row[field] = getattr(reading, field)
    return row


def _insert_for(db: AsyncSession):
    dialect = db.get_bind().dialect.name
    try:
        return _DIALECT_INSERTS[dialect]
    except KeyError:
        raise RuntimeError(
            f"Unsupported database dialect for upserts: {dialect}"
        ) from None


async def insert_readings(
    db: AsyncSession,
    gateway_id: str,
    readings: Sequence[EnergyReading],
    *,
    replace: bool = False,
) -> InsertResult:
    """Insert readings for one gateway without committing.

    In skip mode a reading whose (gateway_id, timestamp) already exists is
    left untouched and counted as skipped. In replace mode the existing
    row's metrics are overwritten and the reading counts as inserted.

    Args:
        db: Async SQLAlchemy session. The caller commits.
        gateway_id: Gateway the readings belong to.
        readings: Readings to write.
        replace: Overwrite existing rows instead of skipping them.

    Returns:
        InsertResult: inserted + skipped always equals ``len(readings)``.
    """
    if not readings:
        return InsertResult()

    insert = _insert_for(db)
    rows = [_row(gateway_id, r) for r in readings]
    if replace:
        # One statement may not upsert the same key twice; the last reading wins.
        rows = list({row["ts"]: row for row in rows}.values())

    inserted = 0
    for start in range(0, len(rows), INSERT_CHUNK_SIZE):
        chunk = rows[start : start + INSERT_CHUNK_SIZE]
        stmt = insert(EnergyReadingRow).values(chunk)
        if replace:
            stmt = stmt.on_conflict_do_update(
                index_elements=["gateway_id", "ts"],
                set_={field: stmt.excluded[field] for field in METRIC_FIELDS},
            )
            await db.execute(stmt)
        else:
            stmt = stmt.on_conflict_do_nothing(index_elements=["gateway_id", "ts"])
            result = await db.execute(stmt)
            inserted += result.rowcount

    if replace:
        inserted = len(readings)
    return InsertResult(inserted=inserted, skipped=len(readings) - inserted)


async def reconcile(
    db: AsyncSession,
    gateway_id: str,
    readings: Sequence[EnergyReading],
    boundary_ts: int,
) -> InsertResult:
    """Store a fetched window, skipping settled rows and refreshing today's.

    Readings before *boundary_ts* (local midnight of today, UTC ms) are
    final and inserted with skip semantics; readings at or after it are
    provisional and inserted with replace semantics. Both partitions are
    committed together.

    Returns:
        InsertResult: Combined counts; they sum to ``len(readings)``.
    """
    historical, provisional = split_at_boundary(readings, boundary_ts)
    logger.info(
        "Gateway %s: %d historical, %d provisional readings",
        gateway_id,
        len(historical),
        len(provisional),
    )

    result = await insert_readings(db, gateway_id, historical, replace=False)
    result += await insert_readings(db, gateway_id, provisional, replace=True)
    await db.commit()

    logger.info(
        "Reconciled %d/%d readings for gateway %s (%d skipped)",
        result.inserted,
        len(readings),
        gateway_id,
        result.skipped,
    )
    return result


async def store_range(
    db: AsyncSession,
    gateway_id: str,
    readings: Sequence[EnergyReading],
    *,
    override: bool = False,
) -> InsertResult:
    """Store a backfilled range with one policy for every reading.

    Without *override* every reading is inserted with skip semantics; with
    it every reading replaces any stored row, regardless of date.
    """
    result = await insert_readings(db, gateway_id, readings, replace=override)
    await db.commit()

    logger.info(
        "Stored %d/%d readings for gateway %s (override=%s)",
        result.inserted,
        len(readings),
        gateway_id,
        override,
    )
    return result
