"""
Civil-date arithmetic for a named IANA timezone.

All stored timestamps are UTC epoch milliseconds. A civil date (YYYY-MM-DD)
is mapped to UTC boundaries by taking the zone's UTC offset at noon of that
date and subtracting it from the UTC-parsed midnight / end-of-day literal.

The offset is computed for one reference date only. A range that spans a DST
transition uses the same offset for both ends, so one boundary can be off by
the DST shift. Callers that need per-instant correctness must compute
boundaries per date.

CHANGELOG:
- 2026-10-18: Reject ISO week dates in parse_civil_date (STORY-012)
- 2026-10-03: Initial creation (STORY-003)

TODO:
- None
"""

from __future__ import annotations

import logging
from datetime import UTC, date, datetime, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

MS_PER_HOUR = 60 * 60 * 1000
MS_PER_DAY = 24 * MS_PER_HOUR

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def parse_civil_date(date_str: str) -> date:
    """Parse a strict YYYY-MM-DD civil date.

    Raises:
        ValueError: If *date_str* is not a valid YYYY-MM-DD date.
    """
    message = f"Invalid date '{date_str}', expected YYYY-MM-DD"
    # fromisoformat also takes ISO week dates such as 2025-W01-1.
    if len(date_str) != 10 or date_str[4] != "-" or date_str[7] != "-":
        raise ValueError(message)
    try:
        parsed = date.fromisoformat(date_str)
    except ValueError:
        raise ValueError(message) from None
    if parsed.isoformat() != date_str:
        raise ValueError(message)
    return parsed


def utc_offset_ms(timezone: str, date_str: str) -> int:
    """Return the UTC offset of *timezone* at noon UTC of *date_str*, in ms.

    ``America/Los_Angeles`` in winter returns ``-28_800_000`` (UTC-8).
    If the zone cannot be resolved the offset silently falls back to 0
    (UTC) and a warning is logged.

    Raises:
        ValueError: If *date_str* is not a valid YYYY-MM-DD date.
    """
    day = parse_civil_date(date_str)
    noon = datetime(day.year, day.month, day.day, 12, tzinfo=UTC)
    try:
        offset = noon.astimezone(ZoneInfo(timezone)).utcoffset()
    except (ZoneInfoNotFoundError, ValueError, OSError):
        logger.warning("Could not resolve timezone %r, falling back to UTC", timezone)
        return 0
    if offset is None:
        return 0
    return int(offset.total_seconds() * 1000)


def day_start_ms(date_str: str, offset_ms: int) -> int:
    """UTC ms of local midnight at the start of *date_str*."""
    day = parse_civil_date(date_str)
    midnight = datetime(day.year, day.month, day.day, tzinfo=UTC)
    return int((midnight - _EPOCH).total_seconds() * 1000) - offset_ms


def day_end_ms(date_str: str, offset_ms: int) -> int:
    """UTC ms of the last millisecond (23:59:59.999 local) of *date_str*."""
    return day_start_ms(date_str, offset_ms) + MS_PER_DAY - 1


def range_bounds_ms(start: str, end: str, timezone: str) -> tuple[int, int, int]:
    """Return ``(start_ts, end_ts, offset_ms)`` for an inclusive civil range.

    The offset is taken from *start* and applied to both ends.
    """
    offset = utc_offset_ms(timezone, start)
    return day_start_ms(start, offset), day_end_ms(end, offset), offset


def civil_window(timezone: str, now: datetime | None = None) -> tuple[str, str]:
    """Return ``(yesterday, today)`` as YYYY-MM-DD strings in *timezone*.

    Yesterday is the local date 24 hours before *now*, not ``today - 1`` in
    UTC, so the window follows the zone's calendar.
    """
    if now is None:
        now = datetime.now(tz=UTC)
    try:
        zone = ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        logger.warning("Could not resolve timezone %r, falling back to UTC", timezone)
        zone = UTC
    today = now.astimezone(zone).date()
    yesterday = (now - timedelta(days=1)).astimezone(zone).date()
    return yesterday.isoformat(), today.isoformat()


def date_from_day_number(day_number: int) -> str:
    """Convert days since the epoch to a YYYY-MM-DD string."""
    return (_EPOCH + timedelta(days=day_number)).date().isoformat()
