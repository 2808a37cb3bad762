"""
Tests for civil-date arithmetic (STORY-003).

CHANGELOG:
- 2026-10-18: Reject ISO week dates in parse_civil_date (STORY-012)
- 2026-10-03: Initial creation (STORY-003)

TODO:
- None
"""

from datetime import UTC, datetime

import pytest

from geostar.timezones import (
    MS_PER_DAY,
    civil_window,
    date_from_day_number,
    day_end_ms,
    day_start_ms,
    parse_civil_date,
    range_bounds_ms,
    utc_offset_ms,
)

LA = "America/Los_Angeles"

# 2025-01-07T00:00:00Z
JAN_7_UTC_MS = 1736208000000


class TestParseCivilDate:
    """Strict YYYY-MM-DD parsing."""

    def test_valid_date(self) -> None:
        assert parse_civil_date("2025-01-07").isoformat() == "2025-01-07"

    @pytest.mark.parametrize(
        "value",
        ["2025-1-7", "2025-01-07T00:00", "", "yesterday", "2025-02-30", "2025-W01-1", "20250107ab"],
    )
    def test_invalid_dates_raise(self, value: str) -> None:
        with pytest.raises(ValueError, match="expected YYYY-MM-DD"):
            parse_civil_date(value)


class TestUtcOffset:
    """Offsets are taken at noon UTC of the reference date."""

    def test_los_angeles_winter(self) -> None:
        assert utc_offset_ms(LA, "2025-01-07") == -8 * 3600 * 1000

    def test_los_angeles_summer(self) -> None:
        assert utc_offset_ms(LA, "2025-07-07") == -7 * 3600 * 1000

    def test_utc(self) -> None:
        assert utc_offset_ms("UTC", "2025-07-07") == 0

    def test_positive_offset(self) -> None:
        assert utc_offset_ms("Asia/Kolkata", "2025-01-07") == 5.5 * 3600 * 1000

    def test_unknown_zone_falls_back_to_utc(self, caplog: pytest.LogCaptureFixture) -> None:
        assert utc_offset_ms("Mars/Olympus_Mons", "2025-01-07") == 0
        assert "falling back to UTC" in caplog.text


class TestDayBounds:
    """Local midnight and end-of-day in UTC milliseconds."""

    def test_day_start_utc(self) -> None:
        assert day_start_ms("2025-01-07", 0) == JAN_7_UTC_MS

    def test_day_start_los_angeles(self) -> None:
        offset = utc_offset_ms(LA, "2025-01-07")
        # Local midnight in LA is 08:00 UTC.
        assert day_start_ms("2025-01-07", offset) == JAN_7_UTC_MS + 8 * 3600 * 1000

    def test_day_end_is_last_millisecond(self) -> None:
        assert day_end_ms("2025-01-07", 0) == JAN_7_UTC_MS + MS_PER_DAY - 1

    def test_range_bounds_use_start_offset(self) -> None:
        # 2025-03-09 is the US spring-forward date; the end keeps the winter offset.
        start_ts, end_ts, offset = range_bounds_ms("2025-03-08", "2025-03-10", LA)
        assert offset == -8 * 3600 * 1000
        assert start_ts == day_start_ms("2025-03-08", offset)
        assert end_ts == day_end_ms("2025-03-10", offset)


class TestCivilWindow:
    """(yesterday, today) follows the zone's calendar."""

    def test_window_in_los_angeles_evening(self) -> None:
        # 2025-01-08T03:00Z is 2025-01-07 19:00 in LA.
        now = datetime(2025, 1, 8, 3, 0, tzinfo=UTC)
        assert civil_window(LA, now) == ("2025-01-06", "2025-01-07")

    def test_window_in_utc(self) -> None:
        now = datetime(2025, 1, 8, 3, 0, tzinfo=UTC)
        assert civil_window("UTC", now) == ("2025-01-07", "2025-01-08")

    def test_window_across_month_boundary(self) -> None:
        now = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)
        assert civil_window("UTC", now) == ("2025-02-28", "2025-03-01")


class TestDateFromDayNumber:
    def test_epoch(self) -> None:
        assert date_from_day_number(0) == "1970-01-01"

    def test_known_date(self) -> None:
        assert date_from_day_number(JAN_7_UTC_MS // MS_PER_DAY) == "2025-01-07"
