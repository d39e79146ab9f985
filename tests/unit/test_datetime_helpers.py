"""Unit tests for Datetime Helpers (levelfit/utils/datetime_helpers.py)"""
import pytest
from datetime import datetime, date, timezone, timedelta
from zoneinfo import ZoneInfo

from levelfit.utils.datetime_helpers import (
    FixedClock,
    SystemClock,
    calendar_day,
    consecutive_day_streak,
    from_epoch_ms,
    get_timezone,
    is_new_day,
    start_of_week,
    to_epoch_ms,
)


# ============================================================================
# Epoch Conversion Tests
# ============================================================================

def test_epoch_ms_conversion():
    moment = datetime(2026, 3, 10, 9, 0, 0, 123000, tzinfo=timezone.utc)

    ms = to_epoch_ms(moment)

    assert ms == 1773133200123
    assert from_epoch_ms(ms) == moment


def test_naive_datetime_treated_as_utc():
    assert to_epoch_ms(datetime(1970, 1, 1, 0, 0, 1)) == 1000


def test_epoch_ms_respects_offset():
    tokyo = datetime(1970, 1, 1, 9, 0, tzinfo=ZoneInfo("Asia/Tokyo"))
    assert to_epoch_ms(tokyo) == 0


# ============================================================================
# Timezone & Calendar Tests
# ============================================================================

def test_get_timezone_falls_back_to_utc():
    assert get_timezone("Not/AZone") == ZoneInfo("UTC")
    assert get_timezone("Europe/Stockholm") == ZoneInfo("Europe/Stockholm")


def test_calendar_day_in_timezone():
    moment = datetime(2026, 3, 10, 23, 30, tzinfo=timezone.utc)

    assert calendar_day(moment, "UTC") == date(2026, 3, 10)
    assert calendar_day(moment, "Europe/Stockholm") == date(2026, 3, 11)


def test_is_new_day():
    base = datetime(2026, 3, 10, 1, 0, tzinfo=timezone.utc)

    assert is_new_day(None, base, "UTC")
    assert not is_new_day(base, base + timedelta(hours=22), "UTC")
    assert is_new_day(base, base + timedelta(hours=23), "UTC")


def test_new_day_is_calendar_not_elapsed_hours():
    late = datetime(2026, 3, 10, 23, 59, tzinfo=timezone.utc)
    assert is_new_day(late, late + timedelta(minutes=2), "UTC")


def test_start_of_week():
    assert start_of_week(date(2026, 3, 10)) == date(2026, 3, 9)
    assert start_of_week(date(2026, 3, 9)) == date(2026, 3, 9)
    assert start_of_week(date(2026, 3, 15)) == date(2026, 3, 9)


# ============================================================================
# Streak Tests
# ============================================================================

@pytest.mark.parametrize("offsets,expected", [
    ([], 0),
    ([0], 1),
    ([0, 1, 2], 3),
    ([1, 2], 2),
    ([0, 2, 3], 1),
    ([2, 3], 0),
    ([0, 0, 1], 2),
])
def test_consecutive_day_streak(offsets, expected):
    today = date(2026, 3, 10)
    days = [today - timedelta(days=n) for n in offsets]
    assert consecutive_day_streak(days, today) == expected


# ============================================================================
# Clock Tests
# ============================================================================

def test_fixed_clock():
    clock = FixedClock(datetime(2026, 3, 10, 9, 0))

    assert clock.now().tzinfo is not None
    clock.advance(timedelta(hours=2))
    assert clock.now() == datetime(2026, 3, 10, 11, 0, tzinfo=timezone.utc)

    clock.set(datetime(2026, 1, 1, tzinfo=timezone.utc))
    assert clock.now().month == 1


def test_system_clock_is_aware():
    before = datetime.now(timezone.utc)
    result = SystemClock("UTC").now()
    after = datetime.now(timezone.utc)

    assert result.tzinfo is not None
    assert before <= result <= after
