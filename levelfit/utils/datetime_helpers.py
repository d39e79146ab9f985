"""
Date/Time Handling Utilities

All engine operations take an explicit `now` supplied by a Clock, never the
ambient system time. Rules:
- Instants are timezone-aware datetimes in memory
- Instants are epoch milliseconds (int) in save files
- Calendar-day comparisons happen in the configured TIMEZONE
- Naive datetimes are treated as UTC
"""

import logging
from datetime import datetime, date, timedelta, timezone
from typing import Iterable, Optional, Protocol
from zoneinfo import ZoneInfo

from levelfit.config import TIMEZONE

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class Clock(Protocol):
    """Supplies the current instant"""

    def now(self) -> datetime:
        ...


class SystemClock:
    """Wall clock in a fixed timezone"""

    def __init__(self, tz_name: str = TIMEZONE):
        self.tz = get_timezone(tz_name)

    def now(self) -> datetime:
        return datetime.now(self.tz)


class FixedClock:
    """Clock frozen at a given instant, advanced manually (tests, replays)"""

    def __init__(self, moment: datetime):
        self._moment = _ensure_aware(moment)

    def now(self) -> datetime:
        return self._moment

    def set(self, moment: datetime) -> None:
        self._moment = _ensure_aware(moment)

    def advance(self, delta: timedelta) -> datetime:
        self._moment = self._moment + delta
        return self._moment


def get_timezone(tz_name: Optional[str] = None) -> ZoneInfo:
    """
    Resolve a timezone name, falling back to UTC

    Args:
        tz_name: IANA timezone name (defaults to TIMEZONE from config)

    Returns:
        ZoneInfo for the requested zone
    """
    tz_name = tz_name or TIMEZONE
    try:
        return ZoneInfo(tz_name)
    except Exception as e:
        logger.error(f"Invalid timezone '{tz_name}': {e}")
        return ZoneInfo("UTC")


def _ensure_aware(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def to_epoch_ms(moment: datetime) -> int:
    """Convert a datetime to integer epoch milliseconds"""
    return (_ensure_aware(moment) - EPOCH) // timedelta(milliseconds=1)


def from_epoch_ms(ms: int) -> datetime:
    """Convert integer epoch milliseconds to an aware UTC datetime"""
    return EPOCH + timedelta(milliseconds=ms)


def calendar_day(moment: datetime, tz_name: Optional[str] = None) -> date:
    """
    Calendar date of an instant in the configured timezone

    Daily boundaries (quest reset, screen time prompt) compare calendar days,
    not elapsed 24-hour periods.
    """
    return _ensure_aware(moment).astimezone(get_timezone(tz_name)).date()


def is_new_day(previous: Optional[datetime], current: datetime, tz_name: Optional[str] = None) -> bool:
    """True if `current` falls on a later calendar day than `previous` (or there is no previous)"""
    if previous is None:
        return True
    return calendar_day(previous, tz_name) != calendar_day(current, tz_name)


def start_of_week(day: date) -> date:
    """Monday of the week containing `day`"""
    return day - timedelta(days=day.weekday())


def consecutive_day_streak(days: Iterable[date], today: date) -> int:
    """
    Count consecutive calendar days ending today, or yesterday if today has
    no entry yet
    """
    day_set = set(days)
    cursor = today if today in day_set else today - timedelta(days=1)
    streak = 0
    while cursor in day_set:
        streak += 1
        cursor -= timedelta(days=1)
    return streak
