"""
Clock abstraction for calendar-day logic

Streaks, the one-entry-per-day rule and daily challenges all depend on
"today" and "yesterday". Every component receives a Clock instead of
calling datetime.now() so day boundaries follow the configured timezone
and can be pinned in tests.
"""
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Protocol
from zoneinfo import ZoneInfo

from lumin.config import APP_TIMEZONE


class Clock(Protocol):
    """Source of the current instant and calendar day"""

    def now(self) -> datetime:
        ...

    def today(self) -> date:
        ...


class SystemClock:
    """Wall clock bound to a timezone"""

    def __init__(self, tz_name: str = APP_TIMEZONE):
        self.tz = ZoneInfo(tz_name)

    def now(self) -> datetime:
        return datetime.now(self.tz)

    def today(self) -> date:
        return self.now().date()


class FixedClock:
    """Clock pinned to a given instant; advance() moves it forward"""

    def __init__(self, current: datetime):
        if current.tzinfo is None:
            current = current.replace(tzinfo=timezone.utc)
        self.current = current

    def now(self) -> datetime:
        return self.current

    def today(self) -> date:
        return self.current.date()

    def advance(self, days: int = 0, seconds: float = 0) -> None:
        self.current = self.current + timedelta(days=days, seconds=seconds)


def yesterday(clock: Clock) -> date:
    return clock.today() - timedelta(days=1)


def day_window(clock: Clock, days: int, end: Optional[date] = None) -> tuple[date, date]:
    """Return (first_day, last_day) of the trailing window of `days` calendar days."""
    last_day = end or clock.today()
    return last_day - timedelta(days=days - 1), last_day
