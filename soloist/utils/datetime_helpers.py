"""
Standardized Date/Time Handling Utilities

Day boundaries are local midnight in the user's time zone. All progression
code asks a Clock for "today" instead of reading the wall clock, so tests
can pin the calendar.

CRITICAL RULES:
- Store timestamps in UTC (use now_utc())
- Compare days as calendar dates in the user's time zone (use Clock.today())
- Never mix naive and aware datetimes
"""

import logging
from datetime import date, datetime, timedelta
from typing import Optional, Protocol
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

# Default timezone if none is configured
DEFAULT_TIMEZONE = "UTC"


def resolve_timezone(tz_name: Optional[str]) -> ZoneInfo:
    """
    Resolve an IANA time zone name, falling back to UTC

    Args:
        tz_name: IANA timezone (e.g., "America/New_York")

    Returns:
        ZoneInfo object
    """
    if not tz_name:
        return ZoneInfo(DEFAULT_TIMEZONE)
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        logger.error(f"Invalid timezone '{tz_name}': {e}")
        return ZoneInfo(DEFAULT_TIMEZONE)


def now_utc() -> datetime:
    """
    Get current datetime in UTC (timezone-aware)

    Returns:
        Current datetime in UTC with timezone info
    """
    return datetime.now(ZoneInfo("UTC"))


class Clock(Protocol):
    """Source of the current time and calendar day"""

    def now(self) -> datetime:
        ...

    def today(self) -> date:
        ...


class SystemClock:
    """Wall clock in a fixed time zone"""

    def __init__(self, tz_name: str = DEFAULT_TIMEZONE):
        self.tz = resolve_timezone(tz_name)

    def now(self) -> datetime:
        return datetime.now(self.tz)

    def today(self) -> date:
        return self.now().date()


class FixedClock:
    """Clock pinned to a given moment; advance() moves it forward"""

    def __init__(self, moment: datetime):
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=ZoneInfo(DEFAULT_TIMEZONE))
        self.moment = moment

    @classmethod
    def on(cls, day: date, tz_name: str = DEFAULT_TIMEZONE) -> "FixedClock":
        """Clock at noon of a calendar day"""
        return cls(datetime(day.year, day.month, day.day, 12, 0, tzinfo=resolve_timezone(tz_name)))

    def now(self) -> datetime:
        return self.moment

    def today(self) -> date:
        return self.moment.date()

    def advance(self, days: int = 0, hours: int = 0) -> None:
        self.moment = self.moment + timedelta(days=days, hours=hours)
