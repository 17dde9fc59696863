"""Time sources.

Sessions are scheduled in naive local time (the organization's configured
timezone), so every time-dependent decision in the engine reads the current
time through a Clock rather than calling datetime.now() directly.
"""
from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo


class Clock:
    """Source of the current local date and time."""

    def now(self) -> datetime:
        raise NotImplementedError

    def today(self) -> date:
        return self.now().date()


class SystemClock(Clock):
    """Wall clock in a fixed timezone, returned as naive local time."""

    def __init__(self, tz: Optional[ZoneInfo] = None):
        if tz is None:
            from attendance.core.config import settings
            tz = settings.tz
        self.tz = tz

    def now(self) -> datetime:
        return datetime.now(self.tz).replace(tzinfo=None, microsecond=0)
