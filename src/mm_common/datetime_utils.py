"""UTC datetime utilities and the injectable clock."""

from datetime import date, datetime, timezone
from typing import Protocol
from zoneinfo import ZoneInfo


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Wall clock. Meal cutoffs and "today" are derived from this in production."""

    def now(self) -> datetime:
        return utc_now()


def local_today(clock: Clock, tz_name: str) -> date:
    """Calendar date of the clock's instant in the given IANA time zone."""
    return clock.now().astimezone(ZoneInfo(tz_name)).date()
