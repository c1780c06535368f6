"""Cycle calendar rules: first-cycle window, successor window, default names."""

import calendar
from datetime import date, timedelta


def month_window(day: date) -> tuple[date, date]:
    """First and last calendar day of the month containing ``day``."""
    last = calendar.monthrange(day.year, day.month)[1]
    return day.replace(day=1), day.replace(day=last)


def successor_window(closed_end: date) -> tuple[date, date]:
    """The next cycle starts the day after the closed one ends and runs to month end."""
    start = closed_end + timedelta(days=1)
    return start, month_window(start)[1]


def default_cycle_name(start: date) -> str:
    """'October 2026' style label."""
    return f"{calendar.month_name[start.month]} {start.year}"
