"""Meal cutoff rule.

Each slot has a time-of-day cutoff in the mess's fixed time zone. Breakfast is
declared the evening before, so its cutoff falls on the previous calendar day;
lunch and dinner cut off on the meal date itself. A slot is locked from the
cutoff instant onward. Managers are exempt; that check lives in the service.
"""

from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from src.mm_common.enums import MealSlot
from src.mm_mess.domain.models import CutoffConfig
from src.mm_meal.domain.models import SlotLocks


def cutoff_instant(slot: MealSlot, meal_date: date, config: CutoffConfig) -> datetime:
    tz = ZoneInfo(config.timezone)
    if slot == MealSlot.BREAKFAST:
        return datetime.combine(meal_date - timedelta(days=1), config.breakfast_cutoff, tzinfo=tz)
    if slot == MealSlot.LUNCH:
        return datetime.combine(meal_date, config.lunch_cutoff, tzinfo=tz)
    return datetime.combine(meal_date, config.dinner_cutoff, tzinfo=tz)


def is_slot_locked(
    slot: MealSlot, meal_date: date, config: CutoffConfig, now: datetime
) -> bool:
    """True once ``now`` (any aware datetime) has reached the slot's cutoff."""
    return now >= cutoff_instant(slot, meal_date, config)


def slot_locks(meal_date: date, config: CutoffConfig, now: datetime) -> SlotLocks:
    return SlotLocks(
        breakfast=is_slot_locked(MealSlot.BREAKFAST, meal_date, config, now),
        lunch=is_slot_locked(MealSlot.LUNCH, meal_date, config, now),
        dinner=is_slot_locked(MealSlot.DINNER, meal_date, config, now),
    )


def parse_cutoff(value: str) -> time:
    """'21:00' -> time(21, 0). Raises ValueError on anything else."""
    hours, _, minutes = value.partition(":")
    return time(int(hours), int(minutes or 0))
