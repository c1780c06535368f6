"""Tests for the meal cutoff rule and DailyMeal unit counting."""

from datetime import date, datetime, time, timedelta, timezone

import pytest

from src.mm_common.enums import MealSlot
from src.mm_meal.domain.cutoff import (
    cutoff_instant,
    is_slot_locked,
    parse_cutoff,
    slot_locks,
)
from src.mm_meal.domain.models import DailyMeal
from src.mm_mess.domain.models import CutoffConfig

DHAKA = CutoffConfig(
    breakfast_cutoff=time(21, 0),
    lunch_cutoff=time(10, 0),
    dinner_cutoff=time(15, 0),
    timezone="Asia/Dhaka",
)
MEAL_DAY = date(2026, 10, 20)


def _dhaka(y: int, mo: int, d: int, h: int, mi: int = 0, s: int = 0) -> datetime:
    # Asia/Dhaka is a fixed UTC+6 with no DST.
    return datetime(y, mo, d, h, mi, s, tzinfo=timezone(timedelta(hours=6)))


class TestCutoffInstant:
    def test_breakfast_is_previous_evening(self) -> None:
        instant = cutoff_instant(MealSlot.BREAKFAST, MEAL_DAY, DHAKA)
        assert instant == _dhaka(2026, 10, 19, 21)

    def test_lunch_same_day(self) -> None:
        assert cutoff_instant(MealSlot.LUNCH, MEAL_DAY, DHAKA) == _dhaka(2026, 10, 20, 10)

    def test_dinner_same_day(self) -> None:
        assert cutoff_instant(MealSlot.DINNER, MEAL_DAY, DHAKA) == _dhaka(2026, 10, 20, 15)


class TestIsSlotLocked:
    def test_one_second_before_cutoff_is_open(self) -> None:
        now = _dhaka(2026, 10, 19, 20, 59, 59)
        assert is_slot_locked(MealSlot.BREAKFAST, MEAL_DAY, DHAKA, now) is False

    def test_exactly_at_cutoff_is_locked(self) -> None:
        now = _dhaka(2026, 10, 19, 21)
        assert is_slot_locked(MealSlot.BREAKFAST, MEAL_DAY, DHAKA, now) is True

    def test_utc_clock_is_compared_as_instant(self) -> None:
        # 04:00 UTC == 10:00 Dhaka
        now = datetime(2026, 10, 20, 4, 0, tzinfo=timezone.utc)
        assert is_slot_locked(MealSlot.LUNCH, MEAL_DAY, DHAKA, now) is True
        assert is_slot_locked(MealSlot.DINNER, MEAL_DAY, DHAKA, now) is False

    def test_past_dates_are_locked(self) -> None:
        now = _dhaka(2026, 10, 25, 8)
        assert is_slot_locked(MealSlot.DINNER, MEAL_DAY, DHAKA, now) is True

    def test_future_dates_are_open(self) -> None:
        now = _dhaka(2026, 10, 1, 8)
        assert is_slot_locked(MealSlot.BREAKFAST, MEAL_DAY, DHAKA, now) is False


class TestSlotLocks:
    def test_mid_morning(self) -> None:
        locks = slot_locks(MEAL_DAY, DHAKA, _dhaka(2026, 10, 20, 9, 30))
        assert (locks.breakfast, locks.lunch, locks.dinner) == (True, False, False)

    def test_evening(self) -> None:
        locks = slot_locks(MEAL_DAY, DHAKA, _dhaka(2026, 10, 20, 16))
        assert (locks.breakfast, locks.lunch, locks.dinner) == (True, True, True)


class TestParseCutoff:
    def test_hours_and_minutes(self) -> None:
        assert parse_cutoff("21:30") == time(21, 30)

    def test_hours_only(self) -> None:
        assert parse_cutoff("7") == time(7, 0)

    def test_garbage_raises(self) -> None:
        with pytest.raises(ValueError):
            parse_cutoff("noon")


class TestDailyMealUnits:
    def test_empty_row_is_zero(self) -> None:
        assert DailyMeal(member_id="m", meal_date=MEAL_DAY).units == 0

    def test_flags_and_guests(self) -> None:
        row = DailyMeal(
            member_id="m", meal_date=MEAL_DAY, breakfast=True, dinner=True, guest_lunch=2
        )
        assert row.slot_count(MealSlot.BREAKFAST) == 1
        assert row.slot_count(MealSlot.LUNCH) == 2
        assert row.units == 4

    def test_from_counts_splits_member_and_guests(self) -> None:
        row = DailyMeal.from_counts("m", MEAL_DAY, breakfast=0, lunch=1, dinner=3)
        assert row.breakfast is False
        assert row.lunch is True and row.guest_lunch == 0
        assert row.dinner is True and row.guest_dinner == 2
        assert row.units == 4
