"""Domain models for mm_meal: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import date

from src.mm_common.enums import MealSlot

GUEST_LIMIT = 10  # guests per slot per member per day


@dataclass
class DailyMeal:
    """One member's attendance for one calendar date.

    Absent rows are equivalent to an all-zero DailyMeal.
    """

    member_id: str
    meal_date: date
    breakfast: bool = False
    lunch: bool = False
    dinner: bool = False
    guest_breakfast: int = 0
    guest_lunch: int = 0
    guest_dinner: int = 0
    cycle_id: str | None = None

    def slot_count(self, slot: MealSlot) -> int:
        """Own flag plus guests for one slot."""
        if slot == MealSlot.BREAKFAST:
            return int(self.breakfast) + self.guest_breakfast
        if slot == MealSlot.LUNCH:
            return int(self.lunch) + self.guest_lunch
        return int(self.dinner) + self.guest_dinner

    @property
    def units(self) -> int:
        return sum(self.slot_count(slot) for slot in MealSlot)

    @classmethod
    def from_counts(
        cls, member_id: str, meal_date: date, breakfast: int, lunch: int, dinner: int
    ) -> "DailyMeal":
        """Build a row from per-slot totals: the first unit is the member, the rest guests."""
        return cls(
            member_id=member_id,
            meal_date=meal_date,
            breakfast=breakfast > 0,
            lunch=lunch > 0,
            dinner=dinner > 0,
            guest_breakfast=max(0, breakfast - 1),
            guest_lunch=max(0, lunch - 1),
            guest_dinner=max(0, dinner - 1),
        )


@dataclass
class SlotLocks:
    breakfast: bool
    lunch: bool
    dinner: bool
