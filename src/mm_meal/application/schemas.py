"""Pydantic schemas for the mm_meal API."""

from datetime import date

from pydantic import BaseModel, Field

from src.mm_common.enums import MealSlot
from src.mm_common.ids import EntityId
from src.mm_meal.domain.models import GUEST_LIMIT, DailyMeal, SlotLocks

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class SetMealRequest(BaseModel):
    member_id: EntityId
    meal_date: date
    slot: MealSlot
    present: bool


class SetGuestCountRequest(BaseModel):
    member_id: EntityId
    meal_date: date
    slot: MealSlot
    count: int = Field(..., ge=0, le=GUEST_LIMIT)


class BulkMealItem(BaseModel):
    """Per-slot totals for one member: own meal plus guests."""

    member_id: EntityId
    breakfast: int = Field(0, ge=0, le=GUEST_LIMIT + 1)
    lunch: int = Field(0, ge=0, le=GUEST_LIMIT + 1)
    dinner: int = Field(0, ge=0, le=GUEST_LIMIT + 1)


class BulkMealRequest(BaseModel):
    meal_date: date
    updates: list[BulkMealItem] = Field(..., min_length=1)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class MealDayResponse(BaseModel):
    member_id: str
    meal_date: date
    breakfast: bool
    lunch: bool
    dinner: bool
    guest_breakfast: int
    guest_lunch: int
    guest_dinner: int
    total_units: int

    @classmethod
    def from_domain(cls, meal: DailyMeal) -> "MealDayResponse":
        return cls(
            member_id=meal.member_id,
            meal_date=meal.meal_date,
            breakfast=meal.breakfast,
            lunch=meal.lunch,
            dinner=meal.dinner,
            guest_breakfast=meal.guest_breakfast,
            guest_lunch=meal.guest_lunch,
            guest_dinner=meal.guest_dinner,
            total_units=meal.units,
        )


class MealRangeResponse(BaseModel):
    start: date
    end: date
    member_id: str | None
    days: list[MealDayResponse]
    total_units: int


class SlotLocksResponse(BaseModel):
    breakfast: bool
    lunch: bool
    dinner: bool

    @classmethod
    def from_domain(cls, locks: SlotLocks) -> "SlotLocksResponse":
        return cls(breakfast=locks.breakfast, lunch=locks.lunch, dinner=locks.dinner)


class TodayResponse(BaseModel):
    meal_date: date
    meals: MealDayResponse
    locked: SlotLocksResponse


class MealGridRow(BaseModel):
    member_id: str
    display_name: str | None
    breakfast: int
    lunch: int
    dinner: int
    total_units: int


class MealGridResponse(BaseModel):
    meal_date: date
    rows: list[MealGridRow]
    total_units: int


class BulkMealResponse(BaseModel):
    meal_date: date
    updated: int
