"""Storage contract for daily meal rows."""

from datetime import date
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.mm_common.enums import MealSlot
from src.mm_meal.domain.models import DailyMeal


class MealRepositoryProtocol(Protocol):
    async def set_slot(
        self,
        db: AsyncSession,
        mess_id: str,
        cycle_id: str,
        member_id: str,
        meal_date: date,
        slot: MealSlot,
        present: bool,
    ) -> DailyMeal: ...

    async def set_guests(
        self,
        db: AsyncSession,
        mess_id: str,
        cycle_id: str,
        member_id: str,
        meal_date: date,
        slot: MealSlot,
        count: int,
    ) -> DailyMeal: ...

    async def upsert_day(
        self, db: AsyncSession, mess_id: str, cycle_id: str, meal: DailyMeal
    ) -> None: ...

    async def get_day(
        self, db: AsyncSession, member_id: str, meal_date: date
    ) -> DailyMeal | None: ...

    async def list_range(
        self,
        db: AsyncSession,
        mess_id: str,
        start: date,
        end: date,
        member_id: str | None,
    ) -> list[DailyMeal]: ...
