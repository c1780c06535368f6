"""MealRepository: concrete implementation of MealRepositoryProtocol.

Slot edits are column-level upserts keyed by (member_id, meal_date): each
statement touches exactly one column, so concurrent edits of different slots
on the same row merge instead of overwriting each other. The cycle_id of an
existing row is never rewritten.
"""

from datetime import date

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.mm_common.enums import MealSlot
from src.mm_common.errors import InternalError
from src.mm_meal.domain.models import DailyMeal

_RETURNING = """
    RETURNING member_id, meal_date, cycle_id, breakfast, lunch, dinner,
              guest_breakfast, guest_lunch, guest_dinner
"""

_SET_FLAG_SQL = {
    MealSlot.BREAKFAST: text(f"""
        INSERT INTO daily_meals (mess_id, cycle_id, member_id, meal_date, breakfast)
        VALUES (:mess_id, :cycle_id, :member_id, :meal_date, :value)
        ON CONFLICT (member_id, meal_date) DO UPDATE
            SET breakfast = EXCLUDED.breakfast, updated_at = NOW()
        {_RETURNING}
    """),
    MealSlot.LUNCH: text(f"""
        INSERT INTO daily_meals (mess_id, cycle_id, member_id, meal_date, lunch)
        VALUES (:mess_id, :cycle_id, :member_id, :meal_date, :value)
        ON CONFLICT (member_id, meal_date) DO UPDATE
            SET lunch = EXCLUDED.lunch, updated_at = NOW()
        {_RETURNING}
    """),
    MealSlot.DINNER: text(f"""
        INSERT INTO daily_meals (mess_id, cycle_id, member_id, meal_date, dinner)
        VALUES (:mess_id, :cycle_id, :member_id, :meal_date, :value)
        ON CONFLICT (member_id, meal_date) DO UPDATE
            SET dinner = EXCLUDED.dinner, updated_at = NOW()
        {_RETURNING}
    """),
}

_SET_GUESTS_SQL = {
    MealSlot.BREAKFAST: text(f"""
        INSERT INTO daily_meals (mess_id, cycle_id, member_id, meal_date, guest_breakfast)
        VALUES (:mess_id, :cycle_id, :member_id, :meal_date, :value)
        ON CONFLICT (member_id, meal_date) DO UPDATE
            SET guest_breakfast = EXCLUDED.guest_breakfast, updated_at = NOW()
        {_RETURNING}
    """),
    MealSlot.LUNCH: text(f"""
        INSERT INTO daily_meals (mess_id, cycle_id, member_id, meal_date, guest_lunch)
        VALUES (:mess_id, :cycle_id, :member_id, :meal_date, :value)
        ON CONFLICT (member_id, meal_date) DO UPDATE
            SET guest_lunch = EXCLUDED.guest_lunch, updated_at = NOW()
        {_RETURNING}
    """),
    MealSlot.DINNER: text(f"""
        INSERT INTO daily_meals (mess_id, cycle_id, member_id, meal_date, guest_dinner)
        VALUES (:mess_id, :cycle_id, :member_id, :meal_date, :value)
        ON CONFLICT (member_id, meal_date) DO UPDATE
            SET guest_dinner = EXCLUDED.guest_dinner, updated_at = NOW()
        {_RETURNING}
    """),
}

# Manager bulk edit sets the whole day at once.
_UPSERT_DAY_SQL = text("""
    INSERT INTO daily_meals
        (mess_id, cycle_id, member_id, meal_date, breakfast, lunch, dinner,
         guest_breakfast, guest_lunch, guest_dinner)
    VALUES
        (:mess_id, :cycle_id, :member_id, :meal_date, :breakfast, :lunch, :dinner,
         :guest_breakfast, :guest_lunch, :guest_dinner)
    ON CONFLICT (member_id, meal_date) DO UPDATE
        SET breakfast       = EXCLUDED.breakfast,
            lunch           = EXCLUDED.lunch,
            dinner          = EXCLUDED.dinner,
            guest_breakfast = EXCLUDED.guest_breakfast,
            guest_lunch     = EXCLUDED.guest_lunch,
            guest_dinner    = EXCLUDED.guest_dinner,
            updated_at      = NOW()
""")

_GET_DAY_SQL = text("""
    SELECT member_id, meal_date, cycle_id, breakfast, lunch, dinner,
           guest_breakfast, guest_lunch, guest_dinner
    FROM daily_meals
    WHERE member_id = :member_id AND meal_date = :meal_date
""")

_LIST_RANGE_SQL = text("""
    SELECT member_id, meal_date, cycle_id, breakfast, lunch, dinner,
           guest_breakfast, guest_lunch, guest_dinner
    FROM daily_meals
    WHERE mess_id = :mess_id
      AND meal_date BETWEEN :start AND :end
      AND (CAST(:member_id AS UUID) IS NULL OR member_id = CAST(:member_id AS UUID))
    ORDER BY meal_date, member_id
""")


def row_to_meal(row: object) -> DailyMeal:
    return DailyMeal(
        member_id=str(row.member_id),  # type: ignore[attr-defined]
        meal_date=row.meal_date,  # type: ignore[attr-defined]
        cycle_id=str(row.cycle_id),  # type: ignore[attr-defined]
        breakfast=row.breakfast,  # type: ignore[attr-defined]
        lunch=row.lunch,  # type: ignore[attr-defined]
        dinner=row.dinner,  # type: ignore[attr-defined]
        guest_breakfast=row.guest_breakfast,  # type: ignore[attr-defined]
        guest_lunch=row.guest_lunch,  # type: ignore[attr-defined]
        guest_dinner=row.guest_dinner,  # type: ignore[attr-defined]
    )


class MealRepository:
    """Concrete repository: raw SQL, caller-owned transaction."""

    async def _upsert_one(self, db: AsyncSession, stmt: object, params: dict[str, object]) -> DailyMeal:
        result = await db.execute(stmt, params)  # type: ignore[arg-type]
        row = result.fetchone()
        if row is None:
            raise InternalError("Meal upsert returned no rows")
        return row_to_meal(row)

    async def set_slot(
        self,
        db: AsyncSession,
        mess_id: str,
        cycle_id: str,
        member_id: str,
        meal_date: date,
        slot: MealSlot,
        present: bool,
    ) -> DailyMeal:
        return await self._upsert_one(
            db,
            _SET_FLAG_SQL[slot],
            {
                "mess_id": mess_id,
                "cycle_id": cycle_id,
                "member_id": member_id,
                "meal_date": meal_date,
                "value": present,
            },
        )

    async def set_guests(
        self,
        db: AsyncSession,
        mess_id: str,
        cycle_id: str,
        member_id: str,
        meal_date: date,
        slot: MealSlot,
        count: int,
    ) -> DailyMeal:
        return await self._upsert_one(
            db,
            _SET_GUESTS_SQL[slot],
            {
                "mess_id": mess_id,
                "cycle_id": cycle_id,
                "member_id": member_id,
                "meal_date": meal_date,
                "value": count,
            },
        )

    async def upsert_day(
        self, db: AsyncSession, mess_id: str, cycle_id: str, meal: DailyMeal
    ) -> None:
        await db.execute(
            _UPSERT_DAY_SQL,
            {
                "mess_id": mess_id,
                "cycle_id": cycle_id,
                "member_id": meal.member_id,
                "meal_date": meal.meal_date,
                "breakfast": meal.breakfast,
                "lunch": meal.lunch,
                "dinner": meal.dinner,
                "guest_breakfast": meal.guest_breakfast,
                "guest_lunch": meal.guest_lunch,
                "guest_dinner": meal.guest_dinner,
            },
        )

    async def get_day(
        self, db: AsyncSession, member_id: str, meal_date: date
    ) -> DailyMeal | None:
        result = await db.execute(
            _GET_DAY_SQL, {"member_id": member_id, "meal_date": meal_date}
        )
        row = result.fetchone()
        return row_to_meal(row) if row else None

    async def list_range(
        self,
        db: AsyncSession,
        mess_id: str,
        start: date,
        end: date,
        member_id: str | None,
    ) -> list[DailyMeal]:
        result = await db.execute(
            _LIST_RANGE_SQL,
            {"mess_id": mess_id, "start": start, "end": end, "member_id": member_id},
        )
        return [row_to_meal(row) for row in result.fetchall()]
