"""MealService: attendance writes and reads for one mess.

Writes share-lock the open cycle and run in a single transaction. Members
edit only their own rows and are held to the slot cutoffs; managers may edit
anyone and bypass cutoffs.
"""

from datetime import date, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from src.mm_common.database import atomic
from src.mm_common.datetime_utils import Clock, SystemClock, local_today
from src.mm_common.enums import ActivityAction, MealSlot
from src.mm_common.errors import InvalidInputError, MealLockedError, UnauthorizedError
from src.mm_cycle.application.guards import require_open_cycle
from src.mm_cycle.domain.models import Cycle
from src.mm_cycle.domain.repository import CycleRepositoryProtocol
from src.mm_cycle.infrastructure.persistence import CycleRepository
from src.mm_meal.application.schemas import (
    BulkMealItem,
    BulkMealResponse,
    MealDayResponse,
    MealGridResponse,
    MealGridRow,
    MealRangeResponse,
    SlotLocksResponse,
    TodayResponse,
)
from src.mm_meal.domain.cutoff import is_slot_locked, slot_locks
from src.mm_meal.domain.models import GUEST_LIMIT, DailyMeal
from src.mm_meal.domain.repository import MealRepositoryProtocol
from src.mm_meal.infrastructure.persistence import MealRepository
from src.mm_mess.application.guards import (
    effective_cutoff_config,
    require_active_member,
    require_manager,
    require_member,
)
from src.mm_mess.domain.models import ActorContext
from src.mm_mess.domain.repository import ActivityLogProtocol, MessRepositoryProtocol
from src.mm_mess.infrastructure.activity_log import ActivityLog
from src.mm_mess.infrastructure.persistence import MessRepository

MAX_RANGE_DAYS = 62


def _check_in_cycle(cycle: Cycle, meal_date: date) -> None:
    """A meal row is stamped with the open cycle, so its date must fall inside it.

    Earlier dates belong to a closed cycle; later ones to a cycle not yet
    opened, whose rows would otherwise be counted (and frozen) in this one.
    """
    if meal_date < cycle.start_date:
        raise InvalidInputError(
            f"{meal_date} belongs to a closed cycle (open cycle starts {cycle.start_date})"
        )
    if meal_date > cycle.end_date:
        raise InvalidInputError(
            f"{meal_date} is after the open cycle ends ({cycle.end_date})"
        )


class MealService:
    def __init__(
        self,
        repo: MealRepositoryProtocol | None = None,
        mess_repo: MessRepositoryProtocol | None = None,
        cycle_repo: CycleRepositoryProtocol | None = None,
        activity: ActivityLogProtocol | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._repo: MealRepositoryProtocol = repo or MealRepository()
        self._mess_repo: MessRepositoryProtocol = mess_repo or MessRepository()
        self._cycle_repo: CycleRepositoryProtocol = cycle_repo or CycleRepository()
        self._activity: ActivityLogProtocol = activity or ActivityLog()
        self._clock: Clock = clock or SystemClock()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def _prepare_write(
        self, db: AsyncSession, ctx: ActorContext, member_id: str, meal_date: date
    ) -> Cycle:
        if not ctx.is_manager and member_id != ctx.member_id:
            raise UnauthorizedError("edit another member's meals")
        await require_active_member(self._mess_repo, db, ctx.mess_id, member_id)
        cycle = await require_open_cycle(self._cycle_repo, db, ctx.mess_id)
        _check_in_cycle(cycle, meal_date)
        return cycle

    async def set_meal(
        self,
        db: AsyncSession,
        ctx: ActorContext,
        member_id: str,
        meal_date: date,
        slot: MealSlot,
        present: bool,
    ) -> MealDayResponse:
        async with atomic(db, "set_meal"):
            cycle = await self._prepare_write(db, ctx, member_id, meal_date)
            if not ctx.is_manager:
                config = await effective_cutoff_config(self._mess_repo, db, ctx.mess_id)
                if is_slot_locked(slot, meal_date, config, self._clock.now()):
                    raise MealLockedError(slot.value, meal_date.isoformat())
            meal = await self._repo.set_slot(
                db, ctx.mess_id, cycle.id, member_id, meal_date, slot, present
            )
        return MealDayResponse.from_domain(meal)

    async def set_guest_count(
        self,
        db: AsyncSession,
        ctx: ActorContext,
        member_id: str,
        meal_date: date,
        slot: MealSlot,
        count: int,
    ) -> MealDayResponse:
        # Guest counts are not held to the slot cutoff.
        if count < 0 or count > GUEST_LIMIT:
            raise InvalidInputError(f"guest count must be between 0 and {GUEST_LIMIT}")
        async with atomic(db, "set_guest_count"):
            cycle = await self._prepare_write(db, ctx, member_id, meal_date)
            meal = await self._repo.set_guests(
                db, ctx.mess_id, cycle.id, member_id, meal_date, slot, count
            )
        return MealDayResponse.from_domain(meal)

    async def bulk_update(
        self,
        db: AsyncSession,
        ctx: ActorContext,
        meal_date: date,
        updates: list[BulkMealItem],
    ) -> BulkMealResponse:
        """Manager grid save: whole days per member, all or nothing."""
        require_manager(ctx, "bulk edit meals")
        for item in updates:
            for count in (item.breakfast, item.lunch, item.dinner):
                if count < 0 or count > GUEST_LIMIT + 1:
                    raise InvalidInputError(
                        f"meal count must be between 0 and {GUEST_LIMIT + 1}"
                    )

        updated = 0
        async with atomic(db, "bulk_update_meals"):
            cycle = await require_open_cycle(self._cycle_repo, db, ctx.mess_id)
            _check_in_cycle(cycle, meal_date)
            for item in updates:
                await require_active_member(self._mess_repo, db, ctx.mess_id, item.member_id)
                meal = DailyMeal.from_counts(
                    item.member_id, meal_date, item.breakfast, item.lunch, item.dinner
                )
                if meal.units == 0:
                    existing = await self._repo.get_day(db, item.member_id, meal_date)
                    if existing is None:
                        continue
                await self._repo.upsert_day(db, ctx.mess_id, cycle.id, meal)
                updated += 1
            await self._activity.write(
                db,
                ctx.mess_id,
                ctx.user_id,
                ActivityAction.MEALS_BULK_UPDATED,
                {"meal_date": meal_date.isoformat(), "rows": updated},
            )
        return BulkMealResponse(meal_date=meal_date, updated=updated)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def query_range(
        self,
        db: AsyncSession,
        ctx: ActorContext,
        start: date,
        end: date,
        member_id: str | None = None,
    ) -> MealRangeResponse:
        if start > end:
            raise InvalidInputError("start must not be after end")
        if (end - start).days + 1 > MAX_RANGE_DAYS:
            raise InvalidInputError(f"range is limited to {MAX_RANGE_DAYS} days")

        if member_id is not None:
            await require_member(self._mess_repo, db, ctx.mess_id, member_id)
        rows = await self._repo.list_range(db, ctx.mess_id, start, end, member_id)

        if member_id is None:
            days = rows
        else:
            # One entry per calendar day; unrecorded days count as all-zero.
            by_date = {row.meal_date: row for row in rows}
            days = []
            day = start
            while day <= end:
                days.append(by_date.get(day) or DailyMeal(member_id=member_id, meal_date=day))
                day += timedelta(days=1)

        return MealRangeResponse(
            start=start,
            end=end,
            member_id=member_id,
            days=[MealDayResponse.from_domain(d) for d in days],
            total_units=sum(d.units for d in days),
        )

    async def today(self, db: AsyncSession, ctx: ActorContext) -> TodayResponse:
        config = await effective_cutoff_config(self._mess_repo, db, ctx.mess_id)
        day = local_today(self._clock, config.timezone)
        meal = await self._repo.get_day(db, ctx.member_id, day)
        if meal is None:
            meal = DailyMeal(member_id=ctx.member_id, meal_date=day)
        locks = slot_locks(day, config, self._clock.now())
        return TodayResponse(
            meal_date=day,
            meals=MealDayResponse.from_domain(meal),
            locked=SlotLocksResponse.from_domain(locks),
        )

    async def meals_for_date(
        self, db: AsyncSession, ctx: ActorContext, meal_date: date
    ) -> MealGridResponse:
        require_manager(ctx, "view the meal grid")
        members = await self._mess_repo.list_members(db, ctx.mess_id, active_only=True)
        rows = await self._repo.list_range(db, ctx.mess_id, meal_date, meal_date, None)
        by_member = {row.member_id: row for row in rows}

        grid: list[MealGridRow] = []
        for member in members:
            meal = by_member.get(member.id) or DailyMeal(member_id=member.id, meal_date=meal_date)
            grid.append(
                MealGridRow(
                    member_id=member.id,
                    display_name=member.display_name,
                    breakfast=meal.slot_count(MealSlot.BREAKFAST),
                    lunch=meal.slot_count(MealSlot.LUNCH),
                    dinner=meal.slot_count(MealSlot.DINNER),
                    total_units=meal.units,
                )
            )
        return MealGridResponse(
            meal_date=meal_date,
            rows=grid,
            total_units=sum(row.total_units for row in grid),
        )
