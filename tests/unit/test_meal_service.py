"""Unit tests for MealService using mock repositories and a fixed clock."""

from dataclasses import replace
from datetime import date, datetime, time, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.mm_common.enums import ActivityAction, MealSlot
from src.mm_common.errors import (
    InvalidInputError,
    MealLockedError,
    NoOpenCycleError,
    NotFoundError,
    UnauthorizedError,
)
from src.mm_cycle.domain.models import Cycle
from src.mm_meal.application.schemas import BulkMealItem
from src.mm_meal.application.service import MealService
from src.mm_meal.domain.models import DailyMeal
from src.mm_mess.domain.models import ActorContext, CutoffConfig, Member

M_A = "0a0a0a0a-0000-4000-8000-00000000000a"
M_B = "0b0b0b0b-0000-4000-8000-00000000000b"
M_X = "0f0f0f0f-0000-4000-8000-00000000000f"
M_MGR = "01010101-0000-4000-8000-000000000001"
MANAGER = ActorContext(user_id="u-mgr", mess_id="mess-1", member_id=M_MGR, role="manager")
MEMBER = ActorContext(user_id="u-a", mess_id="mess-1", member_id=M_A, role="member")
DHAKA = CutoffConfig(time(21, 0), time(10, 0), time(15, 0), "Asia/Dhaka")
TODAY = date(2026, 10, 20)


class _FixedClock:
    def __init__(self, instant: datetime) -> None:
        self._instant = instant

    def now(self) -> datetime:
        return self._instant


def _at_dhaka(day: date, hour: int, minute: int = 0) -> _FixedClock:
    return _FixedClock(
        datetime(day.year, day.month, day.day, hour, minute, tzinfo=timezone(timedelta(hours=6)))
    )


def _cycle() -> Cycle:
    return Cycle(
        id="cycle-1",
        mess_id="mess-1",
        name="October 2026",
        start_date=date(2026, 10, 1),
        end_date=date(2026, 10, 31),
        status="open",
        final_meal_rate_cents=None,
        opening_balance_cents=0,
    )


def _member(member_id: str = M_A) -> Member:
    return Member(
        id=member_id,
        mess_id="mess-1",
        user_id=f"u-{member_id}",
        role="member",
        status="active",
        join_date=date(2026, 10, 1),
        display_name=member_id,
    )


def _service(clock: _FixedClock | None = None) -> tuple[MealService, AsyncMock, AsyncMock, AsyncMock, AsyncMock]:
    repo = AsyncMock()
    mess_repo = AsyncMock()
    cycle_repo = AsyncMock()
    activity = AsyncMock()
    mess_repo.get_member.return_value = _member()
    mess_repo.get_cutoff_config.return_value = DHAKA
    cycle_repo.lock_open_cycle.return_value = _cycle()
    svc = MealService(
        repo=repo,
        mess_repo=mess_repo,
        cycle_repo=cycle_repo,
        activity=activity,
        clock=clock or _at_dhaka(TODAY, 8),
    )
    return svc, repo, mess_repo, cycle_repo, activity


class TestSetMeal:
    async def test_member_sets_own_open_slot(self, db: MagicMock) -> None:
        svc, repo, _, _, _ = _service()
        repo.set_slot.return_value = DailyMeal(member_id=M_A, meal_date=TODAY, lunch=True)

        result = await svc.set_meal(db, MEMBER, M_A, TODAY, MealSlot.LUNCH, True)

        repo.set_slot.assert_awaited_once_with(
            db, "mess-1", "cycle-1", M_A, TODAY, MealSlot.LUNCH, True
        )
        assert result.lunch is True
        assert result.total_units == 1
        db.commit.assert_awaited_once()

    async def test_member_after_cutoff_is_locked(self, db: MagicMock) -> None:
        svc, repo, _, _, _ = _service(_at_dhaka(TODAY, 10, 0))

        with pytest.raises(MealLockedError):
            await svc.set_meal(db, MEMBER, M_A, TODAY, MealSlot.LUNCH, True)

        repo.set_slot.assert_not_awaited()
        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()

    async def test_breakfast_locks_the_evening_before(self, db: MagicMock) -> None:
        svc, _, _, _, _ = _service(_at_dhaka(TODAY, 21, 30))
        tomorrow = TODAY + timedelta(days=1)

        with pytest.raises(MealLockedError, match="Breakfast"):
            await svc.set_meal(db, MEMBER, M_A, tomorrow, MealSlot.BREAKFAST, False)

    async def test_manager_bypasses_cutoff(self, db: MagicMock) -> None:
        svc, repo, mess_repo, _, _ = _service(_at_dhaka(TODAY, 23))
        repo.set_slot.return_value = DailyMeal(member_id=M_A, meal_date=TODAY, dinner=True)

        await svc.set_meal(db, MANAGER, M_A, TODAY, MealSlot.DINNER, True)

        repo.set_slot.assert_awaited_once()
        mess_repo.get_cutoff_config.assert_not_awaited()

    async def test_member_cannot_edit_someone_else(self, db: MagicMock) -> None:
        svc, repo, _, _, _ = _service()

        with pytest.raises(UnauthorizedError):
            await svc.set_meal(db, MEMBER, M_B, TODAY, MealSlot.LUNCH, True)
        repo.set_slot.assert_not_awaited()

    async def test_unknown_member_is_not_found(self, db: MagicMock) -> None:
        svc, _, mess_repo, _, _ = _service()
        mess_repo.get_member.return_value = None

        with pytest.raises(NotFoundError):
            await svc.set_meal(db, MANAGER, M_X, TODAY, MealSlot.LUNCH, True)

    async def test_no_open_cycle(self, db: MagicMock) -> None:
        svc, _, _, cycle_repo, _ = _service()
        cycle_repo.lock_open_cycle.return_value = None

        with pytest.raises(NoOpenCycleError):
            await svc.set_meal(db, MEMBER, M_A, TODAY, MealSlot.DINNER, True)

    async def test_date_before_open_cycle_rejected(self, db: MagicMock) -> None:
        svc, _, _, _, _ = _service()

        with pytest.raises(InvalidInputError):
            await svc.set_meal(db, MANAGER, M_A, date(2026, 9, 30), MealSlot.LUNCH, True)

    async def test_date_after_open_cycle_rejected(self, db: MagicMock) -> None:
        svc, repo, _, _, _ = _service()

        with pytest.raises(InvalidInputError, match="after the open cycle ends"):
            await svc.set_meal(db, MANAGER, M_A, date(2026, 11, 5), MealSlot.LUNCH, True)
        repo.set_slot.assert_not_awaited()
        db.commit.assert_not_awaited()

    async def test_last_day_of_cycle_accepted(self, db: MagicMock) -> None:
        svc, repo, _, _, _ = _service()
        last = date(2026, 10, 31)
        repo.set_slot.return_value = DailyMeal(member_id=M_A, meal_date=last, dinner=True)

        await svc.set_meal(db, MANAGER, M_A, last, MealSlot.DINNER, True)

        repo.set_slot.assert_awaited_once()

    async def test_inactive_member_rejected(self, db: MagicMock) -> None:
        svc, repo, mess_repo, _, _ = _service()
        mess_repo.get_member.return_value = replace(_member(M_A), status="on_leave")

        with pytest.raises(InvalidInputError, match="not active"):
            await svc.set_meal(db, MANAGER, M_A, TODAY, MealSlot.LUNCH, True)
        repo.set_slot.assert_not_awaited()

    async def test_default_cutoffs_used_when_mess_has_none(self, db: MagicMock) -> None:
        svc, repo, mess_repo, _, _ = _service(_at_dhaka(TODAY, 9, 59))
        mess_repo.get_cutoff_config.return_value = None
        repo.set_slot.return_value = DailyMeal(member_id=M_A, meal_date=TODAY, lunch=True)

        await svc.set_meal(db, MEMBER, M_A, TODAY, MealSlot.LUNCH, True)

        repo.set_slot.assert_awaited_once()


class TestSetGuestCount:
    async def test_guests_after_open_cycle_rejected(self, db: MagicMock) -> None:
        svc, repo, _, _, _ = _service()

        with pytest.raises(InvalidInputError):
            await svc.set_guest_count(db, MEMBER, M_A, date(2026, 11, 1), MealSlot.LUNCH, 1)
        repo.set_guests.assert_not_awaited()

    async def test_sets_guests_even_after_cutoff(self, db: MagicMock) -> None:
        svc, repo, _, _, _ = _service(_at_dhaka(TODAY, 20))
        repo.set_guests.return_value = DailyMeal(member_id=M_A, meal_date=TODAY, guest_dinner=2)

        result = await svc.set_guest_count(db, MEMBER, M_A, TODAY, MealSlot.DINNER, 2)

        assert result.guest_dinner == 2
        repo.set_guests.assert_awaited_once_with(
            db, "mess-1", "cycle-1", M_A, TODAY, MealSlot.DINNER, 2
        )

    @pytest.mark.parametrize("count", [-1, 11])
    async def test_out_of_range(self, db: MagicMock, count: int) -> None:
        svc, repo, _, _, _ = _service()

        with pytest.raises(InvalidInputError):
            await svc.set_guest_count(db, MEMBER, M_A, TODAY, MealSlot.LUNCH, count)
        repo.set_guests.assert_not_awaited()


class TestBulkUpdate:
    async def test_manager_only(self, db: MagicMock) -> None:
        svc, _, _, _, _ = _service()

        with pytest.raises(UnauthorizedError):
            await svc.bulk_update(db, MEMBER, TODAY, [BulkMealItem(member_id=M_A, lunch=1)])

    async def test_upserts_rows_and_logs_activity(self, db: MagicMock) -> None:
        svc, repo, _, _, activity = _service()
        repo.get_day.return_value = None

        result = await svc.bulk_update(
            db,
            MANAGER,
            TODAY,
            [
                BulkMealItem(member_id=M_A, breakfast=1, lunch=2, dinner=0),
                BulkMealItem(member_id=M_B, breakfast=0, lunch=0, dinner=0),
            ],
        )

        assert result.updated == 1
        repo.upsert_day.assert_awaited_once()
        written: DailyMeal = repo.upsert_day.await_args.args[3]
        assert written.member_id == M_A
        assert written.guest_lunch == 1
        assert activity.write.await_args.args[3] == ActivityAction.MEALS_BULK_UPDATED
        db.commit.assert_awaited_once()

    async def test_zeroing_an_existing_row_is_written(self, db: MagicMock) -> None:
        svc, repo, _, _, _ = _service()
        repo.get_day.return_value = DailyMeal(member_id=M_A, meal_date=TODAY, lunch=True)

        result = await svc.bulk_update(db, MANAGER, TODAY, [BulkMealItem(member_id=M_A)])

        assert result.updated == 1
        repo.upsert_day.assert_awaited_once()

    async def test_one_bad_member_rolls_back_everything(self, db: MagicMock) -> None:
        svc, repo, mess_repo, _, _ = _service()
        mess_repo.get_member.side_effect = [_member(M_A), None]

        with pytest.raises(NotFoundError):
            await svc.bulk_update(
                db,
                MANAGER,
                TODAY,
                [BulkMealItem(member_id=M_A, lunch=1), BulkMealItem(member_id=M_X, lunch=1)],
            )
        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()

    async def test_date_after_open_cycle_rejected(self, db: MagicMock) -> None:
        svc, repo, _, _, _ = _service()

        with pytest.raises(InvalidInputError):
            await svc.bulk_update(
                db, MANAGER, date(2026, 11, 1), [BulkMealItem(member_id=M_A, lunch=1)]
            )
        repo.upsert_day.assert_not_awaited()
        db.rollback.assert_awaited_once()


class TestQueryRange:
    async def test_member_range_is_dense(self, db: MagicMock) -> None:
        svc, repo, _, _, _ = _service()
        repo.list_range.return_value = [
            DailyMeal(member_id=M_A, meal_date=date(2026, 10, 2), lunch=True, dinner=True)
        ]

        result = await svc.query_range(db, MEMBER, date(2026, 10, 1), date(2026, 10, 3), M_A)

        assert [d.meal_date for d in result.days] == [
            date(2026, 10, 1), date(2026, 10, 2), date(2026, 10, 3)
        ]
        assert result.days[0].total_units == 0
        assert result.total_units == 2

    async def test_reversed_range_rejected(self, db: MagicMock) -> None:
        svc, _, _, _, _ = _service()

        with pytest.raises(InvalidInputError):
            await svc.query_range(db, MEMBER, date(2026, 10, 5), date(2026, 10, 1))

    async def test_range_too_long_rejected(self, db: MagicMock) -> None:
        svc, _, _, _, _ = _service()

        with pytest.raises(InvalidInputError, match="62"):
            await svc.query_range(db, MEMBER, date(2026, 1, 1), date(2026, 6, 1))


class TestToday:
    async def test_today_in_mess_time_zone_with_locks(self, db: MagicMock) -> None:
        # 19:30 UTC on the 19th is 01:30 on the 20th in Dhaka
        clock = _FixedClock(datetime(2026, 10, 19, 19, 30, tzinfo=timezone.utc))
        svc, repo, _, _, _ = _service(clock)
        repo.get_day.return_value = None

        result = await svc.today(db, MEMBER)

        assert result.meal_date == TODAY
        assert result.meals.total_units == 0
        assert result.locked.breakfast is True
        assert result.locked.lunch is False


class TestMealsForDate:
    async def test_grid_covers_active_members(self, db: MagicMock) -> None:
        svc, repo, mess_repo, _, _ = _service()
        mess_repo.list_members.return_value = [_member(M_A), _member(M_B)]
        repo.list_range.return_value = [
            DailyMeal(member_id=M_B, meal_date=TODAY, lunch=True, guest_lunch=1)
        ]

        result = await svc.meals_for_date(db, MANAGER, TODAY)

        assert [r.member_id for r in result.rows] == [M_A, M_B]
        assert result.rows[1].lunch == 2
        assert result.total_units == 2

    async def test_grid_is_manager_only(self, db: MagicMock) -> None:
        svc, _, _, _, _ = _service()

        with pytest.raises(UnauthorizedError):
            await svc.meals_for_date(db, MEMBER, TODAY)
