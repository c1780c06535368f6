"""Unit tests for the raw-SQL repositories using a MagicMock AsyncSession."""

from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.mm_approval.infrastructure.persistence import ApprovalRepository
from src.mm_balance.domain.calculator import member_balance
from src.mm_balance.infrastructure.persistence import LedgerReader
from src.mm_common.enums import EntryKind, MealSlot
from src.mm_common.errors import InternalError
from src.mm_meal.infrastructure.persistence import MealRepository


def _make_meal_row(**kwargs):
    row = MagicMock()
    row.member_id = kwargs.get("member_id", "m-a")
    row.meal_date = kwargs.get("meal_date", date(2026, 10, 19))
    row.cycle_id = kwargs.get("cycle_id", "cycle-1")
    row.breakfast = kwargs.get("breakfast", False)
    row.lunch = kwargs.get("lunch", False)
    row.dinner = kwargs.get("dinner", False)
    row.guest_breakfast = kwargs.get("guest_breakfast", 0)
    row.guest_lunch = kwargs.get("guest_lunch", 0)
    row.guest_dinner = kwargs.get("guest_dinner", 0)
    return row


def _result(*, one=None, many=None) -> MagicMock:
    result_mock = MagicMock()
    result_mock.fetchone.return_value = one
    result_mock.fetchall.return_value = many or []
    return result_mock


@pytest.fixture
def db():
    return MagicMock()


class TestMealRepository:
    async def test_set_slot_maps_returned_row(self, db):
        db.execute = AsyncMock(return_value=_result(one=_make_meal_row(lunch=True, guest_lunch=2)))

        meal = await MealRepository().set_slot(
            db, "mess-1", "cycle-1", "m-a", date(2026, 10, 19), MealSlot.LUNCH, True
        )

        assert meal.lunch is True
        assert meal.units == 3
        params = db.execute.await_args.args[1]
        assert params["value"] is True
        assert params["cycle_id"] == "cycle-1"

    async def test_each_slot_has_its_own_statement(self, db):
        db.execute = AsyncMock(return_value=_result(one=_make_meal_row()))
        repo = MealRepository()

        await repo.set_guests(db, "mess-1", "cycle-1", "m-a", date(2026, 10, 19), MealSlot.DINNER, 1)
        dinner_sql = str(db.execute.await_args.args[0])
        await repo.set_guests(db, "mess-1", "cycle-1", "m-a", date(2026, 10, 19), MealSlot.BREAKFAST, 1)
        breakfast_sql = str(db.execute.await_args.args[0])

        assert "guest_dinner = EXCLUDED.guest_dinner" in dinner_sql
        assert "guest_breakfast = EXCLUDED.guest_breakfast" in breakfast_sql

    async def test_upsert_without_returning_row_is_internal_error(self, db):
        db.execute = AsyncMock(return_value=_result(one=None))

        with pytest.raises(InternalError):
            await MealRepository().set_slot(
                db, "mess-1", "cycle-1", "m-a", date(2026, 10, 19), MealSlot.LUNCH, True
            )

    async def test_get_day_missing(self, db):
        db.execute = AsyncMock(return_value=_result(one=None))
        assert await MealRepository().get_day(db, "m-a", date(2026, 10, 19)) is None

    async def test_list_range(self, db):
        rows = [_make_meal_row(meal_date=date(2026, 10, d), dinner=True) for d in (1, 2, 3)]
        db.execute = AsyncMock(return_value=_result(many=rows))

        meals = await MealRepository().list_range(
            db, "mess-1", date(2026, 10, 1), date(2026, 10, 3), None
        )

        assert [m.meal_date.day for m in meals] == [1, 2, 3]
        assert db.execute.await_args.args[1]["member_id"] is None


class TestApprovalRepository:
    async def test_get_target(self, db):
        row = MagicMock()
        row.id = "dep-1"
        row.mess_id = "mess-1"
        row.cycle_id = "cycle-1"
        row.approval_status = "pending"
        db.execute = AsyncMock(return_value=_result(one=row))

        target = await ApprovalRepository().get_target(db, EntryKind.DEPOSIT, "dep-1")

        assert target is not None
        assert target.approval_status == "pending"
        assert "FROM transactions" in str(db.execute.await_args.args[0])

    async def test_get_target_missing(self, db):
        db.execute = AsyncMock(return_value=_result(one=None))
        assert await ApprovalRepository().get_target(db, EntryKind.BAZAAR, "x") is None

    async def test_decide_only_touches_pending_rows(self, db):
        db.execute = AsyncMock(return_value=_result(one=MagicMock()))

        decided = await ApprovalRepository().decide(
            db, EntryKind.INDIVIDUAL_COST, "ic-1", "rejected", "m-mgr", "duplicate"
        )

        assert decided is True
        sql = str(db.execute.await_args.args[0])
        assert "UPDATE individual_costs" in sql
        assert "approval_status = 'pending'" in sql
        assert db.execute.await_args.args[1]["rejection_reason"] == "duplicate"

    async def test_decide_lost_race_returns_false(self, db):
        db.execute = AsyncMock(return_value=_result(one=None))

        decided = await ApprovalRepository().decide(
            db, EntryKind.DEPOSIT, "dep-1", "approved", "m-mgr", None
        )

        assert decided is False


def _member_row(member_id: str, status: str = "active"):
    row = MagicMock()
    row.id = member_id
    row.status = status
    row.join_date = date(2026, 10, 1)
    return row


def _total_row(member_id: str, total: int):
    row = MagicMock()
    row.member_id = member_id
    row.total = total
    return row


def _scalar(value: int) -> MagicMock:
    result_mock = MagicMock()
    result_mock.scalar_one.return_value = value
    return result_mock


def _ledger_results(deposits: list) -> list[MagicMock]:
    """Results in the order LedgerReader issues its queries."""
    return [
        _result(many=[_make_meal_row(member_id="m-a", lunch=True, dinner=True)]),
        _result(many=[_member_row("m-a"), _member_row("m-b", status="inactive")]),
        _scalar(40_000),
        _scalar(10_000),
        _result(many=deposits),
        _result(many=[_total_row("m-a", 1_500)]),
        _result(many=[]),
    ]


class TestLedgerReader:
    async def test_money_sums_count_approved_entries_only(self, db):
        db.execute = AsyncMock(side_effect=_ledger_results([_total_row("m-a", 60_000)]))

        await LedgerReader().load_cycle_ledger(db, "mess-1", "cycle-1")

        sql = [str(call.args[0]) for call in db.execute.await_args_list]
        bazaar, fixed, deposits, individual = sql[2], sql[3], sql[4], sql[5]
        assert "FROM bazaar_expenses" in bazaar and "approval_status = 'approved'" in bazaar
        assert "FROM transactions" in deposits and "approval_status = 'approved'" in deposits
        assert "FROM individual_costs" in individual and "approval_status = 'approved'" in individual
        assert "FROM fixed_costs" in fixed and "approval_status" not in fixed

    async def test_maps_rows_into_ledger(self, db):
        db.execute = AsyncMock(side_effect=_ledger_results([_total_row("m-a", 60_000)]))

        ledger = await LedgerReader().load_cycle_ledger(db, "mess-1", "cycle-1")

        assert ledger.active_member_ids == ["m-a"]
        assert set(ledger.join_dates) == {"m-a", "m-b"}
        assert ledger.bazaar_total_cents == 40_000
        assert ledger.fixed_total_cents == 10_000
        assert ledger.deposits == {"m-a": 60_000}
        assert ledger.individual_costs == {"m-a": 1_500}
        assert ledger.meals[0].units == 2

    async def test_approving_a_deposit_moves_balance_by_its_amount(self, db):
        reader = LedgerReader()
        db.execute = AsyncMock(side_effect=_ledger_results([]))
        before = await reader.load_cycle_ledger(db, "mess-1", "cycle-1")
        db.execute = AsyncMock(side_effect=_ledger_results([_total_row("m-a", 60_000)]))
        after = await reader.load_cycle_ledger(db, "mess-1", "cycle-1")

        delta = (
            member_balance(after, "m-a").balance_cents
            - member_balance(before, "m-a").balance_cents
        )

        assert delta == 60_000
