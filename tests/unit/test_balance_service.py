"""Unit tests for BalanceService: live figures on open cycles, snapshots on closed ones."""

from datetime import date, datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.mm_balance.application.service import BalanceService
from src.mm_balance.domain.models import CycleLedger
from src.mm_common.errors import NotFoundError
from src.mm_cycle.domain.models import Cycle, MonthSnapshot
from src.mm_meal.domain.models import DailyMeal
from src.mm_mess.domain.models import ActorContext, Member

MEMBER = ActorContext(user_id="u-a", mess_id="mess-1", member_id="A", role="member")


class _FixedClock:
    def now(self) -> datetime:
        # Oct 11 in Dhaka
        return datetime(2026, 10, 11, 6, 0, tzinfo=timezone.utc)


def _cycle(status: str = "open", rate: int | None = None, mess_id: str = "mess-1") -> Cycle:
    return Cycle(
        id="cycle-1", mess_id=mess_id, name="October 2026",
        start_date=date(2026, 10, 1), end_date=date(2026, 10, 31), status=status,
        final_meal_rate_cents=rate, opening_balance_cents=0,
    )


def _ledger() -> CycleLedger:
    meals = [
        DailyMeal(member_id="A", meal_date=date(2026, 10, d), breakfast=True, lunch=True, dinner=True)
        for d in range(1, 11)
    ] + [
        DailyMeal(member_id="B", meal_date=date(2026, 10, d), lunch=True, dinner=True)
        for d in range(1, 6)
    ]
    return CycleLedger(
        cycle_id="cycle-1",
        meals=meals,
        join_dates={"A": date(2026, 10, 1), "B": date(2026, 10, 1)},
        active_member_ids=["A", "B"],
        bazaar_total_cents=1_000_000,
        deposits={"A": 825_000, "B": 225_000},
    )


def _member(member_id: str) -> Member:
    return Member(
        id=member_id, mess_id="mess-1", user_id=f"u-{member_id}", role="member",
        status="active", join_date=date(2026, 10, 1), display_name=f"Member {member_id}",
    )


def _service(cycle: Cycle | None = None) -> tuple[BalanceService, AsyncMock, AsyncMock, AsyncMock, AsyncMock]:
    reader = AsyncMock()
    cycle_repo = AsyncMock()
    mess_repo = AsyncMock()
    meal_repo = AsyncMock()
    reader.load_cycle_ledger.return_value = _ledger()
    cycle_repo.get_cycle.return_value = cycle or _cycle()
    mess_repo.get_member.side_effect = lambda db, mess_id, member_id: _member(member_id)
    mess_repo.list_members.return_value = [_member("A"), _member("B")]
    mess_repo.get_cutoff_config.return_value = None
    meal_repo.list_range.return_value = [
        DailyMeal(member_id="A", meal_date=date(2026, 10, 11), lunch=True, guest_lunch=1)
    ]
    svc = BalanceService(
        reader=reader, cycle_repo=cycle_repo, mess_repo=mess_repo,
        meal_repo=meal_repo, clock=_FixedClock(),
    )
    return svc, reader, cycle_repo, mess_repo, meal_repo


def _snapshot(member_id: str, closing: int) -> MonthSnapshot:
    return MonthSnapshot(
        cycle_id="cycle-1", member_id=member_id, total_meals=30, meal_rate_cents=20_000,
        total_meal_cost_cents=600_000, total_fixed_cost_cents=0,
        total_individual_cost_cents=0, total_deposits_cents=825_000,
        opening_balance_cents=0, closing_balance_cents=closing,
    )


class TestMealRate:
    async def test_live_rate_for_open_cycle(self, db: MagicMock) -> None:
        svc, _, _, _, _ = _service()

        result = await svc.meal_rate(db, MEMBER, "cycle-1")

        assert result.meal_rate_cents == 25_000
        assert result.total_meal_units == 40
        assert result.frozen is False

    async def test_frozen_rate_for_closed_cycle(self, db: MagicMock) -> None:
        svc, _, _, _, _ = _service(_cycle(status="closed", rate=24_000))

        result = await svc.meal_rate(db, MEMBER, "cycle-1")

        assert result.meal_rate_cents == 24_000
        assert result.frozen is True

    async def test_foreign_cycle_not_found(self, db: MagicMock) -> None:
        svc, reader, _, _, _ = _service(_cycle(mess_id="mess-2"))

        with pytest.raises(NotFoundError):
            await svc.meal_rate(db, MEMBER, "cycle-1")
        reader.load_cycle_ledger.assert_not_awaited()


class TestMemberBalance:
    async def test_live_balance(self, db: MagicMock) -> None:
        svc, _, _, _, _ = _service()

        result = await svc.member_balance(db, MEMBER, "cycle-1", "B")

        assert result.balance_cents == -25_000
        assert result.balance_display == "-৳250.00"
        assert result.display_name == "Member B"

    async def test_closed_cycle_reads_snapshot(self, db: MagicMock) -> None:
        svc, reader, cycle_repo, _, _ = _service(_cycle(status="closed", rate=20_000))
        cycle_repo.list_snapshots.return_value = [_snapshot("A", 225_000)]

        result = await svc.member_balance(db, MEMBER, "cycle-1", "A")

        assert result.balance_cents == 225_000
        assert result.meal_rate_cents == 20_000
        reader.load_cycle_ledger.assert_not_awaited()

    async def test_closed_cycle_without_snapshot(self, db: MagicMock) -> None:
        svc, _, cycle_repo, _, _ = _service(_cycle(status="closed", rate=20_000))
        cycle_repo.list_snapshots.return_value = []

        with pytest.raises(NotFoundError, match="Snapshot"):
            await svc.member_balance(db, MEMBER, "cycle-1", "B")


class TestAllMemberBalances:
    async def test_live(self, db: MagicMock) -> None:
        svc, _, _, _, _ = _service()

        result = await svc.all_member_balances(db, MEMBER, "cycle-1")

        assert [(r.member_id, r.balance_cents) for r in result] == [("A", 75_000), ("B", -25_000)]
        assert result[0].display_name == "Member A"

    async def test_closed_uses_snapshots(self, db: MagicMock) -> None:
        svc, _, cycle_repo, _, _ = _service(_cycle(status="closed", rate=20_000))
        cycle_repo.list_snapshots.return_value = [_snapshot("A", 1), _snapshot("B", 2)]

        result = await svc.all_member_balances(db, MEMBER, "cycle-1")

        assert [r.balance_cents for r in result] == [1, 2]


class TestOverview:
    async def test_overview_figures(self, db: MagicMock) -> None:
        svc, _, _, _, meal_repo = _service()

        result = await svc.mess_overview(db, MEMBER, "cycle-1")

        assert result.meal_rate_cents == 25_000
        assert result.total_meal_units == 40
        assert result.total_meal_cost_cents == 1_000_000
        assert result.cash_in_hand_cents == 50_000
        assert result.today_meal_units == 2
        # 10 of 30 days elapsed
        assert result.cycle_progress_percent == 33
        assert result.days_remaining == 20
        assert meal_repo.list_range.await_args.args[2] == date(2026, 10, 11)
