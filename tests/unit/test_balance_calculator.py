"""Tests for meal rate and member balance arithmetic."""

from datetime import date

from src.mm_balance.domain.calculator import (
    all_member_balances,
    cash_in_hand,
    fixed_cost_shares,
    meal_costs,
    meal_rate,
    member_balance,
    total_units,
    units_by_member,
)
from src.mm_balance.domain.models import CycleLedger
from src.mm_meal.domain.models import DailyMeal

OCT_1 = date(2026, 10, 1)


def _meals(member_id: str, units: int, start: date = OCT_1) -> list[DailyMeal]:
    """``units`` meals spread as lunch+dinner days, plus a lone lunch if odd."""
    rows = []
    day = start.toordinal()
    for _ in range(units // 2):
        rows.append(DailyMeal(member_id=member_id, meal_date=date.fromordinal(day), lunch=True, dinner=True))
        day += 1
    if units % 2:
        rows.append(DailyMeal(member_id=member_id, meal_date=date.fromordinal(day), lunch=True))
    return rows


def _two_member_ledger() -> CycleLedger:
    """A eats 30 units, B eats 10; bazaar of 1,000,000 cents gives a rate of 25,000."""
    return CycleLedger(
        cycle_id="c-1",
        meals=_meals("A", 30) + _meals("B", 10),
        join_dates={"A": OCT_1, "B": OCT_1},
        active_member_ids=["A", "B"],
        bazaar_total_cents=1_000_000,
        deposits={"A": 825_000, "B": 225_000},
    )


class TestMealRate:
    def test_rate_is_bazaar_over_units(self) -> None:
        ledger = _two_member_ledger()
        assert total_units(ledger) == 40
        assert meal_rate(ledger) == 25_000

    def test_zero_meals_gives_zero_rate(self) -> None:
        ledger = CycleLedger(cycle_id="c", bazaar_total_cents=50_000, active_member_ids=["A"])
        assert meal_rate(ledger) == 0

    def test_rate_rounds_half_up(self) -> None:
        ledger = CycleLedger(cycle_id="c", meals=_meals("A", 3), bazaar_total_cents=100)
        # 100 / 3 = 33.33 -> 33
        assert meal_rate(ledger) == 33
        ledger.bazaar_total_cents = 101
        # 101 / 3 = 33.67 -> 34
        assert meal_rate(ledger) == 34

    def test_guests_count_toward_owner(self) -> None:
        ledger = CycleLedger(
            cycle_id="c",
            meals=[DailyMeal(member_id="A", meal_date=OCT_1, lunch=True, guest_lunch=3)],
        )
        assert units_by_member(ledger) == {"A": 4}

    def test_rows_before_join_date_are_ignored(self) -> None:
        ledger = CycleLedger(
            cycle_id="c",
            meals=[
                DailyMeal(member_id="A", meal_date=date(2026, 10, 4), dinner=True),
                DailyMeal(member_id="A", meal_date=date(2026, 10, 5), dinner=True),
            ],
            join_dates={"A": date(2026, 10, 5)},
        )
        assert units_by_member(ledger) == {"A": 1}


class TestFixedCostShares:
    def test_even_split(self) -> None:
        ledger = CycleLedger(cycle_id="c", fixed_total_cents=90_000, active_member_ids=["A", "B", "C"])
        assert fixed_cost_shares(ledger) == {"A": 30_000, "B": 30_000, "C": 30_000}

    def test_no_active_members_gives_nothing(self) -> None:
        ledger = CycleLedger(cycle_id="c", fixed_total_cents=90_000)
        assert fixed_cost_shares(ledger) == {}

    def test_odd_cent_goes_to_first_member(self) -> None:
        ledger = CycleLedger(cycle_id="c", fixed_total_cents=100_001, active_member_ids=["A", "B"])
        assert fixed_cost_shares(ledger) == {"A": 50_001, "B": 50_000}


class TestMealCosts:
    def test_uneven_rate_still_charges_whole_bazaar(self) -> None:
        ledger = CycleLedger(
            cycle_id="c",
            meals=_meals("A", 1) + _meals("B", 1) + _meals("C", 1),
            bazaar_total_cents=100_000,
        )
        costs = meal_costs(ledger)
        assert meal_rate(ledger) == 33_333
        assert sum(costs.values()) == 100_000
        assert sorted(costs.values()) == [33_333, 33_333, 33_334]

    def test_split_follows_units(self) -> None:
        ledger = CycleLedger(
            cycle_id="c", meals=_meals("A", 2) + _meals("B", 1), bazaar_total_cents=100
        )
        # exact shares 66.67 and 33.33
        assert meal_costs(ledger) == {"A": 67, "B": 33}

    def test_exact_rate_matches_units_times_rate(self) -> None:
        costs = meal_costs(_two_member_ledger())
        assert costs == {"A": 30 * 25_000, "B": 10 * 25_000}

    def test_no_meals_charges_nothing(self) -> None:
        ledger = CycleLedger(cycle_id="c", bazaar_total_cents=50_000)
        assert meal_costs(ledger) == {}


class TestMemberBalance:
    def test_worked_example(self) -> None:
        ledger = _two_member_ledger()
        a = member_balance(ledger, "A")
        b = member_balance(ledger, "B")
        assert a.meal_cost_cents == 750_000
        assert a.balance_cents == 75_000
        assert b.meal_cost_cents == 250_000
        assert b.balance_cents == -25_000

    def test_all_components(self) -> None:
        ledger = _two_member_ledger()
        ledger.opening_balances = {"A": 10_000}
        ledger.fixed_total_cents = 20_000
        ledger.individual_costs = {"A": 5_000}
        a = member_balance(ledger, "A")
        # 10,000 + 825,000 - 750,000 - 10,000 - 5,000
        assert a.balance_cents == 70_000
        assert a.fixed_cost_share_cents == 10_000
        assert a.opening_balance_cents == 10_000

    def test_member_without_activity(self) -> None:
        ledger = _two_member_ledger()
        c = member_balance(ledger, "C")
        assert c.total_meals == 0
        assert c.balance_cents == 0


class TestAllMemberBalances:
    def test_covers_active_members_in_order(self) -> None:
        ledger = _two_member_ledger()
        balances = all_member_balances(ledger)
        assert [b.member_id for b in balances] == ["A", "B"]
        assert sum(b.balance_cents for b in balances) == 50_000

    def test_balances_sum_to_cash_in_hand(self) -> None:
        ledger = _two_member_ledger()
        ledger.fixed_total_cents = 20_000
        ledger.opening_balances = {"A": 3_000, "B": -1_000}
        total = sum(b.balance_cents for b in all_member_balances(ledger))
        assert total == cash_in_hand(ledger)


class TestCashInHand:
    def test_formula(self) -> None:
        ledger = CycleLedger(
            cycle_id="c",
            opening_balances={"A": 1_000},
            deposits={"A": 50_000, "B": 30_000},
            bazaar_total_cents=40_000,
            fixed_total_cents=10_000,
            individual_costs={"B": 2_000},
        )
        assert cash_in_hand(ledger) == 1_000 + 80_000 - 40_000 - 10_000 - 2_000


class TestConservation:
    def test_uneven_rate_and_share_lose_no_money(self) -> None:
        ledger = CycleLedger(
            cycle_id="c",
            meals=_meals("A", 7) + _meals("B", 5) + _meals("C", 1),
            join_dates={"A": OCT_1, "B": OCT_1, "C": OCT_1},
            active_member_ids=["A", "B", "C"],
            bazaar_total_cents=1_000_001,
            fixed_total_cents=20_002,
            opening_balances={"B": 4_321},
            deposits={"A": 500_000, "B": 300_000, "C": 100_000},
            individual_costs={"C": 1_111},
        )
        balances = all_member_balances(ledger)
        assert sum(b.meal_cost_cents for b in balances) == ledger.bazaar_total_cents
        assert sum(b.fixed_cost_share_cents for b in balances) == ledger.fixed_total_cents
        assert sum(b.balance_cents for b in balances) == cash_in_hand(ledger)
