"""Meal rate and member balance arithmetic.

Pure functions over a CycleLedger; no I/O, no caching. Every figure is int
minor units:

    meal_units(row)        = sum over slots of (flag ? 1 : 0) + guests
    member_units(m)        = sum of meal_units over m's rows dated on/after m joined
    meal_rate              = round_half_up(approved bazaar / sum of member_units), 0 if no units
    meal_cost(m)           = approved bazaar split by member_units (allocate_cents)
    fixed_share(m)         = fixed total split evenly over active members (allocate_cents)
    balance(m)             = opening + deposits - meal_cost - fixed_share - individual

meal_cost(m) equals member_units(m) * meal_rate whenever the rate divides
evenly; otherwise it differs by at most a cent so that the charges add up to
the bazaar spend exactly.
"""

from src.mm_balance.domain.models import BalanceBreakdown, CycleLedger
from src.mm_common.money import allocate_cents, div_round_half_up
from src.mm_meal.domain.models import DailyMeal


def meal_units(row: DailyMeal) -> int:
    return row.units


def units_by_member(ledger: CycleLedger) -> dict[str, int]:
    """Meal units per member. Rows dated before a member's join date are ignored."""
    units: dict[str, int] = {}
    for row in ledger.meals:
        joined = ledger.join_dates.get(row.member_id)
        if joined is not None and row.meal_date < joined:
            continue
        units[row.member_id] = units.get(row.member_id, 0) + meal_units(row)
    return units


def total_units(ledger: CycleLedger) -> int:
    return sum(units_by_member(ledger).values())


def meal_rate(ledger: CycleLedger) -> int:
    return div_round_half_up(ledger.bazaar_total_cents, total_units(ledger))


def meal_costs(ledger: CycleLedger) -> dict[str, int]:
    """Approved bazaar spend charged to each member who ate, by units."""
    return allocate_cents(ledger.bazaar_total_cents, units_by_member(ledger))


def fixed_cost_shares(ledger: CycleLedger) -> dict[str, int]:
    return allocate_cents(
        ledger.fixed_total_cents, {member_id: 1 for member_id in ledger.active_member_ids}
    )


def member_balance(ledger: CycleLedger, member_id: str) -> BalanceBreakdown:
    return _breakdown(
        ledger,
        member_id,
        units_by_member(ledger).get(member_id, 0),
        meal_rate(ledger),
        meal_costs(ledger).get(member_id, 0),
        fixed_cost_shares(ledger).get(member_id, 0),
    )


def all_member_balances(ledger: CycleLedger) -> list[BalanceBreakdown]:
    """Balances of every active member, in ledger order."""
    units = units_by_member(ledger)
    rate = meal_rate(ledger)
    costs = meal_costs(ledger)
    shares = fixed_cost_shares(ledger)
    return [
        _breakdown(
            ledger,
            member_id,
            units.get(member_id, 0),
            rate,
            costs.get(member_id, 0),
            shares.get(member_id, 0),
        )
        for member_id in ledger.active_member_ids
    ]


def _breakdown(
    ledger: CycleLedger,
    member_id: str,
    units: int,
    rate: int,
    meal_cost: int,
    share: int,
) -> BalanceBreakdown:
    opening = ledger.opening_balances.get(member_id, 0)
    deposits = ledger.deposits.get(member_id, 0)
    individual = ledger.individual_costs.get(member_id, 0)
    return BalanceBreakdown(
        member_id=member_id,
        opening_balance_cents=opening,
        total_deposits_cents=deposits,
        total_meals=units,
        meal_rate_cents=rate,
        meal_cost_cents=meal_cost,
        fixed_cost_share_cents=share,
        individual_cost_cents=individual,
        balance_cents=opening + deposits - meal_cost - share - individual,
    )


def cash_in_hand(ledger: CycleLedger) -> int:
    """Money the mess should physically hold for this cycle."""
    return (
        ledger.opening_total_cents
        + ledger.deposit_total_cents
        - ledger.bazaar_total_cents
        - ledger.fixed_total_cents
        - ledger.individual_total_cents
    )
