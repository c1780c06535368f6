"""Domain models for mm_balance: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import date

from src.mm_meal.domain.models import DailyMeal


@dataclass
class CycleLedger:
    """Everything the calculator needs for one cycle, freshly read from the store.

    Money maps hold approved entries only; members absent from a map have 0.
    """

    cycle_id: str
    meals: list[DailyMeal] = field(default_factory=list)
    join_dates: dict[str, date] = field(default_factory=dict)
    active_member_ids: list[str] = field(default_factory=list)
    bazaar_total_cents: int = 0
    fixed_total_cents: int = 0
    opening_balances: dict[str, int] = field(default_factory=dict)
    deposits: dict[str, int] = field(default_factory=dict)
    individual_costs: dict[str, int] = field(default_factory=dict)

    @property
    def opening_total_cents(self) -> int:
        return sum(self.opening_balances.values())

    @property
    def deposit_total_cents(self) -> int:
        return sum(self.deposits.values())

    @property
    def individual_total_cents(self) -> int:
        return sum(self.individual_costs.values())


@dataclass
class BalanceBreakdown:
    member_id: str
    opening_balance_cents: int
    total_deposits_cents: int
    total_meals: int
    meal_rate_cents: int
    meal_cost_cents: int
    fixed_cost_share_cents: int
    individual_cost_cents: int
    balance_cents: int
