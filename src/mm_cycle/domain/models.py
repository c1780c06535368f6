"""Domain models for mm_cycle: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import date, datetime

from src.mm_common.enums import CycleStatus


@dataclass
class Cycle:
    id: str
    mess_id: str
    name: str
    start_date: date
    end_date: date
    status: str                          # CycleStatus value
    final_meal_rate_cents: int | None    # frozen at close, None while open
    opening_balance_cents: int           # sum of per-member opening balances
    closed_at: datetime | None = None
    created_at: datetime | None = None

    @property
    def is_open(self) -> bool:
        return self.status == CycleStatus.OPEN


@dataclass
class MonthSnapshot:
    """Immutable per-member balance components captured by a close."""

    cycle_id: str
    member_id: str
    total_meals: int
    meal_rate_cents: int
    total_meal_cost_cents: int
    total_fixed_cost_cents: int
    total_individual_cost_cents: int
    total_deposits_cents: int
    opening_balance_cents: int
    closing_balance_cents: int
    created_at: datetime | None = None


@dataclass
class CloseResult:
    closed_cycle_id: str
    new_cycle_id: str
    final_meal_rate_cents: int
    snapshot_count: int
