"""Pydantic schemas for the mm_balance API."""

from datetime import date

from pydantic import BaseModel

from src.mm_balance.domain.models import BalanceBreakdown
from src.mm_common.money import cents_to_display
from src.mm_cycle.domain.models import MonthSnapshot


class MealRateResponse(BaseModel):
    cycle_id: str
    meal_rate_cents: int
    meal_rate_display: str
    total_meal_units: int
    bazaar_total_cents: int
    frozen: bool  # True once the cycle is closed


class MemberBalanceResponse(BaseModel):
    member_id: str
    display_name: str | None = None
    opening_balance_cents: int
    total_deposits_cents: int
    total_meals: int
    meal_rate_cents: int
    meal_cost_cents: int
    fixed_cost_share_cents: int
    individual_cost_cents: int
    balance_cents: int
    balance_display: str

    @classmethod
    def from_breakdown(
        cls, b: BalanceBreakdown, display_name: str | None = None
    ) -> "MemberBalanceResponse":
        return cls(
            member_id=b.member_id,
            display_name=display_name,
            opening_balance_cents=b.opening_balance_cents,
            total_deposits_cents=b.total_deposits_cents,
            total_meals=b.total_meals,
            meal_rate_cents=b.meal_rate_cents,
            meal_cost_cents=b.meal_cost_cents,
            fixed_cost_share_cents=b.fixed_cost_share_cents,
            individual_cost_cents=b.individual_cost_cents,
            balance_cents=b.balance_cents,
            balance_display=cents_to_display(b.balance_cents),
        )

    @classmethod
    def from_snapshot(
        cls, s: MonthSnapshot, display_name: str | None = None
    ) -> "MemberBalanceResponse":
        return cls(
            member_id=s.member_id,
            display_name=display_name,
            opening_balance_cents=s.opening_balance_cents,
            total_deposits_cents=s.total_deposits_cents,
            total_meals=s.total_meals,
            meal_rate_cents=s.meal_rate_cents,
            meal_cost_cents=s.total_meal_cost_cents,
            fixed_cost_share_cents=s.total_fixed_cost_cents,
            individual_cost_cents=s.total_individual_cost_cents,
            balance_cents=s.closing_balance_cents,
            balance_display=cents_to_display(s.closing_balance_cents),
        )


class MessOverviewResponse(BaseModel):
    cycle_id: str
    cycle_name: str
    cycle_status: str
    start_date: date
    end_date: date
    active_members: int
    meal_rate_cents: int
    total_meal_units: int
    total_meal_cost_cents: int
    total_opening_cents: int
    total_deposits_cents: int
    total_bazaar_cents: int
    total_fixed_cents: int
    total_individual_cents: int
    cash_in_hand_cents: int
    cash_in_hand_display: str
    today_meal_units: int
    cycle_progress_percent: int
    days_remaining: int
