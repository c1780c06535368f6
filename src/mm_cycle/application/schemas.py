"""Pydantic schemas for the mm_cycle API."""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field

from src.mm_common.money import cents_to_display
from src.mm_cycle.domain.models import Cycle, MonthSnapshot


class CloseMonthRequest(BaseModel):
    next_name: str | None = Field(None, max_length=100)


class RenameCycleRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class CycleResponse(BaseModel):
    id: str
    name: str
    start_date: date
    end_date: date
    status: str
    final_meal_rate_cents: int | None
    opening_balance_cents: int
    closed_at: datetime | None

    @classmethod
    def from_domain(cls, c: Cycle) -> "CycleResponse":
        return cls(
            id=c.id,
            name=c.name,
            start_date=c.start_date,
            end_date=c.end_date,
            status=c.status,
            final_meal_rate_cents=c.final_meal_rate_cents,
            opening_balance_cents=c.opening_balance_cents,
            closed_at=c.closed_at,
        )


class SnapshotResponse(BaseModel):
    member_id: str
    total_meals: int
    meal_rate_cents: int
    total_meal_cost_cents: int
    total_fixed_cost_cents: int
    total_individual_cost_cents: int
    total_deposits_cents: int
    opening_balance_cents: int
    closing_balance_cents: int
    closing_balance_display: str

    @classmethod
    def from_domain(cls, s: MonthSnapshot) -> "SnapshotResponse":
        return cls(
            member_id=s.member_id,
            total_meals=s.total_meals,
            meal_rate_cents=s.meal_rate_cents,
            total_meal_cost_cents=s.total_meal_cost_cents,
            total_fixed_cost_cents=s.total_fixed_cost_cents,
            total_individual_cost_cents=s.total_individual_cost_cents,
            total_deposits_cents=s.total_deposits_cents,
            opening_balance_cents=s.opening_balance_cents,
            closing_balance_cents=s.closing_balance_cents,
            closing_balance_display=cents_to_display(s.closing_balance_cents),
        )


class CloseMonthResponse(BaseModel):
    closed_cycle_id: str
    new_cycle_id: str
    new_cycle_name: str
    final_meal_rate_cents: int
    snapshot_count: int


class StartNewMonthResponse(BaseModel):
    outcome: Literal["closed", "requested"]
    close: CloseMonthResponse | None = None
