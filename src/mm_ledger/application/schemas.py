"""Pydantic schemas for the mm_ledger API."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from src.mm_common.enums import FixedCostType, LedgerKind, PaymentMethod
from src.mm_common.ids import EntityId
from src.mm_common.money import cents_to_display
from src.mm_ledger.domain.models import (
    BazaarExpense,
    BazaarItem,
    ConsumptionRate,
    Deposit,
    FixedCost,
    IndividualCost,
)

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class BazaarItemRequest(BaseModel):
    item_name: str = Field(..., min_length=1, max_length=100)
    quantity: Decimal = Field(..., gt=0, max_digits=12, decimal_places=3)
    unit: str = Field("kg", min_length=1, max_length=20)
    unit_price_cents: int = Field(..., ge=0)


class BazaarExpenseRequest(BaseModel):
    shopper_id: EntityId
    expense_date: date
    notes: str | None = Field(None, max_length=500)
    items: list[BazaarItemRequest] = Field(..., min_length=1)


class DepositRequest(BaseModel):
    member_id: EntityId
    amount_cents: int = Field(..., gt=0, description="Amount in minor units")
    payment_method: PaymentMethod = PaymentMethod.CASH
    reference_no: str | None = Field(None, max_length=100)
    notes: str | None = Field(None, max_length=500)


class FixedCostRequest(BaseModel):
    cost_type: FixedCostType
    amount_cents: int = Field(..., gt=0)
    description: str | None = Field(None, max_length=200)


class IndividualCostRequest(BaseModel):
    member_id: EntityId
    description: str = Field(..., min_length=1, max_length=200)
    amount_cents: int = Field(..., gt=0)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BazaarItemResponse(BaseModel):
    item_name: str
    quantity: Decimal
    unit: str
    unit_price_cents: int
    total_price_cents: int

    @classmethod
    def from_domain(cls, i: BazaarItem) -> "BazaarItemResponse":
        return cls(
            item_name=i.item_name,
            quantity=i.quantity,
            unit=i.unit,
            unit_price_cents=i.unit_price_cents,
            total_price_cents=i.total_price_cents,
        )


class BazaarExpenseResponse(BaseModel):
    id: str
    cycle_id: str
    shopper_id: str
    expense_date: date
    notes: str | None
    total_amount_cents: int
    total_amount_display: str
    approval_status: str
    approved_by: str | None
    rejection_reason: str | None
    created_by: str
    created_at: datetime | None
    items: list[BazaarItemResponse]

    @classmethod
    def from_domain(cls, e: BazaarExpense) -> "BazaarExpenseResponse":
        return cls(
            id=e.id,
            cycle_id=e.cycle_id,
            shopper_id=e.shopper_id,
            expense_date=e.expense_date,
            notes=e.notes,
            total_amount_cents=e.total_amount_cents,
            total_amount_display=cents_to_display(e.total_amount_cents),
            approval_status=e.approval_status,
            approved_by=e.approved_by,
            rejection_reason=e.rejection_reason,
            created_by=e.created_by,
            created_at=e.created_at,
            items=[BazaarItemResponse.from_domain(i) for i in e.items],
        )


class DepositResponse(BaseModel):
    id: str
    cycle_id: str
    member_id: str
    amount_cents: int
    amount_display: str
    payment_method: str
    reference_no: str | None
    notes: str | None
    approval_status: str
    approved_by: str | None
    rejection_reason: str | None
    created_by: str
    created_at: datetime | None

    @classmethod
    def from_domain(cls, d: Deposit) -> "DepositResponse":
        return cls(
            id=d.id,
            cycle_id=d.cycle_id,
            member_id=d.member_id,
            amount_cents=d.amount_cents,
            amount_display=cents_to_display(d.amount_cents),
            payment_method=d.payment_method,
            reference_no=d.reference_no,
            notes=d.notes,
            approval_status=d.approval_status,
            approved_by=d.approved_by,
            rejection_reason=d.rejection_reason,
            created_by=d.created_by,
            created_at=d.created_at,
        )


class FixedCostResponse(BaseModel):
    id: str
    cycle_id: str
    cost_type: str
    description: str | None
    amount_cents: int
    amount_display: str
    created_by: str
    created_at: datetime | None

    @classmethod
    def from_domain(cls, f: FixedCost) -> "FixedCostResponse":
        return cls(
            id=f.id,
            cycle_id=f.cycle_id,
            cost_type=f.cost_type,
            description=f.description,
            amount_cents=f.amount_cents,
            amount_display=cents_to_display(f.amount_cents),
            created_by=f.created_by,
            created_at=f.created_at,
        )


class IndividualCostResponse(BaseModel):
    id: str
    cycle_id: str
    member_id: str
    description: str
    amount_cents: int
    amount_display: str
    approval_status: str
    approved_by: str | None
    rejection_reason: str | None
    created_by: str
    created_at: datetime | None

    @classmethod
    def from_domain(cls, c: IndividualCost) -> "IndividualCostResponse":
        return cls(
            id=c.id,
            cycle_id=c.cycle_id,
            member_id=c.member_id,
            description=c.description,
            amount_cents=c.amount_cents,
            amount_display=cents_to_display(c.amount_cents),
            approval_status=c.approval_status,
            approved_by=c.approved_by,
            rejection_reason=c.rejection_reason,
            created_by=c.created_by,
            created_at=c.created_at,
        )


LedgerEntryResponse = (
    BazaarExpenseResponse | DepositResponse | FixedCostResponse | IndividualCostResponse
)


class LedgerListResponse(BaseModel):
    cycle_id: str
    kind: LedgerKind
    entries: list[LedgerEntryResponse]


class ConsumptionRateResponse(BaseModel):
    item_name: str
    unit: str
    total_quantity: Decimal
    total_cost_cents: int
    average_unit_price_cents: int
    purchase_count: int

    @classmethod
    def from_domain(cls, r: ConsumptionRate) -> "ConsumptionRateResponse":
        return cls(
            item_name=r.item_name,
            unit=r.unit,
            total_quantity=r.total_quantity,
            total_cost_cents=r.total_cost_cents,
            average_unit_price_cents=r.average_unit_price_cents,
            purchase_count=r.purchase_count,
        )
