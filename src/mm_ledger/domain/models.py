"""Domain models for mm_ledger: pure dataclasses, no SQLAlchemy dependency.

Every amount is int minor units. Deposits, bazaar expenses and individual
costs carry approval fields; fixed costs always count.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal


@dataclass
class BazaarItem:
    item_name: str
    quantity: Decimal
    unit: str
    unit_price_cents: int
    total_price_cents: int
    id: int | None = None


@dataclass
class BazaarExpense:
    id: str
    mess_id: str
    cycle_id: str
    shopper_id: str
    expense_date: date
    notes: str | None
    total_amount_cents: int
    approval_status: str          # ApprovalStatus value
    approved_by: str | None
    rejection_reason: str | None
    created_by: str
    created_at: datetime | None = None
    items: list[BazaarItem] = field(default_factory=list)


@dataclass
class Deposit:
    id: str
    mess_id: str
    cycle_id: str
    member_id: str
    amount_cents: int
    payment_method: str           # PaymentMethod value
    reference_no: str | None
    notes: str | None
    approval_status: str
    approved_by: str | None
    rejection_reason: str | None
    created_by: str
    created_at: datetime | None = None


@dataclass
class FixedCost:
    id: str
    mess_id: str
    cycle_id: str
    cost_type: str                # FixedCostType value
    description: str | None
    amount_cents: int
    created_by: str
    created_at: datetime | None = None


@dataclass
class IndividualCost:
    id: str
    mess_id: str
    cycle_id: str
    member_id: str
    description: str
    amount_cents: int
    approval_status: str
    approved_by: str | None
    rejection_reason: str | None
    created_by: str
    created_at: datetime | None = None


@dataclass
class ConsumptionRate:
    item_name: str
    unit: str
    total_quantity: Decimal
    total_cost_cents: int
    average_unit_price_cents: int
    purchase_count: int
