"""Global enums: must match DB CHECK constraints exactly."""

from enum import Enum


class MemberRole(str, Enum):
    MANAGER = "manager"
    COOK = "cook"
    MEMBER = "member"


class MemberStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    ON_LEAVE = "on_leave"


class CycleStatus(str, Enum):
    OPEN = "open"
    CLOSED = "closed"
    ARCHIVED = "archived"  # housekeeping state, never set by this service


class MealSlot(str, Enum):
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"


class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ApprovalDecision(str, Enum):
    """Terminal states a manager may move a pending entry into."""
    APPROVED = "approved"
    REJECTED = "rejected"


class EntryKind(str, Enum):
    """Ledger entries that pass through the approval gate."""
    DEPOSIT = "deposit"
    BAZAAR = "bazaar"
    INDIVIDUAL_COST = "individual_cost"


class LedgerKind(str, Enum):
    """Everything listable per cycle, including the ungated fixed costs."""
    DEPOSIT = "deposit"
    BAZAAR = "bazaar"
    INDIVIDUAL_COST = "individual_cost"
    FIXED_COST = "fixed_cost"


class PaymentMethod(str, Enum):
    CASH = "cash"
    BKASH = "bkash"
    NAGAD = "nagad"
    BANK_TRANSFER = "bank_transfer"
    OTHER = "other"


class FixedCostType(str, Enum):
    COOK_SALARY = "cook_salary"
    WIFI = "wifi"
    GAS = "gas"
    ELECTRICITY = "electricity"
    WATER = "water"
    RENT = "rent"
    CLEANING = "cleaning"
    MAINTENANCE = "maintenance"
    OTHER = "other"


class ActivityAction(str, Enum):
    MESS_CREATED = "mess_created"
    DEPOSIT_ADDED = "deposit_added"
    BAZAAR_ADDED = "bazaar_added"
    FIXED_COST_ADDED = "fixed_cost_added"
    INDIVIDUAL_COST_ADDED = "individual_cost_added"
    ENTRY_APPROVED = "entry_approved"
    ENTRY_REJECTED = "entry_rejected"
    MONTH_CLOSED = "month_closed"
    REQUEST_NEW_MONTH = "request_new_month"
    MANAGER_TRANSFERRED = "manager_transferred"
    CYCLE_RENAMED = "cycle_renamed"
    CUTOFF_UPDATED = "cutoff_updated"
    MEALS_BULK_UPDATED = "meals_bulk_updated"
