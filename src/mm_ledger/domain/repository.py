"""Storage contract for bazaar purchases, deposits and costs."""

from datetime import date
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.mm_ledger.domain.models import (
    BazaarExpense,
    BazaarItem,
    Deposit,
    FixedCost,
    IndividualCost,
)


class LedgerRepositoryProtocol(Protocol):
    async def insert_bazaar_expense(
        self,
        db: AsyncSession,
        *,
        mess_id: str,
        cycle_id: str,
        shopper_id: str,
        expense_date: date,
        notes: str | None,
        total_amount_cents: int,
        approval_status: str,
        approved_by: str | None,
        created_by: str,
    ) -> BazaarExpense: ...

    async def insert_bazaar_items(
        self, db: AsyncSession, expense_id: str, items: list[BazaarItem]
    ) -> None: ...

    async def insert_deposit(
        self,
        db: AsyncSession,
        *,
        mess_id: str,
        cycle_id: str,
        member_id: str,
        amount_cents: int,
        payment_method: str,
        reference_no: str | None,
        notes: str | None,
        approval_status: str,
        approved_by: str | None,
        created_by: str,
    ) -> Deposit: ...

    async def insert_fixed_cost(
        self,
        db: AsyncSession,
        *,
        mess_id: str,
        cycle_id: str,
        cost_type: str,
        description: str | None,
        amount_cents: int,
        created_by: str,
    ) -> FixedCost: ...

    async def insert_individual_cost(
        self,
        db: AsyncSession,
        *,
        mess_id: str,
        cycle_id: str,
        member_id: str,
        description: str,
        amount_cents: int,
        approval_status: str,
        approved_by: str | None,
        created_by: str,
    ) -> IndividualCost: ...

    async def list_bazaar_expenses(
        self, db: AsyncSession, mess_id: str, cycle_id: str
    ) -> list[BazaarExpense]: ...

    async def list_deposits(
        self, db: AsyncSession, mess_id: str, cycle_id: str
    ) -> list[Deposit]: ...

    async def list_fixed_costs(
        self, db: AsyncSession, mess_id: str, cycle_id: str
    ) -> list[FixedCost]: ...

    async def list_individual_costs(
        self, db: AsyncSession, mess_id: str, cycle_id: str
    ) -> list[IndividualCost]: ...

    async def list_bazaar_items(
        self, db: AsyncSession, mess_id: str, cycle_id: str
    ) -> list[BazaarItem]: ...
