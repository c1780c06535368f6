"""LedgerRepository: concrete implementation of LedgerRepositoryProtocol.

Transaction ownership: the CALLER (application service) opens and commits the
transaction. A bazaar header and its items are two statements in that one
transaction, never two commits.
"""

from datetime import date

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.mm_common.errors import InternalError
from src.mm_ledger.domain.models import (
    BazaarExpense,
    BazaarItem,
    Deposit,
    FixedCost,
    IndividualCost,
)

# ---------------------------------------------------------------------------
# SQL: bazaar
# ---------------------------------------------------------------------------

_BAZAAR_COLUMNS = """
    id, mess_id, cycle_id, shopper_id, expense_date, notes, total_amount_cents,
    approval_status, approved_by, rejection_reason, created_by, created_at
"""

_INSERT_BAZAAR_SQL = text(f"""
    INSERT INTO bazaar_expenses
        (mess_id, cycle_id, shopper_id, expense_date, notes, total_amount_cents,
         approval_status, approved_by, created_by)
    VALUES
        (:mess_id, :cycle_id, :shopper_id, :expense_date, :notes, :total_amount_cents,
         :approval_status, :approved_by, :created_by)
    RETURNING {_BAZAAR_COLUMNS}
""")

_INSERT_BAZAAR_ITEM_SQL = text("""
    INSERT INTO bazaar_items
        (expense_id, item_name, quantity, unit, unit_price_cents, total_price_cents)
    VALUES
        (:expense_id, :item_name, :quantity, :unit, :unit_price_cents, :total_price_cents)
""")

_LIST_BAZAAR_SQL = text(f"""
    SELECT {_BAZAAR_COLUMNS} FROM bazaar_expenses
    WHERE mess_id = :mess_id AND cycle_id = :cycle_id
    ORDER BY expense_date DESC, created_at DESC
""")

_LIST_ITEMS_FOR_CYCLE_SQL = text("""
    SELECT i.id, i.expense_id, i.item_name, i.quantity, i.unit,
           i.unit_price_cents, i.total_price_cents
    FROM bazaar_items i
    JOIN bazaar_expenses e ON e.id = i.expense_id
    WHERE e.mess_id = :mess_id AND e.cycle_id = :cycle_id
    ORDER BY i.id
""")

# Consumption figures ignore rejected purchases.
_LIST_COUNTED_ITEMS_SQL = text("""
    SELECT i.id, i.expense_id, i.item_name, i.quantity, i.unit,
           i.unit_price_cents, i.total_price_cents
    FROM bazaar_items i
    JOIN bazaar_expenses e ON e.id = i.expense_id
    WHERE e.mess_id = :mess_id AND e.cycle_id = :cycle_id
      AND e.approval_status <> 'rejected'
    ORDER BY i.id
""")

# ---------------------------------------------------------------------------
# SQL: deposits (transactions table), fixed and individual costs
# ---------------------------------------------------------------------------

_DEPOSIT_COLUMNS = """
    id, mess_id, cycle_id, member_id, amount_cents, payment_method, reference_no,
    notes, approval_status, approved_by, rejection_reason, created_by, created_at
"""

_INSERT_DEPOSIT_SQL = text(f"""
    INSERT INTO transactions
        (mess_id, cycle_id, member_id, amount_cents, payment_method, reference_no,
         notes, approval_status, approved_by, created_by)
    VALUES
        (:mess_id, :cycle_id, :member_id, :amount_cents, :payment_method, :reference_no,
         :notes, :approval_status, :approved_by, :created_by)
    RETURNING {_DEPOSIT_COLUMNS}
""")

_LIST_DEPOSITS_SQL = text(f"""
    SELECT {_DEPOSIT_COLUMNS} FROM transactions
    WHERE mess_id = :mess_id AND cycle_id = :cycle_id
    ORDER BY created_at DESC
""")

_FIXED_COLUMNS = "id, mess_id, cycle_id, cost_type, description, amount_cents, created_by, created_at"

_INSERT_FIXED_SQL = text(f"""
    INSERT INTO fixed_costs
        (mess_id, cycle_id, cost_type, description, amount_cents, created_by)
    VALUES
        (:mess_id, :cycle_id, :cost_type, :description, :amount_cents, :created_by)
    RETURNING {_FIXED_COLUMNS}
""")

_LIST_FIXED_SQL = text(f"""
    SELECT {_FIXED_COLUMNS} FROM fixed_costs
    WHERE mess_id = :mess_id AND cycle_id = :cycle_id
    ORDER BY created_at DESC
""")

_INDIVIDUAL_COLUMNS = """
    id, mess_id, cycle_id, member_id, description, amount_cents,
    approval_status, approved_by, rejection_reason, created_by, created_at
"""

_INSERT_INDIVIDUAL_SQL = text(f"""
    INSERT INTO individual_costs
        (mess_id, cycle_id, member_id, description, amount_cents,
         approval_status, approved_by, created_by)
    VALUES
        (:mess_id, :cycle_id, :member_id, :description, :amount_cents,
         :approval_status, :approved_by, :created_by)
    RETURNING {_INDIVIDUAL_COLUMNS}
""")

_LIST_INDIVIDUAL_SQL = text(f"""
    SELECT {_INDIVIDUAL_COLUMNS} FROM individual_costs
    WHERE mess_id = :mess_id AND cycle_id = :cycle_id
    ORDER BY created_at DESC
""")


def _row_to_item(row: object) -> BazaarItem:
    return BazaarItem(
        id=row.id,  # type: ignore[attr-defined]
        item_name=row.item_name,  # type: ignore[attr-defined]
        quantity=row.quantity,  # type: ignore[attr-defined]
        unit=row.unit,  # type: ignore[attr-defined]
        unit_price_cents=row.unit_price_cents,  # type: ignore[attr-defined]
        total_price_cents=row.total_price_cents,  # type: ignore[attr-defined]
    )


def _row_to_bazaar(row: object) -> BazaarExpense:
    return BazaarExpense(
        id=str(row.id),  # type: ignore[attr-defined]
        mess_id=str(row.mess_id),  # type: ignore[attr-defined]
        cycle_id=str(row.cycle_id),  # type: ignore[attr-defined]
        shopper_id=str(row.shopper_id),  # type: ignore[attr-defined]
        expense_date=row.expense_date,  # type: ignore[attr-defined]
        notes=row.notes,  # type: ignore[attr-defined]
        total_amount_cents=row.total_amount_cents,  # type: ignore[attr-defined]
        approval_status=row.approval_status,  # type: ignore[attr-defined]
        approved_by=str(row.approved_by) if row.approved_by else None,  # type: ignore[attr-defined]
        rejection_reason=row.rejection_reason,  # type: ignore[attr-defined]
        created_by=str(row.created_by),  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


def _row_to_deposit(row: object) -> Deposit:
    return Deposit(
        id=str(row.id),  # type: ignore[attr-defined]
        mess_id=str(row.mess_id),  # type: ignore[attr-defined]
        cycle_id=str(row.cycle_id),  # type: ignore[attr-defined]
        member_id=str(row.member_id),  # type: ignore[attr-defined]
        amount_cents=row.amount_cents,  # type: ignore[attr-defined]
        payment_method=row.payment_method,  # type: ignore[attr-defined]
        reference_no=row.reference_no,  # type: ignore[attr-defined]
        notes=row.notes,  # type: ignore[attr-defined]
        approval_status=row.approval_status,  # type: ignore[attr-defined]
        approved_by=str(row.approved_by) if row.approved_by else None,  # type: ignore[attr-defined]
        rejection_reason=row.rejection_reason,  # type: ignore[attr-defined]
        created_by=str(row.created_by),  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


def _row_to_fixed(row: object) -> FixedCost:
    return FixedCost(
        id=str(row.id),  # type: ignore[attr-defined]
        mess_id=str(row.mess_id),  # type: ignore[attr-defined]
        cycle_id=str(row.cycle_id),  # type: ignore[attr-defined]
        cost_type=row.cost_type,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        amount_cents=row.amount_cents,  # type: ignore[attr-defined]
        created_by=str(row.created_by),  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


def _row_to_individual(row: object) -> IndividualCost:
    return IndividualCost(
        id=str(row.id),  # type: ignore[attr-defined]
        mess_id=str(row.mess_id),  # type: ignore[attr-defined]
        cycle_id=str(row.cycle_id),  # type: ignore[attr-defined]
        member_id=str(row.member_id),  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        amount_cents=row.amount_cents,  # type: ignore[attr-defined]
        approval_status=row.approval_status,  # type: ignore[attr-defined]
        approved_by=str(row.approved_by) if row.approved_by else None,  # type: ignore[attr-defined]
        rejection_reason=row.rejection_reason,  # type: ignore[attr-defined]
        created_by=str(row.created_by),  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class LedgerRepository:
    """Concrete repository: raw SQL, caller-owned transaction."""

    async def _insert_returning(
        self, db: AsyncSession, stmt: object, params: dict[str, object], what: str
    ) -> object:
        result = await db.execute(stmt, params)  # type: ignore[arg-type]
        row = result.fetchone()
        if row is None:
            raise InternalError(f"{what} insert returned no rows")
        return row

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
    ) -> BazaarExpense:
        row = await self._insert_returning(
            db,
            _INSERT_BAZAAR_SQL,
            {
                "mess_id": mess_id,
                "cycle_id": cycle_id,
                "shopper_id": shopper_id,
                "expense_date": expense_date,
                "notes": notes,
                "total_amount_cents": total_amount_cents,
                "approval_status": approval_status,
                "approved_by": approved_by,
                "created_by": created_by,
            },
            "Bazaar expense",
        )
        return _row_to_bazaar(row)

    async def insert_bazaar_items(
        self, db: AsyncSession, expense_id: str, items: list[BazaarItem]
    ) -> None:
        await db.execute(
            _INSERT_BAZAAR_ITEM_SQL,
            [
                {
                    "expense_id": expense_id,
                    "item_name": item.item_name,
                    "quantity": item.quantity,
                    "unit": item.unit,
                    "unit_price_cents": item.unit_price_cents,
                    "total_price_cents": item.total_price_cents,
                }
                for item in items
            ],
        )

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
    ) -> Deposit:
        row = await self._insert_returning(
            db,
            _INSERT_DEPOSIT_SQL,
            {
                "mess_id": mess_id,
                "cycle_id": cycle_id,
                "member_id": member_id,
                "amount_cents": amount_cents,
                "payment_method": payment_method,
                "reference_no": reference_no,
                "notes": notes,
                "approval_status": approval_status,
                "approved_by": approved_by,
                "created_by": created_by,
            },
            "Deposit",
        )
        return _row_to_deposit(row)

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
    ) -> FixedCost:
        row = await self._insert_returning(
            db,
            _INSERT_FIXED_SQL,
            {
                "mess_id": mess_id,
                "cycle_id": cycle_id,
                "cost_type": cost_type,
                "description": description,
                "amount_cents": amount_cents,
                "created_by": created_by,
            },
            "Fixed cost",
        )
        return _row_to_fixed(row)

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
    ) -> IndividualCost:
        row = await self._insert_returning(
            db,
            _INSERT_INDIVIDUAL_SQL,
            {
                "mess_id": mess_id,
                "cycle_id": cycle_id,
                "member_id": member_id,
                "description": description,
                "amount_cents": amount_cents,
                "approval_status": approval_status,
                "approved_by": approved_by,
                "created_by": created_by,
            },
            "Individual cost",
        )
        return _row_to_individual(row)

    async def list_bazaar_expenses(
        self, db: AsyncSession, mess_id: str, cycle_id: str
    ) -> list[BazaarExpense]:
        params = {"mess_id": mess_id, "cycle_id": cycle_id}
        expenses = [
            _row_to_bazaar(row)
            for row in (await db.execute(_LIST_BAZAAR_SQL, params)).fetchall()
        ]
        by_id = {e.id: e for e in expenses}
        for row in (await db.execute(_LIST_ITEMS_FOR_CYCLE_SQL, params)).fetchall():
            expense = by_id.get(str(row.expense_id))
            if expense is not None:
                expense.items.append(_row_to_item(row))
        return expenses

    async def list_deposits(
        self, db: AsyncSession, mess_id: str, cycle_id: str
    ) -> list[Deposit]:
        result = await db.execute(
            _LIST_DEPOSITS_SQL, {"mess_id": mess_id, "cycle_id": cycle_id}
        )
        return [_row_to_deposit(row) for row in result.fetchall()]

    async def list_fixed_costs(
        self, db: AsyncSession, mess_id: str, cycle_id: str
    ) -> list[FixedCost]:
        result = await db.execute(
            _LIST_FIXED_SQL, {"mess_id": mess_id, "cycle_id": cycle_id}
        )
        return [_row_to_fixed(row) for row in result.fetchall()]

    async def list_individual_costs(
        self, db: AsyncSession, mess_id: str, cycle_id: str
    ) -> list[IndividualCost]:
        result = await db.execute(
            _LIST_INDIVIDUAL_SQL, {"mess_id": mess_id, "cycle_id": cycle_id}
        )
        return [_row_to_individual(row) for row in result.fetchall()]

    async def list_bazaar_items(
        self, db: AsyncSession, mess_id: str, cycle_id: str
    ) -> list[BazaarItem]:
        result = await db.execute(
            _LIST_COUNTED_ITEMS_SQL, {"mess_id": mess_id, "cycle_id": cycle_id}
        )
        return [_row_to_item(row) for row in result.fetchall()]
