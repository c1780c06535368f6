"""LedgerReader: loads one cycle's ledger for the calculator.

Read-only. Sums count approved entries only; fixed costs have no approval
gate. Called inside the close transaction too, where the cycle row is
already locked FOR UPDATE, so every query sees the same ledger.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.mm_balance.domain.models import CycleLedger
from src.mm_meal.infrastructure.persistence import row_to_meal

_MEALS_SQL = text("""
    SELECT member_id, meal_date, cycle_id, breakfast, lunch, dinner,
           guest_breakfast, guest_lunch, guest_dinner
    FROM daily_meals
    WHERE cycle_id = :cycle_id
""")

_MEMBERS_SQL = text("""
    SELECT id, status, join_date
    FROM mess_members
    WHERE mess_id = :mess_id
    ORDER BY role, join_date, id
""")

_BAZAAR_TOTAL_SQL = text("""
    SELECT COALESCE(SUM(total_amount_cents), 0)
    FROM bazaar_expenses
    WHERE cycle_id = :cycle_id AND approval_status = 'approved'
""")

_FIXED_TOTAL_SQL = text("""
    SELECT COALESCE(SUM(amount_cents), 0)
    FROM fixed_costs
    WHERE cycle_id = :cycle_id
""")

_DEPOSITS_SQL = text("""
    SELECT member_id, SUM(amount_cents) AS total
    FROM transactions
    WHERE cycle_id = :cycle_id AND approval_status = 'approved'
    GROUP BY member_id
""")

_INDIVIDUAL_SQL = text("""
    SELECT member_id, SUM(amount_cents) AS total
    FROM individual_costs
    WHERE cycle_id = :cycle_id AND approval_status = 'approved'
    GROUP BY member_id
""")

_OPENING_SQL = text("""
    SELECT member_id, amount_cents
    FROM cycle_opening_balances
    WHERE cycle_id = :cycle_id
""")


class LedgerReader:
    async def load_cycle_ledger(
        self, db: AsyncSession, mess_id: str, cycle_id: str
    ) -> CycleLedger:
        params = {"cycle_id": cycle_id}
        ledger = CycleLedger(cycle_id=cycle_id)

        ledger.meals = [
            row_to_meal(row) for row in (await db.execute(_MEALS_SQL, params)).fetchall()
        ]
        for row in (await db.execute(_MEMBERS_SQL, {"mess_id": mess_id})).fetchall():
            member_id = str(row.id)
            ledger.join_dates[member_id] = row.join_date
            if row.status == "active":
                ledger.active_member_ids.append(member_id)

        ledger.bazaar_total_cents = int(
            (await db.execute(_BAZAAR_TOTAL_SQL, params)).scalar_one()
        )
        ledger.fixed_total_cents = int(
            (await db.execute(_FIXED_TOTAL_SQL, params)).scalar_one()
        )
        ledger.deposits = {
            str(row.member_id): int(row.total)
            for row in (await db.execute(_DEPOSITS_SQL, params)).fetchall()
        }
        ledger.individual_costs = {
            str(row.member_id): int(row.total)
            for row in (await db.execute(_INDIVIDUAL_SQL, params)).fetchall()
        }
        ledger.opening_balances = {
            str(row.member_id): int(row.amount_cents)
            for row in (await db.execute(_OPENING_SQL, params)).fetchall()
        }
        return ledger
