"""CycleRepository: concrete implementation of CycleRepositoryProtocol.

Locking protocol on mess_cycles rows:
  - close takes FOR UPDATE on the cycle it closes;
  - every ledger write and approval takes FOR SHARE on the open cycle.
So a close waits for in-flight writes to commit, and writes queued behind a
close re-check status='open' after it commits and find nothing to write into.
"""

from datetime import date

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.mm_common.errors import InternalError
from src.mm_cycle.domain.models import Cycle, MonthSnapshot

_CYCLE_COLUMNS = """
    id, mess_id, name, start_date, end_date, status,
    final_meal_rate_cents, opening_balance_cents, closed_at, created_at
"""

_GET_CYCLE_SQL = text(f"SELECT {_CYCLE_COLUMNS} FROM mess_cycles WHERE id = :cycle_id")

_GET_OPEN_CYCLE_SQL = text(f"""
    SELECT {_CYCLE_COLUMNS} FROM mess_cycles
    WHERE mess_id = :mess_id AND status = 'open'
""")

_LOCK_OPEN_CYCLE_SQL = text(f"""
    SELECT {_CYCLE_COLUMNS} FROM mess_cycles
    WHERE mess_id = :mess_id AND status = 'open'
    FOR SHARE
""")

_LOCK_CYCLE_SHARED_SQL = text(f"""
    SELECT {_CYCLE_COLUMNS} FROM mess_cycles
    WHERE id = :cycle_id
    FOR SHARE
""")

_LOCK_CYCLE_FOR_CLOSE_SQL = text(f"""
    SELECT {_CYCLE_COLUMNS} FROM mess_cycles
    WHERE id = :cycle_id
    FOR UPDATE
""")

_LIST_CYCLES_SQL = text(f"""
    SELECT {_CYCLE_COLUMNS} FROM mess_cycles
    WHERE mess_id = :mess_id
    ORDER BY start_date DESC
""")

_INSERT_CYCLE_SQL = text(f"""
    INSERT INTO mess_cycles
        (mess_id, name, start_date, end_date, status, opening_balance_cents)
    VALUES
        (:mess_id, :name, :start_date, :end_date, 'open', :opening_balance_cents)
    RETURNING {_CYCLE_COLUMNS}
""")

_MARK_CLOSED_SQL = text("""
    UPDATE mess_cycles
    SET status = 'closed',
        final_meal_rate_cents = :rate,
        closed_at = NOW(),
        updated_at = NOW()
    WHERE id = :cycle_id AND status = 'open'
    RETURNING id
""")

_RENAME_CYCLE_SQL = text(f"""
    UPDATE mess_cycles
    SET name = :name, updated_at = NOW()
    WHERE id = :cycle_id
    RETURNING {_CYCLE_COLUMNS}
""")

_INSERT_SNAPSHOT_SQL = text("""
    INSERT INTO month_snapshots
        (cycle_id, member_id, total_meals, meal_rate_cents,
         total_meal_cost_cents, total_fixed_cost_cents, total_individual_cost_cents,
         total_deposits_cents, opening_balance_cents, closing_balance_cents)
    VALUES
        (:cycle_id, :member_id, :total_meals, :meal_rate_cents,
         :total_meal_cost_cents, :total_fixed_cost_cents, :total_individual_cost_cents,
         :total_deposits_cents, :opening_balance_cents, :closing_balance_cents)
""")

_LIST_SNAPSHOTS_SQL = text("""
    SELECT cycle_id, member_id, total_meals, meal_rate_cents,
           total_meal_cost_cents, total_fixed_cost_cents, total_individual_cost_cents,
           total_deposits_cents, opening_balance_cents, closing_balance_cents, created_at
    FROM month_snapshots
    WHERE cycle_id = :cycle_id
    ORDER BY member_id
""")

_INSERT_OPENING_SQL = text("""
    INSERT INTO cycle_opening_balances (cycle_id, member_id, amount_cents)
    VALUES (:cycle_id, :member_id, :amount_cents)
""")


def _row_to_cycle(row: object) -> Cycle:
    return Cycle(
        id=str(row.id),  # type: ignore[attr-defined]
        mess_id=str(row.mess_id),  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        start_date=row.start_date,  # type: ignore[attr-defined]
        end_date=row.end_date,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        final_meal_rate_cents=row.final_meal_rate_cents,  # type: ignore[attr-defined]
        opening_balance_cents=row.opening_balance_cents,  # type: ignore[attr-defined]
        closed_at=row.closed_at,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


def _row_to_snapshot(row: object) -> MonthSnapshot:
    return MonthSnapshot(
        cycle_id=str(row.cycle_id),  # type: ignore[attr-defined]
        member_id=str(row.member_id),  # type: ignore[attr-defined]
        total_meals=row.total_meals,  # type: ignore[attr-defined]
        meal_rate_cents=row.meal_rate_cents,  # type: ignore[attr-defined]
        total_meal_cost_cents=row.total_meal_cost_cents,  # type: ignore[attr-defined]
        total_fixed_cost_cents=row.total_fixed_cost_cents,  # type: ignore[attr-defined]
        total_individual_cost_cents=row.total_individual_cost_cents,  # type: ignore[attr-defined]
        total_deposits_cents=row.total_deposits_cents,  # type: ignore[attr-defined]
        opening_balance_cents=row.opening_balance_cents,  # type: ignore[attr-defined]
        closing_balance_cents=row.closing_balance_cents,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class CycleRepository:
    """Concrete repository: raw SQL, caller-owned transaction."""

    async def _fetch_cycle(
        self, db: AsyncSession, stmt: object, params: dict[str, str]
    ) -> Cycle | None:
        result = await db.execute(stmt, params)  # type: ignore[arg-type]
        row = result.fetchone()
        return _row_to_cycle(row) if row else None

    async def get_cycle(self, db: AsyncSession, cycle_id: str) -> Cycle | None:
        return await self._fetch_cycle(db, _GET_CYCLE_SQL, {"cycle_id": cycle_id})

    async def get_open_cycle(self, db: AsyncSession, mess_id: str) -> Cycle | None:
        return await self._fetch_cycle(db, _GET_OPEN_CYCLE_SQL, {"mess_id": mess_id})

    async def lock_open_cycle(self, db: AsyncSession, mess_id: str) -> Cycle | None:
        return await self._fetch_cycle(db, _LOCK_OPEN_CYCLE_SQL, {"mess_id": mess_id})

    async def lock_cycle_shared(self, db: AsyncSession, cycle_id: str) -> Cycle | None:
        return await self._fetch_cycle(db, _LOCK_CYCLE_SHARED_SQL, {"cycle_id": cycle_id})

    async def lock_cycle_for_close(
        self, db: AsyncSession, cycle_id: str
    ) -> Cycle | None:
        return await self._fetch_cycle(db, _LOCK_CYCLE_FOR_CLOSE_SQL, {"cycle_id": cycle_id})

    async def list_cycles(self, db: AsyncSession, mess_id: str) -> list[Cycle]:
        result = await db.execute(_LIST_CYCLES_SQL, {"mess_id": mess_id})
        return [_row_to_cycle(row) for row in result.fetchall()]

    async def create_cycle(
        self,
        db: AsyncSession,
        mess_id: str,
        name: str,
        start_date: date,
        end_date: date,
        opening_balance_cents: int,
    ) -> Cycle:
        result = await db.execute(
            _INSERT_CYCLE_SQL,
            {
                "mess_id": mess_id,
                "name": name,
                "start_date": start_date,
                "end_date": end_date,
                "opening_balance_cents": opening_balance_cents,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Cycle insert returned no rows")
        return _row_to_cycle(row)

    async def mark_closed(
        self, db: AsyncSession, cycle_id: str, final_meal_rate_cents: int
    ) -> bool:
        result = await db.execute(
            _MARK_CLOSED_SQL, {"cycle_id": cycle_id, "rate": final_meal_rate_cents}
        )
        return result.fetchone() is not None

    async def rename_cycle(
        self, db: AsyncSession, cycle_id: str, name: str
    ) -> Cycle | None:
        result = await db.execute(_RENAME_CYCLE_SQL, {"cycle_id": cycle_id, "name": name})
        row = result.fetchone()
        return _row_to_cycle(row) if row else None

    async def insert_snapshots(
        self, db: AsyncSession, snapshots: list[MonthSnapshot]
    ) -> int:
        if not snapshots:
            return 0
        await db.execute(
            _INSERT_SNAPSHOT_SQL,
            [
                {
                    "cycle_id": s.cycle_id,
                    "member_id": s.member_id,
                    "total_meals": s.total_meals,
                    "meal_rate_cents": s.meal_rate_cents,
                    "total_meal_cost_cents": s.total_meal_cost_cents,
                    "total_fixed_cost_cents": s.total_fixed_cost_cents,
                    "total_individual_cost_cents": s.total_individual_cost_cents,
                    "total_deposits_cents": s.total_deposits_cents,
                    "opening_balance_cents": s.opening_balance_cents,
                    "closing_balance_cents": s.closing_balance_cents,
                }
                for s in snapshots
            ],
        )
        return len(snapshots)

    async def list_snapshots(
        self, db: AsyncSession, cycle_id: str
    ) -> list[MonthSnapshot]:
        result = await db.execute(_LIST_SNAPSHOTS_SQL, {"cycle_id": cycle_id})
        return [_row_to_snapshot(row) for row in result.fetchall()]

    async def insert_opening_balances(
        self, db: AsyncSession, cycle_id: str, balances: dict[str, int]
    ) -> None:
        if not balances:
            return
        await db.execute(
            _INSERT_OPENING_SQL,
            [
                {"cycle_id": cycle_id, "member_id": member_id, "amount_cents": amount}
                for member_id, amount in balances.items()
            ],
        )
