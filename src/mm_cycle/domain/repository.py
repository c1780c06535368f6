"""Storage contract for cycles, their locks and month-end snapshots.

Snapshot rows are write-once; nothing here updates or deletes them.
"""

from datetime import date
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.mm_cycle.domain.models import Cycle, MonthSnapshot


class CycleRepositoryProtocol(Protocol):
    async def get_cycle(self, db: AsyncSession, cycle_id: str) -> Cycle | None: ...

    async def get_open_cycle(self, db: AsyncSession, mess_id: str) -> Cycle | None: ...

    async def lock_open_cycle(self, db: AsyncSession, mess_id: str) -> Cycle | None: ...

    async def lock_cycle_shared(self, db: AsyncSession, cycle_id: str) -> Cycle | None: ...

    async def lock_cycle_for_close(
        self, db: AsyncSession, cycle_id: str
    ) -> Cycle | None: ...

    async def list_cycles(self, db: AsyncSession, mess_id: str) -> list[Cycle]: ...

    async def create_cycle(
        self,
        db: AsyncSession,
        mess_id: str,
        name: str,
        start_date: date,
        end_date: date,
        opening_balance_cents: int,
    ) -> Cycle: ...

    async def mark_closed(
        self, db: AsyncSession, cycle_id: str, final_meal_rate_cents: int
    ) -> bool: ...

    async def rename_cycle(
        self, db: AsyncSession, cycle_id: str, name: str
    ) -> Cycle | None: ...

    async def insert_snapshots(
        self, db: AsyncSession, snapshots: list[MonthSnapshot]
    ) -> int: ...

    async def list_snapshots(
        self, db: AsyncSession, cycle_id: str
    ) -> list[MonthSnapshot]: ...

    async def insert_opening_balances(
        self, db: AsyncSession, cycle_id: str, balances: dict[str, int]
    ) -> None: ...
