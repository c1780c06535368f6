"""Read-only source of a cycle's ledger for the calculator."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.mm_balance.domain.models import CycleLedger


class LedgerReaderProtocol(Protocol):
    async def load_cycle_ledger(
        self, db: AsyncSession, mess_id: str, cycle_id: str
    ) -> CycleLedger: ...
