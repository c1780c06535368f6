"""Lookup and conditional status update for approvable entries."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.mm_approval.domain.models import ApprovalTarget
from src.mm_common.enums import EntryKind


class ApprovalRepositoryProtocol(Protocol):
    async def get_target(
        self, db: AsyncSession, kind: EntryKind, entry_id: str
    ) -> ApprovalTarget | None: ...

    async def decide(
        self,
        db: AsyncSession,
        kind: EntryKind,
        entry_id: str,
        status: str,
        approved_by: str,
        rejection_reason: str | None,
    ) -> bool: ...
