"""ApprovalRepository: status transitions on the three gated ledgers.

One fixed statement per table. The UPDATE only matches rows still pending,
so two managers racing on one entry cannot both decide it.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.mm_approval.domain.models import ApprovalTarget
from src.mm_common.enums import EntryKind

_GET_TARGET_SQL = {
    EntryKind.DEPOSIT: text("""
        SELECT id, mess_id, cycle_id, approval_status FROM transactions WHERE id = :entry_id
    """),
    EntryKind.BAZAAR: text("""
        SELECT id, mess_id, cycle_id, approval_status FROM bazaar_expenses WHERE id = :entry_id
    """),
    EntryKind.INDIVIDUAL_COST: text("""
        SELECT id, mess_id, cycle_id, approval_status FROM individual_costs WHERE id = :entry_id
    """),
}

_DECIDE_SQL = {
    EntryKind.DEPOSIT: text("""
        UPDATE transactions
        SET approval_status = :status, approved_by = :approved_by,
            rejection_reason = :rejection_reason, updated_at = NOW()
        WHERE id = :entry_id AND approval_status = 'pending'
        RETURNING id
    """),
    EntryKind.BAZAAR: text("""
        UPDATE bazaar_expenses
        SET approval_status = :status, approved_by = :approved_by,
            rejection_reason = :rejection_reason, updated_at = NOW()
        WHERE id = :entry_id AND approval_status = 'pending'
        RETURNING id
    """),
    EntryKind.INDIVIDUAL_COST: text("""
        UPDATE individual_costs
        SET approval_status = :status, approved_by = :approved_by,
            rejection_reason = :rejection_reason, updated_at = NOW()
        WHERE id = :entry_id AND approval_status = 'pending'
        RETURNING id
    """),
}


class ApprovalRepository:
    async def get_target(
        self, db: AsyncSession, kind: EntryKind, entry_id: str
    ) -> ApprovalTarget | None:
        result = await db.execute(_GET_TARGET_SQL[kind], {"entry_id": entry_id})
        row = result.fetchone()
        if row is None:
            return None
        return ApprovalTarget(
            id=str(row.id),
            mess_id=str(row.mess_id),
            cycle_id=str(row.cycle_id),
            approval_status=row.approval_status,
        )

    async def decide(
        self,
        db: AsyncSession,
        kind: EntryKind,
        entry_id: str,
        status: str,
        approved_by: str,
        rejection_reason: str | None,
    ) -> bool:
        result = await db.execute(
            _DECIDE_SQL[kind],
            {
                "entry_id": entry_id,
                "status": status,
                "approved_by": approved_by,
                "rejection_reason": rejection_reason,
            },
        )
        return result.fetchone() is not None
