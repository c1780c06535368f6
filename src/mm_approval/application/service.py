"""ApprovalService: the manager's approve/reject decision on a pending entry."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.mm_approval.application.schemas import ApprovalResponse
from src.mm_approval.domain.policy import (
    ensure_can_decide,
    ensure_pending,
    normalise_rejection_reason,
)
from src.mm_approval.domain.repository import ApprovalRepositoryProtocol
from src.mm_approval.infrastructure.persistence import ApprovalRepository
from src.mm_common.database import atomic
from src.mm_common.enums import ActivityAction, ApprovalDecision, EntryKind
from src.mm_common.errors import (
    CycleAlreadyClosedError,
    EntryNotPendingError,
    NotFoundError,
)
from src.mm_cycle.domain.repository import CycleRepositoryProtocol
from src.mm_cycle.infrastructure.persistence import CycleRepository
from src.mm_mess.domain.models import ActorContext
from src.mm_mess.domain.repository import ActivityLogProtocol
from src.mm_mess.infrastructure.activity_log import ActivityLog

logger = logging.getLogger(__name__)

_ENTITY_LABELS = {
    EntryKind.DEPOSIT: "Deposit",
    EntryKind.BAZAAR: "Bazaar expense",
    EntryKind.INDIVIDUAL_COST: "Individual cost",
}


class ApprovalService:
    def __init__(
        self,
        repo: ApprovalRepositoryProtocol | None = None,
        cycle_repo: CycleRepositoryProtocol | None = None,
        activity: ActivityLogProtocol | None = None,
    ) -> None:
        self._repo: ApprovalRepositoryProtocol = repo or ApprovalRepository()
        self._cycle_repo: CycleRepositoryProtocol = cycle_repo or CycleRepository()
        self._activity: ActivityLogProtocol = activity or ActivityLog()

    async def set_approval(
        self,
        db: AsyncSession,
        ctx: ActorContext,
        kind: EntryKind,
        entry_id: str,
        decision: ApprovalDecision,
        rejection_reason: str | None = None,
    ) -> ApprovalResponse:
        ensure_can_decide(ctx)
        reason = normalise_rejection_reason(decision, rejection_reason)
        label = _ENTITY_LABELS[kind]

        async with atomic(db, f"set_approval:{kind.value}"):
            target = await self._repo.get_target(db, kind, entry_id)
            if target is None or target.mess_id != ctx.mess_id:
                raise NotFoundError(label, entry_id)
            # Shared lock: a close in progress finishes first, then we see it closed.
            cycle = await self._cycle_repo.lock_cycle_shared(db, target.cycle_id)
            if cycle is None or not cycle.is_open:
                raise CycleAlreadyClosedError(target.cycle_id)
            ensure_pending(label, entry_id, target.approval_status)

            if not await self._repo.decide(
                db, kind, entry_id, decision.value, ctx.member_id, reason
            ):
                raise EntryNotPendingError(label, entry_id, "decided")

            action = (
                ActivityAction.ENTRY_APPROVED
                if decision == ApprovalDecision.APPROVED
                else ActivityAction.ENTRY_REJECTED
            )
            await self._activity.write(
                db,
                ctx.mess_id,
                ctx.user_id,
                action,
                {"kind": kind.value, "entry_id": entry_id, "reason": reason},
            )

        logger.info("%s %s %s by member %s", label, entry_id, decision.value, ctx.member_id)
        return ApprovalResponse(
            kind=kind,
            entry_id=entry_id,
            approval_status=decision.value,
            approved_by=ctx.member_id,
            rejection_reason=reason,
        )
