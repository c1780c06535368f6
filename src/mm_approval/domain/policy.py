"""Approval policy for deposits, bazaar expenses and individual costs.

Entries created by the manager are approved on the spot; anyone else's wait
as pending until the manager decides. Only pending entries can be decided,
and a decision is final.
"""

from dataclasses import dataclass

from src.mm_common.enums import ApprovalDecision, ApprovalStatus
from src.mm_common.errors import EntryNotPendingError, InvalidInputError, UnauthorizedError
from src.mm_mess.domain.models import ActorContext


@dataclass(frozen=True)
class InitialApproval:
    status: ApprovalStatus
    approved_by: str | None


def initial_approval(ctx: ActorContext) -> InitialApproval:
    if ctx.is_manager:
        return InitialApproval(ApprovalStatus.APPROVED, ctx.member_id)
    return InitialApproval(ApprovalStatus.PENDING, None)


def ensure_can_decide(ctx: ActorContext) -> None:
    if not ctx.is_manager:
        raise UnauthorizedError("approve or reject entries")


def ensure_pending(kind: str, entry_id: str, status: str) -> None:
    if status != ApprovalStatus.PENDING:
        raise EntryNotPendingError(kind, entry_id, status)


def normalise_rejection_reason(
    decision: ApprovalDecision, reason: str | None
) -> str | None:
    """Reasons are kept only on rejections, trimmed, at most 500 characters."""
    if decision != ApprovalDecision.REJECTED:
        return None
    if reason is None:
        return None
    reason = reason.strip()
    if len(reason) > 500:
        raise InvalidInputError("rejection reason is limited to 500 characters")
    return reason or None
