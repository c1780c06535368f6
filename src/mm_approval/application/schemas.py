from pydantic import BaseModel, Field

from src.mm_common.enums import ApprovalDecision, EntryKind


class ApprovalRequest(BaseModel):
    decision: ApprovalDecision
    rejection_reason: str | None = Field(None, max_length=500)


class ApprovalResponse(BaseModel):
    kind: EntryKind
    entry_id: str
    approval_status: str
    approved_by: str
    rejection_reason: str | None
