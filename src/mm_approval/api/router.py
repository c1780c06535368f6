"""mm_approval REST API: manager decisions on pending entries."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.mm_approval.application.schemas import ApprovalRequest
from src.mm_approval.application.service import ApprovalService
from src.mm_common.database import get_db_session
from src.mm_common.enums import EntryKind
from src.mm_common.ids import PathId
from src.mm_common.response import ApiResponse, respond
from src.mm_gateway.auth.dependencies import get_actor_context
from src.mm_mess.domain.models import ActorContext

router = APIRouter(prefix="/messes/{mess_id}/approvals", tags=["approvals"])

_service = ApprovalService()


@router.post("/{kind}/{entry_id}")
async def set_approval(
    kind: EntryKind,
    entry_id: PathId,
    body: ApprovalRequest,
    ctx: Annotated[ActorContext, Depends(get_actor_context)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.set_approval(
        db, ctx, kind, entry_id, body.decision, body.rejection_reason
    )
    return respond(request, data)
