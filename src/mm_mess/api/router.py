"""mm_mess REST API: mess creation, members, manager transfer, cutoffs, activity."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.mm_common.database import get_db_session
from src.mm_common.response import ApiResponse, respond
from src.mm_gateway.auth.dependencies import get_actor_context, get_current_user_id
from src.mm_mess.application.schemas import (
    CreateMessRequest,
    CutoffConfigRequest,
    TransferManagerRequest,
)
from src.mm_mess.application.service import MessService
from src.mm_mess.domain.models import ActorContext

router = APIRouter(prefix="/messes", tags=["messes"])

_service = MessService()


@router.post("")
async def create_mess(
    body: CreateMessRequest,
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.create_mess(db, user_id, body.name, body.address)
    return respond(request, data)


@router.get("/{mess_id}/members")
async def list_members(
    ctx: Annotated[ActorContext, Depends(get_actor_context)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.list_members(db, ctx)
    return respond(request, data)


@router.post("/{mess_id}/manager")
async def transfer_manager(
    body: TransferManagerRequest,
    ctx: Annotated[ActorContext, Depends(get_actor_context)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.transfer_manager(db, ctx, body.new_manager_member_id)
    return respond(request, data)


@router.get("/{mess_id}/cutoffs")
async def get_cutoff_config(
    ctx: Annotated[ActorContext, Depends(get_actor_context)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_cutoff_config(db, ctx)
    return respond(request, data)


@router.put("/{mess_id}/cutoffs")
async def update_cutoff_config(
    body: CutoffConfigRequest,
    ctx: Annotated[ActorContext, Depends(get_actor_context)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.update_cutoff_config(db, ctx, body)
    return respond(request, data)


@router.get("/{mess_id}/activity")
async def recent_activity(
    ctx: Annotated[ActorContext, Depends(get_actor_context)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    limit: int = Query(20, ge=1, le=100, description="Newest entries first"),
) -> ApiResponse:
    data = await _service.recent_activity(db, ctx, limit)
    return respond(request, data)
