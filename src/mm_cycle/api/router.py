"""mm_cycle REST API: month close and cycle housekeeping."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.mm_common.database import get_db_session
from src.mm_common.ids import PathId
from src.mm_common.response import ApiResponse, respond
from src.mm_cycle.application.schemas import CloseMonthRequest, RenameCycleRequest
from src.mm_cycle.application.service import CycleService
from src.mm_gateway.auth.dependencies import get_actor_context
from src.mm_mess.domain.models import ActorContext

router = APIRouter(prefix="/messes/{mess_id}/cycles", tags=["cycles"])

_service = CycleService()


@router.get("")
async def list_cycles(
    ctx: Annotated[ActorContext, Depends(get_actor_context)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.list_cycles(db, ctx)
    return respond(request, data)


@router.get("/open")
async def get_open_cycle(
    ctx: Annotated[ActorContext, Depends(get_actor_context)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_open_cycle(db, ctx)
    return respond(request, data)


@router.post("/{cycle_id}/close")
async def close_month(
    cycle_id: PathId,
    body: CloseMonthRequest,
    ctx: Annotated[ActorContext, Depends(get_actor_context)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.close_month(db, ctx, cycle_id, body.next_name)
    return respond(request, data)


@router.post("/{cycle_id}/new-month")
async def start_new_month(
    cycle_id: PathId,
    body: CloseMonthRequest,
    ctx: Annotated[ActorContext, Depends(get_actor_context)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.start_new_month(db, ctx, cycle_id, body.next_name)
    return respond(request, data)


@router.patch("/{cycle_id}")
async def rename_cycle(
    cycle_id: PathId,
    body: RenameCycleRequest,
    ctx: Annotated[ActorContext, Depends(get_actor_context)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.rename_cycle(db, ctx, cycle_id, body.name)
    return respond(request, data)


@router.get("/{cycle_id}/snapshots")
async def get_snapshots(
    cycle_id: PathId,
    ctx: Annotated[ActorContext, Depends(get_actor_context)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_snapshots(db, ctx, cycle_id)
    return respond(request, data)
