"""mm_balance REST API: read-only rate, balances and overview per cycle."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.mm_balance.application.service import BalanceService
from src.mm_common.database import get_db_session
from src.mm_common.ids import PathId
from src.mm_common.response import ApiResponse, respond
from src.mm_gateway.auth.dependencies import get_actor_context
from src.mm_mess.domain.models import ActorContext

router = APIRouter(prefix="/messes/{mess_id}/cycles/{cycle_id}", tags=["balances"])

_service = BalanceService()


@router.get("/meal-rate")
async def meal_rate(
    cycle_id: PathId,
    ctx: Annotated[ActorContext, Depends(get_actor_context)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.meal_rate(db, ctx, cycle_id)
    return respond(request, data)


@router.get("/balances")
async def all_member_balances(
    cycle_id: PathId,
    ctx: Annotated[ActorContext, Depends(get_actor_context)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.all_member_balances(db, ctx, cycle_id)
    return respond(request, data)


@router.get("/balances/{member_id}")
async def member_balance(
    cycle_id: PathId,
    member_id: PathId,
    ctx: Annotated[ActorContext, Depends(get_actor_context)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.member_balance(db, ctx, cycle_id, member_id)
    return respond(request, data)


@router.get("/overview")
async def mess_overview(
    cycle_id: PathId,
    ctx: Annotated[ActorContext, Depends(get_actor_context)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.mess_overview(db, ctx, cycle_id)
    return respond(request, data)
