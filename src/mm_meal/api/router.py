"""mm_meal REST API: attendance per member and day."""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.mm_common.database import get_db_session
from src.mm_common.ids import UUID_PATTERN
from src.mm_common.response import ApiResponse, respond
from src.mm_gateway.auth.dependencies import get_actor_context
from src.mm_meal.application.schemas import (
    BulkMealRequest,
    SetGuestCountRequest,
    SetMealRequest,
)
from src.mm_meal.application.service import MealService
from src.mm_mess.domain.models import ActorContext

router = APIRouter(prefix="/messes/{mess_id}/meals", tags=["meals"])

_service = MealService()


@router.put("")
async def set_meal(
    body: SetMealRequest,
    ctx: Annotated[ActorContext, Depends(get_actor_context)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.set_meal(
        db, ctx, body.member_id, body.meal_date, body.slot, body.present
    )
    return respond(request, data)


@router.put("/guests")
async def set_guest_count(
    body: SetGuestCountRequest,
    ctx: Annotated[ActorContext, Depends(get_actor_context)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.set_guest_count(
        db, ctx, body.member_id, body.meal_date, body.slot, body.count
    )
    return respond(request, data)


@router.post("/bulk")
async def bulk_update(
    body: BulkMealRequest,
    ctx: Annotated[ActorContext, Depends(get_actor_context)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.bulk_update(db, ctx, body.meal_date, body.updates)
    return respond(request, data)


@router.get("")
async def query_range(
    ctx: Annotated[ActorContext, Depends(get_actor_context)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    start: date = Query(..., description="First day, inclusive"),
    end: date = Query(..., description="Last day, inclusive"),
    member_id: Annotated[
        str | None, Query(pattern=UUID_PATTERN, description="Dense per-day view for one member")
    ] = None,
) -> ApiResponse:
    data = await _service.query_range(db, ctx, start, end, member_id)
    return respond(request, data)


@router.get("/today")
async def today(
    ctx: Annotated[ActorContext, Depends(get_actor_context)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.today(db, ctx)
    return respond(request, data)


@router.get("/grid/{meal_date}")
async def meals_for_date(
    meal_date: date,
    ctx: Annotated[ActorContext, Depends(get_actor_context)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.meals_for_date(db, ctx, meal_date)
    return respond(request, data)
