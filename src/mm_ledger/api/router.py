"""mm_ledger REST API: bazaar, deposits, fixed and individual costs."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.mm_common.database import get_db_session
from src.mm_common.enums import LedgerKind
from src.mm_common.ids import PathId
from src.mm_common.response import ApiResponse, respond
from src.mm_gateway.auth.dependencies import get_actor_context
from src.mm_ledger.application.schemas import (
    BazaarExpenseRequest,
    DepositRequest,
    FixedCostRequest,
    IndividualCostRequest,
)
from src.mm_ledger.application.service import LedgerService
from src.mm_mess.domain.models import ActorContext

router = APIRouter(prefix="/messes/{mess_id}", tags=["ledger"])

_service = LedgerService()


@router.post("/bazaar")
async def record_bazaar_expense(
    body: BazaarExpenseRequest,
    ctx: Annotated[ActorContext, Depends(get_actor_context)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.record_bazaar_expense(
        db, ctx, body.shopper_id, body.expense_date, body.items, body.notes
    )
    return respond(request, data)


@router.post("/deposits")
async def record_deposit(
    body: DepositRequest,
    ctx: Annotated[ActorContext, Depends(get_actor_context)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.record_deposit(
        db,
        ctx,
        body.member_id,
        body.amount_cents,
        body.payment_method,
        body.reference_no,
        body.notes,
    )
    return respond(request, data)


@router.post("/fixed-costs")
async def record_fixed_cost(
    body: FixedCostRequest,
    ctx: Annotated[ActorContext, Depends(get_actor_context)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.record_fixed_cost(
        db, ctx, body.cost_type, body.amount_cents, body.description
    )
    return respond(request, data)


@router.post("/individual-costs")
async def record_individual_cost(
    body: IndividualCostRequest,
    ctx: Annotated[ActorContext, Depends(get_actor_context)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.record_individual_cost(
        db, ctx, body.member_id, body.description, body.amount_cents
    )
    return respond(request, data)


@router.get("/cycles/{cycle_id}/entries")
async def list_for_cycle(
    cycle_id: PathId,
    ctx: Annotated[ActorContext, Depends(get_actor_context)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    kind: LedgerKind = Query(..., description="deposit | bazaar | individual_cost | fixed_cost"),
) -> ApiResponse:
    data = await _service.list_for_cycle(db, ctx, cycle_id, kind)
    return respond(request, data)


@router.get("/cycles/{cycle_id}/consumption")
async def consumption_rates(
    cycle_id: PathId,
    ctx: Annotated[ActorContext, Depends(get_actor_context)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.consumption_rates(db, ctx, cycle_id)
    return respond(request, data)
