"""LedgerService: bazaar purchases, deposits, fixed and individual costs.

Every write share-locks the mess's open cycle, stamps the entry with it,
takes its initial approval status from the approval policy and records an
activity line, all in one transaction.
"""

from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from src.mm_approval.domain.policy import initial_approval
from src.mm_common.database import atomic
from src.mm_common.enums import (
    ActivityAction,
    FixedCostType,
    LedgerKind,
    PaymentMethod,
)
from src.mm_common.errors import InvalidInputError, NotFoundError
from src.mm_common.money import line_total_cents, validate_amount
from src.mm_cycle.application.guards import require_open_cycle
from src.mm_cycle.domain.repository import CycleRepositoryProtocol
from src.mm_cycle.infrastructure.persistence import CycleRepository
from src.mm_ledger.application.schemas import (
    BazaarExpenseResponse,
    BazaarItemRequest,
    ConsumptionRateResponse,
    DepositResponse,
    FixedCostResponse,
    IndividualCostResponse,
    LedgerListResponse,
)
from src.mm_ledger.domain.consumption import aggregate_consumption
from src.mm_ledger.domain.models import BazaarItem
from src.mm_ledger.domain.repository import LedgerRepositoryProtocol
from src.mm_ledger.infrastructure.persistence import LedgerRepository
from src.mm_mess.application.guards import (
    require_active_member,
    require_manager,
    require_member,
)
from src.mm_mess.domain.models import ActorContext
from src.mm_mess.domain.repository import ActivityLogProtocol, MessRepositoryProtocol
from src.mm_mess.infrastructure.activity_log import ActivityLog
from src.mm_mess.infrastructure.persistence import MessRepository


def _check_amount(amount_cents: int) -> None:
    try:
        validate_amount(amount_cents)
    except ValueError as exc:
        raise InvalidInputError(str(exc)) from None


def price_items(items: list[BazaarItemRequest]) -> list[BazaarItem]:
    """Validate bazaar lines and price each one. Raises InvalidInputError."""
    if not items:
        raise InvalidInputError("at least one item is required")
    priced: list[BazaarItem] = []
    for item in items:
        name = item.item_name.strip()
        if not name:
            raise InvalidInputError("item name is required")
        unit = item.unit.strip()
        if not unit:
            raise InvalidInputError(f"unit of {name!r} is required")
        if item.quantity <= 0:
            raise InvalidInputError(f"quantity of {name!r} must be positive")
        if item.unit_price_cents < 0:
            raise InvalidInputError(f"price of {name!r} cannot be negative")
        priced.append(
            BazaarItem(
                item_name=name,
                quantity=item.quantity,
                unit=unit,
                unit_price_cents=item.unit_price_cents,
                total_price_cents=line_total_cents(item.quantity, item.unit_price_cents),
            )
        )
    return priced


class LedgerService:
    def __init__(
        self,
        repo: LedgerRepositoryProtocol | None = None,
        mess_repo: MessRepositoryProtocol | None = None,
        cycle_repo: CycleRepositoryProtocol | None = None,
        activity: ActivityLogProtocol | None = None,
    ) -> None:
        self._repo: LedgerRepositoryProtocol = repo or LedgerRepository()
        self._mess_repo: MessRepositoryProtocol = mess_repo or MessRepository()
        self._cycle_repo: CycleRepositoryProtocol = cycle_repo or CycleRepository()
        self._activity: ActivityLogProtocol = activity or ActivityLog()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def record_bazaar_expense(
        self,
        db: AsyncSession,
        ctx: ActorContext,
        shopper_id: str,
        expense_date: date,
        items: list[BazaarItemRequest],
        notes: str | None = None,
    ) -> BazaarExpenseResponse:
        priced = price_items(items)
        total = sum(i.total_price_cents for i in priced)
        approval = initial_approval(ctx)

        async with atomic(db, "record_bazaar_expense"):
            await require_member(self._mess_repo, db, ctx.mess_id, shopper_id)
            cycle = await require_open_cycle(self._cycle_repo, db, ctx.mess_id)
            expense = await self._repo.insert_bazaar_expense(
                db,
                mess_id=ctx.mess_id,
                cycle_id=cycle.id,
                shopper_id=shopper_id,
                expense_date=expense_date,
                notes=notes,
                total_amount_cents=total,
                approval_status=approval.status.value,
                approved_by=approval.approved_by,
                created_by=ctx.member_id,
            )
            await self._repo.insert_bazaar_items(db, expense.id, priced)
            expense.items = priced
            await self._activity.write(
                db,
                ctx.mess_id,
                ctx.user_id,
                ActivityAction.BAZAAR_ADDED,
                {
                    "expense_id": expense.id,
                    "item_count": len(priced),
                    "total_cents": total,
                    "status": approval.status.value,
                },
            )
        return BazaarExpenseResponse.from_domain(expense)

    async def record_deposit(
        self,
        db: AsyncSession,
        ctx: ActorContext,
        member_id: str,
        amount_cents: int,
        payment_method: PaymentMethod = PaymentMethod.CASH,
        reference_no: str | None = None,
        notes: str | None = None,
    ) -> DepositResponse:
        _check_amount(amount_cents)
        approval = initial_approval(ctx)

        async with atomic(db, "record_deposit"):
            await require_active_member(self._mess_repo, db, ctx.mess_id, member_id)
            cycle = await require_open_cycle(self._cycle_repo, db, ctx.mess_id)
            deposit = await self._repo.insert_deposit(
                db,
                mess_id=ctx.mess_id,
                cycle_id=cycle.id,
                member_id=member_id,
                amount_cents=amount_cents,
                payment_method=payment_method.value,
                reference_no=reference_no,
                notes=notes,
                approval_status=approval.status.value,
                approved_by=approval.approved_by,
                created_by=ctx.member_id,
            )
            await self._activity.write(
                db,
                ctx.mess_id,
                ctx.user_id,
                ActivityAction.DEPOSIT_ADDED,
                {
                    "member_id": member_id,
                    "amount_cents": amount_cents,
                    "payment_method": payment_method.value,
                    "status": approval.status.value,
                },
            )
        return DepositResponse.from_domain(deposit)

    async def record_fixed_cost(
        self,
        db: AsyncSession,
        ctx: ActorContext,
        cost_type: FixedCostType,
        amount_cents: int,
        description: str | None = None,
    ) -> FixedCostResponse:
        require_manager(ctx, "record fixed costs")
        _check_amount(amount_cents)

        async with atomic(db, "record_fixed_cost"):
            cycle = await require_open_cycle(self._cycle_repo, db, ctx.mess_id)
            cost = await self._repo.insert_fixed_cost(
                db,
                mess_id=ctx.mess_id,
                cycle_id=cycle.id,
                cost_type=cost_type.value,
                description=description,
                amount_cents=amount_cents,
                created_by=ctx.member_id,
            )
            await self._activity.write(
                db,
                ctx.mess_id,
                ctx.user_id,
                ActivityAction.FIXED_COST_ADDED,
                {"cost_type": cost_type.value, "amount_cents": amount_cents},
            )
        return FixedCostResponse.from_domain(cost)

    async def record_individual_cost(
        self,
        db: AsyncSession,
        ctx: ActorContext,
        member_id: str,
        description: str,
        amount_cents: int,
    ) -> IndividualCostResponse:
        description = description.strip()
        if not description or len(description) > 200:
            raise InvalidInputError("description must be 1 to 200 characters")
        _check_amount(amount_cents)
        approval = initial_approval(ctx)

        async with atomic(db, "record_individual_cost"):
            await require_active_member(self._mess_repo, db, ctx.mess_id, member_id)
            cycle = await require_open_cycle(self._cycle_repo, db, ctx.mess_id)
            cost = await self._repo.insert_individual_cost(
                db,
                mess_id=ctx.mess_id,
                cycle_id=cycle.id,
                member_id=member_id,
                description=description,
                amount_cents=amount_cents,
                approval_status=approval.status.value,
                approved_by=approval.approved_by,
                created_by=ctx.member_id,
            )
            await self._activity.write(
                db,
                ctx.mess_id,
                ctx.user_id,
                ActivityAction.INDIVIDUAL_COST_ADDED,
                {
                    "member_id": member_id,
                    "amount_cents": amount_cents,
                    "status": approval.status.value,
                },
            )
        return IndividualCostResponse.from_domain(cost)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def _require_cycle_in_mess(
        self, db: AsyncSession, ctx: ActorContext, cycle_id: str
    ) -> None:
        cycle = await self._cycle_repo.get_cycle(db, cycle_id)
        if cycle is None or cycle.mess_id != ctx.mess_id:
            raise NotFoundError("Cycle", cycle_id)

    async def list_for_cycle(
        self, db: AsyncSession, ctx: ActorContext, cycle_id: str, kind: LedgerKind
    ) -> LedgerListResponse:
        """Entries of one kind in any approval status, newest first."""
        await self._require_cycle_in_mess(db, ctx, cycle_id)
        entries: list = []
        if kind == LedgerKind.BAZAAR:
            expenses = await self._repo.list_bazaar_expenses(db, ctx.mess_id, cycle_id)
            entries = [BazaarExpenseResponse.from_domain(e) for e in expenses]
        elif kind == LedgerKind.DEPOSIT:
            deposits = await self._repo.list_deposits(db, ctx.mess_id, cycle_id)
            entries = [DepositResponse.from_domain(d) for d in deposits]
        elif kind == LedgerKind.FIXED_COST:
            fixed = await self._repo.list_fixed_costs(db, ctx.mess_id, cycle_id)
            entries = [FixedCostResponse.from_domain(f) for f in fixed]
        else:
            costs = await self._repo.list_individual_costs(db, ctx.mess_id, cycle_id)
            entries = [IndividualCostResponse.from_domain(c) for c in costs]
        return LedgerListResponse(cycle_id=cycle_id, kind=kind, entries=entries)

    async def consumption_rates(
        self, db: AsyncSession, ctx: ActorContext, cycle_id: str
    ) -> list[ConsumptionRateResponse]:
        await self._require_cycle_in_mess(db, ctx, cycle_id)
        items = await self._repo.list_bazaar_items(db, ctx.mess_id, cycle_id)
        return [ConsumptionRateResponse.from_domain(r) for r in aggregate_consumption(items)]
