"""CycleService: month close, successor cycle, cycle housekeeping.

close_month runs as ONE transaction:
  1. lock the cycle row FOR UPDATE (missing → NotFound, closed → CycleAlreadyClosed)
  2. load the ledger, compute and freeze the meal rate, mark the cycle closed
  3. snapshot every active member's balance from that same ledger
  4. open the successor cycle seeded with the snapshot closing balances
  5. record the activity line, commit
Any store failure rolls all of it back and surfaces as TransactionFailureError.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.mm_balance.domain import calculator
from src.mm_balance.domain.repository import LedgerReaderProtocol
from src.mm_balance.infrastructure.persistence import LedgerReader
from src.mm_common.database import atomic
from src.mm_common.enums import ActivityAction
from src.mm_common.errors import (
    CycleAlreadyClosedError,
    InvalidInputError,
    NoOpenCycleError,
    NotFoundError,
)
from src.mm_cycle.application.schemas import (
    CloseMonthResponse,
    CycleResponse,
    SnapshotResponse,
    StartNewMonthResponse,
)
from src.mm_cycle.domain.lifecycle import default_cycle_name, successor_window
from src.mm_cycle.domain.models import Cycle, MonthSnapshot
from src.mm_cycle.domain.repository import CycleRepositoryProtocol
from src.mm_cycle.infrastructure.persistence import CycleRepository
from src.mm_mess.application.guards import require_manager
from src.mm_mess.domain.models import ActorContext
from src.mm_mess.domain.repository import ActivityLogProtocol
from src.mm_mess.infrastructure.activity_log import ActivityLog

logger = logging.getLogger(__name__)

MAX_CYCLE_NAME = 100


def _clean_name(name: str | None) -> str | None:
    if name is None:
        return None
    name = name.strip()
    if len(name) > MAX_CYCLE_NAME:
        raise InvalidInputError(f"cycle name is limited to {MAX_CYCLE_NAME} characters")
    return name or None


class CycleService:
    def __init__(
        self,
        repo: CycleRepositoryProtocol | None = None,
        reader: LedgerReaderProtocol | None = None,
        activity: ActivityLogProtocol | None = None,
    ) -> None:
        self._repo: CycleRepositoryProtocol = repo or CycleRepository()
        self._reader: LedgerReaderProtocol = reader or LedgerReader()
        self._activity: ActivityLogProtocol = activity or ActivityLog()

    async def _cycle_in_mess(
        self, db: AsyncSession, ctx: ActorContext, cycle_id: str
    ) -> Cycle:
        cycle = await self._repo.get_cycle(db, cycle_id)
        if cycle is None or cycle.mess_id != ctx.mess_id:
            raise NotFoundError("Cycle", cycle_id)
        return cycle

    # ------------------------------------------------------------------
    # Close
    # ------------------------------------------------------------------

    async def close_month(
        self,
        db: AsyncSession,
        ctx: ActorContext,
        cycle_id: str,
        next_name: str | None = None,
    ) -> CloseMonthResponse:
        require_manager(ctx, "close the month")
        next_name = _clean_name(next_name)

        async with atomic(db, "close_month"):
            cycle = await self._repo.lock_cycle_for_close(db, cycle_id)
            if cycle is None or cycle.mess_id != ctx.mess_id:
                raise NotFoundError("Cycle", cycle_id)
            if not cycle.is_open:
                raise CycleAlreadyClosedError(cycle_id)

            ledger = await self._reader.load_cycle_ledger(db, ctx.mess_id, cycle_id)
            rate = calculator.meal_rate(ledger)
            if not await self._repo.mark_closed(db, cycle_id, rate):
                raise CycleAlreadyClosedError(cycle_id)

            balances = calculator.all_member_balances(ledger)
            snapshots = [
                MonthSnapshot(
                    cycle_id=cycle_id,
                    member_id=b.member_id,
                    total_meals=b.total_meals,
                    meal_rate_cents=b.meal_rate_cents,
                    total_meal_cost_cents=b.meal_cost_cents,
                    total_fixed_cost_cents=b.fixed_cost_share_cents,
                    total_individual_cost_cents=b.individual_cost_cents,
                    total_deposits_cents=b.total_deposits_cents,
                    opening_balance_cents=b.opening_balance_cents,
                    closing_balance_cents=b.balance_cents,
                )
                for b in balances
            ]
            count = await self._repo.insert_snapshots(db, snapshots)

            start, end = successor_window(cycle.end_date)
            carried = {s.member_id: s.closing_balance_cents for s in snapshots}
            successor = await self._repo.create_cycle(
                db,
                ctx.mess_id,
                next_name or default_cycle_name(start),
                start,
                end,
                sum(carried.values()),
            )
            await self._repo.insert_opening_balances(db, successor.id, carried)

            await self._activity.write(
                db,
                ctx.mess_id,
                ctx.user_id,
                ActivityAction.MONTH_CLOSED,
                {
                    "cycle_id": cycle_id,
                    "new_cycle_id": successor.id,
                    "meal_rate_cents": rate,
                    "snapshots": count,
                },
            )

        logger.info(
            "Closed cycle %s (rate=%d, snapshots=%d), opened %s",
            cycle_id, rate, count, successor.id,
        )
        return CloseMonthResponse(
            closed_cycle_id=cycle_id,
            new_cycle_id=successor.id,
            new_cycle_name=successor.name,
            final_meal_rate_cents=rate,
            snapshot_count=count,
        )

    async def start_new_month(
        self,
        db: AsyncSession,
        ctx: ActorContext,
        cycle_id: str,
        next_name: str | None = None,
    ) -> StartNewMonthResponse:
        """Managers close right away; anyone else files a request for the manager."""
        if ctx.is_manager:
            result = await self.close_month(db, ctx, cycle_id, next_name)
            return StartNewMonthResponse(outcome="closed", close=result)

        next_name = _clean_name(next_name)
        async with atomic(db, "request_new_month"):
            await self._cycle_in_mess(db, ctx, cycle_id)
            await self._activity.write(
                db,
                ctx.mess_id,
                ctx.user_id,
                ActivityAction.REQUEST_NEW_MONTH,
                {"cycle_id": cycle_id, "next_name": next_name},
            )
        return StartNewMonthResponse(outcome="requested")

    # ------------------------------------------------------------------
    # Housekeeping and reads
    # ------------------------------------------------------------------

    async def rename_cycle(
        self, db: AsyncSession, ctx: ActorContext, cycle_id: str, name: str
    ) -> CycleResponse:
        require_manager(ctx, "rename cycles")
        clean = _clean_name(name)
        if clean is None:
            raise InvalidInputError("cycle name is required")

        async with atomic(db, "rename_cycle"):
            cycle = await self._cycle_in_mess(db, ctx, cycle_id)
            renamed = await self._repo.rename_cycle(db, cycle_id, clean)
            if renamed is None:
                raise NotFoundError("Cycle", cycle_id)
            await self._activity.write(
                db,
                ctx.mess_id,
                ctx.user_id,
                ActivityAction.CYCLE_RENAMED,
                {"cycle_id": cycle_id, "from": cycle.name, "to": clean},
            )
        return CycleResponse.from_domain(renamed)

    async def list_cycles(
        self, db: AsyncSession, ctx: ActorContext
    ) -> list[CycleResponse]:
        return [CycleResponse.from_domain(c) for c in await self._repo.list_cycles(db, ctx.mess_id)]

    async def get_open_cycle(self, db: AsyncSession, ctx: ActorContext) -> CycleResponse:
        cycle = await self._repo.get_open_cycle(db, ctx.mess_id)
        if cycle is None:
            raise NoOpenCycleError(ctx.mess_id)
        return CycleResponse.from_domain(cycle)

    async def get_snapshots(
        self, db: AsyncSession, ctx: ActorContext, cycle_id: str
    ) -> list[SnapshotResponse]:
        await self._cycle_in_mess(db, ctx, cycle_id)
        snapshots = await self._repo.list_snapshots(db, cycle_id)
        return [SnapshotResponse.from_domain(s) for s in snapshots]
