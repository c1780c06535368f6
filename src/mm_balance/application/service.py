"""BalanceService: live meal rate, member balances and the mess overview.

Open cycles are derived from the ledger on every call, nothing is cached.
Closed cycles answer from their frozen rate and month snapshots.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.mm_balance.application.schemas import (
    MealRateResponse,
    MemberBalanceResponse,
    MessOverviewResponse,
)
from src.mm_balance.domain import calculator
from src.mm_balance.domain.repository import LedgerReaderProtocol
from src.mm_balance.infrastructure.persistence import LedgerReader
from src.mm_common.datetime_utils import Clock, SystemClock, local_today
from src.mm_common.errors import NotFoundError
from src.mm_common.money import cents_to_display, div_round_half_up
from src.mm_cycle.domain.models import Cycle
from src.mm_cycle.domain.repository import CycleRepositoryProtocol
from src.mm_cycle.infrastructure.persistence import CycleRepository
from src.mm_meal.domain.repository import MealRepositoryProtocol
from src.mm_meal.infrastructure.persistence import MealRepository
from src.mm_mess.application.guards import effective_cutoff_config, require_member
from src.mm_mess.domain.models import ActorContext
from src.mm_mess.domain.repository import MessRepositoryProtocol
from src.mm_mess.infrastructure.persistence import MessRepository


class BalanceService:
    def __init__(
        self,
        reader: LedgerReaderProtocol | None = None,
        cycle_repo: CycleRepositoryProtocol | None = None,
        mess_repo: MessRepositoryProtocol | None = None,
        meal_repo: MealRepositoryProtocol | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._reader: LedgerReaderProtocol = reader or LedgerReader()
        self._cycle_repo: CycleRepositoryProtocol = cycle_repo or CycleRepository()
        self._mess_repo: MessRepositoryProtocol = mess_repo or MessRepository()
        self._meal_repo: MealRepositoryProtocol = meal_repo or MealRepository()
        self._clock: Clock = clock or SystemClock()

    async def _cycle_in_mess(
        self, db: AsyncSession, ctx: ActorContext, cycle_id: str
    ) -> Cycle:
        cycle = await self._cycle_repo.get_cycle(db, cycle_id)
        if cycle is None or cycle.mess_id != ctx.mess_id:
            raise NotFoundError("Cycle", cycle_id)
        return cycle

    async def meal_rate(
        self, db: AsyncSession, ctx: ActorContext, cycle_id: str
    ) -> MealRateResponse:
        cycle = await self._cycle_in_mess(db, ctx, cycle_id)
        ledger = await self._reader.load_cycle_ledger(db, ctx.mess_id, cycle_id)
        if cycle.is_open or cycle.final_meal_rate_cents is None:
            rate = calculator.meal_rate(ledger)
        else:
            rate = cycle.final_meal_rate_cents
        return MealRateResponse(
            cycle_id=cycle_id,
            meal_rate_cents=rate,
            meal_rate_display=cents_to_display(rate),
            total_meal_units=calculator.total_units(ledger),
            bazaar_total_cents=ledger.bazaar_total_cents,
            frozen=not cycle.is_open,
        )

    async def member_balance(
        self, db: AsyncSession, ctx: ActorContext, cycle_id: str, member_id: str
    ) -> MemberBalanceResponse:
        cycle = await self._cycle_in_mess(db, ctx, cycle_id)
        member = await require_member(self._mess_repo, db, ctx.mess_id, member_id)

        if not cycle.is_open:
            for snap in await self._cycle_repo.list_snapshots(db, cycle_id):
                if snap.member_id == member_id:
                    return MemberBalanceResponse.from_snapshot(snap, member.display_name)
            raise NotFoundError("Snapshot", f"{cycle_id}/{member_id}")

        ledger = await self._reader.load_cycle_ledger(db, ctx.mess_id, cycle_id)
        breakdown = calculator.member_balance(ledger, member_id)
        return MemberBalanceResponse.from_breakdown(breakdown, member.display_name)

    async def all_member_balances(
        self, db: AsyncSession, ctx: ActorContext, cycle_id: str
    ) -> list[MemberBalanceResponse]:
        cycle = await self._cycle_in_mess(db, ctx, cycle_id)
        members = await self._mess_repo.list_members(db, ctx.mess_id, active_only=False)
        names = {m.id: m.display_name for m in members}

        if not cycle.is_open:
            snapshots = await self._cycle_repo.list_snapshots(db, cycle_id)
            return [
                MemberBalanceResponse.from_snapshot(s, names.get(s.member_id))
                for s in snapshots
            ]

        ledger = await self._reader.load_cycle_ledger(db, ctx.mess_id, cycle_id)
        return [
            MemberBalanceResponse.from_breakdown(b, names.get(b.member_id))
            for b in calculator.all_member_balances(ledger)
        ]

    async def mess_overview(
        self, db: AsyncSession, ctx: ActorContext, cycle_id: str
    ) -> MessOverviewResponse:
        cycle = await self._cycle_in_mess(db, ctx, cycle_id)
        ledger = await self._reader.load_cycle_ledger(db, ctx.mess_id, cycle_id)
        if cycle.is_open or cycle.final_meal_rate_cents is None:
            rate = calculator.meal_rate(ledger)
        else:
            rate = cycle.final_meal_rate_cents
        units = calculator.total_units(ledger)

        config = await effective_cutoff_config(self._mess_repo, db, ctx.mess_id)
        today = local_today(self._clock, config.timezone)
        today_rows = await self._meal_repo.list_range(db, ctx.mess_id, today, today, None)

        total_days = max((cycle.end_date - cycle.start_date).days, 1)
        elapsed = max((today - cycle.start_date).days, 0)
        progress = min(div_round_half_up(elapsed * 100, total_days), 100)
        cash = calculator.cash_in_hand(ledger)

        return MessOverviewResponse(
            cycle_id=cycle.id,
            cycle_name=cycle.name,
            cycle_status=cycle.status,
            start_date=cycle.start_date,
            end_date=cycle.end_date,
            active_members=len(ledger.active_member_ids),
            meal_rate_cents=rate,
            total_meal_units=units,
            total_meal_cost_cents=sum(calculator.meal_costs(ledger).values()),
            total_opening_cents=ledger.opening_total_cents,
            total_deposits_cents=ledger.deposit_total_cents,
            total_bazaar_cents=ledger.bazaar_total_cents,
            total_fixed_cents=ledger.fixed_total_cents,
            total_individual_cents=ledger.individual_total_cents,
            cash_in_hand_cents=cash,
            cash_in_hand_display=cents_to_display(cash),
            today_meal_units=sum(row.units for row in today_rows),
            cycle_progress_percent=progress,
            days_remaining=max((cycle.end_date - today).days, 0),
        )
