"""MessService: membership, manager transfer, cutoff settings, activity feed.

Also the seam the gateway uses to turn an authenticated user id into an
ActorContext for a mess.
"""

import logging
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.mm_common.database import atomic
from src.mm_common.datetime_utils import Clock, SystemClock, local_today
from src.mm_common.enums import ActivityAction, MemberRole
from src.mm_common.errors import (
    InternalError,
    InvalidInputError,
    NotFoundError,
    UnauthorizedError,
)
from src.mm_cycle.domain.lifecycle import default_cycle_name, month_window
from src.mm_cycle.domain.repository import CycleRepositoryProtocol
from src.mm_cycle.infrastructure.persistence import CycleRepository
from src.mm_mess.application.guards import (
    default_cutoff_config,
    effective_cutoff_config,
    require_manager,
    require_member,
)
from src.mm_mess.application.schemas import (
    ActivityResponse,
    CreateMessResponse,
    CutoffConfigRequest,
    CutoffConfigResponse,
    MemberResponse,
    TransferManagerResponse,
)
from src.mm_mess.domain.models import ActorContext, CutoffConfig
from src.mm_mess.domain.repository import ActivityLogProtocol, MessRepositoryProtocol
from src.mm_mess.infrastructure.activity_log import ActivityLog
from src.mm_mess.infrastructure.persistence import MessRepository

logger = logging.getLogger(__name__)


class MessService:
    def __init__(
        self,
        repo: MessRepositoryProtocol | None = None,
        cycle_repo: CycleRepositoryProtocol | None = None,
        activity: ActivityLogProtocol | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._repo: MessRepositoryProtocol = repo or MessRepository()
        self._cycle_repo: CycleRepositoryProtocol = cycle_repo or CycleRepository()
        self._activity: ActivityLogProtocol = activity or ActivityLog()
        self._clock: Clock = clock or SystemClock()

    async def resolve_actor(
        self, db: AsyncSession, user_id: str, mess_id: str
    ) -> ActorContext:
        member = await self._repo.get_member_by_user(db, mess_id, user_id)
        if member is None or not member.is_active:
            raise UnauthorizedError("act in this mess", "Active membership")
        return ActorContext(
            user_id=user_id,
            mess_id=mess_id,
            member_id=member.id,
            role=member.role,
        )

    async def create_mess(
        self, db: AsyncSession, user_id: str, name: str, address: str | None
    ) -> CreateMessResponse:
        """Mess, its manager, default cutoffs and the first open cycle, all at once."""
        config = default_cutoff_config()
        start, end = month_window(local_today(self._clock, config.timezone))
        async with atomic(db, "create_mess"):
            mess = await self._repo.create_mess(db, name, address, user_id)
            manager = await self._repo.add_member(db, mess.id, user_id, MemberRole.MANAGER.value)
            await self._repo.upsert_cutoff_config(db, mess.id, config)
            cycle = await self._cycle_repo.create_cycle(
                db, mess.id, default_cycle_name(start), start, end, 0
            )
            await self._activity.write(
                db, mess.id, user_id, ActivityAction.MESS_CREATED, {"name": name}
            )
        logger.info("Mess %s created by user %s, first cycle %s", mess.id, user_id, cycle.id)
        return CreateMessResponse(
            mess_id=mess.id,
            name=mess.name,
            manager_member_id=manager.id,
            cycle_id=cycle.id,
            cycle_name=cycle.name,
        )

    async def transfer_manager(
        self, db: AsyncSession, ctx: ActorContext, new_manager_member_id: str
    ) -> TransferManagerResponse:
        require_manager(ctx, "transfer the manager role")
        if new_manager_member_id == ctx.member_id:
            raise InvalidInputError("cannot transfer the manager role to yourself")

        async with atomic(db, "transfer_manager"):
            target = await require_member(self._repo, db, ctx.mess_id, new_manager_member_id)
            if not target.is_active:
                raise NotFoundError("Active member", new_manager_member_id)
            swapped = await self._repo.swap_manager(
                db, ctx.mess_id, ctx.member_id, new_manager_member_id
            )
            if swapped != 2:
                raise InternalError(f"Manager swap touched {swapped} rows, expected 2")
            await self._activity.write(
                db,
                ctx.mess_id,
                ctx.user_id,
                ActivityAction.MANAGER_TRANSFERRED,
                {"from": ctx.member_id, "to": new_manager_member_id},
            )
        logger.info(
            "Mess %s manager transferred %s -> %s",
            ctx.mess_id, ctx.member_id, new_manager_member_id,
        )
        return TransferManagerResponse(
            previous_manager_member_id=ctx.member_id,
            new_manager_member_id=new_manager_member_id,
        )

    async def list_members(
        self, db: AsyncSession, ctx: ActorContext
    ) -> list[MemberResponse]:
        members = await self._repo.list_members(db, ctx.mess_id, active_only=False)
        return [MemberResponse.from_domain(m) for m in members]

    async def get_cutoff_config(
        self, db: AsyncSession, ctx: ActorContext
    ) -> CutoffConfigResponse:
        config = await effective_cutoff_config(self._repo, db, ctx.mess_id)
        return CutoffConfigResponse.from_domain(config)

    async def update_cutoff_config(
        self, db: AsyncSession, ctx: ActorContext, body: CutoffConfigRequest
    ) -> CutoffConfigResponse:
        require_manager(ctx, "change meal cutoffs")
        try:
            ZoneInfo(body.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            raise InvalidInputError(f"unknown time zone {body.timezone!r}") from None

        config = CutoffConfig(
            breakfast_cutoff=body.breakfast_cutoff,
            lunch_cutoff=body.lunch_cutoff,
            dinner_cutoff=body.dinner_cutoff,
            timezone=body.timezone,
        )
        async with atomic(db, "update_cutoff_config"):
            saved = await self._repo.upsert_cutoff_config(db, ctx.mess_id, config)
            await self._activity.write(
                db,
                ctx.mess_id,
                ctx.user_id,
                ActivityAction.CUTOFF_UPDATED,
                {
                    "breakfast": saved.breakfast_cutoff.isoformat(),
                    "lunch": saved.lunch_cutoff.isoformat(),
                    "dinner": saved.dinner_cutoff.isoformat(),
                    "timezone": saved.timezone,
                },
            )
        return CutoffConfigResponse.from_domain(saved)

    async def recent_activity(
        self, db: AsyncSession, ctx: ActorContext, limit: int | None = None
    ) -> list[ActivityResponse]:
        page = min(limit or settings.ACTIVITY_PAGE_LIMIT, settings.ACTIVITY_PAGE_LIMIT)
        entries = await self._activity.list_recent(db, ctx.mess_id, page)
        return [ActivityResponse.from_domain(e) for e in entries]
