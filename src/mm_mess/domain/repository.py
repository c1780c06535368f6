"""Storage contract for messes, members, cutoff settings and the activity feed."""

from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.mm_common.enums import ActivityAction
from src.mm_mess.domain.models import ActivityEntry, CutoffConfig, Member, Mess


class MessRepositoryProtocol(Protocol):
    async def create_mess(
        self, db: AsyncSession, name: str, address: str | None, created_by: str
    ) -> Mess: ...

    async def add_member(
        self, db: AsyncSession, mess_id: str, user_id: str, role: str
    ) -> Member: ...

    async def get_member(
        self, db: AsyncSession, mess_id: str, member_id: str
    ) -> Member | None: ...

    async def get_member_by_user(
        self, db: AsyncSession, mess_id: str, user_id: str
    ) -> Member | None: ...

    async def list_members(
        self, db: AsyncSession, mess_id: str, active_only: bool
    ) -> list[Member]: ...

    async def swap_manager(
        self, db: AsyncSession, mess_id: str, current_id: str, new_id: str
    ) -> int: ...

    async def get_cutoff_config(
        self, db: AsyncSession, mess_id: str
    ) -> CutoffConfig | None: ...

    async def upsert_cutoff_config(
        self, db: AsyncSession, mess_id: str, config: CutoffConfig
    ) -> CutoffConfig: ...


class ActivityLogProtocol(Protocol):
    async def write(
        self,
        db: AsyncSession,
        mess_id: str,
        actor_id: str | None,
        action: ActivityAction,
        details: dict[str, Any],
    ) -> None: ...

    async def list_recent(
        self, db: AsyncSession, mess_id: str, limit: int
    ) -> list[ActivityEntry]: ...
