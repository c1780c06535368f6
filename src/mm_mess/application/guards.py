"""Membership checks shared by every mess-scoped service."""

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.mm_common.errors import InvalidInputError, NotFoundError, UnauthorizedError
from src.mm_meal.domain.cutoff import parse_cutoff
from src.mm_mess.domain.models import ActorContext, CutoffConfig, Member
from src.mm_mess.domain.repository import MessRepositoryProtocol


def require_manager(ctx: ActorContext, action: str) -> None:
    if not ctx.is_manager:
        raise UnauthorizedError(action)


async def require_member(
    repo: MessRepositoryProtocol, db: AsyncSession, mess_id: str, member_id: str
) -> Member:
    """The member row, or NotFound when it belongs to another mess or does not exist."""
    member = await repo.get_member(db, mess_id, member_id)
    if member is None:
        raise NotFoundError("Member", member_id)
    return member


async def require_active_member(
    repo: MessRepositoryProtocol, db: AsyncSession, mess_id: str, member_id: str
) -> Member:
    """Like require_member, but the member must also be active.

    Only active members are snapshotted at close, so meals, deposits and costs
    booked to anyone else would drop out of the month-end balances.
    """
    member = await require_member(repo, db, mess_id, member_id)
    if not member.is_active:
        raise InvalidInputError(f"member {member_id} is {member.status}, not active")
    return member


def default_cutoff_config() -> CutoffConfig:
    return CutoffConfig(
        breakfast_cutoff=parse_cutoff(settings.DEFAULT_BREAKFAST_CUTOFF),
        lunch_cutoff=parse_cutoff(settings.DEFAULT_LUNCH_CUTOFF),
        dinner_cutoff=parse_cutoff(settings.DEFAULT_DINNER_CUTOFF),
        timezone=settings.DEFAULT_TIMEZONE,
    )


async def effective_cutoff_config(
    repo: MessRepositoryProtocol, db: AsyncSession, mess_id: str
) -> CutoffConfig:
    config = await repo.get_cutoff_config(db, mess_id)
    return config if config is not None else default_cutoff_config()
