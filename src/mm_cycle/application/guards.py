from sqlalchemy.ext.asyncio import AsyncSession

from src.mm_common.errors import NoOpenCycleError
from src.mm_cycle.domain.models import Cycle
from src.mm_cycle.domain.repository import CycleRepositoryProtocol


async def require_open_cycle(
    repo: CycleRepositoryProtocol, db: AsyncSession, mess_id: str
) -> Cycle:
    """Share-lock the mess's open cycle for the rest of the transaction.

    Every ledger write goes through here so a concurrent close either sees the
    write in full or makes it fail with NoOpenCycleError.
    """
    cycle = await repo.lock_open_cycle(db, mess_id)
    if cycle is None:
        raise NoOpenCycleError(mess_id)
    return cycle
