"""FastAPI dependencies: bearer token -> user id -> ActorContext.

Usage in any mess-scoped router:
    from src.mm_gateway.auth.dependencies import get_actor_context

    @router.get("/messes/{mess_id}/thing")
    async def thing(ctx: ActorContext = Depends(get_actor_context)):
        ...
"""

from typing import Annotated

from fastapi import Depends, Path
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from src.mm_common.database import get_db_session
from src.mm_common.errors import UnauthenticatedError
from src.mm_common.ids import UUID_PATTERN
from src.mm_gateway.auth.jwt_handler import decode_token
from src.mm_mess.application.service import MessService
from src.mm_mess.domain.models import ActorContext

# auto_error=False so a missing header becomes our own 1001 envelope, not a bare 403
_bearer = HTTPBearer(auto_error=False)

_mess_service = MessService()


async def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer)],
) -> str:
    if credentials is None or not credentials.credentials:
        raise UnauthenticatedError()
    payload = decode_token(credentials.credentials)
    return payload["sub"]


async def get_actor_context(
    mess_id: Annotated[str, Path(pattern=UUID_PATTERN, description="Mess the caller is acting in")],
    user_id: Annotated[str, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ActorContext:
    """Resolve the caller's active membership in the path's mess.

    Raises UnauthorizedError when the user is not an active member there.
    """
    return await _mess_service.resolve_actor(db, user_id, mess_id)
