"""DB helpers for activity_log.

Called from application services within their transaction, so an action and
its audit line commit or roll back together.
"""
import json
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.mm_common.enums import ActivityAction
from src.mm_mess.domain.models import ActivityEntry

_INSERT_ACTIVITY_SQL = text("""
    INSERT INTO activity_log (mess_id, actor_id, action, details)
    VALUES (:mess_id, :actor_id, :action, CAST(:details AS JSONB))
""")

_LIST_ACTIVITY_SQL = text("""
    SELECT id, mess_id, actor_id, action, details, created_at
    FROM activity_log
    WHERE mess_id = :mess_id
    ORDER BY created_at DESC, id DESC
    LIMIT :limit
""")


class ActivityLog:
    async def write(
        self,
        db: AsyncSession,
        mess_id: str,
        actor_id: str | None,
        action: ActivityAction,
        details: dict[str, Any],
    ) -> None:
        """Insert one audit row within the caller's transaction."""
        await db.execute(
            _INSERT_ACTIVITY_SQL,
            {
                "mess_id": mess_id,
                "actor_id": actor_id,
                "action": action.value,
                "details": json.dumps(details, default=str),
            },
        )

    async def list_recent(
        self, db: AsyncSession, mess_id: str, limit: int
    ) -> list[ActivityEntry]:
        result = await db.execute(
            _LIST_ACTIVITY_SQL, {"mess_id": mess_id, "limit": limit}
        )
        return [
            ActivityEntry(
                id=row.id,
                mess_id=str(row.mess_id),
                actor_id=row.actor_id,
                action=row.action,
                details=row.details or {},
                created_at=row.created_at,
            )
            for row in result.fetchall()
        ]
