"""MessRepository: concrete implementation of MessRepositoryProtocol.

Transaction ownership: the CALLER (application service) opens and commits the
transaction; every method here runs inside it.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.mm_common.errors import InternalError
from src.mm_mess.domain.models import CutoffConfig, Member, Mess

# ---------------------------------------------------------------------------
# SQL: messes / members
# ---------------------------------------------------------------------------

_INSERT_MESS_SQL = text("""
    INSERT INTO messes (name, address, created_by)
    VALUES (:name, :address, :created_by)
    RETURNING id, name, address, created_by, created_at
""")

_INSERT_MEMBER_SQL = text("""
    INSERT INTO mess_members (mess_id, user_id, role, status)
    VALUES (:mess_id, :user_id, :role, 'active')
    RETURNING id, mess_id, user_id, role, status, join_date, leave_date, display_name
""")

_GET_MEMBER_SQL = text("""
    SELECT id, mess_id, user_id, role, status, join_date, leave_date, display_name
    FROM mess_members
    WHERE mess_id = :mess_id AND id = :member_id
""")

_GET_MEMBER_BY_USER_SQL = text("""
    SELECT id, mess_id, user_id, role, status, join_date, leave_date, display_name
    FROM mess_members
    WHERE mess_id = :mess_id AND user_id = :user_id
    ORDER BY join_date DESC
    LIMIT 1
""")

_LIST_MEMBERS_SQL = text("""
    SELECT id, mess_id, user_id, role, status, join_date, leave_date, display_name
    FROM mess_members
    WHERE mess_id = :mess_id
      AND (CAST(:active_only AS BOOLEAN) = FALSE OR status = 'active')
    ORDER BY role, join_date, id
""")

# Both rows change in one statement; the deferred one-manager exclusion
# constraint is checked at commit, so no moment with zero or two managers.
_SWAP_MANAGER_SQL = text("""
    UPDATE mess_members
    SET role = CASE WHEN id = :new_id THEN 'manager' ELSE 'member' END,
        updated_at = NOW()
    WHERE mess_id = :mess_id
      AND id IN (:current_id, :new_id)
      AND status = 'active'
""")

# ---------------------------------------------------------------------------
# SQL: meal cutoff configuration
# ---------------------------------------------------------------------------

_GET_CUTOFF_SQL = text("""
    SELECT breakfast_cutoff, lunch_cutoff, dinner_cutoff, timezone
    FROM meal_cutoff_config
    WHERE mess_id = :mess_id
""")

_UPSERT_CUTOFF_SQL = text("""
    INSERT INTO meal_cutoff_config
        (mess_id, breakfast_cutoff, lunch_cutoff, dinner_cutoff, timezone)
    VALUES
        (:mess_id, :breakfast_cutoff, :lunch_cutoff, :dinner_cutoff, :timezone)
    ON CONFLICT (mess_id) DO UPDATE
        SET breakfast_cutoff = EXCLUDED.breakfast_cutoff,
            lunch_cutoff     = EXCLUDED.lunch_cutoff,
            dinner_cutoff    = EXCLUDED.dinner_cutoff,
            timezone         = EXCLUDED.timezone,
            updated_at       = NOW()
    RETURNING breakfast_cutoff, lunch_cutoff, dinner_cutoff, timezone
""")


def _row_to_member(row: object) -> Member:
    return Member(
        id=str(row.id),  # type: ignore[attr-defined]
        mess_id=str(row.mess_id),  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        role=row.role,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        join_date=row.join_date,  # type: ignore[attr-defined]
        leave_date=row.leave_date,  # type: ignore[attr-defined]
        display_name=row.display_name,  # type: ignore[attr-defined]
    )


def _row_to_cutoff(row: object) -> CutoffConfig:
    return CutoffConfig(
        breakfast_cutoff=row.breakfast_cutoff,  # type: ignore[attr-defined]
        lunch_cutoff=row.lunch_cutoff,  # type: ignore[attr-defined]
        dinner_cutoff=row.dinner_cutoff,  # type: ignore[attr-defined]
        timezone=row.timezone,  # type: ignore[attr-defined]
    )


class MessRepository:
    """Concrete repository: raw SQL, caller-owned transaction."""

    async def create_mess(
        self, db: AsyncSession, name: str, address: str | None, created_by: str
    ) -> Mess:
        result = await db.execute(
            _INSERT_MESS_SQL,
            {"name": name, "address": address, "created_by": created_by},
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Mess insert returned no rows")
        return Mess(
            id=str(row.id),
            name=row.name,
            address=row.address,
            created_by=row.created_by,
            created_at=row.created_at,
        )

    async def add_member(
        self, db: AsyncSession, mess_id: str, user_id: str, role: str
    ) -> Member:
        result = await db.execute(
            _INSERT_MEMBER_SQL,
            {"mess_id": mess_id, "user_id": user_id, "role": role},
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Member insert returned no rows")
        return _row_to_member(row)

    async def get_member(
        self, db: AsyncSession, mess_id: str, member_id: str
    ) -> Member | None:
        result = await db.execute(
            _GET_MEMBER_SQL, {"mess_id": mess_id, "member_id": member_id}
        )
        row = result.fetchone()
        return _row_to_member(row) if row else None

    async def get_member_by_user(
        self, db: AsyncSession, mess_id: str, user_id: str
    ) -> Member | None:
        result = await db.execute(
            _GET_MEMBER_BY_USER_SQL, {"mess_id": mess_id, "user_id": user_id}
        )
        row = result.fetchone()
        return _row_to_member(row) if row else None

    async def list_members(
        self, db: AsyncSession, mess_id: str, active_only: bool
    ) -> list[Member]:
        result = await db.execute(
            _LIST_MEMBERS_SQL, {"mess_id": mess_id, "active_only": active_only}
        )
        return [_row_to_member(row) for row in result.fetchall()]

    async def swap_manager(
        self, db: AsyncSession, mess_id: str, current_id: str, new_id: str
    ) -> int:
        result = await db.execute(
            _SWAP_MANAGER_SQL,
            {"mess_id": mess_id, "current_id": current_id, "new_id": new_id},
        )
        return int(result.rowcount or 0)  # type: ignore[attr-defined]

    async def get_cutoff_config(
        self, db: AsyncSession, mess_id: str
    ) -> CutoffConfig | None:
        result = await db.execute(_GET_CUTOFF_SQL, {"mess_id": mess_id})
        row = result.fetchone()
        return _row_to_cutoff(row) if row else None

    async def upsert_cutoff_config(
        self, db: AsyncSession, mess_id: str, config: CutoffConfig
    ) -> CutoffConfig:
        result = await db.execute(
            _UPSERT_CUTOFF_SQL,
            {
                "mess_id": mess_id,
                "breakfast_cutoff": config.breakfast_cutoff,
                "lunch_cutoff": config.lunch_cutoff,
                "dinner_cutoff": config.dinner_cutoff,
                "timezone": config.timezone,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Cutoff upsert returned no rows")
        return _row_to_cutoff(row)
