"""Domain models for mm_mess: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any

from src.mm_common.enums import MemberRole, MemberStatus


@dataclass
class Mess:
    id: str
    name: str
    address: str | None
    created_by: str
    created_at: datetime | None = None


@dataclass
class Member:
    id: str
    mess_id: str
    user_id: str
    role: str                     # MemberRole value
    status: str                   # MemberStatus value
    join_date: date
    leave_date: date | None = None
    display_name: str | None = None

    @property
    def is_active(self) -> bool:
        return self.status == MemberStatus.ACTIVE

    @property
    def is_manager(self) -> bool:
        return self.role == MemberRole.MANAGER


@dataclass(frozen=True)
class ActorContext:
    """Resolved caller: who is acting, in which mess, with which role.

    Passed explicitly into every core call; the core never looks it up on
    its own and never stores it.
    """

    user_id: str
    mess_id: str
    member_id: str
    role: str

    @property
    def is_manager(self) -> bool:
        return self.role == MemberRole.MANAGER


@dataclass
class CutoffConfig:
    breakfast_cutoff: time
    lunch_cutoff: time
    dinner_cutoff: time
    timezone: str


@dataclass
class ActivityEntry:
    id: int
    mess_id: str
    actor_id: str | None
    action: str
    details: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
