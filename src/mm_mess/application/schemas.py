"""Pydantic schemas for the mm_mess API."""

from datetime import date, datetime, time
from typing import Any

from pydantic import BaseModel, Field

from src.mm_common.ids import EntityId
from src.mm_mess.domain.models import ActivityEntry, CutoffConfig, Member


class CreateMessRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    address: str | None = Field(None, max_length=200)


class TransferManagerRequest(BaseModel):
    new_manager_member_id: EntityId


class CutoffConfigRequest(BaseModel):
    breakfast_cutoff: time = Field(..., description="Evaluated on the day before the meal")
    lunch_cutoff: time
    dinner_cutoff: time
    timezone: str = Field(..., min_length=1, description="IANA zone, e.g. Asia/Dhaka")


class CreateMessResponse(BaseModel):
    mess_id: str
    name: str
    manager_member_id: str
    cycle_id: str
    cycle_name: str


class MemberResponse(BaseModel):
    id: str
    user_id: str
    display_name: str | None
    role: str
    status: str
    join_date: date
    leave_date: date | None

    @classmethod
    def from_domain(cls, m: Member) -> "MemberResponse":
        return cls(
            id=m.id,
            user_id=m.user_id,
            display_name=m.display_name,
            role=m.role,
            status=m.status,
            join_date=m.join_date,
            leave_date=m.leave_date,
        )


class TransferManagerResponse(BaseModel):
    previous_manager_member_id: str
    new_manager_member_id: str


class CutoffConfigResponse(BaseModel):
    breakfast_cutoff: time
    lunch_cutoff: time
    dinner_cutoff: time
    timezone: str

    @classmethod
    def from_domain(cls, c: CutoffConfig) -> "CutoffConfigResponse":
        return cls(
            breakfast_cutoff=c.breakfast_cutoff,
            lunch_cutoff=c.lunch_cutoff,
            dinner_cutoff=c.dinner_cutoff,
            timezone=c.timezone,
        )


class ActivityResponse(BaseModel):
    id: int
    actor_id: str | None
    action: str
    details: dict[str, Any]
    created_at: datetime | None

    @classmethod
    def from_domain(cls, e: ActivityEntry) -> "ActivityResponse":
        return cls(
            id=e.id,
            actor_id=e.actor_id,
            action=e.action,
            details=e.details,
            created_at=e.created_at,
        )
