from datetime import date, datetime

from pydantic import field_validator
from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from counseling.models.base import TimeOfDay, normalize_time, utc_naive_now


class ScheduleSlotRuleBase(SQLModel):
    weekday: int = Field(ge=0, le=6, index=True)  # date.weekday(): 0 = Monday
    time_of_day: str = Field(max_length=5)  # "HH:MM"
    online_allowed: bool = True
    offline_allowed: bool = True
    active: bool = True


class ScheduleSlotRule(ScheduleSlotRuleBase, table=True):
    __tablename__ = "schedule_slot_rules"
    __table_args__ = (
        UniqueConstraint("weekday", "time_of_day", name="uq_schedule_slot_rules_weekday_time"),
    )
    id: int | None = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=utc_naive_now)
    updated_at: datetime = Field(default_factory=utc_naive_now)


class ScheduleSlotRuleCreate(ScheduleSlotRuleBase):
    time_of_day: TimeOfDay


class ScheduleSlotRuleUpdate(SQLModel):
    online_allowed: bool | None = None
    offline_allowed: bool | None = None
    active: bool | None = None
    time_of_day: str | None = None

    @field_validator("time_of_day")
    @classmethod
    def _normalize(cls, v: str | None) -> str | None:
        return normalize_time(v) if v is not None else None


class ScheduleSlotRulePublic(ScheduleSlotRuleBase):
    id: int
    created_at: datetime
    updated_at: datetime


class BlockedDateBase(SQLModel):
    calendar_date: date = Field(unique=True, index=True)
    reason: str | None = None


class BlockedDate(BlockedDateBase, table=True):
    __tablename__ = "blocked_dates"
    id: int | None = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=utc_naive_now)


class BlockedDateCreate(BlockedDateBase):
    pass


class BlockedDatePublic(BlockedDateBase):
    id: int
    created_at: datetime


class SlotAvailability(SQLModel):
    time: str
    online_available: bool
    offline_available: bool
    is_booked: bool


class DayAvailability(SQLModel):
    date: str  # YYYY-MM-DD
    is_blocked: bool
    slots: list[SlotAvailability] = []
