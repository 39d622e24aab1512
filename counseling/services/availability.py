"""
Slot availability and booking conflict rules.

A slot is a (weekday, "HH:MM") ScheduleSlotRule instantiated on a calendar date.
A date/time is bookable for a consultation mode when the date is not blocked, an
active rule exists for that weekday and time, the rule allows the mode, and no
other appointment holding the slot (pending, pending_payment, confirmed) exists.

Client-initiated changes and cancellations are accepted up to 22:00 local time
on the day before the appointment (inclusive).
"""
import logging
from collections.abc import Iterable
from datetime import date, datetime, time, timedelta
from enum import Enum
from zoneinfo import ZoneInfo

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from counseling.core.config import settings
from counseling.models.appointment import ACTIVE_STATUSES, Appointment, ConsultationMode
from counseling.models.schedule import (
    BlockedDate,
    DayAvailability,
    ScheduleSlotRule,
    SlotAvailability,
)

logger = logging.getLogger(__name__)


class ConflictReason(str, Enum):
    date_blocked = "date_blocked"
    slot_not_configured = "slot_not_configured"
    mode_not_supported = "mode_not_supported"
    slot_taken = "slot_taken"
    deadline_passed = "deadline_passed"
    unauthorized = "unauthorized"


def local_now() -> datetime:
    """Current wall-clock time in the booking timezone, naive."""
    return datetime.now(ZoneInfo(settings.timezone)).replace(tzinfo=None)


def _to_local_naive(dt: datetime) -> datetime:
    if dt.tzinfo is not None:
        return dt.astimezone(ZoneInfo(settings.timezone)).replace(tzinfo=None)
    return dt


def modification_deadline(appointment_date: date) -> datetime:
    """22:00 (local, naive) on the day before the appointment."""
    previous_day = appointment_date - timedelta(days=1)
    return datetime.combine(previous_day, time(settings.modification_cutoff_hour, 0))


def can_modify_or_cancel(appointment_date: date, now: datetime | None = None) -> bool:
    if now is None:
        now = local_now()
    return _to_local_naive(now) <= modification_deadline(appointment_date)


def mode_allowed(rule: ScheduleSlotRule, mode: ConsultationMode | None) -> bool:
    if mode == ConsultationMode.online:
        return rule.online_allowed
    if mode == ConsultationMode.offline:
        return rule.offline_allowed
    return rule.online_allowed or rule.offline_allowed


def build_slot_availability(
    rules: Iterable[ScheduleSlotRule],
    booked_times: set[str],
    mode: ConsultationMode | None = None,
) -> list[SlotAvailability]:
    """Filter rules by mode and mark occupied slots. Rules are expected sorted by time."""
    out: list[SlotAvailability] = []
    for rule in rules:
        if not mode_allowed(rule, mode):
            continue
        booked = rule.time_of_day in booked_times
        out.append(
            SlotAvailability(
                time=rule.time_of_day,
                online_available=rule.online_allowed and not booked,
                offline_available=rule.offline_allowed and not booked,
                is_booked=booked,
            )
        )
    return out


async def is_date_bookable(session: AsyncSession, d: date) -> bool:
    result = await session.execute(
        select(BlockedDate.id).where(BlockedDate.calendar_date == d).limit(1)
    )
    return result.first() is None


async def get_active_rules_for_weekday(
    session: AsyncSession, weekday: int
) -> list[ScheduleSlotRule]:
    result = await session.execute(
        select(ScheduleSlotRule)
        .where(
            ScheduleSlotRule.weekday == weekday,
            ScheduleSlotRule.active == True,  # noqa: E712
        )
        .order_by(ScheduleSlotRule.time_of_day, ScheduleSlotRule.id)
    )
    return list(result.scalars().all())


async def get_active_rule(
    session: AsyncSession, weekday: int, time_of_day: str
) -> ScheduleSlotRule | None:
    result = await session.execute(
        select(ScheduleSlotRule).where(
            ScheduleSlotRule.weekday == weekday,
            ScheduleSlotRule.time_of_day == time_of_day,
            ScheduleSlotRule.active == True,  # noqa: E712
        )
    )
    return result.scalars().first()


async def get_booked_times(
    session: AsyncSession, d: date, exclude_appointment_id: int | None = None
) -> set[str]:
    """Times on `d` held by an appointment in an active status."""
    q = select(Appointment.appointment_time).where(
        Appointment.appointment_date == d,
        Appointment.status.in_(ACTIVE_STATUSES),
    )
    if exclude_appointment_id is not None:
        q = q.where(Appointment.id != exclude_appointment_id)
    result = await session.execute(q)
    return {row[0] for row in result.all()}


async def slots_for_date(
    session: AsyncSession, d: date, mode: ConsultationMode | None = None
) -> DayAvailability:
    if not await is_date_bookable(session, d):
        return DayAvailability(date=d.isoformat(), is_blocked=True, slots=[])
    rules = await get_active_rules_for_weekday(session, d.weekday())
    booked = await get_booked_times(session, d)
    return DayAvailability(
        date=d.isoformat(),
        is_blocked=False,
        slots=build_slot_availability(rules, booked, mode),
    )


async def check_slot(
    session: AsyncSession,
    d: date,
    time_of_day: str,
    mode: ConsultationMode,
    exclude_appointment_id: int | None = None,
) -> ConflictReason | None:
    """Returns the first reason (d, time_of_day) can't be booked for `mode`, or None.

    Read only. `exclude_appointment_id` is the appointment being moved, so it does
    not conflict with itself.
    """
    if not await is_date_bookable(session, d):
        return ConflictReason.date_blocked
    rule = await get_active_rule(session, d.weekday(), time_of_day)
    if rule is None:
        return ConflictReason.slot_not_configured
    if not mode_allowed(rule, mode):
        return ConflictReason.mode_not_supported
    booked = await get_booked_times(session, d, exclude_appointment_id=exclude_appointment_id)
    if time_of_day in booked:
        return ConflictReason.slot_taken
    return None
