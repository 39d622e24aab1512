import logging
from datetime import date, datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from counseling.models.appointment import (
    ACTIVE_STATUSES,
    Appointment,
    AppointmentCreate,
    AppointmentStatus,
)
from counseling.models.base import utc_naive_now
from counseling.services.availability import (
    ConflictReason,
    can_modify_or_cancel,
    check_slot,
)

logger = logging.getLogger(__name__)


def is_owner(appointment: Appointment, verify_email: str | None) -> bool:
    if not verify_email or not appointment.contact_email:
        return False
    return verify_email.strip().lower() == appointment.contact_email.strip().lower()


def authorize_owner(
    appointment: Appointment, verify_email: str | None, is_admin: bool
) -> ConflictReason | None:
    """Capability check done before any client change: owner email or admin."""
    if is_admin or is_owner(appointment, verify_email):
        return None
    return ConflictReason.unauthorized


async def _flush_slot(session: AsyncSession, appointment: Appointment) -> ConflictReason | None:
    """Flush a booking write; the active-slot unique index turns a lost race into slot_taken."""
    # Rollback expires the instance, so read what the log needs first
    slot_date, slot_time = appointment.appointment_date, appointment.appointment_time
    session.add(appointment)
    try:
        await session.flush()
    except IntegrityError:
        await session.rollback()
        logger.info("Slot %s %s taken concurrently", slot_date, slot_time)
        return ConflictReason.slot_taken
    await session.refresh(appointment)
    return None


async def create_appointment(
    session: AsyncSession, data: AppointmentCreate
) -> Appointment | ConflictReason:
    reason = await check_slot(
        session, data.appointment_date, data.appointment_time, data.consultation_mode
    )
    if reason:
        logger.info(
            "Booking refused for %s %s (%s): %s",
            data.appointment_date,
            data.appointment_time,
            data.consultation_mode.value,
            reason.value,
        )
        return reason
    appointment = Appointment.model_validate(data)
    reason = await _flush_slot(session, appointment)
    if reason:
        return reason
    logger.info("Appointment %s booked for %s %s", appointment.id, appointment.appointment_date, appointment.appointment_time)
    return appointment


async def get_appointment(session: AsyncSession, appointment_id: int) -> Appointment | None:
    return await session.get(Appointment, appointment_id)


async def list_appointments(session: AsyncSession) -> list[Appointment]:
    result = await session.execute(
        select(Appointment).order_by(Appointment.created_at.desc(), Appointment.id.desc())
    )
    return list(result.scalars().all())


async def list_appointments_by_email(session: AsyncSession, email: str) -> list[Appointment]:
    result = await session.execute(
        select(Appointment)
        .where(Appointment.contact_email == email.strip())
        .order_by(Appointment.appointment_date.desc(), Appointment.appointment_time.desc())
    )
    return list(result.scalars().all())


async def apply_modification(
    session: AsyncSession,
    appointment: Appointment,
    new_date: date | None,
    new_time: str | None,
    *,
    is_admin: bool = False,
    now: datetime | None = None,
) -> Appointment | ConflictReason:
    """Move an appointment to a new date and/or time.

    Clients are bound by the day-before deadline; admins are not. Keeping the same
    date and time is a successful no-op.
    """
    if not is_admin and not can_modify_or_cancel(appointment.appointment_date, now):
        return ConflictReason.deadline_passed
    target_date = new_date or appointment.appointment_date
    target_time = new_time or appointment.appointment_time
    if target_date == appointment.appointment_date and target_time == appointment.appointment_time:
        return appointment
    reason = await check_slot(
        session,
        target_date,
        target_time,
        appointment.consultation_mode,
        exclude_appointment_id=appointment.id,
    )
    if reason:
        return reason
    appointment.appointment_date = target_date
    appointment.appointment_time = target_time
    appointment.updated_at = utc_naive_now()
    reason = await _flush_slot(session, appointment)
    if reason:
        return reason
    logger.info("Appointment %s moved to %s %s", appointment.id, target_date, target_time)
    return appointment


async def cancel_appointment(
    session: AsyncSession,
    appointment: Appointment,
    *,
    is_admin: bool = False,
    now: datetime | None = None,
) -> Appointment | ConflictReason:
    if not is_admin and not can_modify_or_cancel(appointment.appointment_date, now):
        return ConflictReason.deadline_passed
    appointment.status = AppointmentStatus.cancelled
    appointment.updated_at = utc_naive_now()
    session.add(appointment)
    await session.flush()
    await session.refresh(appointment)
    logger.info("Appointment %s cancelled", appointment.id)
    return appointment


async def update_appointment_status(
    session: AsyncSession, appointment: Appointment, status: AppointmentStatus
) -> Appointment | ConflictReason:
    """Admin status change. Reactivating a released slot re-checks occupancy."""
    if status in ACTIVE_STATUSES and appointment.status not in ACTIVE_STATUSES:
        reason = await check_slot(
            session,
            appointment.appointment_date,
            appointment.appointment_time,
            appointment.consultation_mode,
            exclude_appointment_id=appointment.id,
        )
        if reason == ConflictReason.slot_taken:
            return reason
    appointment.status = status
    appointment.updated_at = utc_naive_now()
    reason = await _flush_slot(session, appointment)
    if reason:
        return reason
    return appointment
