import logging
from datetime import date

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from counseling.api.deps import get_is_admin, get_session, require_admin
from counseling.api.errors import conflict_exception
from counseling.api.schemas.appointment import (
    AppointmentStatusRequest,
    BookedSlotsResponse,
    CancelAppointmentRequest,
    ModifyAppointmentRequest,
)
from counseling.core.config import settings
from counseling.models.appointment import Appointment, AppointmentCreate, AppointmentPublic
from counseling.services import appointment_service
from counseling.services.availability import ConflictReason, get_booked_times
from counseling.services.email_service import (
    send_booking_received_email,
    send_counselor_booking_notification,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/appointments", tags=["appointments"])


async def _load(session: AsyncSession, appointment_id: int) -> Appointment:
    appointment = await appointment_service.get_appointment(session, appointment_id)
    if not appointment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Appointment not found")
    return appointment


@router.get("", response_model=list[AppointmentPublic], dependencies=[Depends(require_admin)])
async def list_appointments(
    session: AsyncSession = Depends(get_session),
) -> list[AppointmentPublic]:
    return await appointment_service.list_appointments(session)


@router.post("", response_model=AppointmentPublic, status_code=status.HTTP_201_CREATED)
async def book_appointment(
    body: AppointmentCreate,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_session),
) -> AppointmentPublic:
    result = await appointment_service.create_appointment(session, body)
    if isinstance(result, ConflictReason):
        raise conflict_exception(result)
    background_tasks.add_task(
        send_booking_received_email,
        to_email=result.contact_email,
        recipient_name=result.name,
        appointment_date=result.appointment_date,
        appointment_time=result.appointment_time,
        consultation_type=result.consultation_type.value,
        consultation_mode=result.consultation_mode.value,
    )
    if settings.counselor_email:
        background_tasks.add_task(
            send_counselor_booking_notification,
            counselor_email=settings.counselor_email,
            visitor_name=result.name,
            visitor_email=result.contact_email,
            appointment_date=result.appointment_date,
            appointment_time=result.appointment_time,
            consultation_mode=result.consultation_mode.value,
        )
    return result


@router.get("/by-email/{email}", response_model=list[AppointmentPublic])
async def list_appointments_by_email(
    email: str,
    session: AsyncSession = Depends(get_session),
) -> list[AppointmentPublic]:
    """Visitor history lookup."""
    return await appointment_service.list_appointments_by_email(session, email)


@router.get("/slots/{date_param}", response_model=BookedSlotsResponse)
async def booked_slots(
    date_param: date,
    session: AsyncSession = Depends(get_session),
) -> BookedSlotsResponse:
    booked = await get_booked_times(session, date_param)
    return BookedSlotsResponse(date=date_param.isoformat(), booked_slots=sorted(booked))


@router.get("/{appointment_id}", response_model=AppointmentPublic, dependencies=[Depends(require_admin)])
async def get_appointment(
    appointment_id: int,
    session: AsyncSession = Depends(get_session),
) -> AppointmentPublic:
    return await _load(session, appointment_id)


@router.patch("/{appointment_id}", response_model=AppointmentPublic)
async def modify_appointment(
    appointment_id: int,
    body: ModifyAppointmentRequest,
    session: AsyncSession = Depends(get_session),
    is_admin: bool = Depends(get_is_admin),
) -> AppointmentPublic:
    """Change date and/or time. Visitors must verify the booking email."""
    appointment = await _load(session, appointment_id)
    denied = appointment_service.authorize_owner(appointment, body.verify_email, is_admin)
    if denied:
        raise conflict_exception(denied)
    result = await appointment_service.apply_modification(
        session,
        appointment,
        body.appointment_date,
        body.appointment_time,
        is_admin=is_admin,
    )
    if isinstance(result, ConflictReason):
        raise conflict_exception(result)
    return result


@router.post("/{appointment_id}/cancel", response_model=AppointmentPublic)
async def cancel_appointment(
    appointment_id: int,
    body: CancelAppointmentRequest,
    session: AsyncSession = Depends(get_session),
    is_admin: bool = Depends(get_is_admin),
) -> AppointmentPublic:
    appointment = await _load(session, appointment_id)
    denied = appointment_service.authorize_owner(appointment, body.verify_email, is_admin)
    if denied:
        raise conflict_exception(denied)
    result = await appointment_service.cancel_appointment(session, appointment, is_admin=is_admin)
    if isinstance(result, ConflictReason):
        raise conflict_exception(result)
    return result


@router.patch(
    "/{appointment_id}/status",
    response_model=AppointmentPublic,
    dependencies=[Depends(require_admin)],
)
async def update_status(
    appointment_id: int,
    body: AppointmentStatusRequest,
    session: AsyncSession = Depends(get_session),
) -> AppointmentPublic:
    appointment = await _load(session, appointment_id)
    result = await appointment_service.update_appointment_status(session, appointment, body.status)
    if isinstance(result, ConflictReason):
        raise conflict_exception(result)
    return result
