from datetime import date

from pydantic import BaseModel, field_validator

from counseling.models.appointment import AppointmentStatus
from counseling.models.base import normalize_time


class ModifyAppointmentRequest(BaseModel):
    verify_email: str | None = None
    appointment_date: date | None = None
    appointment_time: str | None = None

    @field_validator("appointment_time")
    @classmethod
    def _normalize(cls, v: str | None) -> str | None:
        return normalize_time(v) if v is not None else None


class CancelAppointmentRequest(BaseModel):
    verify_email: str | None = None


class AppointmentStatusRequest(BaseModel):
    status: AppointmentStatus


class BookedSlotsResponse(BaseModel):
    date: str  # YYYY-MM-DD
    booked_slots: list[str]
