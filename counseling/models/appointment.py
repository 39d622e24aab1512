from datetime import date, datetime
from enum import Enum

from pydantic import EmailStr, model_validator
from sqlalchemy import JSON, Index, text
from sqlmodel import Field, SQLModel

from counseling.models.base import TimeOfDay, utc_naive_now


class ConsultationType(str, Enum):
    regular = "regular"
    welfare = "welfare"


class ConsultationMode(str, Enum):
    online = "online"
    offline = "offline"


class AppointmentStatus(str, Enum):
    pending = "pending"
    pending_payment = "pending_payment"
    confirmed = "confirmed"
    cancelled = "cancelled"
    completed = "completed"


class Gender(str, Enum):
    male = "male"
    female = "female"
    other = "other"


# Statuses that hold a slot
ACTIVE_STATUSES = (
    AppointmentStatus.pending,
    AppointmentStatus.pending_payment,
    AppointmentStatus.confirmed,
)

_ACTIVE_SLOT_WHERE = text("status IN ('pending', 'pending_payment', 'confirmed')")


class AppointmentBase(SQLModel):
    # Scheduling
    appointment_date: date = Field(index=True)
    appointment_time: str = Field(max_length=5)  # "HH:MM"
    consultation_type: ConsultationType
    consultation_mode: ConsultationMode

    # Personal info
    name: str
    gender: Gender
    birth_date: date
    occupation: str | None = None
    hobbies: str | None = None

    # Contact info
    contact_phone: str
    contact_email: str = Field(index=True)
    emergency_contact: str | None = None

    # Counseling history
    has_previous_counseling: bool = False
    previous_counseling_details: str | None = None
    has_mental_diagnosis: bool = False
    mental_diagnosis_details: str | None = None
    current_medication: str | None = None

    # Consultation focus
    consultation_topics: list[str] | None = Field(default=None, sa_type=JSON)
    situation_description: str

    # Agreements
    data_collection_consent: bool = False
    confidentiality_consent: bool = False

    # Storage key of the uploaded welfare eligibility proof
    welfare_proof_file: str | None = None


class Appointment(AppointmentBase, table=True):
    __tablename__ = "appointments"
    # One active booking per (date, time); cancelled/completed rows don't count
    __table_args__ = (
        Index(
            "uq_appointments_active_slot",
            "appointment_date",
            "appointment_time",
            unique=True,
            postgresql_where=_ACTIVE_SLOT_WHERE,
            sqlite_where=_ACTIVE_SLOT_WHERE,
        ),
    )
    id: int | None = Field(default=None, primary_key=True)
    status: AppointmentStatus = Field(default=AppointmentStatus.pending, index=True)
    created_at: datetime = Field(default_factory=utc_naive_now)
    updated_at: datetime = Field(default_factory=utc_naive_now)


class AppointmentCreate(AppointmentBase):
    appointment_time: TimeOfDay
    contact_email: EmailStr

    @model_validator(mode="after")
    def _check_intake(self) -> "AppointmentCreate":
        if not (self.data_collection_consent and self.confidentiality_consent):
            raise ValueError("both consent agreements must be accepted")
        if self.consultation_type == ConsultationType.welfare and not self.welfare_proof_file:
            raise ValueError("welfare consultations require a proof document")
        return self


class AppointmentPublic(AppointmentBase):
    id: int
    status: AppointmentStatus
    created_at: datetime
    updated_at: datetime
