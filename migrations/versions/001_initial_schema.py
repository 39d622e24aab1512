"""Initial schema: schedule rules, blocked dates, appointments, announcements, conversations.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

consultation_type = sa.Enum("regular", "welfare", name="consultationtype")
consultation_mode = sa.Enum("online", "offline", name="consultationmode")
appointment_status = sa.Enum(
    "pending", "pending_payment", "confirmed", "cancelled", "completed", name="appointmentstatus"
)
gender = sa.Enum("male", "female", "other", name="gender")

ACTIVE_SLOT_WHERE = sa.text("status IN ('pending', 'pending_payment', 'confirmed')")


def upgrade() -> None:
    op.create_table(
        "schedule_slot_rules",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("weekday", sa.Integer(), nullable=False),
        sa.Column("time_of_day", sa.String(length=5), nullable=False),
        sa.Column("online_allowed", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("offline_allowed", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("active", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("weekday", "time_of_day", name="uq_schedule_slot_rules_weekday_time"),
    )
    op.create_index(op.f("ix_schedule_slot_rules_weekday"), "schedule_slot_rules", ["weekday"], unique=False)

    op.create_table(
        "blocked_dates",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("calendar_date", sa.Date(), nullable=False),
        sa.Column("reason", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_blocked_dates_calendar_date"), "blocked_dates", ["calendar_date"], unique=True)

    op.create_table(
        "appointments",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("appointment_date", sa.Date(), nullable=False),
        sa.Column("appointment_time", sa.String(length=5), nullable=False),
        sa.Column("consultation_type", consultation_type, nullable=False),
        sa.Column("consultation_mode", consultation_mode, nullable=False),
        sa.Column("status", appointment_status, nullable=False, server_default="pending"),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("gender", gender, nullable=False),
        sa.Column("birth_date", sa.Date(), nullable=False),
        sa.Column("occupation", sa.String(), nullable=True),
        sa.Column("hobbies", sa.String(), nullable=True),
        sa.Column("contact_phone", sa.String(), nullable=False),
        sa.Column("contact_email", sa.String(), nullable=False),
        sa.Column("emergency_contact", sa.String(), nullable=True),
        sa.Column("has_previous_counseling", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("previous_counseling_details", sa.String(), nullable=True),
        sa.Column("has_mental_diagnosis", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("mental_diagnosis_details", sa.String(), nullable=True),
        sa.Column("current_medication", sa.String(), nullable=True),
        sa.Column("consultation_topics", sa.JSON(), nullable=True),
        sa.Column("situation_description", sa.String(), nullable=False),
        sa.Column("data_collection_consent", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("confidentiality_consent", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("welfare_proof_file", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_appointments_appointment_date"), "appointments", ["appointment_date"], unique=False)
    op.create_index(op.f("ix_appointments_contact_email"), "appointments", ["contact_email"], unique=False)
    op.create_index(op.f("ix_appointments_status"), "appointments", ["status"], unique=False)
    # Closes the check-then-insert race: one active booking per (date, time)
    op.create_index(
        "uq_appointments_active_slot",
        "appointments",
        ["appointment_date", "appointment_time"],
        unique=True,
        postgresql_where=ACTIVE_SLOT_WHERE,
        sqlite_where=ACTIVE_SLOT_WHERE,
    )

    op.create_table(
        "announcements",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("content", sa.String(), nullable=False),
        sa.Column("is_pinned", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "conversations",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("visitor_name", sa.String(), nullable=False),
        sa.Column("visitor_email", sa.String(), nullable=False),
        sa.Column("subject", sa.String(), nullable=True),
        sa.Column("is_resolved", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_conversations_visitor_email"), "conversations", ["visitor_email"], unique=True)

    op.create_table(
        "messages",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("conversation_id", sa.Integer(), nullable=False),
        sa.Column("sender_name", sa.String(), nullable=False),
        sa.Column("sender_email", sa.String(), nullable=True),
        sa.Column("content", sa.String(), nullable=False),
        sa.Column("is_from_admin", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["conversation_id"], ["conversations.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_messages_conversation_id"), "messages", ["conversation_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_messages_conversation_id"), table_name="messages")
    op.drop_table("messages")
    op.drop_index(op.f("ix_conversations_visitor_email"), table_name="conversations")
    op.drop_table("conversations")
    op.drop_table("announcements")
    op.drop_index("uq_appointments_active_slot", table_name="appointments")
    op.drop_index(op.f("ix_appointments_status"), table_name="appointments")
    op.drop_index(op.f("ix_appointments_contact_email"), table_name="appointments")
    op.drop_index(op.f("ix_appointments_appointment_date"), table_name="appointments")
    op.drop_table("appointments")
    op.drop_index(op.f("ix_blocked_dates_calendar_date"), table_name="blocked_dates")
    op.drop_table("blocked_dates")
    op.drop_index(op.f("ix_schedule_slot_rules_weekday"), table_name="schedule_slot_rules")
    op.drop_table("schedule_slot_rules")
    for enum_type in (gender, appointment_status, consultation_mode, consultation_type):
        enum_type.drop(op.get_bind(), checkfirst=True)
