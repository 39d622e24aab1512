from __future__ import annotations

from datetime import date, datetime

import pytest
from sqlalchemy.exc import IntegrityError

from conftest import add_rule, intake_payload, with_session
from counseling.models.appointment import Appointment, AppointmentCreate, AppointmentStatus
from counseling.services import appointment_service
from counseling.services.availability import ConflictReason, get_booked_times

MONDAY = date(2030, 1, 7)


def _create(**overrides) -> Appointment | ConflictReason:
    data = AppointmentCreate.model_validate(intake_payload(**overrides))
    return with_session(lambda s: appointment_service.create_appointment(s, data))


def _reload(appointment_id: int) -> Appointment:
    return with_session(lambda s: appointment_service.get_appointment(s, appointment_id))


def test_create_then_same_slot_is_taken_regardless_of_mode() -> None:
    add_rule(0, "10:00")

    first = _create()
    assert isinstance(first, Appointment)
    assert first.status == AppointmentStatus.pending

    assert _create(consultation_mode="online") == ConflictReason.slot_taken
    assert _create(consultation_mode="offline", contact_email="c@x.com") == ConflictReason.slot_taken


def test_create_refuses_unsupported_mode() -> None:
    add_rule(0, "10:00", online=True, offline=False)
    assert _create(consultation_mode="offline") == ConflictReason.mode_not_supported


def test_create_accepts_time_with_seconds() -> None:
    add_rule(0, "10:00")
    created = _create(appointment_time="10:00:00")
    assert isinstance(created, Appointment)
    assert created.appointment_time == "10:00"


def test_intake_requires_consents_and_welfare_proof() -> None:
    with pytest.raises(ValueError):
        AppointmentCreate.model_validate(intake_payload(confidentiality_consent=False))
    with pytest.raises(ValueError):
        AppointmentCreate.model_validate(intake_payload(consultation_type="welfare"))
    ok = AppointmentCreate.model_validate(
        intake_payload(consultation_type="welfare", welfare_proof_file="/objects/uploads/abc")
    )
    assert ok.welfare_proof_file == "/objects/uploads/abc"


def test_modify_moves_booking_and_frees_old_slot() -> None:
    add_rule(0, "10:00")
    add_rule(0, "11:00")
    booked = _create()

    moved = with_session(
        lambda s: appointment_service.apply_modification(
            s, booked, MONDAY, "11:00", now=datetime(2030, 1, 1, 12, 0)
        )
    )

    assert isinstance(moved, Appointment)
    assert moved.appointment_time == "11:00"
    assert moved.updated_at >= booked.created_at
    assert with_session(lambda s: get_booked_times(s, MONDAY)) == {"11:00"}


def test_modify_to_same_slot_is_noop() -> None:
    add_rule(0, "10:00")
    booked = _create()
    before = booked.updated_at

    result = with_session(
        lambda s: appointment_service.apply_modification(s, booked, MONDAY, "10:00", now=datetime(2030, 1, 1))
    )

    assert isinstance(result, Appointment)
    assert _reload(booked.id).updated_at == before


def test_modify_into_taken_slot_fails() -> None:
    add_rule(0, "10:00")
    add_rule(0, "11:00")
    booked = _create()
    _create(appointment_time="11:00", contact_email="c@x.com")

    result = with_session(
        lambda s: appointment_service.apply_modification(s, booked, None, "11:00", now=datetime(2030, 1, 1))
    )

    assert result == ConflictReason.slot_taken
    assert _reload(booked.id).appointment_time == "10:00"


def test_modify_after_deadline_fails_for_client_but_not_admin() -> None:
    add_rule(0, "10:00")
    add_rule(0, "11:00")
    booked = _create()
    late = datetime(2030, 1, 6, 22, 0, 1)

    refused = with_session(
        lambda s: appointment_service.apply_modification(s, booked, None, "11:00", now=late)
    )
    assert refused == ConflictReason.deadline_passed

    allowed = with_session(
        lambda s: appointment_service.apply_modification(s, booked, None, "11:00", is_admin=True, now=late)
    )
    assert isinstance(allowed, Appointment)


def test_cancel_respects_deadline_and_releases_slot() -> None:
    add_rule(0, "10:00")
    booked = _create()

    assert (
        with_session(
            lambda s: appointment_service.cancel_appointment(s, booked, now=datetime(2030, 1, 7, 8, 0))
        )
        == ConflictReason.deadline_passed
    )

    cancelled = with_session(
        lambda s: appointment_service.cancel_appointment(s, booked, now=datetime(2030, 1, 6, 21, 0))
    )
    assert cancelled.status == AppointmentStatus.cancelled
    assert with_session(lambda s: get_booked_times(s, MONDAY)) == set()
    assert isinstance(_create(contact_email="c@x.com"), Appointment)


def test_admin_cannot_reactivate_into_taken_slot() -> None:
    add_rule(0, "10:00")
    first = _create()
    with_session(lambda s: appointment_service.cancel_appointment(s, first, is_admin=True))
    _create(contact_email="c@x.com")

    result = with_session(
        lambda s: appointment_service.update_appointment_status(s, first, AppointmentStatus.confirmed)
    )
    assert result == ConflictReason.slot_taken

    completed = with_session(
        lambda s: appointment_service.update_appointment_status(s, first, AppointmentStatus.completed)
    )
    assert completed.status == AppointmentStatus.completed


def test_active_slot_index_rejects_second_active_booking() -> None:
    add_rule(0, "10:00")
    first = _create()
    data = AppointmentCreate.model_validate(intake_payload(contact_email="c@x.com"))

    async def _insert_without_check(session):
        session.add(Appointment.model_validate(data))
        await session.flush()

    with pytest.raises(IntegrityError):
        with_session(_insert_without_check)

    # A cancelled row in the same slot is fine
    async def _insert_cancelled(session):
        row = Appointment.model_validate(data)
        row.status = AppointmentStatus.cancelled
        session.add(row)
        await session.flush()
        return row

    assert with_session(_insert_cancelled).id != first.id


def test_authorize_owner() -> None:
    appointment = Appointment.model_validate(
        AppointmentCreate.model_validate(intake_payload(contact_email="b@x.com"))
    )
    assert appointment_service.authorize_owner(appointment, "a@x.com", False) == ConflictReason.unauthorized
    assert appointment_service.authorize_owner(appointment, None, False) == ConflictReason.unauthorized
    assert appointment_service.authorize_owner(appointment, " B@x.com ", False) is None
    assert appointment_service.authorize_owner(appointment, "a@x.com", True) is None


def test_list_by_email_newest_date_first() -> None:
    add_rule(0, "10:00")
    add_rule(1, "10:00")
    _create()
    _create(appointment_date="2030-01-08")
    _create(contact_email="other@x.com", appointment_date="2030-01-14")

    rows = with_session(lambda s: appointment_service.list_appointments_by_email(s, "b@x.com"))

    assert [r.appointment_date for r in rows] == [date(2030, 1, 8), date(2030, 1, 7)]


async def _slot_looks_free(*args, **kwargs) -> None:
    return None


def test_lost_race_on_create_is_slot_taken(monkeypatch) -> None:
    add_rule(0, "10:00")
    first = _create()
    monkeypatch.setattr(appointment_service, "check_slot", _slot_looks_free)

    assert _create(contact_email="c@x.com") == ConflictReason.slot_taken
    rows = with_session(lambda s: appointment_service.list_appointments(s))
    assert [r.id for r in rows] == [first.id]


def test_lost_race_on_modify_is_slot_taken(monkeypatch) -> None:
    add_rule(0, "10:00")
    add_rule(0, "11:00")
    booked = _create()
    _create(appointment_time="11:00", contact_email="c@x.com")
    monkeypatch.setattr(appointment_service, "check_slot", _slot_looks_free)

    async def _move(session):
        row = await appointment_service.get_appointment(session, booked.id)
        return await appointment_service.apply_modification(
            session, row, None, "11:00", now=datetime(2030, 1, 1)
        )

    assert with_session(_move) == ConflictReason.slot_taken
    assert _reload(booked.id).appointment_time == "10:00"


def test_lost_race_on_reactivation_is_slot_taken(monkeypatch) -> None:
    add_rule(0, "10:00")
    first = _create()
    with_session(lambda s: appointment_service.cancel_appointment(s, first, is_admin=True))
    _create(contact_email="c@x.com")
    monkeypatch.setattr(appointment_service, "check_slot", _slot_looks_free)

    async def _reactivate(session):
        row = await appointment_service.get_appointment(session, first.id)
        return await appointment_service.update_appointment_status(session, row, AppointmentStatus.confirmed)

    assert with_session(_reactivate) == ConflictReason.slot_taken
    assert _reload(first.id).status == AppointmentStatus.cancelled


def test_timestamps_are_stored_naive() -> None:
    add_rule(0, "10:00")
    booked = _create()
    reloaded = _reload(booked.id)
    assert reloaded.created_at.tzinfo is None
    assert reloaded.updated_at.tzinfo is None
