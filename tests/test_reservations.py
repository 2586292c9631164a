from datetime import date, datetime, time
from zoneinfo import ZoneInfo

import pytest
from fastapi import HTTPException

from app.api.catalog.repositories.repo_setting import SettingRepository
from app.api.reservations.core.reservation_status import ReservationStatus, can_transition, is_past_grace
from app.api.reservations.core.slots import generate_time_slots, parse_slot_label, slot_end
from app.api.reservations.schemas.schema_reservation import CreateReservationRequest
from app.api.reservations.services.service_reservation import (
    FULLY_BOOKED,
    RESERVATION_SETTINGS_KEY,
    ReservationService,
)

NOON = datetime(2026, 10, 17, 12, 0, tzinfo=ZoneInfo("Asia/Manila"))
TOMORROW = date(2026, 10, 18)


def test_generate_time_slots():
    slots = generate_time_slots(time(11, 0), time(13, 0), 30)
    assert slots == ["11:00 AM", "11:30 AM", "12:00 PM", "12:30 PM"]


def test_generate_time_slots_rejects_bad_duration():
    with pytest.raises(ValueError):
        generate_time_slots(time(11, 0), time(13, 0), 0)


@pytest.mark.parametrize(
    "label, expected",
    [("1:30 PM", time(13, 30)), ("12:00 AM", time(0, 0)), ("12:15 pm", time(12, 15)), ("18:45", time(18, 45)), ("13:00 PM", None)],
)
def test_parse_slot_label(label, expected):
    assert parse_slot_label(label) == expected


def test_slot_end_is_capped_at_midnight():
    assert slot_end(time(18, 30), 30) == time(19, 0)
    assert slot_end(time(23, 45), 30) == time.max


def booking(**overrides):
    data = dict(
        name="Ana Santos",
        phone="09171234567",
        email="ana@example.com",
        pax=4,
        reservation_date=TOMORROW,
        reservation_time="6:30 PM",
    )
    data.update(overrides)
    return CreateReservationRequest(**data)


def small_venue(db, capacity=10):
    SettingRepository(db).set_value(RESERVATION_SETTINGS_KEY, {"max_pax_per_slot": capacity})


def test_create_reservation(db):
    service = ReservationService(db, clock=lambda: NOON)
    created = service.create_reservation(booking())
    assert not created.is_duplicate
    assert created.reservation_code.startswith("ARW-RSV-")

    reservation = service.get_by_code(created.reservation_code.lower())
    assert reservation.reservation_time == time(18, 30)
    assert reservation.phone == "639171234567"
    assert reservation.customer_id is not None


def test_double_submit_returns_first_booking(db):
    service = ReservationService(db, clock=lambda: NOON)
    first = service.create_reservation(booking(idempotency_key="form-1"))
    again = service.create_reservation(booking(idempotency_key="form-1", phone="+63 917 123 4567"))
    assert again.is_duplicate
    assert again.reservation_code == first.reservation_code


def test_full_slot_conflicts(db):
    small_venue(db, capacity=10)
    service = ReservationService(db, clock=lambda: NOON)
    service.create_reservation(booking(pax=6))
    service.create_reservation(booking(pax=4, name="Ben"))
    with pytest.raises(HTTPException) as exc:
        service.create_reservation(booking(pax=1, name="Cara"))
    assert exc.value.status_code == 409
    assert exc.value.detail == FULLY_BOOKED


def test_available_slots_show_remaining_seats(db):
    small_venue(db, capacity=10)
    service = ReservationService(db, clock=lambda: NOON)
    service.create_reservation(booking(pax=6))

    slots = {s.time: s for s in service.available_slots(TOMORROW).slots}
    assert slots["11:00 AM"].remaining == 10
    assert slots["6:30 PM"].remaining == 4
    assert slots["6:30 PM"].available
    assert "9:00 PM" not in slots


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"phone": "1234"}, "Please enter a valid Philippine phone number"),
        ({"email": "not-an-email"}, "Please enter a valid email address"),
        ({"reservation_date": date(2026, 10, 16)}, "Please select a date within the next 30 days"),
        ({"reservation_date": date(2026, 12, 31)}, "Please select a date within the next 30 days"),
        ({"reservation_time": "10:30 AM"}, "Please select a valid time"),
        ({"reservation_time": "9:00 PM"}, "Please select a valid time"),
    ],
)
def test_invalid_booking(db, overrides, message):
    with pytest.raises(HTTPException) as exc:
        ReservationService(db, clock=lambda: NOON).create_reservation(booking(**overrides))
    assert exc.value.status_code == 400
    assert exc.value.detail == message


def test_unknown_code(db):
    with pytest.raises(HTTPException) as exc:
        ReservationService(db).get_by_code("ARW-RSV-0000")
    assert exc.value.status_code == 404


@pytest.mark.parametrize(
    "current, target, allowed",
    [
        ("pending", "confirmed", True),
        ("pending", "cancelled", True),
        ("confirmed", "completed", True),
        ("confirmed", "no_show", True),
        ("pending", "completed", False),
        ("pending", "no_show", False),
        ("no_show", "confirmed", False),
        ("cancelled", "pending", False),
    ],
)
def test_reservation_can_transition(current, target, allowed):
    assert can_transition(current, target) is allowed


def test_is_past_grace():
    assert not is_past_grace(TOMORROW, time(18, 30), datetime(2026, 10, 18, 19, 0, tzinfo=NOON.tzinfo), 30)
    assert is_past_grace(TOMORROW, time(18, 30), datetime(2026, 10, 18, 19, 1, tzinfo=NOON.tzinfo), 30)


def test_staff_confirm_then_complete(db):
    service = ReservationService(db, clock=lambda: NOON)
    created = service.create_reservation(booking())

    reservation = service.update_status(created.reservation_id, ReservationStatus.CONFIRMED, changed_by="staff-1")
    assert reservation.status == ReservationStatus.CONFIRMED
    assert reservation.status_changed_by == "staff-1"
    assert reservation.status_changed_at is not None

    reservation = service.update_status(created.reservation_id, ReservationStatus.COMPLETED)
    assert reservation.status == ReservationStatus.COMPLETED


def test_invalid_reservation_transition_conflicts(db):
    service = ReservationService(db, clock=lambda: NOON)
    created = service.create_reservation(booking())
    with pytest.raises(HTTPException) as exc:
        service.update_status(created.reservation_id, ReservationStatus.COMPLETED)
    assert exc.value.status_code == 409
    assert exc.value.detail == "Cannot change reservation status from pending to completed"


def test_update_unknown_reservation(db):
    with pytest.raises(HTTPException) as exc:
        ReservationService(db).update_status(404, ReservationStatus.CONFIRMED)
    assert exc.value.status_code == 404


def test_no_shows_only_close_confirmed_bookings_past_grace(db):
    service = ReservationService(db, clock=lambda: NOON)
    late = service.create_reservation(booking(name="Ana", reservation_time="6:00 PM"))
    on_time = service.create_reservation(booking(name="Ben", reservation_time="6:45 PM"))
    unconfirmed = service.create_reservation(booking(name="Cara", reservation_time="6:00 PM"))
    for created in (late, on_time):
        service.update_status(created.reservation_id, ReservationStatus.CONFIRMED)

    result = service.process_no_shows(now=datetime(2026, 10, 18, 18, 31, tzinfo=NOON.tzinfo))
    assert result.processed == 1
    assert result.reservation_codes == [late.reservation_code]

    assert service.get_by_code(late.reservation_code).status == ReservationStatus.NO_SHOW
    assert service.get_by_code(late.reservation_code).status_changed_by == "system_no_show_job"
    assert service.get_by_code(on_time.reservation_code).status == ReservationStatus.CONFIRMED
    assert service.get_by_code(unconfirmed.reservation_code).status == ReservationStatus.PENDING


def test_no_show_grace_comes_from_settings(db):
    SettingRepository(db).set_value(RESERVATION_SETTINGS_KEY, {"no_show_grace_minutes": 60})
    service = ReservationService(db, clock=lambda: NOON)
    created = service.create_reservation(booking(reservation_time="6:00 PM"))
    service.update_status(created.reservation_id, ReservationStatus.CONFIRMED)

    assert service.process_no_shows(now=datetime(2026, 10, 18, 18, 45, tzinfo=NOON.tzinfo)).processed == 0
    assert service.process_no_shows(now=datetime(2026, 10, 18, 19, 1, tzinfo=NOON.tzinfo)).processed == 1
