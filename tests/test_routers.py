"""
Tests de los endpoints HTTP con TestClient
"""
from datetime import timedelta
from decimal import Decimal

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.database import get_db
from app.routers import bookings, courts, guest_bookings, recurring_schedules
from app.schemas.actor import Actor
from app.services import booking_service
from app.services.auth import get_current_actor

from conftest import FIXED_NOW, MONDAY, THURSDAY, TUESDAY, at


@pytest.fixture
def current_actor():
    """Actor autenticado; los tests lo cambian según el caso"""
    return {"actor": Actor(user_id=1)}


@pytest.fixture
def client(override_get_db, current_actor, monkeypatch):
    monkeypatch.setattr(booking_service, "facility_now", lambda: FIXED_NOW)

    app = FastAPI()
    app.include_router(courts.router, prefix="/courts")
    app.include_router(bookings.router, prefix="/bookings")
    app.include_router(guest_bookings.router, prefix="/guest-bookings")
    app.include_router(recurring_schedules.router, prefix="/recurring-schedules")
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_actor] = lambda: current_actor["actor"]
    return TestClient(app)


def _booking_payload(court_id, start, end, **extra):
    payload = {
        "court_id": court_id,
        "start_time": start.isoformat(),
        "end_time": end.isoformat(),
    }
    payload.update(extra)
    return payload


def test_create_court_requires_manager(client, current_actor):
    payload = {
        "name": "Court 2",
        "hourly_rate": "15.00",
        "availability": {"friday": [{"start": "08:00", "end": "22:00"}]},
    }

    response = client.post("/courts/", json=payload)
    assert response.status_code == 403

    current_actor["actor"] = Actor(user_id=100, can_manage=True)
    response = client.post("/courts/", json=payload)
    assert response.status_code == 200
    slots = response.json()["availability_slots"]
    assert [(s["weekday"], s["start_time"]) for s in slots] == [("friday", "08:00:00")]


def test_overlapping_slots_are_rejected(client, current_actor):
    current_actor["actor"] = Actor(user_id=100, can_manage=True)
    payload = {
        "name": "Court 3",
        "availability": {
            "monday": [
                {"start": "09:00", "end": "12:00"},
                {"start": "11:00", "end": "13:00"},
            ]
        },
    }

    response = client.post("/courts/", json=payload)

    assert response.status_code == 422


def test_booking_conflict_maps_to_409(client, sample_court):
    """
    Test: Los errores de dominio llegan al cliente con su código HTTP
    """
    payload = _booking_payload(sample_court.id, at(MONDAY, 10), at(MONDAY, 11))

    created = client.post("/bookings/", json=payload)
    assert created.status_code == 201
    assert created.json()["status"] == "Pending"
    assert Decimal(str(created.json()["total_price"])) == Decimal("20.00")

    conflict = client.post(
        "/bookings/",
        json=_booking_payload(sample_court.id, at(MONDAY, 10, 30), at(MONDAY, 11, 30)),
    )
    assert conflict.status_code == 409
    assert conflict.json()["detail"]["code"] == "TimeSlotConflict"

    closed = client.post(
        "/bookings/",
        json=_booking_payload(sample_court.id, at(TUESDAY, 10), at(TUESDAY, 11)),
    )
    assert closed.status_code == 400
    assert closed.json()["detail"]["code"] == "CourtUnavailable"

    missing = client.post(
        "/bookings/", json=_booking_payload(999, at(MONDAY, 10), at(MONDAY, 11))
    )
    assert missing.status_code == 404


def test_availability_endpoint(client, sample_court):
    client.post(
        "/bookings/", json=_booking_payload(sample_court.id, at(MONDAY, 10), at(MONDAY, 11))
    )

    response = client.get(
        f"/courts/{sample_court.id}/availability", params={"date": MONDAY.isoformat()}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["is_open"] is True
    assert body["weekday"] == "monday"
    assert len(body["existing_bookings"]) == 1
    assert [(w["start"], w["end"]) for w in body["free_windows"]] == [
        (at(MONDAY, 9).isoformat(), at(MONDAY, 10).isoformat()),
        (at(MONDAY, 11).isoformat(), at(MONDAY, 12).isoformat()),
    ]
    assert all(w["slot_type"] is None for w in body["free_windows"])

    thursday = client.get(
        f"/courts/{sample_court.id}/availability", params={"date": THURSDAY.isoformat()}
    ).json()
    assert [w["slot_type"] for w in thursday["free_windows"]] == ["academy"]


def test_cancel_and_payment_endpoints(client, sample_court, current_actor):
    created = client.post(
        "/bookings/", json=_booking_payload(sample_court.id, at(MONDAY, 10), at(MONDAY, 11))
    ).json()

    forbidden = client.put(
        f"/bookings/{created['id']}/payment", json={"payment_status": "Paid"}
    )
    assert forbidden.status_code == 403

    current_actor["actor"] = Actor(user_id=2)
    assert client.put(f"/bookings/{created['id']}/cancel").status_code == 403

    current_actor["actor"] = Actor(user_id=1)
    cancelled = client.put(f"/bookings/{created['id']}/cancel")
    assert cancelled.status_code == 200
    assert cancelled.json()["status"] == "Cancelled"

    again = client.put(f"/bookings/{created['id']}/cancel")
    assert again.status_code == 400
    assert again.json()["detail"]["code"] == "InvalidTransition"

    current_actor["actor"] = Actor(user_id=100, can_manage=True)
    paid = client.put(
        f"/bookings/{created['id']}/payment", json={"payment_status": "Paid"}
    )
    assert paid.status_code == 400


def test_guest_booking_flow(client, sample_court):
    payload = _booking_payload(
        sample_court.id,
        at(MONDAY, 9),
        at(MONDAY, 10),
        guest_name="Ana",
        guest_email="ana@example.com",
        guest_phone="+5491100000000",
    )

    created = client.post("/guest-bookings/", json=payload)
    assert created.status_code == 201
    reference = created.json()["booking_reference"]
    assert reference.startswith("GB-")

    assert client.get(f"/guest-bookings/{reference}").status_code == 200
    assert client.get("/guest-bookings/GB-00000000").status_code == 404

    wrong = client.put(
        f"/guest-bookings/{reference}/cancel", json={"email": "other@example.com"}
    )
    assert wrong.status_code == 403

    cancelled = client.put(
        f"/guest-bookings/{reference}/cancel", json={"email": "ana@example.com"}
    )
    assert cancelled.status_code == 200
    assert cancelled.json()["status"] == "Cancelled"


def test_recurring_schedule_endpoint_reports_rejections(client, sample_court, current_actor):
    blocked_day = MONDAY + timedelta(weeks=1)
    client.post(
        "/bookings/",
        json=_booking_payload(sample_court.id, at(blocked_day, 10), at(blocked_day, 11)),
    )

    payload = {
        "court_id": sample_court.id,
        "days_of_week": ["monday"],
        "start_time_of_day": "10:00",
        "end_time_of_day": "11:00",
        "effective_from": MONDAY.isoformat(),
        "horizon_weeks": 2,
    }
    assert client.post("/recurring-schedules/", json=payload).status_code == 403

    current_actor["actor"] = Actor(user_id=100, can_manage=True)
    response = client.post("/recurring-schedules/", json=payload)

    assert response.status_code == 201
    body = response.json()
    assert len(body["accepted"]) == 1
    assert body["accepted"][0]["status"] == "Confirmed"
    assert body["rejected"] == [
        {
            "date": blocked_day.isoformat(),
            "reason": "time_slot_conflict",
            "detail": body["rejected"][0]["detail"],
        }
    ]
    assert body["schedule"]["days_of_week"] == ["monday"]

    schedule_id = body["schedule"]["id"]
    exception = client.post(
        f"/recurring-schedules/{schedule_id}/exceptions",
        json={"date": MONDAY.isoformat(), "reason": "Tournament"},
    )
    assert exception.status_code == 200
    assert len(exception.json()["cancelled_bookings"]) == 1
    assert exception.json()["schedule"]["exceptions"][0]["reason"] == "Tournament"


def _schedule_payload(court_id, weeks):
    return {
        "court_id": court_id,
        "days_of_week": ["monday"],
        "start_time_of_day": "10:00",
        "end_time_of_day": "11:00",
        "effective_from": MONDAY.isoformat(),
        "horizon_weeks": weeks,
    }


def test_recurring_schedule_lifecycle_endpoints(client, sample_court, current_actor):
    current_actor["actor"] = Actor(user_id=100, can_manage=True)
    created = client.post(
        "/recurring-schedules/", json=_schedule_payload(sample_court.id, 1)
    ).json()
    schedule_id = created["schedule"]["id"]

    generated = client.post(
        f"/recurring-schedules/{schedule_id}/generate", json={"weeks": 2}
    )
    assert generated.status_code == 200
    assert [b["start_time"] for b in generated.json()["accepted"]] == [
        at(MONDAY + timedelta(weeks=1), 10).isoformat(),
        at(MONDAY + timedelta(weeks=2), 10).isoformat(),
    ]
    assert client.post(
        f"/recurring-schedules/{schedule_id}/generate", json={"weeks": 0}
    ).status_code == 422

    skipped_day = MONDAY + timedelta(weeks=2)
    exception = client.post(
        f"/recurring-schedules/{schedule_id}/exceptions",
        json={"date": skipped_day.isoformat()},
    ).json()
    exception_id = exception["schedule"]["exceptions"][0]["id"]

    removed = client.delete(
        f"/recurring-schedules/{schedule_id}/exceptions/{exception_id}"
    )
    assert removed.status_code == 200
    assert removed.json()["exceptions"] == []
    assert client.delete(
        f"/recurring-schedules/{schedule_id}/exceptions/{exception_id}"
    ).status_code == 404

    current_actor["actor"] = Actor(user_id=1)
    assert client.delete(f"/recurring-schedules/{schedule_id}").status_code == 403

    current_actor["actor"] = Actor(user_id=100, can_manage=True)
    deleted = client.delete(f"/recurring-schedules/{schedule_id}")
    assert deleted.status_code == 200
    body = deleted.json()
    assert body["schedule"]["is_active"] is False
    assert len(body["cancelled_bookings"]) == 2
    assert all(b["status"] == "Cancelled" for b in body["cancelled_bookings"])

    inactive = client.get("/recurring-schedules/", params={"active": False}).json()
    assert [s["id"] for s in inactive] == [schedule_id]
    assert client.get("/recurring-schedules/", params={"active": True}).json() == []

    again = client.delete(f"/recurring-schedules/{schedule_id}")
    assert again.status_code == 400
    assert again.json()["detail"]["code"] == "InvalidTransition"


def test_available_courts_endpoint(client, sample_court):
    monday = client.get(f"/guest-bookings/available-courts/{MONDAY.isoformat()}")

    assert monday.status_code == 200
    assert monday.json()["date"] == MONDAY.isoformat()
    assert [c["id"] for c in monday.json()["courts"]] == [sample_court.id]

    tuesday = client.get(f"/guest-bookings/available-courts/{TUESDAY.isoformat()}")
    assert tuesday.json()["courts"] == []

    thursday = client.get(
        f"/guest-bookings/available-courts/{THURSDAY.isoformat()}",
        params={"purpose": "Training"},
    )
    assert [c["id"] for c in thursday.json()["courts"]] == [sample_court.id]
