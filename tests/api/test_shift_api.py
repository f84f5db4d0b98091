from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from src.guard_shifts.guard_shifts.core.enums import Role
from src.guard_shifts.guard_shifts.directory.model import Service
from src.guard_shifts.guard_shifts.guards.model import Guard
from src.guard_shifts.guard_shifts.main import create_app

GUARD_ID = 7
ADMIN_ID = 1


@pytest.fixture()
def app():
    app = create_app("config.testing")
    container = app.extensions["guard_shifts"]
    container.guards_repo.add(Guard(guard_id=ADMIN_ID, full_name="Admin", role=Role.ADMIN))
    container.guards_repo.add(Guard(guard_id=GUARD_ID, full_name="Guard", role=Role.GUARD, service_codes=("ALBA",)))
    container.services_repo.add(Service(service_id=1, code="ALBA", name="alba", display_name="Alba"))
    container.services_repo.add(Service(service_id=2, code="PRIVANZA", name="privanza", display_name="Privanza"))
    return app


def login(client, user_id: int, role: Role) -> None:
    with client.session_transaction() as sess:
        sess["user_id"] = user_id
        sess["role"] = role.value


def schedule_now(client) -> dict:
    start = datetime.now().replace(microsecond=0)
    login(client, ADMIN_ID, Role.ADMIN)
    resp = client.post(
        "/api/shifts/schedule",
        json={
            "guard_id": GUARD_ID,
            "service_id": 1,
            "scheduled_start_time": start.isoformat(),
            "scheduled_end_time": (start + timedelta(hours=8)).isoformat(),
        },
    )
    assert resp.status_code == 200
    return resp.get_json()["shift"]


def test_requires_login(app):
    client = app.test_client()
    assert client.get("/api/shifts/active").status_code == 401
    assert client.post("/api/shifts/end").status_code == 401


def test_guard_cannot_use_admin_endpoints(app):
    client = app.test_client()
    login(client, GUARD_ID, Role.GUARD)

    resp = client.get("/api/shifts/all")

    assert resp.status_code == 403
    assert resp.get_json()["code"] == "FORBIDDEN"


def test_available_services_for_guard(app):
    client = app.test_client()
    login(client, GUARD_ID, Role.GUARD)

    body = client.get("/api/shifts/available-services").get_json()

    assert [s["code"] for s in body["services"]] == ["ALBA"]


def test_missing_shift_maps_to_404(app):
    client = app.test_client()
    login(client, GUARD_ID, Role.GUARD)

    resp = client.post("/api/shifts/break/start")

    assert resp.status_code == 404
    assert resp.get_json()["code"] == "NOT_FOUND"


def test_workday_over_http(app):
    client = app.test_client()
    scheduled = schedule_now(client)
    assert scheduled["status"] == "scheduled"

    login(client, GUARD_ID, Role.GUARD)
    resp = client.post("/api/shifts/biometric-entry", json={})
    assert resp.status_code == 200
    assert resp.get_json()["shift"]["status"] == "biometric_registered"

    # second biometric entry: nothing scheduled remains for today
    assert client.post("/api/shifts/biometric-entry", json={}).status_code == 404

    mismatch = client.post("/api/shifts/start", json={"service_id": 2})
    assert mismatch.status_code == 422
    assert mismatch.get_json()["code"] == "SERVICE_MISMATCH"

    assert client.post("/api/shifts/start", json={}).status_code == 400

    resp = client.post("/api/shifts/start", json={"service_id": 1})
    assert resp.get_json()["shift"]["status"] == "active"

    assert client.post("/api/shifts/break/end").status_code == 409
    assert client.post("/api/shifts/break/start").get_json()["shift"]["status"] == "on_break"
    assert client.post("/api/shifts/break/end").get_json()["shift"]["status"] == "active"

    resp = client.post(
        "/api/shifts/patrol/start", json={"location": {"latitude": 19.43, "longitude": -99.13}}
    )
    assert resp.get_json()["shift"]["activities"][-1]["location"] == {"latitude": 19.43, "longitude": -99.13}

    assert client.post("/api/shifts/incident", json={"notes": " "}).status_code == 400
    assert client.post("/api/shifts/incident", json={"notes": "Gate left open"}).status_code == 200

    resp = client.post("/api/shifts/end")
    body = resp.get_json()
    assert body["shift"]["status"] == "completed"
    assert body["shift"]["total_worked_minutes"] >= 0

    assert client.get("/api/shifts/active").get_json()["shift"] is None
    assert client.get("/api/shifts/today").get_json()["shift"]["status"] == "completed"


def test_biometric_outside_window_maps_to_422(app):
    client = app.test_client()
    schedule_now(client)

    login(client, GUARD_ID, Role.GUARD)
    early = (datetime.now() - timedelta(hours=1)).replace(microsecond=0)
    resp = client.post("/api/shifts/biometric-entry", json={"timestamp": early.isoformat()})

    assert resp.status_code == 422
    assert resp.get_json()["code"] == "OUT_OF_WINDOW"


def test_admin_listing_and_stats(app):
    client = app.test_client()
    schedule_now(client)

    assert len(client.get("/api/shifts/all").get_json()["shifts"]) == 1
    assert client.get("/api/shifts/all?status=bogus").status_code == 400
    assert len(client.get("/api/shifts/by-service/1").get_json()["shifts"]) == 1

    body = client.get("/api/shifts/stats/1").get_json()
    assert body["total_shifts"] == 1
    assert body["stats"][0]["status"] == "scheduled"

    bad_range = client.get("/api/shifts/stats/1?start_date=2026-02-05&end_date=2026-02-01")
    assert bad_range.status_code == 400


def test_schedule_unknown_guard_maps_to_404(app):
    client = app.test_client()
    login(client, ADMIN_ID, Role.ADMIN)
    now = datetime.now().replace(microsecond=0)

    resp = client.post(
        "/api/shifts/schedule",
        json={
            "guard_id": 999,
            "service_id": 1,
            "scheduled_start_time": now.isoformat(),
            "scheduled_end_time": (now + timedelta(hours=1)).isoformat(),
        },
    )

    assert resp.status_code == 404


@pytest.mark.parametrize("suffix", ["+00:00", "Z"])
def test_biometric_timestamp_with_utc_offset_is_accepted(app, suffix):
    client = app.test_client()
    schedule_now(client)

    login(client, GUARD_ID, Role.GUARD)
    stamp = datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0).isoformat() + suffix
    resp = client.post("/api/shifts/biometric-entry", json={"timestamp": stamp})

    assert resp.status_code == 200
    body = resp.get_json()["shift"]
    assert body["status"] == "biometric_registered"
    local = datetime.fromisoformat(body["biometric_start_time"])
    assert abs((local - datetime.now()).total_seconds()) < 120


def test_biometric_timestamp_must_be_a_string(app):
    client = app.test_client()
    schedule_now(client)

    login(client, GUARD_ID, Role.GUARD)
    resp = client.post("/api/shifts/biometric-entry", json={"timestamp": 1767000000})

    assert resp.status_code == 400
    assert resp.get_json()["code"] == "VALIDATION_ERROR"
    assert client.get("/api/shifts/today").get_json()["shift"]["status"] == "scheduled"


def test_schedule_rejects_numeric_times(app):
    client = app.test_client()
    login(client, ADMIN_ID, Role.ADMIN)

    resp = client.post(
        "/api/shifts/schedule",
        json={
            "guard_id": GUARD_ID,
            "service_id": 1,
            "scheduled_start_time": 1767000000,
            "scheduled_end_time": "2026-12-29T17:00:00",
        },
    )

    assert resp.status_code == 400
    assert resp.get_json()["code"] == "VALIDATION_ERROR"
