from __future__ import annotations

import pytest

from fakes import FakeWorld, make_user
from timeclock.core.enums import Role
from timeclock.main import create_app
from timeclock.users.department_model import Department

EMPLOYEE = make_user(1, Role.EMPLOYEE, dept_id=1)
MANAGER = make_user(2, Role.MANAGER, dept_id=1)
ADMIN = make_user(3, Role.ADMIN, dept_id=None)


@pytest.fixture
def world():
    return FakeWorld(
        users=[EMPLOYEE, MANAGER, ADMIN],
        departments=[Department(dept_id=1, name="Operations", manager_id=MANAGER.user_id)],
    )


@pytest.fixture
def client(world, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    app = create_app(world.container)
    return app.test_client()


def as_user(user):
    return {"X-User-Id": str(user.user_id)}


def test_requests_without_identity_are_rejected(client):
    resp = client.post("/api/checkin", json={})

    assert resp.status_code == 401
    assert resp.get_json()["code"] == "UNAUTHORIZED"


def test_check_in_and_out_with_override_time(client):
    resp = client.post("/api/checkin", json={"devOverrideTime": "2025-03-03T08:40:00"}, headers=as_user(EMPLOYEE))

    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["status"] == "late"
    assert data["lateMinutes"] == 25
    assert data["checkInTime"] == "08:40"

    resp = client.post("/api/checkout", json={"devOverrideTime": "2025-03-03T16:02:00"}, headers=as_user(EMPLOYEE))
    assert resp.get_json()["data"]["checkOutTime"] == "16:02"


def test_second_check_in_returns_conflict_code(client):
    body = {"devOverrideTime": "2025-03-03T08:00:00"}
    client.post("/api/checkin", json=body, headers=as_user(EMPLOYEE))

    resp = client.post("/api/checkin", json=body, headers=as_user(EMPLOYEE))

    assert resp.status_code == 400
    assert resp.get_json() == {"success": False, "error": "Already checked in today", "code": "ALREADY_CHECKED_IN"}


def test_punch_with_unknown_action(client):
    resp = client.post("/api/punch", json={"action": "break"}, headers=as_user(EMPLOYEE))

    assert resp.status_code == 400
    assert resp.get_json()["code"] == "INVALID_ACTION"


def test_malformed_override_time(client):
    resp = client.post("/api/checkin", json={"devOverrideTime": "yesterday"}, headers=as_user(EMPLOYEE))

    assert resp.status_code == 400
    assert resp.get_json()["code"] == "INVALID_TIME"


def test_today_status_endpoint(client):
    resp = client.get("/api/attendance/today?asOf=2025-03-03T07:30:00", headers=as_user(EMPLOYEE))

    data = resp.get_json()["data"]
    assert data["state"] == "empty"
    assert data["warnings"]["isBeforeShift"] is True
    assert data["shift"]["workStart"] == "08:00"


def test_classify_endpoint(client):
    resp = client.post(
        "/api/attendance/classify",
        json={
            "asOf": "2025-03-03T18:00:00",
            "policy": {"workStart": "08:00", "workEnd": "16:00", "gracePeriodMinutes": 10},
            "record": {"date": "2025-03-03", "checkInTime": "08:05", "checkOutTime": "17:05"},
        },
        headers=as_user(EMPLOYEE),
    )

    assert resp.get_json()["data"] == {"status": "present", "lateMinutes": 0, "hoursWorked": 9.0, "isOvertime": False}


def test_policy_update_requires_admin(client):
    body = {"gracePeriodMinutes": 5}

    resp = client.put("/api/policy", json=body, headers=as_user(EMPLOYEE))
    assert resp.status_code == 403

    resp = client.put("/api/policy", json=body, headers=as_user(ADMIN))
    assert resp.status_code == 200
    assert resp.get_json()["data"]["gracePeriodMinutes"] == 5


def test_request_round_trip_through_http(client):
    resp = client.post(
        "/api/requests",
        json={"type": "sick_leave", "fromDate": "2025-03-02", "toDate": "2025-03-03"},
        headers=as_user(EMPLOYEE),
    )
    assert resp.status_code == 201
    request_id = resp.get_json()["data"]["id"]

    assert client.get("/api/requests/pending/count", headers=as_user(MANAGER)).get_json()["data"] == {"count": 1}
    assert client.get("/api/requests/pending", headers=as_user(EMPLOYEE)).status_code == 403

    resp = client.post(f"/api/requests/{request_id}/approve", json={"note": "ok"}, headers=as_user(MANAGER))
    assert resp.get_json()["data"]["status"] == "approved"

    resp = client.get("/api/notifications", headers=as_user(EMPLOYEE))
    assert resp.get_json()["data"]["unread"] == 1


def test_unknown_route_is_json(client):
    resp = client.get("/api/nothing-here", headers=as_user(EMPLOYEE))

    assert resp.status_code == 404
    assert resp.get_json()["code"] == "NOT_FOUND"


def test_monthly_endpoint_returns_calendar_and_stats(client):
    client.post("/api/checkin", json={"devOverrideTime": "2025-03-03T08:40:00"}, headers=as_user(EMPLOYEE))

    resp = client.get("/api/attendance/monthly?asOf=2025-03-03T18:00:00", headers=as_user(EMPLOYEE))

    data = resp.get_json()["data"]
    assert (data["year"], data["month"]) == (2025, 3)
    assert len(data["days"]) == 31
    assert data["stats"]["lateDays"] == 1
    assert data["stats"]["lateMinutes"] == 25


def test_audit_trail_is_admin_only(client):
    client.put("/api/policy", json={"gracePeriodMinutes": 5}, headers=as_user(ADMIN))

    assert client.get("/api/audit", headers=as_user(MANAGER)).status_code == 403

    resp = client.get("/api/audit?targetType=policy", headers=as_user(ADMIN))
    [entry] = resp.get_json()["data"]
    assert entry["action"] == "Updated attendance policy"
    assert entry["actorId"] == ADMIN.user_id

    resp = client.get(f"/api/audit/policy/{entry['targetId']}", headers=as_user(ADMIN))
    assert [e["id"] for e in resp.get_json()["data"]] == [entry["id"]]

    resp = client.get("/api/audit?targetType=payroll", headers=as_user(ADMIN))
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "INVALID_TARGET_TYPE"
