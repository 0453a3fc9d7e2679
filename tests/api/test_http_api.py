from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from fakes import (
    InMemoryCostCenters,
    InMemoryEntries,
    InMemoryLimits,
    InMemoryNotifications,
    InMemoryPeriods,
    InMemoryProjects,
    InMemoryUsers,
)
from timesheet_system.container import wire
from timesheet_system.core.enums import PeriodStatus, Role
from timesheet_system.limits.model import HourLimit
from timesheet_system.main import create_app
from timesheet_system.periods.model import ReportingPeriod


@pytest.fixture
def container():
    users = InMemoryUsers()
    admin = users.add(full_name="Admin", email="admin@example.com", password="admin1234", role=Role.ADMIN)
    erin = users.add(full_name="Erin", email="erin@example.com", password="employee123")
    projects = InMemoryProjects()
    projects.add(name="Tools", code="INT-TOOLS", assigned=[erin.account_id])
    periods = InMemoryPeriods(
        [
            ReportingPeriod(
                period_id=1,
                name="March",
                start_date=date(2026, 3, 1),
                end_date=date(2026, 3, 31),
                status=PeriodStatus.ACTIVE,
            )
        ]
    )
    limits = InMemoryLimits()
    limits.save(
        HourLimit(employee_id=erin.account_id, weekly_limit=Decimal("40"), daily_limit=Decimal("24"), warning_threshold=90)
    )
    assert admin.account_id == 1 and erin.account_id == 2
    return wire(
        users_repo=users,
        projects_repo=projects,
        cost_centers_repo=InMemoryCostCenters(),
        periods_repo=periods,
        limits_repo=limits,
        entries_repo=InMemoryEntries(),
        notifications_repo=InMemoryNotifications(),
    )


@pytest.fixture
def app(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    return create_app(container)


def _login(app, email, password):
    client = app.test_client()
    resp = client.post("/api/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return client


def test_health(app):
    resp = app.test_client().get("/api/health")
    assert resp.status_code == 200
    assert resp.get_json() == {"success": True, "data": {"status": "ok"}}


def test_login_sets_session(app):
    client = _login(app, "erin@example.com", "employee123")
    me = client.get("/api/auth/me").get_json()
    assert me["data"]["role"] == "employee"
    assert me["data"]["email"] == "erin@example.com"

    client.post("/api/auth/logout")
    assert client.get("/api/auth/me").status_code == 401


def test_repeated_failures_lock_the_account(app):
    client = app.test_client()
    for _ in range(5):
        resp = client.post("/api/auth/login", json={"email": "erin@example.com", "password": "nope"})
        assert resp.status_code == 401
        assert resp.get_json()["code"] == "INVALID_CREDENTIALS"

    resp = client.post("/api/auth/login", json={"email": "erin@example.com", "password": "employee123"})
    body = resp.get_json()
    assert resp.status_code == 423
    assert body["code"] == "ACCOUNT_LOCKED"
    assert body["details"]["retry_after_minutes"] == 15


def test_guards(app):
    assert app.test_client().get("/api/timesheets").status_code == 401
    client = _login(app, "erin@example.com", "employee123")
    resp = client.get("/api/users")
    assert resp.status_code == 403
    assert resp.get_json()["code"] == "FORBIDDEN"


def test_timesheet_admission_over_http(app):
    client = _login(app, "erin@example.com", "employee123")
    payload = {"project_id": 1, "date": "2026-03-04", "hours": 8, "description": "Feature work"}

    created = client.post("/api/timesheets", json=payload)
    assert created.status_code == 201
    body = created.get_json()
    assert body["data"]["hours"] == 8.0
    assert body["data"]["status"] == "draft"
    assert body["warning"] is False

    duplicate = client.post("/api/timesheets", json=payload)
    assert duplicate.status_code == 409
    assert duplicate.get_json()["code"] == "DUPLICATE_ENTRY"

    too_much = client.post("/api/timesheets", json={**payload, "date": "2026-03-05", "hours": 24})
    assert too_much.status_code == 201
    rejected = client.post("/api/timesheets", json={**payload, "date": "2026-03-06", "hours": 9})
    assert rejected.status_code == 422
    assert rejected.get_json()["details"] == {"current_week_sum": 32.0, "weekly_limit": 40.0, "projected": 41.0}

    outside = client.post("/api/timesheets", json={**payload, "date": "2026-04-04"})
    assert outside.status_code == 422
    assert outside.get_json()["code"] == "DATE_NOT_IN_PERIOD"

    bad_date = client.post("/api/timesheets", json={**payload, "date": "04/03/2026"})
    assert bad_date.status_code == 400


def test_review_flow_notifies_owner(app):
    erin = _login(app, "erin@example.com", "employee123")
    created = erin.post(
        "/api/timesheets",
        json={"project_id": 1, "date": "2026-03-04", "hours": 7.5, "description": "Docs", "status": "submitted"},
    ).get_json()
    entry_id = created["data"]["entry_id"]

    admin = _login(app, "admin@example.com", "admin1234")
    approved = admin.post(f"/api/timesheets/{entry_id}/approve")
    assert approved.status_code == 200
    assert approved.get_json()["data"]["approved_by"] == 1

    again = admin.post(f"/api/timesheets/{entry_id}/approve")
    assert again.status_code == 409

    assert erin.get("/api/notifications/unread-count").get_json()["data"] == {"count": 1}
    notes = erin.get("/api/notifications").get_json()
    assert notes["data"][0]["title"] == "Timesheet Approved"

    erin.post("/api/notifications/read-all")
    assert erin.get("/api/notifications/unread-count").get_json()["data"] == {"count": 0}


def test_validate_date_and_hour_check_endpoints(app):
    client = _login(app, "erin@example.com", "employee123")

    inside = client.post("/api/timesheet-periods/validate-date", json={"date": "2026-03-10"}).get_json()
    assert inside["data"]["valid"] is True
    assert inside["data"]["period"]["name"] == "March"

    check = client.post("/api/work-hour-limits/validate", json={"date": "2026-03-10", "hours": 30}).get_json()
    assert check["data"]["valid"] is False
    assert check["data"]["code"] == "DAILY_LIMIT_EXCEEDED"
    assert check["data"]["can_bypass"] is False

    mine = client.get("/api/work-hour-limits/my-limit").get_json()
    assert mine["data"]["weekly_limit"] == 40.0


def test_admin_creates_period_and_employees_are_told(app, container):
    admin = _login(app, "admin@example.com", "admin1234")
    resp = admin.post(
        "/api/timesheet-periods",
        json={"name": "April", "start_date": "2026-04-01", "end_date": "2026-04-30", "status": "active"},
    )
    assert resp.status_code == 201

    erin = _login(app, "erin@example.com", "employee123")
    notes = erin.get("/api/notifications").get_json()["data"]
    assert [n["title"] for n in notes] == ["New Timesheet Period Available"]


def test_cost_centers_are_admin_managed(app):
    admin = _login(app, "admin@example.com", "admin1234")
    resp = admin.post("/api/cost-centers", json={"name": "Engineering", "code": "eng", "budget": 5000})
    assert resp.status_code == 201
    cost_center = resp.get_json()["data"]
    assert cost_center["code"] == "ENG"
    cost_center_id = cost_center["cost_center_id"]

    linked = admin.put("/api/projects/1/cost-center", json={"cost_center_id": cost_center_id})
    assert linked.status_code == 200
    assert admin.delete(f"/api/cost-centers/{cost_center_id}").status_code == 400

    erin = _login(app, "erin@example.com", "employee123")
    listed = erin.get("/api/cost-centers").get_json()
    assert listed["count"] == 1
    assert erin.post("/api/cost-centers", json={"name": "Sales", "code": "SAL"}).status_code == 403
    charged = erin.get(f"/api/projects?cost_center_id={cost_center_id}").get_json()["data"]
    assert [p["code"] for p in charged] == ["INT-TOOLS"]


def test_profile_edit_and_password_change(app):
    erin = _login(app, "erin@example.com", "employee123")
    profile = erin.get("/api/profile").get_json()["data"]
    assert [p["code"] for p in profile["assigned_projects"]] == ["INT-TOOLS"]

    resp = erin.put("/api/profile", json={"full_name": "Erin Lee", "position": "Analyst"})
    assert resp.get_json()["data"]["account"]["full_name"] == "Erin Lee"
    assert erin.get("/api/auth/me").get_json()["data"]["full_name"] == "Erin Lee"

    wrong = erin.put("/api/profile/change-password", json={"current_password": "nope", "new_password": "fresh-pass-1"})
    assert wrong.status_code == 401
    changed = erin.put(
        "/api/profile/change-password", json={"current_password": "employee123", "new_password": "fresh-pass-1"}
    )
    assert changed.status_code == 200
    _login(app, "erin@example.com", "fresh-pass-1")


def test_unknown_route_is_json(app):
    resp = app.test_client().get("/api/nope")
    assert resp.status_code == 404
    assert resp.get_json()["success"] is False
