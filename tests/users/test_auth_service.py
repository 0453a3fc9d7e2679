from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta

import pytest

from fakes import InMemoryUsers
from timesheet_system.core.actor import Actor
from timesheet_system.core.enums import Role
from timesheet_system.core.exceptions import (
    AccountInactive,
    AccountLocked,
    AuthorizationError,
    InvalidCredentials,
    NotFoundError,
    RateLimitExceeded,
    ValidationError,
)
from timesheet_system.users.rate_limiter import LoginRateLimiter
from timesheet_system.users.service import AuthService, UserService

NOW = datetime(2026, 3, 4, 9, 0, 0)


@pytest.fixture
def users():
    repo = InMemoryUsers()
    repo.add(full_name="Admin", email="admin@example.com", password="admin1234", role=Role.ADMIN)
    repo.add(full_name="Erin", email="erin@example.com", password="employee123")
    return repo


def test_login_success_returns_session_identity(users):
    s_user = AuthService(users).authenticate("ERIN@example.com ", "employee123", now=NOW)
    assert s_user.user_id == 2
    assert s_user.role == Role.EMPLOYEE
    assert s_user.full_name == "Erin"


def test_unknown_email_is_invalid_credentials(users):
    with pytest.raises(InvalidCredentials):
        AuthService(users).authenticate("nobody@example.com", "whatever", now=NOW)


def test_inactive_account_is_rejected_before_password_check(users):
    users.set_active(2, is_active=False)
    with pytest.raises(AccountInactive):
        AuthService(users).authenticate("erin@example.com", "wrong", now=NOW)
    assert users.get_by_id(2).failed_attempts == 0


def test_lockout_after_five_failures_persists_state(users):
    service = AuthService(users)
    for i in range(5):
        with pytest.raises(InvalidCredentials):
            service.authenticate("erin@example.com", "wrong", now=NOW + timedelta(seconds=i))

    stored = users.get_by_id(2)
    assert stored.failed_attempts == 0
    assert stored.locked_until is not None

    with pytest.raises(AccountLocked) as exc:
        service.authenticate("erin@example.com", "employee123", now=NOW + timedelta(seconds=5))
    assert exc.value.retry_after_minutes == 15


def test_success_after_failures_clears_counters(users):
    service = AuthService(users)
    for _ in range(3):
        with pytest.raises(InvalidCredentials):
            service.authenticate("erin@example.com", "wrong", now=NOW)

    service.authenticate("erin@example.com", "employee123", now=NOW)

    stored = users.get_by_id(2)
    assert stored.failed_attempts == 0
    assert stored.locked_until is None


def test_rate_limiter_runs_before_lookup(users):
    service = AuthService(users, rate_limiter=LoginRateLimiter(max_attempts=2, window_minutes=15))
    for _ in range(2):
        with pytest.raises(InvalidCredentials):
            service.authenticate("nobody@example.com", "whatever", client_key="1.2.3.4", now=NOW)
    with pytest.raises(RateLimitExceeded):
        service.authenticate("erin@example.com", "employee123", client_key="1.2.3.4", now=NOW)


def test_successful_login_clears_the_client_counter(users):
    service = AuthService(users, rate_limiter=LoginRateLimiter(max_attempts=2, window_minutes=15))
    with pytest.raises(InvalidCredentials):
        service.authenticate("erin@example.com", "wrong", client_key="1.2.3.4", now=NOW)
    service.authenticate("erin@example.com", "employee123", client_key="1.2.3.4", now=NOW)

    with pytest.raises(InvalidCredentials):
        service.authenticate("erin@example.com", "wrong", client_key="1.2.3.4", now=NOW)
    with pytest.raises(InvalidCredentials):
        service.authenticate("erin@example.com", "wrong", client_key="1.2.3.4", now=NOW)
    with pytest.raises(RateLimitExceeded):
        service.authenticate("erin@example.com", "employee123", client_key="1.2.3.4", now=NOW)


def test_create_account_requires_admin(users):
    with pytest.raises(AuthorizationError):
        UserService(users).create_account(
            actor=Actor.employee(2), full_name="X", email="x@example.com", password="longenough"
        )


def test_create_account_validates_and_rejects_duplicates(users):
    service = UserService(users)
    admin = Actor.admin(1)

    with pytest.raises(ValidationError):
        service.create_account(actor=admin, full_name="X", email="not-an-email", password="longenough")
    with pytest.raises(ValidationError):
        service.create_account(actor=admin, full_name="X", email="x@example.com", password="short")
    with pytest.raises(ValidationError):
        service.create_account(actor=admin, full_name="X", email="Erin@Example.com", password="longenough")

    new_id = service.create_account(
        actor=admin, full_name="Xavier", email="xavier@example.com", password="longenough", department=" Ops "
    )
    created = users.get_by_id(new_id)
    assert created.department == "Ops"
    assert created.role == Role.EMPLOYEE


def test_admin_cannot_deactivate_self(users):
    with pytest.raises(ValidationError):
        UserService(users).set_active(actor=Actor.admin(1), user_id=1, is_active=False)


def test_admins_cannot_be_deleted(users):
    service = UserService(users)
    with pytest.raises(ValidationError):
        service.delete_account(actor=Actor.admin(1), user_id=1)
    service.delete_account(actor=Actor.admin(1), user_id=2)
    with pytest.raises(NotFoundError):
        service.delete_account(actor=Actor.admin(1), user_id=2)


def test_unlock_clears_lockout(users):
    users.accounts[2] = replace(users.accounts[2], locked_until=NOW + timedelta(minutes=10), failed_attempts=2)

    UserService(users).unlock_account(actor=Actor.admin(1), user_id=2)

    assert users.get_by_id(2).locked_until is None
    assert users.get_by_id(2).failed_attempts == 0
