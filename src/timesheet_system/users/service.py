from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import now_local
from ..common.validators import require_max_length, require_min_length, require_non_empty
from ..core import constants
from ..core.actor import Actor
from ..core.enums import Role
from ..core.exceptions import (
    AccountInactive,
    AccountLocked,
    AuthorizationError,
    InvalidCredentials,
    NotFoundError,
    ValidationError,
)
from ..database.mysql_base import UniqueViolation
from ..projects.model import Project
from ..projects.repository import ProjectRepository
from .credential_guard import CredentialGuard, LoginDecision
from .model import Account, LoginState
from .rate_limiter import LoginRateLimiter
from .repository import UserRepository

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]{2,}$")


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    user_id: int
    full_name: str
    email: str
    role: Role


class AuthService:
    """Use case: authenticate a user (login)."""

    def __init__(
        self,
        users: UserRepository,
        guard: Optional[CredentialGuard] = None,
        rate_limiter: Optional[LoginRateLimiter] = None,
    ):
        self._users = users
        self._guard = guard or CredentialGuard()
        self._rate_limiter = rate_limiter

    def authenticate(
        self,
        email: str,
        password: str,
        *,
        client_key: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> SessionUser:
        now = now or now_local()

        if self._rate_limiter is not None and client_key:
            self._rate_limiter.hit(client_key, now=now)

        account = self._users.get_by_email((email or "").strip().lower())
        if not account:
            raise InvalidCredentials()
        if not account.is_active:
            raise AccountInactive()

        evaluation = self._guard.evaluate_login(account, password or "", now)
        if evaluation.changed:
            self._users.save_login_state(account.account_id, evaluation.state)

        if evaluation.decision == LoginDecision.REJECT_LOCKED:
            raise AccountLocked(retry_after_minutes=int(evaluation.retry_after_minutes or 1))
        if evaluation.decision == LoginDecision.REJECT_INVALID_CREDENTIALS:
            raise InvalidCredentials()

        if self._rate_limiter is not None and client_key:
            self._rate_limiter.reset(client_key)

        return SessionUser(
            user_id=account.account_id,
            full_name=account.full_name,
            email=account.email,
            role=account.role,
        )

    def get_session_user(self, user_id: int) -> SessionUser:
        account = self._users.get_by_id(int(user_id))
        if not account:
            raise NotFoundError("User", user_id)
        return SessionUser(
            user_id=account.account_id,
            full_name=account.full_name,
            email=account.email,
            role=account.role,
        )


@dataclass(frozen=True)
class AccountView:
    """Account without secrets, for listings."""

    user_id: int
    full_name: str
    email: str
    role: Role
    department: Optional[str]
    position: Optional[str]
    is_active: bool
    locked_until: Optional[datetime]

    @classmethod
    def of(cls, account: Account) -> "AccountView":
        return cls(
            user_id=account.account_id,
            full_name=account.full_name,
            email=account.email,
            role=account.role,
            department=account.department,
            position=account.position,
            is_active=account.is_active,
            locked_until=account.locked_until,
        )


class UserService:
    """Use case: manage accounts (admin)."""

    def __init__(self, users: UserRepository):
        self._users = users

    @staticmethod
    def _require_admin(actor: Actor) -> None:
        if not actor.is_admin:
            raise AuthorizationError("Admin access required")

    def create_account(
        self,
        *,
        actor: Actor,
        full_name: str,
        email: str,
        password: str,
        role: Role = Role.EMPLOYEE,
        department: Optional[str] = None,
        position: Optional[str] = None,
    ) -> int:
        self._require_admin(actor)

        full_name = require_non_empty(full_name, "Full name")
        require_max_length(full_name, "Full name", 100)
        email = require_non_empty(email, "Email").lower()
        if not _EMAIL_RE.match(email):
            raise ValidationError("Please provide a valid email")
        require_min_length(password, "Password", constants.MIN_PASSWORD_LENGTH)

        if self._users.get_by_email(email):
            raise ValidationError("User already exists with this email")

        try:
            return self._users.create_account(
                full_name=full_name,
                email=email,
                password_hash=generate_password_hash(password),
                role=role,
                department=(department or "").strip() or None,
                position=(position or "").strip() or None,
            )
        except UniqueViolation:
            raise ValidationError("User already exists with this email")

    def list_accounts(self, *, actor: Actor, role: Optional[Role] = None) -> Sequence[AccountView]:
        self._require_admin(actor)
        return [AccountView.of(a) for a in self._users.list_accounts(role=role)]

    def set_active(self, *, actor: Actor, user_id: int, is_active: bool) -> None:
        self._require_admin(actor)
        if int(user_id) == actor.user_id and not is_active:
            raise ValidationError("You cannot deactivate your own account")
        if not self._users.set_active(int(user_id), is_active=is_active):
            raise NotFoundError("User", user_id)

    def unlock_account(self, *, actor: Actor, user_id: int) -> None:
        self._require_admin(actor)
        account = self._users.get_by_id(int(user_id))
        if not account:
            raise NotFoundError("User", user_id)
        self._users.save_login_state(account.account_id, LoginState())
        logger.info("Account %s unlocked by admin %s", account.account_id, actor.user_id)

    def delete_account(self, *, actor: Actor, user_id: int) -> None:
        self._require_admin(actor)

        account = self._users.get_by_id(int(user_id))
        if not account:
            raise NotFoundError("User", user_id)
        if account.role == Role.ADMIN:
            raise ValidationError("Admin accounts cannot be deleted")

        if not self._users.delete_by_id(account.account_id):
            raise NotFoundError("User", user_id)


@dataclass(frozen=True)
class Profile:
    account: AccountView
    assigned_projects: tuple[Project, ...] = ()


class ProfileService:
    """Use case: a signed-in user reads and edits their own account."""

    def __init__(self, users: UserRepository, projects: ProjectRepository):
        self._users = users
        self._projects = projects

    def _own_account(self, actor: Actor) -> Account:
        account = self._users.get_by_id(actor.user_id)
        if not account:
            raise NotFoundError("User", actor.user_id)
        return account

    def get_profile(self, *, actor: Actor) -> Profile:
        account = self._own_account(actor)
        projects = self._projects.list_projects(employee_id=account.account_id) if account.is_employee else ()
        return Profile(account=AccountView.of(account), assigned_projects=tuple(projects))

    def update_profile(
        self,
        *,
        actor: Actor,
        full_name: Optional[str] = None,
        department: Optional[str] = None,
        position: Optional[str] = None,
    ) -> Profile:
        # Email, role and activation stay admin-managed.
        account = self._own_account(actor)

        if full_name is not None:
            full_name = require_non_empty(full_name, "Full name")
            require_max_length(full_name, "Full name", 100)
        else:
            full_name = account.full_name
        if department is not None:
            department = department.strip() or None
            require_max_length(department, "Department", 100)
        else:
            department = account.department
        if position is not None:
            position = position.strip() or None
            require_max_length(position, "Position", 100)
        else:
            position = account.position

        self._users.update_profile(
            account.account_id, full_name=full_name, department=department, position=position
        )
        return self.get_profile(actor=actor)

    def change_password(self, *, actor: Actor, current_password: str, new_password: str) -> None:
        if not current_password or not new_password:
            raise ValidationError("Current password and new password are required")
        account = self._own_account(actor)
        if not check_password_hash(account.password_hash, current_password):
            raise InvalidCredentials("Current password is incorrect")
        require_min_length(new_password, "Password", constants.MIN_PASSWORD_LENGTH)

        self._users.set_password_hash(account.account_id, generate_password_hash(new_password))
        logger.info("Password changed for account %s", account.account_id)
