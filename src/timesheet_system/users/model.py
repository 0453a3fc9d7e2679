from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class Account:
    """Domain entity: a login identity plus its lockout state.

    Plain data object; repositories map rows to it and back.
    """

    account_id: int
    full_name: str
    email: str
    password_hash: str
    role: Role
    department: Optional[str] = None
    position: Optional[str] = None
    is_active: bool = True
    failed_attempts: int = 0
    last_failed_at: Optional[datetime] = None
    locked_until: Optional[datetime] = None

    @property
    def is_employee(self) -> bool:
        return self.role == Role.EMPLOYEE

    def is_locked(self, now: datetime) -> bool:
        return self.locked_until is not None and self.locked_until > now


@dataclass(frozen=True)
class LoginState:
    """The lockout fields of an Account, persisted together."""

    failed_attempts: int = 0
    last_failed_at: Optional[datetime] = None
    locked_until: Optional[datetime] = None

    @classmethod
    def of(cls, account: Account) -> "LoginState":
        return cls(
            failed_attempts=account.failed_attempts,
            last_failed_at=account.last_failed_at,
            locked_until=account.locked_until,
        )
