from __future__ import annotations

from dataclasses import dataclass

from .enums import Role


@dataclass(frozen=True)
class Actor:
    """Who is performing a request, and what they are allowed to skip.

    Services receive this value instead of comparing role strings, so tests
    can pass synthetic actors without a session or login.
    """

    user_id: int
    role: Role

    @classmethod
    def admin(cls, user_id: int) -> "Actor":
        return cls(user_id=int(user_id), role=Role.ADMIN)

    @classmethod
    def employee(cls, user_id: int) -> "Actor":
        return cls(user_id=int(user_id), role=Role.EMPLOYEE)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def acts_for_others(self) -> bool:
        return self.is_admin

    @property
    def bypasses_period_gate(self) -> bool:
        return self.is_admin

    @property
    def may_bypass_limits(self) -> bool:
        return self.is_admin

    @property
    def needs_project_assignment(self) -> bool:
        return not self.is_admin

    def resolve_employee(self, requested_employee_id: int | None) -> int:
        """Employees always act for themselves; admins act for the payload's employee."""
        if self.acts_for_others and requested_employee_id:
            return int(requested_employee_id)
        return self.user_id

    def can_view(self, owner_id: int) -> bool:
        return self.is_admin or int(owner_id) == self.user_id
