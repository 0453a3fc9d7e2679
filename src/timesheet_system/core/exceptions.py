from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Optional


class DomainError(Exception):
    """Base exception for business rule violations."""

    code = "DOMAIN_ERROR"
    status_code = 400

    def details(self) -> dict[str, Any]:
        return {}


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "VALIDATION_ERROR"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "FORBIDDEN"
    status_code = 403


class NotFoundError(DomainError):
    """Raised when an id does not resolve to an entity."""

    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.entity_id = entity_id

    def details(self) -> dict[str, Any]:
        return {"entity": self.entity, "id": self.entity_id}


# Authentication


class AuthError(DomainError):
    code = "AUTH_ERROR"
    status_code = 401


class InvalidCredentials(AuthError):
    code = "INVALID_CREDENTIALS"

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)


class AccountInactive(AuthError):
    code = "ACCOUNT_INACTIVE"

    def __init__(self, message: str = "Your account has been deactivated"):
        super().__init__(message)


class AccountLocked(AuthError):
    code = "ACCOUNT_LOCKED"
    status_code = 423

    def __init__(self, retry_after_minutes: int):
        super().__init__(
            "Account temporarily locked due to repeated failed logins. "
            f"Try again in {retry_after_minutes} minute(s)."
        )
        self.retry_after_minutes = retry_after_minutes

    def details(self) -> dict[str, Any]:
        return {"retry_after_minutes": self.retry_after_minutes}


class RateLimitExceeded(AuthError):
    code = "RATE_LIMITED"
    status_code = 429

    def __init__(self, retry_after_seconds: int):
        super().__init__("Too many login attempts. Please try again later.")
        self.retry_after_seconds = retry_after_seconds

    def details(self) -> dict[str, Any]:
        return {"retry_after_seconds": self.retry_after_seconds}


# Timesheet admission


class AdmissionError(DomainError):
    """A timesheet entry was refused by one of the admission gates."""

    code = "ADMISSION_REJECTED"
    status_code = 422


class ProjectNotFound(AdmissionError):
    code = "PROJECT_NOT_FOUND"
    status_code = 404

    def __init__(self, project_id: int):
        super().__init__("Project not found")
        self.project_id = project_id

    def details(self) -> dict[str, Any]:
        return {"project_id": self.project_id}


class NotAssignedToProject(AdmissionError):
    code = "NOT_ASSIGNED_TO_PROJECT"
    status_code = 403

    def __init__(self, employee_id: int, project_id: int):
        super().__init__("You are not assigned to this project")
        self.employee_id = employee_id
        self.project_id = project_id

    def details(self) -> dict[str, Any]:
        return {"employee_id": self.employee_id, "project_id": self.project_id}


class DateNotInPeriod(AdmissionError):
    code = "DATE_NOT_IN_PERIOD"

    def __init__(self, entry_date: date):
        super().__init__("Date is not within any allowed timesheet period")
        self.entry_date = entry_date

    def details(self) -> dict[str, Any]:
        return {"date": self.entry_date.isoformat()}


class DailyLimitExceeded(AdmissionError):
    code = "DAILY_LIMIT_EXCEEDED"

    def __init__(self, limit: Decimal):
        super().__init__(f"Hours exceed daily limit of {limit} hours")
        self.limit = limit

    def details(self) -> dict[str, Any]:
        return {"limit": self.limit}


class WeeklyLimitExceeded(AdmissionError):
    code = "WEEKLY_LIMIT_EXCEEDED"

    def __init__(self, *, current_week_sum: Decimal, weekly_limit: Decimal, projected: Decimal):
        super().__init__(
            f"Adding these hours would exceed weekly limit of {weekly_limit} hours "
            f"(current: {current_week_sum} hours)"
        )
        self.current_week_sum = current_week_sum
        self.weekly_limit = weekly_limit
        self.projected = projected

    def details(self) -> dict[str, Any]:
        return {
            "current_week_sum": self.current_week_sum,
            "weekly_limit": self.weekly_limit,
            "projected": self.projected,
        }


class DuplicateEntry(AdmissionError):
    code = "DUPLICATE_ENTRY"
    status_code = 409

    def __init__(self, *, employee_id: int, project_id: int, entry_date: date):
        super().__init__("A timesheet entry already exists for this employee, project, and date")
        self.employee_id = employee_id
        self.project_id = project_id
        self.entry_date = entry_date

    def details(self) -> dict[str, Any]:
        return {
            "employee_id": self.employee_id,
            "project_id": self.project_id,
            "date": self.entry_date.isoformat(),
        }


# Entry lifecycle


class StateError(DomainError):
    code = "STATE_ERROR"
    status_code = 409


class InvalidStatusTransition(StateError):
    code = "INVALID_STATUS_TRANSITION"

    def __init__(self, current: Any, target: Optional[Any] = None, message: Optional[str] = None):
        current_v = getattr(current, "value", current)
        target_v = getattr(target, "value", target)
        if message is None:
            if target is None or target_v == current_v:
                message = f"Cannot update {current_v} timesheet"
            else:
                message = f"Cannot move timesheet from {current_v} to {target_v}"
        super().__init__(message)
        self.current = current_v
        self.target = target_v

    def details(self) -> dict[str, Any]:
        return {"current": self.current, "target": self.target}
