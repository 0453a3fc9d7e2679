from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Account role used for access control."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class EntryStatus(str, Enum):
    """Lifecycle of a timesheet entry."""

    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


class PeriodStatus(str, Enum):
    UPCOMING = "upcoming"
    ACTIVE = "active"
    CLOSED = "closed"


class PeriodVisibility(str, Enum):
    ALL_EMPLOYEES = "all"
    RESTRICTED = "restricted"


class ProjectStatus(str, Enum):
    PLANNING = "planning"
    ACTIVE = "active"
    ON_HOLD = "on-hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class NotificationType(str, Enum):
    HOUR_LIMIT_WARNING = "hour_limit_warning"
    TIMESHEET_STATUS_CHANGED = "timesheet_status_changed"
    PERIOD_OPENED = "period_opened"
