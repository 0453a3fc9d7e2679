from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from ..common.datetime_utils import week_bounds
from ..common.validators import require_decimal, require_max_length, require_non_empty, require_range
from ..core import constants
from ..core.actor import Actor
from ..core.enums import EntryStatus, NotificationType
from ..core.exceptions import (
    AdmissionError,
    AuthorizationError,
    DateNotInPeriod,
    DuplicateEntry,
    NotAssignedToProject,
    NotFoundError,
    ProjectNotFound,
    ValidationError,
)
from ..database.mysql_base import UniqueViolation
from ..limits.validator import COUNTED_STATUSES, HourLimitValidator, LimitCheck
from ..notifications.dispatcher import NotificationDispatcher, safe_emit
from ..periods.gate import PeriodGate
from ..projects.repository import ProjectRepository
from ..users.repository import UserRepository
from .model import TimeEntry
from .repository import TimesheetRepository
from .transitions import CREATE_STATUSES, ensure_editable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdmissionResult:
    entry: TimeEntry
    limit_check: Optional[LimitCheck] = None

    @property
    def warning(self) -> bool:
        return bool(self.limit_check and self.limit_check.warning)


def clean_hours(value: Any) -> Decimal:
    hours = require_decimal(value, "Hours")
    return require_range(hours, "Hours", constants.MIN_ENTRY_HOURS, constants.MAX_ENTRY_HOURS)


def clean_description(value: Optional[str]) -> str:
    description = require_non_empty(value or "", "Description")
    require_max_length(description, "Description", constants.MAX_DESCRIPTION_LENGTH)
    return description


class AdmissionPipeline:
    """Runs a create/update request through the admission gates in order:
    ownership, project assignment, period gate, hour limits, uniqueness.

    The first gate that refuses raises its AdmissionError; nothing is written
    in that case. A weekly-threshold crossing on an accepted entry emits an
    hour_limit_warning notification.
    """

    def __init__(
        self,
        entries: TimesheetRepository,
        projects: ProjectRepository,
        users: UserRepository,
        gate: PeriodGate,
        validator: HourLimitValidator,
        dispatcher: Optional[NotificationDispatcher] = None,
    ):
        self._entries = entries
        self._projects = projects
        self._users = users
        self._gate = gate
        self._validator = validator
        self._dispatcher = dispatcher

    # gates

    @staticmethod
    def _check_bypass(actor: Actor, bypass: bool) -> bool:
        if bypass and not actor.may_bypass_limits:
            raise AuthorizationError("Only administrators can bypass hour limits")
        return bool(bypass)

    def _check_employee(self, employee_id: int) -> None:
        account = self._users.get_by_id(employee_id)
        if not account or not account.is_active:
            raise NotFoundError("Employee", employee_id)

    def _check_project(self, actor: Actor, employee_id: int, project_id: int) -> None:
        project = self._projects.get_by_id(project_id)
        if not project:
            raise ProjectNotFound(project_id)
        if actor.needs_project_assignment and not project.is_assigned(employee_id):
            raise NotAssignedToProject(employee_id, project_id)

    def _check_period(self, actor: Actor, employee_id: int, day: date) -> None:
        if actor.bypasses_period_gate:
            return
        if not self._gate.is_date_admissible(employee_id, day):
            raise DateNotInPeriod(day)

    @staticmethod
    def _week_total_before(current: TimeEntry, check: LimitCheck) -> Decimal:
        # check.current_week_sum excludes the edited entry; add it back when it
        # already counted toward the same week.
        before = check.current_week_sum or Decimal("0")
        same_week = week_bounds(current.entry_date) == (check.week_start, check.week_end)
        if current.status in COUNTED_STATUSES and same_week:
            before += current.hours
        return before

    def _warn(self, entry: TimeEntry, check: LimitCheck) -> None:
        safe_emit(
            self._dispatcher,
            NotificationType.HOUR_LIMIT_WARNING,
            {
                "recipient_id": entry.employee_id,
                "employee_id": entry.employee_id,
                "entry_id": entry.entry_id,
                "current_hours": check.projected_weekly,
                "weekly_limit": check.weekly_limit,
                "percentage": check.percentage,
                "week_start": check.week_start,
                "week_end": check.week_end,
            },
        )

    # operations

    def create_entry(
        self,
        *,
        actor: Actor,
        project_id: Any,
        entry_date: date,
        hours: Any,
        description: Optional[str],
        employee_id: Optional[int] = None,
        status: EntryStatus = EntryStatus.DRAFT,
        bypass: bool = False,
    ) -> AdmissionResult:
        hours = clean_hours(hours)
        description = clean_description(description)
        if status not in CREATE_STATUSES:
            raise ValidationError("New timesheets must be draft or submitted")
        bypass = self._check_bypass(actor, bypass)
        try:
            project_id = int(project_id)
        except (TypeError, ValueError):
            raise ValidationError("Project is required")

        employee_id = actor.resolve_employee(employee_id)
        try:
            if employee_id != actor.user_id:
                self._check_employee(employee_id)
            self._check_project(actor, employee_id, project_id)
            self._check_period(actor, employee_id, entry_date)
            check = self._validator.validate(employee_id, entry_date, hours, bypass=bypass)
            try:
                entry_id = self._entries.create(
                    employee_id=employee_id,
                    project_id=project_id,
                    entry_date=entry_date,
                    hours=hours,
                    description=description,
                    status=status,
                )
            except UniqueViolation:
                raise DuplicateEntry(employee_id=employee_id, project_id=project_id, entry_date=entry_date)
        except AdmissionError as exc:
            logger.info(
                "Rejected entry for employee %s on %s (project %s): %s",
                employee_id, entry_date, project_id, exc.code,
            )
            raise

        entry = TimeEntry(
            entry_id=entry_id,
            employee_id=employee_id,
            project_id=project_id,
            entry_date=entry_date,
            hours=hours,
            description=description,
            status=status,
        )
        logger.info(
            "Accepted entry %s for employee %s on %s: %s h (%s)%s",
            entry_id, employee_id, entry_date, hours, status.value, " [bypass]" if bypass else "",
        )
        if check.crossed_warning:
            self._warn(entry, check)
        return AdmissionResult(entry=entry, limit_check=check)

    def update_entry(
        self,
        *,
        actor: Actor,
        entry_id: int,
        project_id: Optional[Any] = None,
        entry_date: Optional[date] = None,
        hours: Optional[Any] = None,
        description: Optional[str] = None,
        status: Optional[EntryStatus] = None,
        bypass: bool = False,
    ) -> AdmissionResult:
        current = self._entries.get_by_id(int(entry_id))
        if not current:
            raise NotFoundError("Timesheet", entry_id)
        if not actor.can_view(current.employee_id):
            raise AuthorizationError("You can only update your own timesheets")

        target_status = status or current.status
        ensure_editable(actor, current, target_status)
        bypass = self._check_bypass(actor, bypass)

        new_hours = clean_hours(hours) if hours is not None else current.hours
        new_description = clean_description(description) if description is not None else current.description
        if project_id is not None:
            try:
                new_project_id = int(project_id)
            except (TypeError, ValueError):
                raise ValidationError("Project is invalid")
        else:
            new_project_id = current.project_id
        new_date = entry_date or current.entry_date
        employee_id = current.employee_id

        check: Optional[LimitCheck] = None
        try:
            if new_project_id != current.project_id:
                self._check_project(actor, employee_id, new_project_id)
            if new_date != current.entry_date:
                self._check_period(actor, employee_id, new_date)
            if new_hours != current.hours or new_date != current.entry_date:
                check = self._validator.validate(
                    employee_id, new_date, new_hours, exclude_entry_id=current.entry_id, bypass=bypass
                )
            try:
                self._entries.update_fields(
                    current.entry_id,
                    project_id=new_project_id,
                    entry_date=new_date,
                    hours=new_hours,
                    description=new_description,
                    status=target_status,
                )
            except UniqueViolation:
                raise DuplicateEntry(employee_id=employee_id, project_id=new_project_id, entry_date=new_date)
        except AdmissionError as exc:
            logger.info("Rejected update of entry %s: %s", current.entry_id, exc.code)
            raise

        entry = TimeEntry(
            entry_id=current.entry_id,
            employee_id=employee_id,
            project_id=new_project_id,
            entry_date=new_date,
            hours=new_hours,
            description=new_description,
            status=target_status,
            approved_by=current.approved_by,
            approved_at=current.approved_at,
            rejection_reason=current.rejection_reason,
            created_at=current.created_at,
        )
        logger.info("Updated entry %s (%s)", entry.entry_id, target_status.value)
        if check is not None and check.crosses_from(self._week_total_before(current, check)):
            self._warn(entry, check)
        return AdmissionResult(entry=entry, limit_check=check)
