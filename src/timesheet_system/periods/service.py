from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import require_max_length, require_non_empty
from ..core.actor import Actor
from ..core.enums import NotificationType, PeriodStatus, PeriodVisibility, Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..notifications.dispatcher import NotificationDispatcher, safe_emit
from ..users.repository import UserRepository
from .gate import PeriodGate
from .model import ReportingPeriod
from .repository import PeriodRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DateCheck:
    valid: bool
    period: Optional[ReportingPeriod] = None
    message: Optional[str] = None


class PeriodService:
    """Admin management of reporting periods plus the employee-facing lookups."""

    def __init__(
        self,
        periods: PeriodRepository,
        users: UserRepository,
        gate: Optional[PeriodGate] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
    ):
        self._periods = periods
        self._users = users
        self._gate = gate or PeriodGate(periods)
        self._dispatcher = dispatcher

    @staticmethod
    def _require_admin(actor: Actor) -> None:
        if not actor.is_admin:
            raise AuthorizationError("Admin access required")

    def _validate_members(self, visibility: PeriodVisibility, members: Iterable[int]) -> frozenset[int]:
        members = frozenset(int(m) for m in members)
        if visibility == PeriodVisibility.RESTRICTED and not members:
            raise ValidationError("Restricted periods need at least one member")
        for employee_id in members:
            account = self._users.get_by_id(employee_id)
            if not account or not account.is_employee:
                raise ValidationError(f"Employee {employee_id} does not exist")
        # Members only matter for restricted periods.
        return members if visibility == PeriodVisibility.RESTRICTED else frozenset()

    @staticmethod
    def _validate_range(start_date: date, end_date: date) -> None:
        if end_date <= start_date:
            raise ValidationError("End date must be after start date")

    def _announce(self, period: ReportingPeriod) -> None:
        if period.visibility == PeriodVisibility.RESTRICTED:
            recipients = sorted(period.restricted_members)
        else:
            recipients = [a.account_id for a in self._users.list_accounts(role=Role.EMPLOYEE, active_only=True)]
        if not recipients:
            return
        safe_emit(
            self._dispatcher,
            NotificationType.PERIOD_OPENED,
            {
                "recipient_ids": recipients,
                "period_id": period.period_id,
                "name": period.name,
                "start_date": period.start_date,
                "end_date": period.end_date,
            },
        )

    def create_period(
        self,
        *,
        actor: Actor,
        name: str,
        start_date: date,
        end_date: date,
        status: PeriodStatus = PeriodStatus.UPCOMING,
        visibility: PeriodVisibility = PeriodVisibility.ALL_EMPLOYEES,
        restricted_members: Iterable[int] = (),
        description: Optional[str] = None,
    ) -> ReportingPeriod:
        self._require_admin(actor)

        name = require_non_empty(name, "Period name")
        require_max_length(name, "Period name", 100)
        self._validate_range(start_date, end_date)
        members = self._validate_members(visibility, restricted_members)
        description = (description or "").strip() or None

        period_id = self._periods.create_period(
            name=name,
            start_date=start_date,
            end_date=end_date,
            status=status,
            visibility=visibility,
            restricted_members=members,
            description=description,
            created_by=actor.user_id,
        )
        period = ReportingPeriod(
            period_id=period_id,
            name=name,
            start_date=start_date,
            end_date=end_date,
            status=status,
            visibility=visibility,
            restricted_members=members,
            description=description,
            created_by=actor.user_id,
        )
        logger.info("Period %s (%s) created by %s", period_id, status.value, actor.user_id)

        if status == PeriodStatus.ACTIVE:
            self._announce(period)
        return period

    def update_period(
        self,
        *,
        actor: Actor,
        period_id: int,
        name: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[PeriodStatus] = None,
        visibility: Optional[PeriodVisibility] = None,
        restricted_members: Optional[Iterable[int]] = None,
        description: Optional[str] = None,
    ) -> ReportingPeriod:
        self._require_admin(actor)

        current = self._periods.get_by_id(int(period_id))
        if not current:
            raise NotFoundError("Period", period_id)

        name = require_non_empty(name, "Period name") if name is not None else current.name
        require_max_length(name, "Period name", 100)
        start_date = start_date or current.start_date
        end_date = end_date or current.end_date
        self._validate_range(start_date, end_date)
        status = status or current.status
        visibility = visibility or current.visibility
        members = self._validate_members(
            visibility,
            current.restricted_members if restricted_members is None else restricted_members,
        )
        if description is not None:
            description = description.strip() or None
        else:
            description = current.description

        self._periods.update_period(
            period_id=current.period_id,
            name=name,
            start_date=start_date,
            end_date=end_date,
            status=status,
            visibility=visibility,
            restricted_members=members,
            description=description,
        )
        updated = ReportingPeriod(
            period_id=current.period_id,
            name=name,
            start_date=start_date,
            end_date=end_date,
            status=status,
            visibility=visibility,
            restricted_members=members,
            description=description,
            created_by=current.created_by,
        )

        if current.status != PeriodStatus.ACTIVE and status == PeriodStatus.ACTIVE:
            logger.info("Period %s activated by %s", current.period_id, actor.user_id)
            self._announce(updated)
        return updated

    def delete_period(self, *, actor: Actor, period_id: int) -> None:
        self._require_admin(actor)
        if not self._periods.delete_period(int(period_id)):
            raise NotFoundError("Period", period_id)
        logger.info("Period %s deleted by %s", period_id, actor.user_id)

    def list_periods(self, *, actor: Actor, status: Optional[PeriodStatus] = None) -> Sequence[ReportingPeriod]:
        periods = self._periods.list_periods(status=status)
        if actor.is_admin:
            return periods
        return [p for p in periods if p.grants_access(actor.user_id)]

    def get_period(self, *, actor: Actor, period_id: int) -> ReportingPeriod:
        period = self._periods.get_by_id(int(period_id))
        if not period:
            raise NotFoundError("Period", period_id)
        if not actor.is_admin and not period.grants_access(actor.user_id):
            raise AuthorizationError("You do not have access to this period")
        return period

    def my_active_periods(self, *, actor: Actor, now: Optional[datetime] = None) -> Sequence[ReportingPeriod]:
        return self._gate.list_accessible_periods(actor.user_id, now or now_local())

    def validate_date(self, *, actor: Actor, day: date) -> DateCheck:
        if actor.bypasses_period_gate:
            return DateCheck(valid=True, message="Administrators may log time on any date")
        period = self._gate.find_admitting_period(actor.user_id, day)
        if period is None:
            return DateCheck(valid=False, message="Date is not within any allowed timesheet period")
        return DateCheck(valid=True, period=period)
