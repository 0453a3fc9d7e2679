from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable, Optional, Sequence

from ..common.datetime_utils import now_local, week_bounds
from ..common.validators import require_decimal, require_max_length, require_range
from ..core.actor import Actor
from ..core.exceptions import AdmissionError, AuthorizationError, DomainError, NotFoundError, ValidationError
from ..timesheets.model import EntryFilter
from ..timesheets.repository import TimesheetRepository
from ..users.repository import UserRepository
from .model import HourLimit
from .repository import HourLimitRepository
from .validator import COUNTED_STATUSES, HourLimitValidator, LimitCheck, percentage_of

logger = logging.getLogger(__name__)

DAILY_RANGE = (Decimal("1"), Decimal("24"))
WEEKLY_RANGE = (Decimal("1"), Decimal("168"))
WARNING_RANGE = (Decimal("50"), Decimal("100"))


@dataclass(frozen=True)
class WeekSummary:
    employee_id: int
    week_start: date
    week_end: date
    total_hours: Decimal
    weekly_limit: Decimal
    remaining_hours: Decimal
    percentage: Decimal
    is_over_limit: bool
    is_near_limit: bool
    entry_count: int
    limit_in_effect: bool = True


@dataclass(frozen=True)
class BulkResult:
    employee_id: int
    success: bool
    error: Optional[str] = None


class HourLimitService:
    def __init__(
        self,
        limits: HourLimitRepository,
        users: UserRepository,
        entries: TimesheetRepository,
        validator: HourLimitValidator,
    ):
        self._limits = limits
        self._users = users
        self._entries = entries
        self._validator = validator

    @staticmethod
    def _require_admin(actor: Actor) -> None:
        if not actor.is_admin:
            raise AuthorizationError("Admin access required")

    def _require_employee(self, employee_id: int) -> None:
        account = self._users.get_by_id(int(employee_id))
        if not account:
            raise NotFoundError("Employee", employee_id)
        if not account.is_employee:
            raise ValidationError("Hour limits apply to employees only")

    def get_limit(self, *, actor: Actor, employee_id: int) -> HourLimit:
        if not actor.can_view(employee_id):
            raise AuthorizationError("You can only view your own hour limit")
        return self._validator.limit_for(int(employee_id))

    def _build(
        self,
        base: HourLimit,
        *,
        actor: Actor,
        weekly_limit: Any = None,
        daily_limit: Any = None,
        warning_threshold: Any = None,
        enforce_limit: Optional[bool] = None,
        notes: Optional[str] = None,
        effective_from: Optional[datetime] = None,
        effective_to: Optional[datetime] = None,
    ) -> HourLimit:
        changes: dict[str, Any] = {"is_custom": True, "last_modified_by": actor.user_id}
        if weekly_limit is not None:
            changes["weekly_limit"] = require_range(
                require_decimal(weekly_limit, "Weekly limit"), "Weekly limit", *WEEKLY_RANGE
            )
        if daily_limit is not None:
            changes["daily_limit"] = require_range(
                require_decimal(daily_limit, "Daily limit"), "Daily limit", *DAILY_RANGE
            )
        if warning_threshold is not None:
            threshold = require_range(
                require_decimal(warning_threshold, "Warning threshold"), "Warning threshold", *WARNING_RANGE
            )
            if threshold != threshold.to_integral_value():
                raise ValidationError("Warning threshold must be a whole number")
            changes["warning_threshold"] = int(threshold)
        if enforce_limit is not None:
            changes["enforce_limit"] = bool(enforce_limit)
        if notes is not None:
            changes["notes"] = require_max_length(notes.strip(), "Notes", 500) or None
        if effective_from is not None:
            changes["effective_from"] = effective_from
        if effective_to is not None:
            changes["effective_to"] = effective_to

        limit = replace(base, **changes)
        if limit.effective_from and limit.effective_to and limit.effective_to < limit.effective_from:
            raise ValidationError("Effective end must not be before effective start")
        return limit

    def set_limit(self, *, actor: Actor, employee_id: int, **fields: Any) -> HourLimit:
        self._require_admin(actor)
        self._require_employee(employee_id)
        base = self._validator.limit_for(int(employee_id))
        saved = self._limits.save(self._build(base, actor=actor, **fields))
        logger.info("Hour limit for employee %s set by %s", employee_id, actor.user_id)
        return saved

    def bulk_update(self, *, actor: Actor, employee_ids: Iterable[int], **fields: Any) -> Sequence[BulkResult]:
        self._require_admin(actor)
        results: list[BulkResult] = []
        for employee_id in employee_ids:
            try:
                self.set_limit(actor=actor, employee_id=int(employee_id), **fields)
            except DomainError as exc:
                results.append(BulkResult(employee_id=int(employee_id), success=False, error=str(exc)))
            else:
                results.append(BulkResult(employee_id=int(employee_id), success=True))
        return results

    def reset_limit(self, *, actor: Actor, employee_id: int) -> None:
        self._require_admin(actor)
        if not self._limits.delete(int(employee_id)):
            raise NotFoundError("Hour limit", employee_id)
        logger.info("Hour limit for employee %s reset by %s", employee_id, actor.user_id)

    def list_limits(self, *, actor: Actor, custom_only: bool = False) -> Sequence[HourLimit]:
        self._require_admin(actor)
        return self._limits.list_limits(custom_only=custom_only)

    def week_summary(self, *, actor: Actor, employee_id: int, on: Optional[date] = None) -> WeekSummary:
        if not actor.can_view(employee_id):
            raise AuthorizationError("You can only view your own hours")

        on = on or now_local().date()
        week_start, week_end = week_bounds(on)
        limit = self._validator.limit_for(int(employee_id))
        total = self._validator.week_sum(int(employee_id), on)
        entries = [
            e
            for e in self._entries.list_entries(
                EntryFilter(employee_id=int(employee_id), start_date=week_start, end_date=week_end)
            )
            if e.status in COUNTED_STATUSES
        ]

        return WeekSummary(
            employee_id=int(employee_id),
            week_start=week_start,
            week_end=week_end,
            total_hours=total,
            weekly_limit=limit.weekly_limit,
            remaining_hours=max(limit.weekly_limit - total, Decimal("0")),
            percentage=percentage_of(total, limit.weekly_limit),
            is_over_limit=total > limit.weekly_limit,
            is_near_limit=total >= limit.warning_hours,
            entry_count=len(entries),
            limit_in_effect=limit.is_effective(on),
        )

    def check(
        self,
        *,
        actor: Actor,
        employee_id: int,
        day: date,
        hours: Any,
        exclude_entry_id: Optional[int] = None,
    ) -> dict[str, Any]:
        """Dry run of the validator; rejects are reported instead of raised."""
        if not actor.can_view(employee_id):
            raise AuthorizationError("You can only check your own hours")
        hours = require_decimal(hours, "Hours")

        try:
            result: LimitCheck = self._validator.validate(
                int(employee_id), day, hours, exclude_entry_id=exclude_entry_id
            )
        except AdmissionError as exc:
            return {
                "valid": False,
                "code": exc.code,
                "message": str(exc),
                "details": exc.details(),
                "can_bypass": actor.may_bypass_limits,
            }
        return {"valid": True, "check": result, "can_bypass": actor.may_bypass_limits}
