from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from ..common.datetime_utils import week_bounds
from ..core.enums import EntryStatus
from ..core.exceptions import DailyLimitExceeded, WeeklyLimitExceeded
from ..timesheets.repository import TimesheetRepository
from .model import HourLimit, HourLimitDefaults
from .repository import HourLimitRepository

# Rejected entries never count toward the week.
COUNTED_STATUSES = (EntryStatus.DRAFT, EntryStatus.SUBMITTED, EntryStatus.APPROVED)

_CENT = Decimal("0.01")


def percentage_of(hours: Decimal, limit: Decimal) -> Decimal:
    if limit <= 0:
        return Decimal("0")
    return (hours / limit * Decimal(100)).quantize(_CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class LimitCheck:
    """Outcome of a limit check that did not reject the entry."""

    employee_id: int
    entry_date: date
    hours: Decimal
    week_start: date
    week_end: date
    bypassed: bool = False
    warning: bool = False
    crossed_warning: bool = False
    current_week_sum: Optional[Decimal] = None
    projected_weekly: Optional[Decimal] = None
    percentage: Optional[Decimal] = None
    weekly_limit: Optional[Decimal] = None
    daily_limit: Optional[Decimal] = None
    warning_threshold: Optional[int] = None
    warning_hours: Optional[Decimal] = None

    def crosses_from(self, week_total_before: Decimal) -> bool:
        """True when the week moved from below the warning line to at or above it."""
        if not self.warning or self.warning_hours is None:
            return False
        return week_total_before < self.warning_hours


class HourLimitValidator:
    """Per-entry daily cap plus the Sunday-Saturday weekly cap."""

    def __init__(
        self,
        limits: HourLimitRepository,
        entries: TimesheetRepository,
        defaults: Optional[HourLimitDefaults] = None,
    ):
        self._limits = limits
        self._entries = entries
        self._defaults = defaults or HourLimitDefaults()

    @property
    def defaults(self) -> HourLimitDefaults:
        return self._defaults

    def limit_for(self, employee_id: int) -> HourLimit:
        return self._limits.get_or_create(int(employee_id), self._defaults)

    def week_sum(self, employee_id: int, day: date, *, exclude_entry_id: Optional[int] = None) -> Decimal:
        week_start, week_end = week_bounds(day)
        return self._entries.sum_hours(
            int(employee_id),
            week_start,
            week_end,
            statuses=COUNTED_STATUSES,
            exclude_entry_id=exclude_entry_id,
        )

    def validate(
        self,
        employee_id: int,
        day: date,
        hours: Decimal,
        *,
        exclude_entry_id: Optional[int] = None,
        bypass: bool = False,
    ) -> LimitCheck:
        """Raise DailyLimitExceeded / WeeklyLimitExceeded or return the check.

        Reads only; calling it twice without writes in between gives the same
        answer.
        """
        week_start, week_end = week_bounds(day)
        if bypass:
            return LimitCheck(
                employee_id=int(employee_id),
                entry_date=day,
                hours=hours,
                week_start=week_start,
                week_end=week_end,
                bypassed=True,
            )

        limit = self.limit_for(employee_id)

        if hours > limit.daily_limit:
            raise DailyLimitExceeded(limit.daily_limit)

        current = self.week_sum(employee_id, day, exclude_entry_id=exclude_entry_id)
        projected = current + hours

        if limit.enforce_limit and projected > limit.weekly_limit:
            raise WeeklyLimitExceeded(
                current_week_sum=current,
                weekly_limit=limit.weekly_limit,
                projected=projected,
            )

        threshold_hours = limit.warning_hours
        warning = projected >= threshold_hours
        return LimitCheck(
            employee_id=int(employee_id),
            entry_date=day,
            hours=hours,
            week_start=week_start,
            week_end=week_end,
            warning=warning,
            crossed_warning=warning and current < threshold_hours,
            current_week_sum=current,
            projected_weekly=projected,
            percentage=percentage_of(projected, limit.weekly_limit),
            weekly_limit=limit.weekly_limit,
            daily_limit=limit.daily_limit,
            warning_threshold=limit.warning_threshold,
            warning_hours=threshold_hours,
        )
