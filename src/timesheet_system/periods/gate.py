from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.enums import PeriodStatus
from .model import ReportingPeriod
from .repository import PeriodRepository


def is_candidate(period: ReportingPeriod, day: date) -> bool:
    return period.status == PeriodStatus.ACTIVE and period.covers(day)


class PeriodGate:
    """Decides whether an employee may log time on a given date.

    Any active period that covers the date and lets the employee in is enough;
    overlapping periods need no precedence rule. Administrators never reach
    this gate (the admission pipeline skips it for them).
    """

    def __init__(self, periods: PeriodRepository):
        self._periods = periods

    def find_admitting_period(self, employee_id: int, day: date) -> Optional[ReportingPeriod]:
        for period in self._periods.list_active_covering(day):
            if is_candidate(period, day) and period.grants_access(employee_id):
                return period
        return None

    def is_date_admissible(self, employee_id: int, day: date, now: Optional[datetime] = None) -> bool:
        return self.find_admitting_period(employee_id, day) is not None

    def list_accessible_periods(self, employee_id: int, now: Optional[datetime] = None) -> Sequence[ReportingPeriod]:
        today = (now or now_local()).date()
        return [
            p
            for p in self._periods.list_active_covering(today)
            if is_candidate(p, today) and p.grants_access(employee_id)
        ]
