from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import FrozenSet, Optional

from ..core.enums import PeriodStatus, PeriodVisibility


@dataclass(frozen=True)
class ReportingPeriod:
    """A named, inclusive date range in which employees may log time."""

    period_id: int
    name: str
    start_date: date
    end_date: date
    status: PeriodStatus = PeriodStatus.UPCOMING
    visibility: PeriodVisibility = PeriodVisibility.ALL_EMPLOYEES
    restricted_members: FrozenSet[int] = field(default_factory=frozenset)
    description: Optional[str] = None
    created_by: Optional[int] = None

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def grants_access(self, employee_id: int) -> bool:
        if self.visibility == PeriodVisibility.ALL_EMPLOYEES:
            return True
        return int(employee_id) in self.restricted_members
