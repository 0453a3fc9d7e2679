from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core import constants
from ..core.enums import EntryStatus


@dataclass(frozen=True)
class TimeEntry:
    entry_id: int
    employee_id: int
    project_id: int
    entry_date: date
    hours: Decimal
    description: str
    status: EntryStatus = EntryStatus.DRAFT
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class EntryFilter:
    """Listing criteria; None means 'any'."""

    employee_id: Optional[int] = None
    project_id: Optional[int] = None
    status: Optional[EntryStatus] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    limit: int = constants.DEFAULT_LIST_LIMIT

    def matches(self, entry: TimeEntry) -> bool:
        if self.employee_id is not None and entry.employee_id != self.employee_id:
            return False
        if self.project_id is not None and entry.project_id != self.project_id:
            return False
        if self.status is not None and entry.status != self.status:
            return False
        if self.start_date is not None and entry.entry_date < self.start_date:
            return False
        if self.end_date is not None and entry.entry_date > self.end_date:
            return False
        return True
