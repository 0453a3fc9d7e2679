from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import EntryStatus
from .model import EntryFilter, TimeEntry


class TimesheetRepository(Protocol):
    """Persistence for time entries.

    ``create`` and ``update_fields`` raise UniqueViolation when the
    (employee, project, date) triple is already taken.
    """

    def get_by_id(self, entry_id: int) -> Optional[TimeEntry]:
        raise NotImplementedError

    def create(
        self,
        *,
        employee_id: int,
        project_id: int,
        entry_date: date,
        hours: Decimal,
        description: str,
        status: EntryStatus,
    ) -> int:
        raise NotImplementedError

    def update_fields(
        self,
        entry_id: int,
        *,
        project_id: int,
        entry_date: date,
        hours: Decimal,
        description: str,
        status: EntryStatus,
    ) -> bool:
        raise NotImplementedError

    def set_status(
        self,
        entry_id: int,
        *,
        status: EntryStatus,
        approved_by: Optional[int] = None,
        approved_at: Optional[datetime] = None,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    def approve_submitted(self, entry_ids: Iterable[int], *, approved_by: int, approved_at: datetime) -> Sequence[int]:
        """Approve the ids that are currently submitted; return those ids."""
        raise NotImplementedError

    def delete(self, entry_id: int) -> bool:
        raise NotImplementedError

    def list_entries(self, criteria: EntryFilter) -> Sequence[TimeEntry]:
        """Newest date first."""
        raise NotImplementedError

    def sum_hours(
        self,
        employee_id: int,
        start_date: date,
        end_date: date,
        *,
        statuses: Iterable[EntryStatus],
        exclude_entry_id: Optional[int] = None,
    ) -> Decimal:
        raise NotImplementedError
