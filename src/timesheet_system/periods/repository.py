from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import PeriodStatus, PeriodVisibility
from .model import ReportingPeriod


class PeriodRepository(Protocol):
    def get_by_id(self, period_id: int) -> Optional[ReportingPeriod]:
        raise NotImplementedError

    def list_periods(self, *, status: Optional[PeriodStatus] = None) -> Sequence[ReportingPeriod]:
        """Newest start date first."""
        raise NotImplementedError

    def list_active_covering(self, day: date) -> Sequence[ReportingPeriod]:
        """Active periods with start_date <= day <= end_date, newest start first."""
        raise NotImplementedError

    def create_period(
        self,
        *,
        name: str,
        start_date: date,
        end_date: date,
        status: PeriodStatus,
        visibility: PeriodVisibility,
        restricted_members: Iterable[int],
        description: Optional[str],
        created_by: Optional[int],
    ) -> int:
        raise NotImplementedError

    def update_period(
        self,
        *,
        period_id: int,
        name: str,
        start_date: date,
        end_date: date,
        status: PeriodStatus,
        visibility: PeriodVisibility,
        restricted_members: Iterable[int],
        description: Optional[str],
    ) -> bool:
        raise NotImplementedError

    def delete_period(self, period_id: int) -> bool:
        raise NotImplementedError
