from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import HourLimit, HourLimitDefaults


class HourLimitRepository(Protocol):
    def get(self, employee_id: int) -> Optional[HourLimit]:
        raise NotImplementedError

    def get_or_create(self, employee_id: int, defaults: HourLimitDefaults) -> HourLimit:
        """Return the employee's record, inserting defaults if it is missing.

        Concurrent callers for the same employee must end up with one row.
        """
        raise NotImplementedError

    def save(self, limit: HourLimit) -> HourLimit:
        """Insert or replace the employee's record."""
        raise NotImplementedError

    def delete(self, employee_id: int) -> bool:
        raise NotImplementedError

    def list_limits(self, *, custom_only: bool = False) -> Sequence[HourLimit]:
        raise NotImplementedError
