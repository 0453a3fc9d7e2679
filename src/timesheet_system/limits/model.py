from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Mapping, Optional

from ..core import constants


@dataclass(frozen=True)
class HourLimitDefaults:
    """Values used when an employee has no hour-limit record yet."""

    weekly_limit: Decimal = constants.DEFAULT_WEEKLY_LIMIT
    daily_limit: Decimal = constants.DEFAULT_DAILY_LIMIT
    warning_threshold: int = constants.DEFAULT_WARNING_THRESHOLD
    enforce: bool = constants.DEFAULT_ENFORCE_LIMIT

    @classmethod
    def from_dict(cls, values: Optional[Mapping[str, Any]]) -> "HourLimitDefaults":
        values = values or {}
        return cls(
            weekly_limit=Decimal(str(values.get("weekly_limit", constants.DEFAULT_WEEKLY_LIMIT))),
            daily_limit=Decimal(str(values.get("daily_limit", constants.DEFAULT_DAILY_LIMIT))),
            warning_threshold=int(values.get("warning_threshold", constants.DEFAULT_WARNING_THRESHOLD)),
            enforce=bool(values.get("enforce", constants.DEFAULT_ENFORCE_LIMIT)),
        )


@dataclass(frozen=True)
class HourLimit:
    employee_id: int
    weekly_limit: Decimal
    daily_limit: Decimal
    warning_threshold: int
    enforce_limit: bool = True
    is_custom: bool = False
    notes: Optional[str] = None
    effective_from: Optional[datetime] = None
    effective_to: Optional[datetime] = None
    last_modified_by: Optional[int] = None
    limit_id: Optional[int] = None

    @classmethod
    def default_for(cls, employee_id: int, defaults: HourLimitDefaults) -> "HourLimit":
        return cls(
            employee_id=int(employee_id),
            weekly_limit=defaults.weekly_limit,
            daily_limit=defaults.daily_limit,
            warning_threshold=defaults.warning_threshold,
            enforce_limit=defaults.enforce,
        )

    @property
    def warning_hours(self) -> Decimal:
        """Weekly hours at which the warning threshold is reached."""
        return self.weekly_limit * Decimal(self.warning_threshold) / Decimal(100)

    def is_effective(self, day: date) -> bool:
        # Stored for reporting; the validator applies a limit regardless.
        if self.effective_from and day < self.effective_from.date():
            return False
        if self.effective_to and day > self.effective_to.date():
            return False
        return True
