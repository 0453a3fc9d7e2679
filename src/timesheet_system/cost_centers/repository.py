from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol, Sequence

from .model import CostCenter


class CostCenterRepository(Protocol):
    def get_by_id(self, cost_center_id: int) -> Optional[CostCenter]:
        raise NotImplementedError

    def create_cost_center(
        self,
        *,
        name: str,
        code: str,
        description: Optional[str],
        budget: Decimal,
        department: Optional[str],
        manager_id: Optional[int],
        is_active: bool,
    ) -> int:
        """Raises UniqueViolation on a duplicate code."""
        raise NotImplementedError

    def update_cost_center(
        self,
        cost_center_id: int,
        *,
        name: str,
        code: str,
        description: Optional[str],
        budget: Decimal,
        department: Optional[str],
        manager_id: Optional[int],
        is_active: bool,
    ) -> bool:
        """Raises UniqueViolation on a duplicate code."""
        raise NotImplementedError

    def delete_cost_center(self, cost_center_id: int) -> bool:
        raise NotImplementedError

    def list_cost_centers(
        self,
        *,
        department: Optional[str] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> Sequence[CostCenter]:
        """Newest first. ``search`` matches name or code, case-insensitively."""
        raise NotImplementedError
