from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class CostCenter:
    """Budget bucket that projects are charged against."""

    cost_center_id: int
    name: str
    code: str
    description: Optional[str] = None
    budget: Decimal = Decimal("0")
    department: Optional[str] = None
    manager_id: Optional[int] = None
    is_active: bool = True
