from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from ..core.enums import ProjectStatus


@dataclass(frozen=True)
class Project:
    project_id: int
    name: str
    code: str
    status: ProjectStatus = ProjectStatus.PLANNING
    description: Optional[str] = None
    is_active: bool = True
    cost_center_id: Optional[int] = None
    assigned_employee_ids: FrozenSet[int] = field(default_factory=frozenset)

    def is_assigned(self, employee_id: int) -> bool:
        return int(employee_id) in self.assigned_employee_ids
