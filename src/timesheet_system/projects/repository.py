from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import ProjectStatus
from .model import Project


class ProjectRepository(Protocol):
    def get_by_id(self, project_id: int) -> Optional[Project]:
        """Project with its assignment set loaded."""
        raise NotImplementedError

    def create_project(
        self,
        *,
        name: str,
        code: str,
        status: ProjectStatus,
        description: Optional[str],
        cost_center_id: Optional[int] = None,
    ) -> int:
        """Raises UniqueViolation on a duplicate code."""
        raise NotImplementedError

    def list_projects(
        self, *, employee_id: Optional[int] = None, cost_center_id: Optional[int] = None
    ) -> Sequence[Project]:
        """All projects, narrowed to those ``employee_id`` is assigned to and/or
        charged to ``cost_center_id``."""
        raise NotImplementedError

    def set_cost_center(self, project_id: int, cost_center_id: Optional[int]) -> bool:
        raise NotImplementedError

    def count_by_cost_center(self, cost_center_id: int) -> int:
        raise NotImplementedError

    def add_assignment(self, *, project_id: int, employee_id: int) -> bool:
        raise NotImplementedError

    def remove_assignment(self, *, project_id: int, employee_id: int) -> bool:
        raise NotImplementedError
