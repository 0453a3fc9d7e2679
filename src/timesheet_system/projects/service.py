from __future__ import annotations

from typing import Optional, Sequence

from ..common.validators import require_max_length, require_non_empty
from ..core.actor import Actor
from ..core.enums import ProjectStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..cost_centers.repository import CostCenterRepository
from ..database.mysql_base import UniqueViolation
from ..users.repository import UserRepository
from .model import Project
from .repository import ProjectRepository


class ProjectService:
    def __init__(self, projects: ProjectRepository, users: UserRepository, cost_centers: CostCenterRepository):
        self._projects = projects
        self._users = users
        self._cost_centers = cost_centers

    def _check_cost_center(self, cost_center_id: Optional[int]) -> Optional[int]:
        if cost_center_id is None:
            return None
        cost_center = self._cost_centers.get_by_id(int(cost_center_id))
        if not cost_center or not cost_center.is_active:
            raise ValidationError("Cost center does not exist or is inactive")
        return cost_center.cost_center_id

    def create_project(
        self,
        *,
        actor: Actor,
        name: str,
        code: str,
        status: ProjectStatus = ProjectStatus.PLANNING,
        description: Optional[str] = None,
        cost_center_id: Optional[int] = None,
    ) -> int:
        if not actor.is_admin:
            raise AuthorizationError("Admin access required")

        name = require_non_empty(name, "Project name")
        require_max_length(name, "Project name", 100)
        code = require_non_empty(code, "Project code").upper()
        require_max_length(code, "Project code", 20)
        description = (description or "").strip() or None
        require_max_length(description, "Description", 500)
        cost_center_id = self._check_cost_center(cost_center_id)

        try:
            return self._projects.create_project(
                name=name, code=code, status=status, description=description, cost_center_id=cost_center_id
            )
        except UniqueViolation:
            raise ValidationError(f"Project code {code} is already in use")

    def get_project(self, *, actor: Actor, project_id: int) -> Project:
        project = self._projects.get_by_id(int(project_id))
        if not project:
            raise NotFoundError("Project", project_id)
        if not actor.is_admin and not project.is_assigned(actor.user_id):
            raise AuthorizationError("You are not assigned to this project")
        return project

    def list_projects(self, *, actor: Actor, cost_center_id: Optional[int] = None) -> Sequence[Project]:
        if actor.is_admin:
            return self._projects.list_projects(cost_center_id=cost_center_id)
        return self._projects.list_projects(employee_id=actor.user_id, cost_center_id=cost_center_id)

    def set_cost_center(self, *, actor: Actor, project_id: int, cost_center_id: Optional[int]) -> None:
        """Charge the project to a cost center, or detach it with None."""
        if not actor.is_admin:
            raise AuthorizationError("Admin access required")
        cost_center_id = self._check_cost_center(cost_center_id)
        if not self._projects.set_cost_center(int(project_id), cost_center_id):
            raise NotFoundError("Project", project_id)

    def assign_employee(self, *, actor: Actor, project_id: int, employee_id: int) -> None:
        if not actor.is_admin:
            raise AuthorizationError("Admin access required")
        if not self._projects.get_by_id(int(project_id)):
            raise NotFoundError("Project", project_id)

        employee = self._users.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("User", employee_id)
        if not employee.is_employee or not employee.is_active:
            raise ValidationError("Only active employees can be assigned to projects")

        self._projects.add_assignment(project_id=int(project_id), employee_id=int(employee_id))

    def unassign_employee(self, *, actor: Actor, project_id: int, employee_id: int) -> None:
        if not actor.is_admin:
            raise AuthorizationError("Admin access required")
        if not self._projects.remove_assignment(project_id=int(project_id), employee_id=int(employee_id)):
            raise NotFoundError("Project assignment", f"{project_id}/{employee_id}")
