from __future__ import annotations

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Any, Optional, Sequence

from ..common.validators import require_decimal, require_max_length, require_non_empty
from ..core.actor import Actor
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..database.mysql_base import UniqueViolation
from ..projects.repository import ProjectRepository
from ..users.repository import UserRepository
from .model import CostCenter
from .repository import CostCenterRepository

logger = logging.getLogger(__name__)


def clean_budget(value: Any) -> Decimal:
    budget = require_decimal(value, "Budget")
    if budget < 0:
        raise ValidationError("Budget cannot be negative")
    return budget


def _optional_text(value: Optional[str], field_name: str, max_len: int) -> Optional[str]:
    value = (value or "").strip() or None
    require_max_length(value, field_name, max_len)
    return value


class CostCenterService:
    """Cost centers are readable by every signed-in user; only admins change them."""

    def __init__(self, cost_centers: CostCenterRepository, projects: ProjectRepository, users: UserRepository):
        self._cost_centers = cost_centers
        self._projects = projects
        self._users = users

    @staticmethod
    def _require_admin(actor: Actor) -> None:
        if not actor.is_admin:
            raise AuthorizationError("Admin access required")

    def _check_manager(self, manager_id: Optional[int]) -> Optional[int]:
        if manager_id is None:
            return None
        manager = self._users.get_by_id(int(manager_id))
        if not manager or not manager.is_active:
            raise ValidationError("Cost center manager must be an active user")
        return manager.account_id

    def list_cost_centers(
        self,
        *,
        department: Optional[str] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> Sequence[CostCenter]:
        return self._cost_centers.list_cost_centers(
            department=(department or "").strip() or None,
            is_active=is_active,
            search=(search or "").strip() or None,
        )

    def get_cost_center(self, cost_center_id: int) -> CostCenter:
        cost_center = self._cost_centers.get_by_id(int(cost_center_id))
        if not cost_center:
            raise NotFoundError("Cost center", cost_center_id)
        return cost_center

    def create_cost_center(
        self,
        *,
        actor: Actor,
        name: str,
        code: str,
        description: Optional[str] = None,
        budget: Any = 0,
        department: Optional[str] = None,
        manager_id: Optional[int] = None,
        is_active: bool = True,
    ) -> CostCenter:
        self._require_admin(actor)

        name = require_non_empty(name, "Cost center name")
        require_max_length(name, "Cost center name", 100)
        code = require_non_empty(code, "Cost center code").upper()
        require_max_length(code, "Cost center code", 20)

        cost_center = CostCenter(
            cost_center_id=0,
            name=name,
            code=code,
            description=_optional_text(description, "Description", 500),
            budget=clean_budget(budget),
            department=_optional_text(department, "Department", 100),
            manager_id=self._check_manager(manager_id),
            is_active=bool(is_active),
        )
        try:
            cost_center_id = self._cost_centers.create_cost_center(
                name=cost_center.name,
                code=cost_center.code,
                description=cost_center.description,
                budget=cost_center.budget,
                department=cost_center.department,
                manager_id=cost_center.manager_id,
                is_active=cost_center.is_active,
            )
        except UniqueViolation:
            raise ValidationError(f"Cost center code {code} is already in use")

        logger.info("Cost center %s (%s) created by %s", cost_center_id, code, actor.user_id)
        return replace(cost_center, cost_center_id=cost_center_id)

    def update_cost_center(
        self,
        *,
        actor: Actor,
        cost_center_id: int,
        name: Optional[str] = None,
        code: Optional[str] = None,
        description: Optional[str] = None,
        budget: Optional[Any] = None,
        department: Optional[str] = None,
        manager_id: Optional[int] = None,
        is_active: Optional[bool] = None,
    ) -> CostCenter:
        self._require_admin(actor)
        current = self.get_cost_center(cost_center_id)

        changes: dict[str, Any] = {}
        if name is not None:
            changes["name"] = require_non_empty(name, "Cost center name")
            require_max_length(changes["name"], "Cost center name", 100)
        if code is not None:
            changes["code"] = require_non_empty(code, "Cost center code").upper()
            require_max_length(changes["code"], "Cost center code", 20)
        if description is not None:
            changes["description"] = _optional_text(description, "Description", 500)
        if budget is not None:
            changes["budget"] = clean_budget(budget)
        if department is not None:
            changes["department"] = _optional_text(department, "Department", 100)
        if manager_id is not None:
            changes["manager_id"] = self._check_manager(manager_id)
        if is_active is not None:
            changes["is_active"] = bool(is_active)

        updated = replace(current, **changes)
        try:
            self._cost_centers.update_cost_center(
                updated.cost_center_id,
                name=updated.name,
                code=updated.code,
                description=updated.description,
                budget=updated.budget,
                department=updated.department,
                manager_id=updated.manager_id,
                is_active=updated.is_active,
            )
        except UniqueViolation:
            raise ValidationError(f"Cost center code {updated.code} is already in use")
        return updated

    def delete_cost_center(self, *, actor: Actor, cost_center_id: int) -> None:
        self._require_admin(actor)
        current = self.get_cost_center(cost_center_id)

        in_use = self._projects.count_by_cost_center(current.cost_center_id)
        if in_use:
            raise ValidationError(f"Cannot delete cost center. It is being used by {in_use} project(s)")

        self._cost_centers.delete_cost_center(current.cost_center_id)
        logger.info("Cost center %s deleted by %s", current.cost_center_id, actor.user_id)
