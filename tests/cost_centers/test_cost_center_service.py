from __future__ import annotations

from decimal import Decimal

import pytest

from fakes import InMemoryCostCenters, InMemoryProjects, InMemoryUsers
from timesheet_system.core.actor import Actor
from timesheet_system.core.enums import Role
from timesheet_system.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from timesheet_system.cost_centers.service import CostCenterService


@pytest.fixture
def env():
    users = InMemoryUsers()
    admin = users.add(full_name="Admin", role=Role.ADMIN)
    erin = users.add(full_name="Erin")
    cost_centers = InMemoryCostCenters()
    projects = InMemoryProjects()
    service = CostCenterService(cost_centers, projects, users)
    return service, cost_centers, projects, Actor.admin(admin.account_id), Actor.employee(erin.account_id)


def test_create_normalizes_and_rejects_duplicate_codes(env):
    service, cost_centers, _, admin, _ = env

    created = service.create_cost_center(
        actor=admin, name=" Engineering ", code="eng", budget="1500.50", department=" R&D ", manager_id=1
    )

    assert created.code == "ENG"
    assert created.name == "Engineering"
    assert created.department == "R&D"
    assert created.budget == Decimal("1500.50")
    assert cost_centers.get_by_id(created.cost_center_id) == created

    with pytest.raises(ValidationError):
        service.create_cost_center(actor=admin, name="Other", code="ENG")


@pytest.mark.parametrize(
    "overrides",
    [
        {"name": ""},
        {"code": "  "},
        {"code": "X" * 21},
        {"budget": "-1"},
        {"budget": "lots"},
        {"manager_id": 99},
    ],
)
def test_create_validates_input(env, overrides):
    service, _, _, admin, _ = env
    fields = dict(name="Engineering", code="ENG", budget="0")
    fields.update(overrides)
    with pytest.raises(ValidationError):
        service.create_cost_center(actor=admin, **fields)


def test_employees_read_but_do_not_write(env):
    service, cost_centers, _, _, erin = env
    cost_center = cost_centers.add(name="Engineering", code="ENG")

    assert service.get_cost_center(cost_center.cost_center_id) == cost_center
    assert service.list_cost_centers() == [cost_center]

    with pytest.raises(AuthorizationError):
        service.create_cost_center(actor=erin, name="Sales", code="SAL")
    with pytest.raises(AuthorizationError):
        service.update_cost_center(actor=erin, cost_center_id=cost_center.cost_center_id, budget="10")
    with pytest.raises(AuthorizationError):
        service.delete_cost_center(actor=erin, cost_center_id=cost_center.cost_center_id)


def test_list_filters(env):
    service, cost_centers, _, _, _ = env
    eng = cost_centers.add(name="Engineering", code="ENG", department="R&D")
    sales = cost_centers.add(name="Sales", code="SAL", department="Commercial")
    old = cost_centers.add(name="Old Support", code="SUP", is_active=False)

    assert service.list_cost_centers() == [old, sales, eng]
    assert service.list_cost_centers(department="R&D") == [eng]
    assert service.list_cost_centers(is_active=False) == [old]
    assert service.list_cost_centers(search="sal") == [sales]
    assert service.list_cost_centers(search="sup") == [old]


def test_update_changes_only_given_fields(env):
    service, cost_centers, _, admin, _ = env
    eng = cost_centers.add(name="Engineering", code="ENG", budget="100")
    cost_centers.add(name="Sales", code="SAL")

    updated = service.update_cost_center(actor=admin, cost_center_id=eng.cost_center_id, budget="250", is_active=False)

    assert updated.name == "Engineering"
    assert updated.budget == Decimal("250")
    assert updated.is_active is False
    assert cost_centers.get_by_id(eng.cost_center_id) == updated

    with pytest.raises(ValidationError):
        service.update_cost_center(actor=admin, cost_center_id=eng.cost_center_id, code="sal")
    with pytest.raises(NotFoundError):
        service.update_cost_center(actor=admin, cost_center_id=999, name="Ghost")


def test_delete_refuses_cost_center_in_use(env):
    service, cost_centers, projects, admin, _ = env
    eng = cost_centers.add(name="Engineering", code="ENG")
    project = projects.add(name="Portal", cost_center_id=eng.cost_center_id)

    with pytest.raises(ValidationError) as exc:
        service.delete_cost_center(actor=admin, cost_center_id=eng.cost_center_id)
    assert "1 project(s)" in str(exc.value)

    projects.set_cost_center(project.project_id, None)
    service.delete_cost_center(actor=admin, cost_center_id=eng.cost_center_id)
    assert cost_centers.get_by_id(eng.cost_center_id) is None

    with pytest.raises(NotFoundError):
        service.delete_cost_center(actor=admin, cost_center_id=eng.cost_center_id)
