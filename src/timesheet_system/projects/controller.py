from __future__ import annotations

from flask import Flask, request

from ..common.validators import require_positive_id
from ..common.web import admin_required, current_actor, enum_value, json_body, login_required, ok, optional_int
from ..container import Container
from ..core.enums import ProjectStatus


def register(app: Flask, container: Container) -> None:
    @app.get("/api/projects", endpoint="list_projects")
    @login_required
    def list_projects():
        projects = container.project_service.list_projects(
            actor=current_actor(),
            cost_center_id=optional_int(request.args.get("cost_center_id"), "Cost center"),
        )
        return ok(projects, count=len(projects))

    @app.post("/api/projects", endpoint="create_project")
    @admin_required
    def create_project():
        payload = json_body()
        actor = current_actor()
        project_id = container.project_service.create_project(
            actor=actor,
            name=payload.get("name") or "",
            code=payload.get("code") or "",
            status=enum_value(ProjectStatus, payload.get("status") or ProjectStatus.PLANNING.value, "Status"),
            description=payload.get("description"),
            cost_center_id=optional_int(payload.get("cost_center_id"), "Cost center"),
        )
        project = container.project_service.get_project(actor=actor, project_id=project_id)
        return ok(project, message="Project created", status=201)

    @app.get("/api/projects/<int:project_id>", endpoint="get_project")
    @login_required
    def get_project(project_id: int):
        return ok(container.project_service.get_project(actor=current_actor(), project_id=project_id))

    @app.put("/api/projects/<int:project_id>/cost-center", endpoint="set_project_cost_center")
    @admin_required
    def set_project_cost_center(project_id: int):
        payload = json_body()
        actor = current_actor()
        container.project_service.set_cost_center(
            actor=actor,
            project_id=project_id,
            cost_center_id=optional_int(payload.get("cost_center_id"), "Cost center"),
        )
        return ok(container.project_service.get_project(actor=actor, project_id=project_id))

    @app.post("/api/projects/<int:project_id>/assignments", endpoint="assign_employee")
    @admin_required
    def assign_employee(project_id: int):
        payload = json_body()
        container.project_service.assign_employee(
            actor=current_actor(),
            project_id=project_id,
            employee_id=require_positive_id(payload.get("employee_id"), "Employee"),
        )
        return ok(message="Employee assigned", status=201)

    @app.delete("/api/projects/<int:project_id>/assignments/<int:employee_id>", endpoint="unassign_employee")
    @admin_required
    def unassign_employee(project_id: int, employee_id: int):
        container.project_service.unassign_employee(
            actor=current_actor(), project_id=project_id, employee_id=employee_id
        )
        return ok(message="Employee unassigned")
