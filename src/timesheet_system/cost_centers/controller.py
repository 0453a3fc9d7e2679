from __future__ import annotations

from flask import Flask, request

from ..common.web import admin_required, current_actor, flag, json_body, login_required, ok, optional_int
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.get("/api/cost-centers", endpoint="list_cost_centers")
    @login_required
    def list_cost_centers():
        is_active = request.args.get("is_active")
        cost_centers = container.cost_center_service.list_cost_centers(
            department=request.args.get("department"),
            is_active=flag(is_active) if is_active is not None else None,
            search=request.args.get("search"),
        )
        return ok(cost_centers, count=len(cost_centers))

    @app.get("/api/cost-centers/<int:cost_center_id>", endpoint="get_cost_center")
    @login_required
    def get_cost_center(cost_center_id: int):
        return ok(container.cost_center_service.get_cost_center(cost_center_id))

    @app.post("/api/cost-centers", endpoint="create_cost_center")
    @admin_required
    def create_cost_center():
        payload = json_body()
        cost_center = container.cost_center_service.create_cost_center(
            actor=current_actor(),
            name=payload.get("name") or "",
            code=payload.get("code") or "",
            description=payload.get("description"),
            budget=payload.get("budget", 0),
            department=payload.get("department"),
            manager_id=optional_int(payload.get("manager_id"), "Manager"),
            is_active=flag(payload.get("is_active", True)),
        )
        return ok(cost_center, message="Cost center created successfully", status=201)

    @app.put("/api/cost-centers/<int:cost_center_id>", endpoint="update_cost_center")
    @admin_required
    def update_cost_center(cost_center_id: int):
        payload = json_body()
        cost_center = container.cost_center_service.update_cost_center(
            actor=current_actor(),
            cost_center_id=cost_center_id,
            name=payload.get("name"),
            code=payload.get("code"),
            description=payload.get("description"),
            budget=payload.get("budget"),
            department=payload.get("department"),
            manager_id=optional_int(payload.get("manager_id"), "Manager"),
            is_active=flag(payload["is_active"]) if "is_active" in payload else None,
        )
        return ok(cost_center, message="Cost center updated successfully")

    @app.delete("/api/cost-centers/<int:cost_center_id>", endpoint="delete_cost_center")
    @admin_required
    def delete_cost_center(cost_center_id: int):
        container.cost_center_service.delete_cost_center(actor=current_actor(), cost_center_id=cost_center_id)
        return ok(message="Cost center deleted successfully")
