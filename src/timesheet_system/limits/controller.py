from __future__ import annotations

from typing import Any

from flask import Flask, request

from ..common.validators import require_positive_id
from ..common.web import (
    admin_required,
    current_actor,
    date_value,
    flag,
    json_body,
    login_required,
    ok,
    optional_date,
    optional_datetime,
    optional_int,
)
from ..container import Container
from ..core.exceptions import ValidationError


def _limit_fields(payload: dict) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "weekly_limit": payload.get("weekly_limit"),
        "daily_limit": payload.get("daily_limit"),
        "warning_threshold": payload.get("warning_threshold"),
        "notes": payload.get("notes"),
        "effective_from": optional_datetime(payload.get("effective_from"), "Effective from"),
        "effective_to": optional_datetime(payload.get("effective_to"), "Effective to"),
    }
    if "enforce_limit" in payload:
        fields["enforce_limit"] = flag(payload.get("enforce_limit"))
    return fields


def register(app: Flask, container: Container) -> None:
    @app.get("/api/work-hour-limits", endpoint="list_limits")
    @admin_required
    def list_limits():
        limits = container.hour_limit_service.list_limits(
            actor=current_actor(), custom_only=flag(request.args.get("custom_only"))
        )
        return ok(limits, count=len(limits))

    @app.post("/api/work-hour-limits", endpoint="set_limit")
    @admin_required
    def set_limit():
        payload = json_body()
        limit = container.hour_limit_service.set_limit(
            actor=current_actor(),
            employee_id=require_positive_id(payload.get("employee_id"), "Employee"),
            **_limit_fields(payload),
        )
        return ok(limit, message="Hour limit saved")

    @app.get("/api/work-hour-limits/my-limit", endpoint="my_limit")
    @login_required
    def my_limit():
        actor = current_actor()
        return ok(container.hour_limit_service.get_limit(actor=actor, employee_id=actor.user_id))

    @app.get("/api/work-hour-limits/employee/<int:employee_id>", endpoint="employee_limit")
    @login_required
    def employee_limit(employee_id: int):
        return ok(container.hour_limit_service.get_limit(actor=current_actor(), employee_id=employee_id))

    @app.delete("/api/work-hour-limits/employee/<int:employee_id>", endpoint="reset_limit")
    @admin_required
    def reset_limit(employee_id: int):
        container.hour_limit_service.reset_limit(actor=current_actor(), employee_id=employee_id)
        return ok(message="Hour limit reset to defaults")

    @app.post("/api/work-hour-limits/bulk-update", endpoint="bulk_update_limits")
    @admin_required
    def bulk_update():
        payload = json_body()
        employee_ids = payload.get("employee_ids")
        if not isinstance(employee_ids, list) or not employee_ids:
            raise ValidationError("employee_ids must be a non-empty list")
        results = container.hour_limit_service.bulk_update(
            actor=current_actor(),
            employee_ids=[require_positive_id(e, "Employee") for e in employee_ids],
            **_limit_fields(payload),
        )
        updated = sum(1 for r in results if r.success)
        return ok(results, message=f"Updated {updated} of {len(results)} hour limits")

    @app.get("/api/work-hour-limits/check-hours/<int:employee_id>", endpoint="week_summary")
    @login_required
    def week_summary(employee_id: int):
        summary = container.hour_limit_service.week_summary(
            actor=current_actor(),
            employee_id=employee_id,
            on=optional_date(request.args.get("date"), "Date"),
        )
        return ok(summary)

    @app.post("/api/work-hour-limits/validate", endpoint="validate_hours")
    @login_required
    def validate_hours():
        payload = json_body()
        actor = current_actor()
        result = container.hour_limit_service.check(
            actor=actor,
            employee_id=actor.resolve_employee(optional_int(payload.get("employee_id"), "Employee")),
            day=date_value(payload.get("date"), "Date"),
            hours=payload.get("hours"),
            exclude_entry_id=optional_int(payload.get("exclude_entry_id"), "Entry"),
        )
        return ok(result)
