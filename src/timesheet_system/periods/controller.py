from __future__ import annotations

from flask import Flask, request

from ..common.validators import require_positive_id
from ..common.web import (
    admin_required,
    current_actor,
    date_value,
    enum_value,
    json_body,
    login_required,
    ok,
    optional_date,
)
from ..container import Container
from ..core.enums import PeriodStatus, PeriodVisibility
from ..core.exceptions import ValidationError


def _members(payload: dict):
    members = payload.get("restricted_members")
    if members is None:
        return None
    if not isinstance(members, list):
        raise ValidationError("restricted_members must be a list of employee ids")
    return [require_positive_id(m, "Member") for m in members]


def register(app: Flask, container: Container) -> None:
    @app.get("/api/timesheet-periods", endpoint="list_periods")
    @login_required
    def list_periods():
        status = request.args.get("status")
        periods = container.period_service.list_periods(
            actor=current_actor(),
            status=enum_value(PeriodStatus, status, "Status") if status else None,
        )
        return ok(periods, count=len(periods))

    @app.post("/api/timesheet-periods", endpoint="create_period")
    @admin_required
    def create_period():
        payload = json_body()
        period = container.period_service.create_period(
            actor=current_actor(),
            name=payload.get("name") or "",
            start_date=date_value(payload.get("start_date"), "Start date"),
            end_date=date_value(payload.get("end_date"), "End date"),
            status=enum_value(PeriodStatus, payload.get("status") or PeriodStatus.UPCOMING.value, "Status"),
            visibility=enum_value(
                PeriodVisibility, payload.get("visibility") or PeriodVisibility.ALL_EMPLOYEES.value, "Visibility"
            ),
            restricted_members=_members(payload) or [],
            description=payload.get("description"),
        )
        return ok(period, message="Timesheet period created", status=201)

    @app.get("/api/timesheet-periods/active/my-periods", endpoint="my_active_periods")
    @login_required
    def my_active_periods():
        periods = container.period_service.my_active_periods(actor=current_actor())
        return ok(periods, count=len(periods))

    @app.post("/api/timesheet-periods/validate-date", endpoint="validate_period_date")
    @login_required
    def validate_date():
        payload = json_body()
        result = container.period_service.validate_date(
            actor=current_actor(),
            day=date_value(payload.get("date"), "Date"),
        )
        return ok(result)

    @app.get("/api/timesheet-periods/<int:period_id>", endpoint="get_period")
    @login_required
    def get_period(period_id: int):
        return ok(container.period_service.get_period(actor=current_actor(), period_id=period_id))

    @app.put("/api/timesheet-periods/<int:period_id>", endpoint="update_period")
    @admin_required
    def update_period(period_id: int):
        payload = json_body()
        status = payload.get("status")
        visibility = payload.get("visibility")
        period = container.period_service.update_period(
            actor=current_actor(),
            period_id=period_id,
            name=payload.get("name"),
            start_date=optional_date(payload.get("start_date"), "Start date"),
            end_date=optional_date(payload.get("end_date"), "End date"),
            status=enum_value(PeriodStatus, status, "Status") if status else None,
            visibility=enum_value(PeriodVisibility, visibility, "Visibility") if visibility else None,
            restricted_members=_members(payload),
            description=payload.get("description"),
        )
        return ok(period, message="Timesheet period updated")

    @app.delete("/api/timesheet-periods/<int:period_id>", endpoint="delete_period")
    @admin_required
    def delete_period(period_id: int):
        container.period_service.delete_period(actor=current_actor(), period_id=period_id)
        return ok(message="Timesheet period deleted")
