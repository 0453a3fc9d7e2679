from __future__ import annotations

from flask import Flask, request

from ..common.validators import require_positive_id
from ..common.web import (
    admin_required,
    current_actor,
    date_value,
    enum_value,
    flag,
    json_body,
    login_required,
    ok,
    optional_date,
    optional_int,
)
from ..container import Container
from ..core.enums import EntryStatus
from ..core.exceptions import ValidationError
from .admission import AdmissionResult


def _admitted(result: AdmissionResult, message: str, status: int = 200):
    return ok(result.entry, message=message, status=status, warning=result.warning, limit_check=result.limit_check)


def register(app: Flask, container: Container) -> None:
    service = container.timesheet_service

    @app.get("/api/timesheets", endpoint="list_timesheets")
    @login_required
    def list_timesheets():
        args = request.args
        status = args.get("status")
        entries = service.list_entries(
            actor=current_actor(),
            employee_id=optional_int(args.get("employee_id"), "Employee"),
            project_id=optional_int(args.get("project_id"), "Project"),
            status=enum_value(EntryStatus, status, "Status") if status else None,
            start_date=optional_date(args.get("start_date"), "Start date"),
            end_date=optional_date(args.get("end_date"), "End date"),
            limit=optional_int(args.get("limit"), "Limit") or 200,
        )
        return ok(entries, count=len(entries))

    @app.post("/api/timesheets", endpoint="create_timesheet")
    @login_required
    def create_timesheet():
        payload = json_body()
        result = service.create_entry(
            actor=current_actor(),
            employee_id=optional_int(payload.get("employee_id"), "Employee"),
            project_id=require_positive_id(payload.get("project_id"), "Project"),
            entry_date=date_value(payload.get("date"), "Date"),
            hours=payload.get("hours"),
            description=payload.get("description"),
            status=enum_value(EntryStatus, payload.get("status") or EntryStatus.DRAFT.value, "Status"),
            bypass=flag(payload.get("bypass")),
        )
        return _admitted(result, "Timesheet created", status=201)

    @app.get("/api/timesheets/<int:entry_id>", endpoint="get_timesheet")
    @login_required
    def get_timesheet(entry_id: int):
        return ok(service.get_entry(actor=current_actor(), entry_id=entry_id))

    @app.put("/api/timesheets/<int:entry_id>", endpoint="update_timesheet")
    @login_required
    def update_timesheet(entry_id: int):
        payload = json_body()
        status = payload.get("status")
        result = service.update_entry(
            actor=current_actor(),
            entry_id=entry_id,
            project_id=optional_int(payload.get("project_id"), "Project"),
            entry_date=optional_date(payload.get("date"), "Date"),
            hours=payload.get("hours"),
            description=payload.get("description"),
            status=enum_value(EntryStatus, status, "Status") if status else None,
            bypass=flag(payload.get("bypass")),
        )
        return _admitted(result, "Timesheet updated")

    @app.delete("/api/timesheets/<int:entry_id>", endpoint="delete_timesheet")
    @login_required
    def delete_timesheet(entry_id: int):
        service.delete_entry(actor=current_actor(), entry_id=entry_id)
        return ok(message="Timesheet deleted")

    @app.post("/api/timesheets/<int:entry_id>/submit", endpoint="submit_timesheet")
    @login_required
    def submit_timesheet(entry_id: int):
        return _admitted(service.submit_entry(actor=current_actor(), entry_id=entry_id), "Timesheet submitted")

    @app.post("/api/timesheets/<int:entry_id>/approve", endpoint="approve_timesheet")
    @admin_required
    def approve_timesheet(entry_id: int):
        return ok(service.approve_entry(actor=current_actor(), entry_id=entry_id), message="Timesheet approved")

    @app.post("/api/timesheets/<int:entry_id>/reject", endpoint="reject_timesheet")
    @admin_required
    def reject_timesheet(entry_id: int):
        payload = json_body()
        entry = service.reject_entry(
            actor=current_actor(), entry_id=entry_id, reason=payload.get("rejection_reason") or ""
        )
        return ok(entry, message="Timesheet rejected")

    @app.post("/api/timesheets/bulk-approve", endpoint="bulk_approve_timesheets")
    @admin_required
    def bulk_approve():
        payload = json_body()
        entry_ids = payload.get("entry_ids")
        if not isinstance(entry_ids, list) or not entry_ids:
            raise ValidationError("entry_ids must be a non-empty list")
        count = service.bulk_approve(
            actor=current_actor(), entry_ids=[require_positive_id(e, "Entry") for e in entry_ids]
        )
        return ok({"approved": count}, message=f"{count} timesheet(s) approved")
