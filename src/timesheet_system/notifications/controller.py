from __future__ import annotations

from flask import Flask, request

from ..common.web import current_actor, flag, login_required, ok, optional_int
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.notification_service

    @app.get("/api/notifications", endpoint="list_notifications")
    @login_required
    def list_notifications():
        actor = current_actor()
        items = service.list_for(
            actor=actor,
            unread_only=flag(request.args.get("unread_only")),
            limit=optional_int(request.args.get("limit"), "Limit") or 50,
        )
        return ok(items, count=len(items), unread=service.unread_count(actor=actor))

    @app.get("/api/notifications/unread-count", endpoint="unread_notifications")
    @login_required
    def unread_count():
        return ok({"count": service.unread_count(actor=current_actor())})

    @app.post("/api/notifications/<int:notification_id>/read", endpoint="read_notification")
    @login_required
    def mark_read(notification_id: int):
        service.mark_read(actor=current_actor(), notification_id=notification_id)
        return ok(message="Notification marked as read")

    @app.post("/api/notifications/read-all", endpoint="read_all_notifications")
    @login_required
    def mark_all_read():
        count = service.mark_all_read(actor=current_actor())
        return ok({"updated": count}, message="All notifications marked as read")
