from __future__ import annotations

import logging
from datetime import date, datetime
from functools import wraps
from typing import Any, Optional

from flask import Flask, jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..core.actor import Actor
from ..core.enums import Role
from ..core.exceptions import DomainError, ValidationError
from .datetime_utils import parse_iso_date, parse_iso_datetime
from .serializers import to_jsonable

logger = logging.getLogger(__name__)


def ok(data: Any = None, *, message: str | None = None, status: int = 200, **extra: Any):
    body: dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = to_jsonable(data)
    for key, value in extra.items():
        body[key] = to_jsonable(value)
    return jsonify(body), status


def fail(message: str, *, status: int, code: str, details: dict | None = None):
    body: dict[str, Any] = {"success": False, "message": message, "code": code}
    if details:
        body["details"] = to_jsonable(details)
    return jsonify(body), status


def json_body() -> dict:
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def date_value(value: Any, field_name: str) -> date:
    try:
        return parse_iso_date(str(value))
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a date (YYYY-MM-DD)")


def optional_date(value: Any, field_name: str) -> Optional[date]:
    if value in (None, ""):
        return None
    return date_value(value, field_name)


def optional_datetime(value: Any, field_name: str) -> Optional[datetime]:
    if value in (None, ""):
        return None
    try:
        return parse_iso_datetime(str(value))
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an ISO date or timestamp")


def optional_int(value: Any, field_name: str) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")


def enum_value(enum_cls, value: Any, field_name: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}")


def flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in {"1", "true", "yes", "on"}


def current_actor() -> Actor:
    return Actor(user_id=int(session["user_id"]), role=Role(session["role"]))


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return fail("Please log in to continue", status=401, code="UNAUTHENTICATED")
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return fail("Please log in to continue", status=401, code="UNAUTHENTICATED")
        if session.get("role") != Role.ADMIN.value:
            return fail("Admin access required", status=403, code="FORBIDDEN")
        return view(*args, **kwargs)

    return wrapper


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        return fail(str(exc), status=exc.status_code, code=exc.code, details=exc.details())

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        return fail(exc.description or exc.name, status=exc.code or 500, code=exc.name.upper().replace(" ", "_"))

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        if app.config.get("DEBUG"):
            return fail(f"Internal error: {exc}", status=500, code="INTERNAL_ERROR")
        return fail("An unexpected error occurred", status=500, code="INTERNAL_ERROR")
