from __future__ import annotations

from flask import Flask, request, session

from ..common.web import admin_required, current_actor, enum_value, json_body, login_required, ok
from ..container import Container
from ..core.enums import Role
from .service import AccountView


def register(app: Flask, container: Container) -> None:
    @app.post("/api/auth/login", endpoint="login")
    def login():
        payload = json_body()
        s_user = container.auth_service.authenticate(
            str(payload.get("email") or ""),
            str(payload.get("password") or ""),
            client_key=request.remote_addr or "unknown",
        )

        session.clear()
        session["user_id"] = s_user.user_id
        session["name"] = s_user.full_name
        session["role"] = s_user.role.value
        return ok(s_user, message="Login successful")

    @app.post("/api/auth/logout", endpoint="logout")
    def logout():
        session.clear()
        return ok(message="Logged out")

    @app.get("/api/auth/me", endpoint="me")
    @login_required
    def me():
        return ok(container.auth_service.get_session_user(int(session["user_id"])))

    @app.get("/api/users", endpoint="list_users")
    @admin_required
    def list_users():
        role = request.args.get("role")
        accounts = container.user_service.list_accounts(
            actor=current_actor(),
            role=enum_value(Role, role, "Role") if role else None,
        )
        return ok(accounts, count=len(accounts))

    @app.post("/api/users", endpoint="create_user")
    @admin_required
    def create_user():
        payload = json_body()
        user_id = container.user_service.create_account(
            actor=current_actor(),
            full_name=payload.get("full_name") or "",
            email=payload.get("email") or "",
            password=payload.get("password") or "",
            role=enum_value(Role, payload.get("role") or Role.EMPLOYEE.value, "Role"),
            department=payload.get("department"),
            position=payload.get("position"),
        )
        account = container.users_repo.get_by_id(user_id)
        return ok(AccountView.of(account) if account else {"user_id": user_id}, message="User created", status=201)

    @app.post("/api/users/<int:user_id>/activate", endpoint="activate_user")
    @admin_required
    def activate_user(user_id: int):
        container.user_service.set_active(actor=current_actor(), user_id=user_id, is_active=True)
        return ok(message="User activated")

    @app.post("/api/users/<int:user_id>/deactivate", endpoint="deactivate_user")
    @admin_required
    def deactivate_user(user_id: int):
        container.user_service.set_active(actor=current_actor(), user_id=user_id, is_active=False)
        return ok(message="User deactivated")

    @app.post("/api/users/<int:user_id>/unlock", endpoint="unlock_user")
    @admin_required
    def unlock_user(user_id: int):
        container.user_service.unlock_account(actor=current_actor(), user_id=user_id)
        return ok(message="User unlocked")

    @app.delete("/api/users/<int:user_id>", endpoint="delete_user")
    @admin_required
    def delete_user(user_id: int):
        container.user_service.delete_account(actor=current_actor(), user_id=user_id)
        return ok(message="User deleted")

    @app.get("/api/profile", endpoint="get_profile")
    @login_required
    def get_profile():
        return ok(container.profile_service.get_profile(actor=current_actor()))

    @app.put("/api/profile", endpoint="update_profile")
    @login_required
    def update_profile():
        payload = json_body()
        profile = container.profile_service.update_profile(
            actor=current_actor(),
            full_name=payload.get("full_name"),
            department=payload.get("department"),
            position=payload.get("position"),
        )
        session["name"] = profile.account.full_name
        return ok(profile, message="Profile updated successfully")

    @app.put("/api/profile/change-password", endpoint="change_password")
    @login_required
    def change_password():
        payload = json_body()
        container.profile_service.change_password(
            actor=current_actor(),
            current_password=str(payload.get("current_password") or ""),
            new_password=str(payload.get("new_password") or ""),
        )
        return ok(message="Password changed successfully")
