from __future__ import annotations

from flask import Flask, request, session

from ..common.http import current_principal, json_body, login_required, ok, optional_bool
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def login():
        data = json_body()
        user = container.auth_service.authenticate(data.get("username", ""), data.get("password", ""))

        session.clear()
        session["user_id"] = user.user_id
        session["name"] = user.full_name
        session["role"] = user.role.value
        return ok({"user_id": user.user_id, "full_name": user.full_name, "role": user.role.value})

    @app.route("/api/auth/logout", methods=["POST"], endpoint="auth_logout")
    def logout():
        session.clear()
        return ok(message="Logged out")

    @app.route("/api/auth/me", methods=["GET"], endpoint="auth_me")
    @login_required
    def me():
        user = container.auth_service.current_user(current_principal())
        return ok(user.to_public_dict())

    @app.route("/api/admin/users", methods=["GET"], endpoint="admin_users")
    @login_required
    def list_users():
        users = container.user_service.list_users(current_principal(), role=request.args.get("role"))
        return ok([u.to_public_dict() for u in users], count=len(users))

    @app.route("/api/admin/users", methods=["POST"], endpoint="admin_users_create")
    @login_required
    def create_user():
        data = json_body()
        user = container.user_service.create_account(
            current_principal(),
            full_name=data.get("full_name", ""),
            username=data.get("username", ""),
            password=data.get("password", ""),
            role=data.get("role", ""),
            phone=data.get("phone"),
        )
        return ok(user.to_public_dict(), status=201)

    @app.route("/api/admin/users/<int:user_id>", methods=["GET"], endpoint="admin_users_get")
    @login_required
    def get_user(user_id: int):
        return ok(container.user_service.get_user(current_principal(), user_id).to_public_dict())

    @app.route("/api/admin/users/<int:user_id>", methods=["PUT"], endpoint="admin_users_update")
    @login_required
    def update_user(user_id: int):
        data = json_body()
        user = container.user_service.update_account(
            current_principal(),
            user_id,
            full_name=data.get("full_name"),
            phone=data.get("phone"),
            is_active=optional_bool(data, "is_active"),
        )
        return ok(user.to_public_dict())

    @app.route("/api/admin/users/<int:user_id>", methods=["DELETE"], endpoint="admin_users_delete")
    @login_required
    def delete_user(user_id: int):
        container.user_service.delete_user(current_principal(), user_id)
        return ok(message="User deleted")
