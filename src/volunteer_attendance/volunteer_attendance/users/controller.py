from __future__ import annotations

from flask import Flask, jsonify, request, session

from ..container import Container
from ..core.enums import Role
from .guards import current_user_id, login_required


def register(app: Flask, container: Container) -> None:
    def _login(s_user) -> None:
        session.clear()
        session["user_id"] = s_user.user_id
        session["name"] = s_user.name
        session["role"] = s_user.role.value

    @app.route("/api/auth/register", methods=["POST"], endpoint="auth_register")
    def auth_register():
        data = request.get_json(silent=True) or {}
        # only an admin may hand out elevated roles; self-registration is always "user"
        is_admin = session.get("role") == Role.ADMIN.value
        user = container.user_service.register(
            name=data.get("name", ""),
            email=data.get("email", ""),
            password=data.get("password", ""),
            role=data.get("role") if is_admin else None,
        )
        # a logged-in user registering someone else keeps their own session
        if "user_id" not in session:
            _login(container.auth_service.authenticate(user.email, data.get("password", "")))
        return jsonify({"message": "User registered successfully", "user": user.to_dict()}), 201

    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def auth_login():
        data = request.get_json(silent=True) or {}
        s_user = container.auth_service.authenticate(data.get("email", ""), data.get("password", ""))
        _login(s_user)
        user = container.user_service.get_profile(s_user.user_id)
        return jsonify({"message": "Login successful", "user": user.to_dict()})

    @app.route("/api/auth/logout", methods=["POST"], endpoint="auth_logout")
    def auth_logout():
        session.clear()
        return jsonify({"message": "Logged out", "user": None})

    @app.route("/api/auth/profile", methods=["GET"], endpoint="auth_profile")
    @login_required
    def auth_profile():
        user = container.user_service.get_profile(current_user_id())
        return jsonify(user.to_dict())

    @app.route("/api/auth/profile", methods=["PUT"], endpoint="auth_profile_update")
    @login_required
    def auth_profile_update():
        data = request.get_json(silent=True) or {}
        user = container.user_service.update_profile(
            current_user_id(),
            name=data.get("name"),
            email=data.get("email"),
            current_password=data.get("currentPassword"),
            new_password=data.get("newPassword"),
        )
        session["name"] = user.name
        return jsonify(user.to_dict())
