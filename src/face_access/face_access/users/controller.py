from __future__ import annotations

from datetime import timedelta

from flask import Flask, jsonify, request, session

from ..common.web import SESSION_KEY, current_actor, error_response, login_required
from ..container import Container
from ..core.constants import DEFAULT_SESSION_DAYS


def register(app: Flask, container: Container) -> None:
    app.permanent_session_lifetime = timedelta(days=DEFAULT_SESSION_DAYS)

    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    def login():
        data = request.get_json(silent=True) or {}
        try:
            actor = container.auth_service.authenticate(data.get("email", ""), data.get("password", ""))
        except Exception as e:
            return error_response(e)

        session.clear()
        session.permanent = bool(data.get("remember_me"))
        session[SESSION_KEY] = actor.to_session()
        return jsonify({"success": True, "user": actor.to_session()}), 200

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return jsonify({"success": True}), 200

    @app.route("/api/auth/me", methods=["GET"], endpoint="me")
    @login_required
    def me():
        return jsonify({"success": True, "user": current_actor().to_session()}), 200
