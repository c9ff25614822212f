from __future__ import annotations

import logging

from flask import Flask, session

from ..common.datetime_utils import datetime_from_json, datetime_to_json
from ..common.web import admin_required, current_user, error_body, login_required, ok, payload
from ..container import Container
from .service import session_expired

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.before_request
    def enforce_session_timeout():
        if "user" not in session:
            return None

        now = container.clock()
        last_activity = datetime_from_json(session.get("last_activity"))
        if session_expired(last_activity, now, container.session_timeout_minutes):
            logger.info("auth: session for %s expired after inactivity", session["user"].get("employee_id"))
            session.clear()
            container.auth_service.sign_out()
            return error_body("session-expired", "Your session has expired. Please sign in again.", 401)

        session["last_activity"] = datetime_to_json(now)
        return None

    @app.route("/api/auth/signup", methods=["POST"], endpoint="signup")
    def signup():
        data = payload()
        employee = container.auth_service.sign_up(
            name=data.get("name", ""),
            email=data.get("email", ""),
            password=data.get("password", ""),
            employee_id=data.get("employee_id", ""),
            phone=data.get("phone"),
            department=data.get("department"),
            position=data.get("position"),
            # Open admin signup: the role comes from the form, unchecked.
            role=data.get("role") or "employee",
        )
        return ok(employee.to_dict(), 201)

    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    def login():
        data = payload()
        user = container.auth_service.sign_in(
            data.get("identifier", ""),
            data.get("password", ""),
            data.get("role") or None,
        )

        session.clear()
        session["user"] = user.to_dict()
        session["last_activity"] = datetime_to_json(container.clock())
        return ok(user.to_dict())

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        container.auth_service.sign_out()
        return ok()

    @app.route("/api/auth/me", methods=["GET"], endpoint="me")
    @login_required
    def me():
        return ok(current_user().to_dict())

    @app.route("/api/profile", methods=["GET"], endpoint="profile")
    @login_required
    def profile():
        return ok(container.employee_service.get_profile(current_user().id).to_dict())

    @app.route("/api/profile", methods=["PUT", "PATCH"], endpoint="update_profile")
    @login_required
    def update_profile():
        data = payload()
        employee = container.employee_service.update_profile(
            current_user().id,
            name=data.get("name"),
            phone=data.get("phone"),
            department=data.get("department"),
            position=data.get("position"),
        )
        return ok(employee.to_dict())

    @app.route("/api/admin/employees", methods=["GET"], endpoint="admin_employees")
    @admin_required
    def admin_employees():
        employees = container.employee_service.list_employees(current_role=current_user().role)
        return ok([e.to_dict() for e in employees])
