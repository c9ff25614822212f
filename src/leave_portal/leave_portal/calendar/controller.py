from __future__ import annotations

from flask import Flask, request

from ..common.web import admin_required, current_user, login_required, ok, parse_day
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def _scope():
        """Employees always see themselves; admins see everyone unless they pick an employee."""
        user = current_user()
        if user.is_admin:
            return request.args.get("employee_id") or None
        return user.id

    @app.route("/api/calendar/<int:year>/<int:month>", methods=["GET"], endpoint="calendar_month")
    @login_required
    def calendar_month(year: int, month: int):
        user = current_user()
        service = container.calendar_service(user.id, is_admin=user.is_admin)
        return ok(service.month_view(year, month, employee_id=_scope()))

    @app.route("/api/calendar/day/<day>", methods=["GET"], endpoint="calendar_day")
    @login_required
    def calendar_day(day: str):
        user = current_user()
        service = container.calendar_service(user.id, is_admin=user.is_admin)
        return ok(service.day_detail(parse_day(day), employee_id=_scope()))

    @app.route("/api/admin/stats", methods=["GET"], endpoint="admin_stats")
    @admin_required
    def admin_stats():
        user = current_user()
        service = container.calendar_service(user.id, is_admin=True)
        return ok(service.today_stats().to_dict())
