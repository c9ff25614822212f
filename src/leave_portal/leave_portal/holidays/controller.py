from __future__ import annotations

from flask import Flask, request

from ..common.web import admin_required, current_user, login_required, ok, payload, written
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def _calendar():
        user = current_user()
        calendar = container.holiday_calendar(is_admin=user.is_admin)
        calendar.load()
        return calendar

    @app.route("/api/holidays", methods=["GET"], endpoint="holidays")
    @login_required
    def holidays():
        calendar = _calendar()
        year = request.args.get("year", type=int)
        items = calendar.get_by_year(year) if year else calendar.holidays
        return ok([h.to_dict() for h in items])

    @app.route("/api/holidays", methods=["POST"], endpoint="save_holiday")
    @admin_required
    def save_holiday():
        data = payload()
        result = _calendar().save(
            name=data.get("name", ""),
            day=data.get("date", ""),
            type_=data.get("type") or "national",
            description=data.get("description"),
            is_optional=bool(data.get("is_optional")),
            holiday_id=data.get("id") or None,
            created_by=current_user().id,
        )
        return written(result, 201)

    @app.route("/api/holidays/<holiday_id>", methods=["DELETE"], endpoint="delete_holiday")
    @admin_required
    def delete_holiday(holiday_id: str):
        source = _calendar().delete(holiday_id)
        return ok({"id": holiday_id}, source=source.value, synced=source.value == "remote")
