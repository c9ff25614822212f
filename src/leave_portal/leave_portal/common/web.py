from __future__ import annotations

from datetime import date
from functools import wraps
from typing import Any, Optional

from flask import jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..employees.model import SessionUser
from .datetime_utils import parse_iso_date


def current_user() -> Optional[SessionUser]:
    data = session.get("user")
    return SessionUser.from_dict(data) if data else None


def error_body(code: str, message: str, status: int, **extra):
    return jsonify({"success": False, "error": code, "message": message, **extra}), status


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if current_user() is None:
            return error_body("authentication-error", "Please sign in to continue", 401)
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        user = current_user()
        if user is None:
            return error_body("authentication-error", "Please sign in to continue", 401)
        if user.role != Role.ADMIN:
            return error_body("authorization-error", "Administrator access required", 403)
        return view(*args, **kwargs)

    return wrapper


def payload() -> dict:
    """JSON body, or form fields for plain form posts."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def ok(data: Any = None, status: int = 200, **extra):
    return jsonify({"success": True, "data": data, **extra}), status


def parse_day(value: str) -> date:
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError("Invalid date format")


def written(result, status: int = 200):
    """Response for a WriteResult: the record plus where it was stored."""
    body = result.to_dict()
    return ok(body["data"], status, source=body["source"], synced=body["synced"])
