from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.constants import (
    MAX_WORKING_HOURS,
    MIN_WORKING_HOURS,
    REASON_MAX_LENGTH,
    REASON_MIN_LENGTH,
    SANITIZED_MAX_LENGTH,
)
from ..core.enums import LeaveType
from ..core.exceptions import ValidationError
from .datetime_utils import parse_iso_date

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_PHONE_RE = re.compile(r"^\+?[1-9]\d{1,14}$")
_EMPLOYEE_ID_RE = re.compile(r"^[a-zA-Z0-9_-]+$")
_NAME_RE = re.compile(r"^[a-zA-Z\s'-]+$")
_SPECIAL_RE = re.compile(r"[!@#$%^&*(),.?\":{}|<>]")

COMMON_PASSWORDS = {
    "password", "123456", "123456789", "qwerty", "abc123",
    "password123", "admin", "letmein", "welcome", "monkey",
}


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    errors: list[str] = field(default_factory=list)

    @property
    def error(self) -> Optional[str]:
        return self.errors[0] if self.errors else None


def _ok() -> ValidationResult:
    return ValidationResult(True, [])


def _fail(*errors: str) -> ValidationResult:
    return ValidationResult(False, list(errors))


def ensure_valid(result: ValidationResult) -> None:
    if not result.is_valid:
        raise ValidationError(result.errors)


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters long")
    return value


def sanitize_input(text, max_length: int = SANITIZED_MAX_LENGTH) -> str:
    """Trim, drop angle brackets and quotes, collapse whitespace, cap length."""
    if not isinstance(text, str):
        return ""
    cleaned = text.strip()
    cleaned = re.sub(r"[<>]", "", cleaned)
    cleaned = re.sub(r"['\"]", "", cleaned)
    cleaned = re.sub(r"\s+", " ", cleaned)
    return cleaned[:max_length]


def escape_html(text: str) -> str:
    table = {"&": "&amp;", "<": "&lt;", ">": "&gt;", '"': "&quot;", "'": "&#039;"}
    return "".join(table.get(ch, ch) for ch in text)


def validate_email(email: str) -> ValidationResult:
    if not email:
        return _fail("Email is required")
    if not _EMAIL_RE.match(email):
        return _fail("Invalid email format")
    if len(email) > 254:
        return _fail("Email is too long")
    return _ok()


def validate_password(password: str) -> ValidationResult:
    if not password:
        return _fail("Password is required")

    errors: list[str] = []
    if len(password) < 8:
        errors.append("Password must be at least 8 characters long")
    if len(password) > 128:
        errors.append("Password is too long (max 128 characters)")
    if not re.search(r"[A-Z]", password):
        errors.append("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", password):
        errors.append("Password must contain at least one lowercase letter")
    if not re.search(r"\d", password):
        errors.append("Password must contain at least one number")
    if not _SPECIAL_RE.search(password):
        errors.append("Password must contain at least one special character")
    if password.lower() in COMMON_PASSWORDS:
        errors.append("Password is too common, please choose a stronger password")
    return ValidationResult(not errors, errors)


def validate_phone(phone: Optional[str]) -> ValidationResult:
    # Optional field
    if not phone:
        return _ok()
    cleaned = re.sub(r"[^\d+]", "", phone)
    if not _PHONE_RE.match(cleaned):
        return _fail("Invalid phone number format")
    return _ok()


def validate_employee_id(employee_id: str) -> ValidationResult:
    if not employee_id:
        return _fail("Employee ID is required")
    sanitized = sanitize_input(employee_id)
    if len(sanitized) < 3:
        return _fail("Employee ID must be at least 3 characters long")
    if len(sanitized) > 20:
        return _fail("Employee ID is too long (max 20 characters)")
    if not _EMPLOYEE_ID_RE.match(sanitized):
        return _fail("Employee ID can only contain letters, numbers, hyphens, and underscores")
    return _ok()


def validate_name(name: str) -> ValidationResult:
    if not name:
        return _fail("Name is required")
    sanitized = sanitize_input(name)
    if len(sanitized) < 2:
        return _fail("Name must be at least 2 characters long")
    if len(sanitized) > 100:
        return _fail("Name is too long (max 100 characters)")
    if not _NAME_RE.match(sanitized):
        return _fail("Name can only contain letters, spaces, hyphens, and apostrophes")
    return _ok()


def validate_date(
    value: Optional[str],
    *,
    required: bool = False,
    min_date: Optional[str] = None,
    max_date: Optional[str] = None,
    future_only: bool = False,
    past_only: bool = False,
    today: Optional[date] = None,
) -> ValidationResult:
    if not value:
        return _fail("Date is required") if required else _ok()

    try:
        day = parse_iso_date(value)
    except ValueError:
        return _fail("Invalid date format")

    today = today or date.today()
    if future_only and day <= today:
        return _fail("Date must be in the future")
    if past_only and day >= today:
        return _fail("Date must be in the past")

    try:
        if min_date and day < parse_iso_date(min_date):
            return _fail(f"Date must be after {min_date}")
        if max_date and day > parse_iso_date(max_date):
            return _fail(f"Date must be before {max_date}")
    except ValueError:
        return _fail("Invalid date format")
    return _ok()


def validate_working_hours(check_in: Optional[datetime], check_out: Optional[datetime]) -> ValidationResult:
    if not check_in:
        return _fail("Check-in time is required")
    if not check_out:
        return _ok()
    if check_out <= check_in:
        return _fail("Check-out time must be after check-in time")

    hours = (check_out - check_in).total_seconds() / 3600
    if hours > MAX_WORKING_HOURS:
        return _fail(f"Working hours cannot exceed {MAX_WORKING_HOURS} hours")
    if hours < MIN_WORKING_HOURS:
        return _fail("Working hours must be at least 30 minutes")
    return _ok()


def _reason_errors(reason: Optional[str]) -> list[str]:
    cleaned = sanitize_input(reason or "", max_length=REASON_MAX_LENGTH)
    errors = []
    if len(cleaned) < REASON_MIN_LENGTH:
        errors.append(f"Reason must be at least {REASON_MIN_LENGTH} characters long")
    if reason and len(reason.strip()) > REASON_MAX_LENGTH:
        errors.append(f"Reason is too long (max {REASON_MAX_LENGTH} characters)")
    return errors


def validate_leave_request(
    *,
    leave_type: Optional[str],
    start_date: Optional[str],
    end_date: Optional[str],
    reason: Optional[str],
    today: Optional[date] = None,
) -> ValidationResult:
    today = today or date.today()
    errors: list[str] = []

    if not leave_type:
        errors.append("Leave type is required")
    elif leave_type not in {t.value for t in LeaveType}:
        errors.append("Invalid leave type")

    start_check = validate_date(start_date, required=True, min_date=today.isoformat(), today=today)
    if not start_check.is_valid:
        errors.append(f"Start date: {start_check.error}")

    end_check = validate_date(end_date, required=True, today=today)
    if not end_check.is_valid:
        errors.append(f"End date: {end_check.error}")

    if start_check.is_valid and end_check.is_valid and parse_iso_date(end_date) < parse_iso_date(start_date):
        errors.append("End date must be after start date")

    errors.extend(_reason_errors(reason))
    return ValidationResult(not errors, errors)


def validate_comp_off_request(
    *,
    work_date: Optional[str],
    comp_off_date: Optional[str],
    reason: Optional[str],
    today: Optional[date] = None,
) -> ValidationResult:
    today = today or date.today()
    errors: list[str] = []

    work_check = validate_date(work_date, required=True, past_only=True, today=today)
    if not work_check.is_valid:
        errors.append(f"Work date: {work_check.error}")

    comp_off_check = validate_date(comp_off_date, required=True, future_only=True, today=today)
    if not comp_off_check.is_valid:
        errors.append(f"Comp off date: {comp_off_check.error}")

    errors.extend(_reason_errors(reason))
    return ValidationResult(not errors, errors)
