from __future__ import annotations

from datetime import date, datetime

from src.leave_portal.leave_portal.common.validators import (
    sanitize_input,
    validate_comp_off_request,
    validate_email,
    validate_employee_id,
    validate_leave_request,
    validate_password,
    validate_phone,
    validate_working_hours,
)

TODAY = date(2025, 1, 15)
REASON = "Family function out of town"


def test_leave_end_before_start_has_explicit_message():
    result = validate_leave_request(
        leave_type="vacation", start_date="2025-01-20", end_date="2025-01-18", reason=REASON, today=TODAY
    )
    assert not result.is_valid
    assert "End date must be after start date" in result.errors


def test_leave_in_the_past_and_short_reason_report_all_errors():
    result = validate_leave_request(
        leave_type="holiday", start_date="2025-01-10", end_date="2025-01-12", reason="short", today=TODAY
    )
    assert not result.is_valid
    assert "Invalid leave type" in result.errors
    assert any(e.startswith("Start date:") for e in result.errors)
    assert "Reason must be at least 10 characters long" in result.errors


def test_valid_leave_request():
    result = validate_leave_request(
        leave_type="sick", start_date="2025-01-15", end_date="2025-01-16", reason=REASON, today=TODAY
    )
    assert result.is_valid
    assert result.errors == []


def test_comp_off_work_date_in_future_fails():
    result = validate_comp_off_request(
        work_date="2025-01-20", comp_off_date="2025-01-25", reason=REASON, today=TODAY
    )
    assert not result.is_valid
    assert "Work date: Date must be in the past" in result.errors


def test_comp_off_date_in_past_fails():
    result = validate_comp_off_request(
        work_date="2025-01-11", comp_off_date="2025-01-12", reason=REASON, today=TODAY
    )
    assert not result.is_valid
    assert "Comp off date: Date must be in the future" in result.errors


def test_comp_off_today_is_neither_past_nor_future():
    result = validate_comp_off_request(work_date="2025-01-15", comp_off_date="2025-01-15", reason=REASON, today=TODAY)
    assert len(result.errors) == 2


def test_password_rules():
    assert validate_password("Employee@1234").is_valid
    weak = validate_password("password")
    assert not weak.is_valid
    assert "Password is too common, please choose a stronger password" in weak.errors


def test_email_phone_and_employee_id():
    assert validate_email("a@b.co").is_valid
    assert not validate_email("not-an-email").is_valid
    assert validate_phone(None).is_valid
    assert validate_phone("+91 98765 43210").is_valid
    assert not validate_phone("0123").is_valid
    assert validate_employee_id("EMP_001").is_valid
    assert not validate_employee_id("E!").is_valid


def test_working_hours_bounds():
    start = datetime(2025, 1, 15, 9, 0)
    assert validate_working_hours(start, None).is_valid
    assert not validate_working_hours(start, datetime(2025, 1, 15, 9, 10)).is_valid
    assert not validate_working_hours(start, datetime(2025, 1, 15, 8, 0)).is_valid


def test_sanitize_input():
    assert sanitize_input("  <b>Hello</b>   'world' ") == "bHello/b world"
    assert sanitize_input(None) == ""
    assert len(sanitize_input("x" * 400)) == 255
    assert len(sanitize_input("x" * 400, max_length=500)) == 400
