from __future__ import annotations

from datetime import datetime

import pytest

from src.leave_portal.leave_portal.core.enums import Role
from src.leave_portal.leave_portal.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    RemoteUnavailableError,
    ValidationError,
)
from src.leave_portal.leave_portal.employees.service import AuthService, EmployeeService, session_expired

PASSWORD = "Employee@1234"


@pytest.fixture
def auth(employee_repo, local, clock):
    return AuthService(employee_repo, local, clock=clock)


def _sign_up(auth, **overrides):
    fields = dict(name="Asha Rao", email="Asha@Company.com", password=PASSWORD, employee_id="EMP042")
    fields.update(overrides)
    return auth.sign_up(**fields)


def test_sign_up_then_sign_in_by_email_or_employee_id(auth, local):
    employee = _sign_up(auth, department="Engineering")
    assert employee.email == "asha@company.com"
    assert employee.role == Role.EMPLOYEE
    assert employee.password_hash != PASSWORD

    by_email = auth.sign_in("asha@company.com", PASSWORD)
    by_number = auth.sign_in("EMP042", PASSWORD, role="employee")

    assert by_email == by_number
    assert by_email.department == "Engineering"
    assert local.get_current_user()["employee_id"] == "EMP042"
    assert auth.current_user() == by_email

    auth.sign_out()
    assert auth.current_user() is None


def test_sign_up_collects_every_field_error(auth):
    with pytest.raises(ValidationError) as exc:
        _sign_up(auth, name="A", email="nope", password="short", employee_id="x")
    assert "Invalid email format" in exc.value.errors
    assert "Employee ID must be at least 3 characters long" in exc.value.errors
    assert len(exc.value.errors) > 4


def test_duplicate_accounts_conflict(auth):
    _sign_up(auth)
    with pytest.raises(ConflictError, match="Employee ID already exists"):
        _sign_up(auth, email="other@company.com")
    with pytest.raises(ConflictError, match="Email is already registered"):
        _sign_up(auth, employee_id="EMP043")


def test_wrong_password_and_unknown_user(auth):
    _sign_up(auth)
    with pytest.raises(AuthenticationError, match="Invalid credentials"):
        auth.sign_in("EMP042", "Wrong@1234")
    with pytest.raises(AuthenticationError, match="Invalid credentials"):
        auth.sign_in("ghost@company.com", PASSWORD)
    with pytest.raises(ValidationError):
        auth.sign_in("", PASSWORD)


def test_role_mismatch(auth, local):
    _sign_up(auth)
    with pytest.raises(AuthorizationError, match="not registered as admin"):
        auth.sign_in("EMP042", PASSWORD, role="admin")
    assert local.get_current_user() is None


def test_rate_limited_login(auth, employee_repo):
    _sign_up(auth)
    employee_repo.rate_limited.add(("EMP042", "login"))

    with pytest.raises(AuthenticationError, match="after 10:45:00"):
        auth.sign_in("EMP042", PASSWORD)


def test_rate_limit_fails_open_when_backend_is_flaky(auth, employee_repo):
    _sign_up(auth)

    def unavailable(*args, **kwargs):
        raise RemoteUnavailableError("rate limit lookup failed")

    employee_repo.check_rate_limit = unavailable
    assert auth.sign_in("EMP042", PASSWORD).employee_id == "EMP042"


def test_session_timeout_window():
    last = datetime(2025, 1, 15, 9, 0)
    assert not session_expired(last, datetime(2025, 1, 15, 9, 30))
    assert session_expired(last, datetime(2025, 1, 15, 9, 31))
    assert not session_expired(None, datetime(2025, 1, 15, 12, 0))


def test_profile_update_and_directory(auth, employee_repo):
    employee = _sign_up(auth)
    service = EmployeeService(employee_repo)

    updated = service.update_profile(employee.id, phone="+15551234567", position="Analyst")
    assert updated.phone == "+15551234567"
    assert updated.position == "Analyst"
    assert updated.name == "Asha Rao"

    with pytest.raises(ValidationError):
        service.update_profile(employee.id, phone="abc")
    with pytest.raises(NotFoundError):
        service.get_profile("missing")
    with pytest.raises(AuthorizationError):
        service.list_employees(current_role=Role.EMPLOYEE)
    assert [e.id for e in service.list_employees(current_role=Role.ADMIN)] == [employee.id]
