from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional, Sequence, Union

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import new_remote_id, now_local
from ..common.validators import (
    ensure_valid,
    sanitize_input,
    validate_email,
    validate_employee_id,
    validate_name,
    validate_password,
    validate_phone,
    ValidationResult,
)
from ..core.constants import DEFAULT_SESSION_TIMEOUT_MINUTES
from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    RemoteUnavailableError,
    ValidationError,
)
from ..local_store.fallback import FallbackStore
from .model import Employee, RateLimitStatus, SessionUser
from .repository import EmployeeRepository

logger = logging.getLogger(__name__)


def session_expired(
    last_activity: Optional[datetime],
    now: datetime,
    timeout_minutes: int = DEFAULT_SESSION_TIMEOUT_MINUTES,
) -> bool:
    """True when the last recorded activity is older than the inactivity window."""
    if last_activity is None:
        return False
    return now - last_activity > timedelta(minutes=int(timeout_minutes))


def _merge(*results: ValidationResult) -> ValidationResult:
    errors = [e for r in results for e in r.errors]
    return ValidationResult(not errors, errors)


class AuthService:
    """Use case: sign up, sign in and sign out.

    Sign-in accepts either an email or an employee id. Both sign-in and
    sign-up are throttled per identifier; throttling fails open when the
    backend cannot be reached.
    """

    def __init__(
        self,
        employees: EmployeeRepository,
        local: FallbackStore,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._employees = employees
        self._local = local
        self._clock = clock

    def _rate_limit(self, identifier: str, action: str) -> RateLimitStatus:
        try:
            return self._employees.check_rate_limit(identifier, action)
        except RemoteUnavailableError as e:
            logger.warning("auth: rate limit check for %s unavailable, allowing (%s)", action, e)
            return RateLimitStatus(is_allowed=True, remaining=0)

    def sign_up(
        self,
        *,
        name: str,
        email: str,
        password: str,
        employee_id: str,
        phone: Optional[str] = None,
        department: Optional[str] = None,
        position: Optional[str] = None,
        role: Union[Role, str] = Role.EMPLOYEE,
    ) -> Employee:
        email = sanitize_input(email).lower()
        employee_id = sanitize_input(employee_id)
        ensure_valid(
            _merge(
                validate_name(name),
                validate_email(email),
                validate_password(password),
                validate_employee_id(employee_id),
                validate_phone(phone),
            )
        )
        try:
            role = Role(role)
        except ValueError:
            raise ValidationError("Invalid role")

        if not self._rate_limit(email, "signup").is_allowed:
            raise AuthenticationError("Too many signup attempts. Please try again later.")

        if self._employees.get_by_employee_id(employee_id):
            raise ConflictError("Employee ID already exists")
        if self._employees.get_by_email(email):
            raise ConflictError("Email is already registered")

        employee = Employee(
            id=new_remote_id(),
            name=sanitize_input(name),
            email=email,
            employee_id=employee_id,
            role=role,
            password_hash=generate_password_hash(password),
            department=sanitize_input(department) or None,
            position=sanitize_input(position) or None,
            phone=sanitize_input(phone) or None,
            created_at=self._clock(),
        )
        self._employees.create(employee)
        logger.info("auth: registered %s (%s)", employee.employee_id, employee.role.value)
        return employee

    def _find(self, identifier: str) -> Optional[Employee]:
        if "@" in identifier:
            return self._employees.get_by_email(identifier.lower())
        return self._employees.get_by_employee_id(identifier)

    def sign_in(self, identifier: str, password: str, role: Union[Role, str, None] = None) -> SessionUser:
        identifier = sanitize_input(identifier)
        if not identifier or not password:
            raise ValidationError("Email/Employee ID and password are required")

        status = self._rate_limit(identifier, "login")
        if not status.is_allowed:
            when = status.reset_time.strftime("%H:%M:%S") if status.reset_time else "a while"
            raise AuthenticationError(f"Too many login attempts. Please try again after {when}.")

        employee = self._find(identifier)
        if not employee:
            raise AuthenticationError("Invalid credentials")

        try:
            ok = check_password_hash(employee.password_hash, password)
        except (TypeError, ValueError):
            # e.g. placeholder or corrupted hashes
            ok = False
        if not ok:
            raise AuthenticationError("Invalid credentials")

        if role and employee.role != Role(role):
            raise AuthorizationError(f"This account is not registered as {Role(role).value}")

        user = SessionUser.from_employee(employee)
        self._local.set_current_user(user.to_dict())
        return user

    def sign_out(self) -> None:
        self._local.clear_current_user()

    def current_user(self) -> Optional[SessionUser]:
        data = self._local.get_current_user()
        return SessionUser.from_dict(data) if data else None


class EmployeeService:
    """Use case: directory and self-service profile."""

    def __init__(self, employees: EmployeeRepository):
        self._employees = employees

    def list_employees(self, *, current_role: Role) -> Sequence[Employee]:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only administrators can list employees")
        return self._employees.list_all()

    def get_profile(self, id: str) -> Employee:
        employee = self._employees.get_by_id(str(id))
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def update_profile(
        self,
        id: str,
        *,
        name: Optional[str] = None,
        phone: Optional[str] = None,
        department: Optional[str] = None,
        position: Optional[str] = None,
    ) -> Employee:
        current = self.get_profile(id)

        checks = [validate_phone(phone)]
        if name is not None:
            checks.append(validate_name(name))
        ensure_valid(_merge(*checks))

        self._employees.update_profile(
            current.id,
            name=sanitize_input(name) if name is not None else current.name,
            phone=(sanitize_input(phone) or None) if phone is not None else current.phone,
            department=(sanitize_input(department) or None) if department is not None else current.department,
            position=(sanitize_input(position) or None) if position is not None else current.position,
        )
        return self.get_profile(current.id)
