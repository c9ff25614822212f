from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.constants import RATE_LIMIT_MAX_ATTEMPTS, RATE_LIMIT_WINDOW_MINUTES
from ..core.enums import Role
from .model import Employee, RateLimitStatus


class EmployeeRepository(Protocol):
    """Remote store for accounts, role lookups and sign-in throttling."""

    def get_by_id(self, id: str) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_employee_id(self, employee_id: str) -> Optional[Employee]:
        raise NotImplementedError

    def create(self, employee: Employee) -> None:
        raise NotImplementedError

    def update_profile(
        self,
        id: str,
        *,
        name: str,
        phone: Optional[str],
        department: Optional[str],
        position: Optional[str],
    ) -> bool:
        raise NotImplementedError

    def list_all(self) -> Sequence[Employee]:
        raise NotImplementedError

    def list_admin_ids(self) -> Sequence[str]:
        raise NotImplementedError

    def get_role(self, id: str) -> Optional[Role]:
        raise NotImplementedError

    def check_rate_limit(
        self,
        identifier: str,
        action: str,
        *,
        max_attempts: int = RATE_LIMIT_MAX_ATTEMPTS,
        window_minutes: int = RATE_LIMIT_WINDOW_MINUTES,
    ) -> RateLimitStatus:
        raise NotImplementedError
