from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import datetime_from_json, datetime_to_json
from ..core.enums import Role


@dataclass(frozen=True)
class Employee:
    """An account: employees and administrators share this record."""

    id: str
    name: str
    email: str
    employee_id: str
    role: Role
    password_hash: str = ""
    department: Optional[str] = None
    position: Optional[str] = None
    phone: Optional[str] = None
    is_verified: bool = False
    created_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def to_dict(self) -> dict:
        # Never expose the password hash.
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "employee_id": self.employee_id,
            "role": self.role.value,
            "department": self.department,
            "position": self.position,
            "phone": self.phone,
            "is_verified": self.is_verified,
            "created_at": datetime_to_json(self.created_at),
        }


@dataclass(frozen=True)
class SessionUser:
    """What we keep in the Flask session and under ``currentUser`` after sign-in."""

    id: str
    name: str
    email: str
    employee_id: str
    role: Role
    department: Optional[str] = None
    position: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @classmethod
    def from_employee(cls, employee: Employee) -> "SessionUser":
        return cls(
            id=employee.id,
            name=employee.name,
            email=employee.email,
            employee_id=employee.employee_id,
            role=employee.role,
            department=employee.department,
            position=employee.position,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "employee_id": self.employee_id,
            "role": self.role.value,
            "department": self.department,
            "position": self.position,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SessionUser":
        return cls(
            id=str(data["id"]),
            name=data.get("name") or "",
            email=data.get("email") or "",
            employee_id=data.get("employee_id") or "",
            role=Role(data.get("role") or Role.EMPLOYEE.value),
            department=data.get("department"),
            position=data.get("position"),
        )


@dataclass(frozen=True)
class RateLimitStatus:
    is_allowed: bool
    remaining: int
    reset_time: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "is_allowed": self.is_allowed,
            "remaining": self.remaining,
            "reset_time": datetime_to_json(self.reset_time),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RateLimitStatus":
        return cls(
            is_allowed=bool(data.get("is_allowed")),
            remaining=int(data.get("remaining") or 0),
            reset_time=datetime_from_json(data.get("reset_time")),
        )
