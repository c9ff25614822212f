from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import date_from_json, datetime_from_json, datetime_to_json, format_iso_date
from ..core.enums import LeaveType, RequestStatus


@dataclass(frozen=True)
class LeaveRequest:
    id: str
    employee_id: str
    type: LeaveType
    start_date: date
    end_date: date
    reason: str
    status: RequestStatus
    applied_date: datetime
    admin_comment: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[str] = None
    employee_name: Optional[str] = None
    employee_number: Optional[str] = None

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "employee_id": self.employee_id,
            "type": self.type.value,
            "start_date": format_iso_date(self.start_date),
            "end_date": format_iso_date(self.end_date),
            "reason": self.reason,
            "status": self.status.value,
            "applied_date": datetime_to_json(self.applied_date),
            "admin_comment": self.admin_comment,
            "reviewed_at": datetime_to_json(self.reviewed_at),
            "reviewed_by": self.reviewed_by,
            "employee_name": self.employee_name,
            "employee_number": self.employee_number,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LeaveRequest":
        return cls(
            id=str(data["id"]),
            employee_id=str(data["employee_id"]),
            type=LeaveType(data["type"]),
            start_date=date_from_json(data["start_date"]),
            end_date=date_from_json(data["end_date"]),
            reason=data.get("reason") or "",
            status=RequestStatus(data.get("status") or RequestStatus.PENDING.value),
            applied_date=datetime_from_json(data.get("applied_date")),
            admin_comment=data.get("admin_comment"),
            reviewed_at=datetime_from_json(data.get("reviewed_at")),
            reviewed_by=data.get("reviewed_by"),
            employee_name=data.get("employee_name"),
            employee_number=data.get("employee_number"),
        )


@dataclass(frozen=True)
class CompOffRequest:
    """Compensatory day off for work done on a non-working day."""

    id: str
    employee_id: str
    work_date: date
    comp_off_date: date
    reason: str
    status: RequestStatus
    applied_date: datetime
    admin_comment: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[str] = None
    employee_name: Optional[str] = None
    employee_number: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "employee_id": self.employee_id,
            "work_date": format_iso_date(self.work_date),
            "comp_off_date": format_iso_date(self.comp_off_date),
            "reason": self.reason,
            "status": self.status.value,
            "applied_date": datetime_to_json(self.applied_date),
            "admin_comment": self.admin_comment,
            "reviewed_at": datetime_to_json(self.reviewed_at),
            "reviewed_by": self.reviewed_by,
            "employee_name": self.employee_name,
            "employee_number": self.employee_number,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CompOffRequest":
        return cls(
            id=str(data["id"]),
            employee_id=str(data["employee_id"]),
            work_date=date_from_json(data["work_date"]),
            comp_off_date=date_from_json(data["comp_off_date"]),
            reason=data.get("reason") or "",
            status=RequestStatus(data.get("status") or RequestStatus.PENDING.value),
            applied_date=datetime_from_json(data.get("applied_date")),
            admin_comment=data.get("admin_comment"),
            reviewed_at=datetime_from_json(data.get("reviewed_at")),
            reviewed_by=data.get("reviewed_by"),
            employee_name=data.get("employee_name"),
            employee_number=data.get("employee_number"),
        )
