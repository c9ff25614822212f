from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import date_from_json, datetime_from_json, datetime_to_json, format_iso_date


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance record per (employee, calendar date)."""

    id: str
    employee_id: str
    date: date
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    hours_worked: float = 0.0
    break_start: Optional[datetime] = None
    break_end: Optional[datetime] = None
    total_break_time: float = 0.0  # minutes
    is_on_break: bool = False
    has_used_break: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "employee_id": self.employee_id,
            "date": format_iso_date(self.date),
            "check_in": datetime_to_json(self.check_in),
            "check_out": datetime_to_json(self.check_out),
            "hours_worked": self.hours_worked,
            "break_start": datetime_to_json(self.break_start),
            "break_end": datetime_to_json(self.break_end),
            "total_break_time": self.total_break_time,
            "is_on_break": self.is_on_break,
            "has_used_break": self.has_used_break,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AttendanceRecord":
        # Older local entries may lack the break fields.
        return cls(
            id=str(data["id"]),
            employee_id=str(data["employee_id"]),
            date=date_from_json(data["date"]),
            check_in=datetime_from_json(data.get("check_in")),
            check_out=datetime_from_json(data.get("check_out")),
            hours_worked=float(data.get("hours_worked") or 0),
            break_start=datetime_from_json(data.get("break_start")),
            break_end=datetime_from_json(data.get("break_end")),
            total_break_time=float(data.get("total_break_time") or 0),
            is_on_break=bool(data.get("is_on_break") or False),
            has_used_break=bool(data.get("has_used_break") or False),
        )
