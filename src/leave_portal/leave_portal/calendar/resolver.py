"""Derived day status for calendar cells.

A day's status is never stored. It is computed from holidays, approved
requests and attendance records with a fixed precedence:

    holiday > compoff > leave > present > absent > future

Comp-off is evaluated before leave, so a date covered by both shows as
comp-off.
"""

from __future__ import annotations

import calendar as _calendar
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Iterable, Optional, Union

from ..attendance.model import AttendanceRecord
from ..common.datetime_utils import format_iso_date, parse_iso_date
from ..core.enums import DayStatusType, RequestStatus
from ..holidays.model import Holiday
from ..requests.model import CompOffRequest, LeaveRequest

GRID_CELLS = 42

DayLike = Union[str, date]


@dataclass(frozen=True)
class DayStatus:
    status: DayStatusType
    record: Optional[Any] = None

    def to_dict(self) -> dict:
        record = self.record.to_dict() if self.record is not None else None
        return {"status": self.status.value, "record": record}


@dataclass(frozen=True)
class CalendarCell:
    date: date
    is_current_month: bool
    is_today: bool

    @property
    def day(self) -> int:
        return self.date.day

    @property
    def is_weekend(self) -> bool:
        # Saturday / Sunday
        return self.date.weekday() >= 5

    def to_dict(self) -> dict:
        return {
            "date": format_iso_date(self.date),
            "day": self.day,
            "is_current_month": self.is_current_month,
            "is_today": self.is_today,
            "is_weekend": self.is_weekend,
        }


def _as_date(value: DayLike) -> date:
    return value if isinstance(value, date) else parse_iso_date(value)


def _owned(employee_id: Optional[str], record_owner: str) -> bool:
    return employee_id is None or str(record_owner) == str(employee_id)


def resolve_day_status(
    day: DayLike,
    employee_id: Optional[str],
    *,
    holidays: Iterable[Holiday] = (),
    attendance: Iterable[AttendanceRecord] = (),
    leaves: Iterable[LeaveRequest] = (),
    comp_offs: Iterable[CompOffRequest] = (),
    today: Optional[date] = None,
) -> DayStatus:
    """Return exactly one status for ``day``; ``employee_id=None`` matches every employee."""
    day = _as_date(day)
    today = today or date.today()

    for h in holidays:
        if h.date == day:
            return DayStatus(DayStatusType.HOLIDAY, h)

    for c in comp_offs:
        if c.status == RequestStatus.APPROVED and c.comp_off_date == day and _owned(employee_id, c.employee_id):
            return DayStatus(DayStatusType.COMPOFF, c)

    for leave in leaves:
        if leave.status == RequestStatus.APPROVED and leave.covers(day) and _owned(employee_id, leave.employee_id):
            return DayStatus(DayStatusType.LEAVE, leave)

    for r in attendance:
        if r.date == day and _owned(employee_id, r.employee_id):
            return DayStatus(DayStatusType.PRESENT, r)

    if day < today:
        return DayStatus(DayStatusType.ABSENT)
    return DayStatus(DayStatusType.FUTURE)


def month_grid(year: int, month: int, *, today: Optional[date] = None) -> list[CalendarCell]:
    """Six Sunday-first weeks covering the month, padded with neighbouring days."""
    if not 1 <= int(month) <= 12:
        raise ValueError(f"Invalid month: {month}")

    today = today or date.today()
    first = date(int(year), int(month), 1)
    # date.weekday(): Monday=0 .. Sunday=6; shift so Sunday starts the week.
    start = first - timedelta(days=(first.weekday() + 1) % 7)
    last_day = _calendar.monthrange(first.year, first.month)[1]
    last = first.replace(day=last_day)

    cells = []
    for offset in range(GRID_CELLS):
        d = start + timedelta(days=offset)
        cells.append(CalendarCell(date=d, is_current_month=first <= d <= last, is_today=d == today))
    return cells
