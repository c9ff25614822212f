from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import date, datetime
from typing import Callable, Optional, Sequence

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..attendance.service import local_history_key
from ..common.datetime_utils import now_local
from ..core.enums import DayStatusType, Role
from ..core.exceptions import RemoteUnavailableError
from ..employees.repository import EmployeeRepository
from ..holidays.service import HolidayCalendar
from ..local_store.fallback import FallbackStore
from ..requests.service import CompOffBook, LeaveRequestBook
from .resolver import DayStatus, month_grid, resolve_day_status

logger = logging.getLogger(__name__)

_HISTORY_PREFIX = local_history_key("")


@dataclass(frozen=True)
class AttendanceStats:
    total_employees: int
    present_today: int
    absent_today: int
    on_leave_today: int
    on_comp_off_today: int
    on_break_today: int
    attendance_rate: float

    def to_dict(self) -> dict:
        return asdict(self)


class CalendarService:
    """Month calendar and today's dashboard numbers.

    Works on already-loaded holiday and request collections so the view
    shows the same data (remote or local) as the rest of the session.
    """

    def __init__(
        self,
        *,
        holidays: HolidayCalendar,
        leaves: LeaveRequestBook,
        comp_offs: CompOffBook,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        local: FallbackStore,
        clock: Callable[[], datetime] = now_local,
    ):
        self._holidays = holidays
        self._leaves = leaves
        self._comp_offs = comp_offs
        self._attendance = attendance
        self._employees = employees
        self._local = local
        self._clock = clock

    # -------- Data access --------
    def _attendance_between(self, start: date, end: date, employee_id: Optional[str]) -> list[AttendanceRecord]:
        try:
            return list(self._attendance.list_between(start_date=start, end_date=end, employee_id=employee_id))
        except RemoteUnavailableError as e:
            logger.warning("calendar: remote attendance read failed, using local store (%s)", e)

        if employee_id is not None:
            keys = [local_history_key(employee_id)]
        else:
            keys = [k for k in self._local.raw.keys() if k.startswith(_HISTORY_PREFIX)]

        records = []
        for key in keys:
            for item in self._local.read_list(key) or []:
                record = AttendanceRecord.from_dict(item)
                if start <= record.date <= end:
                    records.append(record)
        return records

    def _employee_ids(self, records: Sequence[AttendanceRecord]) -> list[str]:
        try:
            return [e.id for e in self._employees.list_all() if e.role == Role.EMPLOYEE]
        except RemoteUnavailableError as e:
            logger.warning("calendar: employee list unavailable, deriving from records (%s)", e)

        ids = {r.employee_id for r in records}
        ids.update(r.employee_id for r in self._leaves.requests)
        ids.update(r.employee_id for r in self._comp_offs.requests)
        return sorted(ids)

    def day_status(self, day: date, employee_id: Optional[str], *, attendance: Sequence[AttendanceRecord]) -> DayStatus:
        return resolve_day_status(
            day,
            employee_id,
            holidays=self._holidays.holidays,
            attendance=attendance,
            leaves=self._leaves.requests,
            comp_offs=self._comp_offs.requests,
            today=self._clock().date(),
        )

    # -------- Views --------
    def month_view(self, year: int, month: int, *, employee_id: Optional[str] = None) -> list[dict]:
        """One entry per grid cell.

        With ``employee_id`` each cell carries that employee's status. Without
        it (admin view) each cell also lists the status of every employee.
        """
        today = self._clock().date()
        cells = month_grid(year, month, today=today)
        records = self._attendance_between(cells[0].date, cells[-1].date, employee_id)

        employee_ids = self._employee_ids(records) if employee_id is None else []
        out = []
        for cell in cells:
            entry = cell.to_dict()
            entry.update(self.day_status(cell.date, employee_id, attendance=records).to_dict())
            if employee_id is None:
                entry["employees"] = {
                    emp: self.day_status(cell.date, emp, attendance=records).status.value for emp in employee_ids
                }
            out.append(entry)
        return out

    def day_detail(self, day: date, *, employee_id: Optional[str] = None) -> dict:
        records = self._attendance_between(day, day, employee_id)
        detail = self.day_status(day, employee_id, attendance=records).to_dict()
        detail["date"] = day.isoformat()
        if employee_id is None:
            detail["employees"] = {
                emp: self.day_status(day, emp, attendance=records).to_dict()
                for emp in self._employee_ids(records)
            }
        return detail

    def today_stats(self, today: Optional[date] = None) -> AttendanceStats:
        today = today or self._clock().date()
        records = self._attendance_between(today, today, None)
        employee_ids = self._employee_ids(records)

        present = on_break = on_leave = on_comp_off = 0
        for emp in employee_ids:
            # Holidays do not hide who actually came in.
            status = resolve_day_status(
                today,
                emp,
                attendance=records,
                leaves=self._leaves.requests,
                comp_offs=self._comp_offs.requests,
                today=today,
            )
            if status.status == DayStatusType.PRESENT:
                present += 1
                if status.record.is_on_break:
                    on_break += 1
            elif status.status == DayStatusType.LEAVE:
                on_leave += 1
            elif status.status == DayStatusType.COMPOFF:
                on_comp_off += 1

        total = len(employee_ids)
        return AttendanceStats(
            total_employees=total,
            present_today=present,
            absent_today=max(0, total - present - on_leave - on_comp_off),
            on_leave_today=on_leave,
            on_comp_off_today=on_comp_off,
            on_break_today=on_break,
            attendance_rate=round(present / total * 100, 1) if total else 0.0,
        )
