from __future__ import annotations

from datetime import date, datetime

import pytest

from src.leave_portal.leave_portal.attendance.model import AttendanceRecord
from src.leave_portal.leave_portal.calendar.resolver import GRID_CELLS, month_grid, resolve_day_status
from src.leave_portal.leave_portal.core.enums import DayStatusType, HolidayType, LeaveType, RequestStatus
from src.leave_portal.leave_portal.holidays.model import Holiday
from src.leave_portal.leave_portal.requests.model import CompOffRequest, LeaveRequest

TODAY = date(2025, 1, 28)
APPLIED = datetime(2025, 1, 2, 10, 0)


def _holiday(day: date) -> Holiday:
    return Holiday(id="republic-day-2025", name="Republic Day", date=day, type=HolidayType.NATIONAL)


def _leave(start: date, end: date, status=RequestStatus.APPROVED, employee_id="emp-1") -> LeaveRequest:
    return LeaveRequest(
        id="leave-1",
        employee_id=employee_id,
        type=LeaveType.VACATION,
        start_date=start,
        end_date=end,
        reason="Trip with family",
        status=status,
        applied_date=APPLIED,
    )


def _comp_off(day: date, status=RequestStatus.APPROVED, employee_id="emp-1") -> CompOffRequest:
    return CompOffRequest(
        id="compoff-1",
        employee_id=employee_id,
        work_date=date(2025, 1, 5),
        comp_off_date=day,
        reason="Worked the weekend release",
        status=status,
        applied_date=APPLIED,
    )


def _present(day: date, employee_id="emp-1") -> AttendanceRecord:
    return AttendanceRecord(id="att-1", employee_id=employee_id, date=day, check_in=datetime(2025, 1, 1, 9, 0))


def test_holiday_wins_over_approved_leave():
    day = date(2025, 1, 26)
    status = resolve_day_status(
        "2025-01-26",
        "emp-1",
        holidays=[_holiday(day)],
        leaves=[_leave(date(2025, 1, 24), date(2025, 1, 27))],
        today=TODAY,
    )
    assert status.status == DayStatusType.HOLIDAY
    assert status.record.name == "Republic Day"


@pytest.mark.parametrize(
    "with_holiday,with_comp_off,with_leave,with_attendance,expected",
    [
        (True, True, True, True, DayStatusType.HOLIDAY),
        (False, True, True, True, DayStatusType.COMPOFF),
        (False, False, True, True, DayStatusType.LEAVE),
        (False, False, False, True, DayStatusType.PRESENT),
        (False, False, False, False, DayStatusType.ABSENT),
    ],
)
def test_precedence_order(with_holiday, with_comp_off, with_leave, with_attendance, expected):
    day = date(2025, 1, 20)
    status = resolve_day_status(
        day,
        "emp-1",
        holidays=[_holiday(day)] if with_holiday else [],
        comp_offs=[_comp_off(day)] if with_comp_off else [],
        leaves=[_leave(day, day)] if with_leave else [],
        attendance=[_present(day)] if with_attendance else [],
        today=TODAY,
    )
    assert status.status == expected


def test_future_day_without_records():
    assert resolve_day_status(date(2025, 2, 3), "emp-1", today=TODAY).status == DayStatusType.FUTURE
    # today itself is not absent yet
    assert resolve_day_status(TODAY, "emp-1", today=TODAY).status == DayStatusType.FUTURE


def test_pending_and_foreign_requests_are_ignored():
    day = date(2025, 1, 20)
    status = resolve_day_status(
        day,
        "emp-1",
        leaves=[_leave(day, day, status=RequestStatus.PENDING), _leave(day, day, employee_id="emp-2")],
        comp_offs=[_comp_off(day, status=RequestStatus.REJECTED)],
        attendance=[_present(day, employee_id="emp-2")],
        today=TODAY,
    )
    assert status.status == DayStatusType.ABSENT


def test_no_employee_matches_everyone():
    day = date(2025, 1, 20)
    status = resolve_day_status(day, None, leaves=[_leave(day, day, employee_id="emp-9")], today=TODAY)
    assert status.status == DayStatusType.LEAVE


def test_month_grid_is_six_sunday_first_weeks():
    cells = month_grid(2025, 1, today=TODAY)

    assert len(cells) == GRID_CELLS
    # January 1st 2025 is a Wednesday
    assert cells[0].date == date(2024, 12, 29)
    assert cells[0].date.weekday() == 6
    assert cells[3].date == date(2025, 1, 1)
    assert cells[3].is_current_month
    assert not cells[0].is_current_month
    assert [c.date for c in cells if c.is_today] == [TODAY]
    assert sum(1 for c in cells if c.is_current_month) == 31


def test_month_grid_rejects_bad_month():
    with pytest.raises(ValueError):
        month_grid(2025, 13)
