from __future__ import annotations

from datetime import datetime

import pytest

from src.leave_portal.leave_portal.attendance import accounting
from src.leave_portal.leave_portal.core.enums import AttendanceState
from src.leave_portal.leave_portal.core.exceptions import InvalidTransitionError


def _at(hh: int, mm: int = 0) -> datetime:
    return datetime(2025, 1, 15, hh, mm)


def _checked_in(at: datetime):
    return accounting.check_in(None, record_id="rec-1", employee_id="emp-1", now=at)


def test_eight_hours_with_half_hour_break_is_seven_and_a_half():
    rec = _checked_in(_at(9))
    rec = accounting.start_break(rec, now=_at(12))
    rec = accounting.end_break(rec, now=_at(12, 30))
    rec = accounting.check_out(rec, now=_at(17))

    assert rec.total_break_time == 30
    assert rec.hours_worked == 7.5


def test_full_day_scenario():
    rec = _checked_in(_at(9))
    assert accounting.attendance_state(rec) == AttendanceState.CHECKED_IN

    rec = accounting.start_break(rec, now=_at(12))
    assert accounting.attendance_state(rec) == AttendanceState.ON_BREAK

    rec = accounting.end_break(rec, now=_at(12, 30))
    rec = accounting.check_out(rec, now=_at(18))

    assert rec.check_in == _at(9)
    assert rec.check_out == _at(18)
    assert rec.total_break_time == 30
    assert rec.hours_worked == 8.5
    assert accounting.attendance_state(rec) == AttendanceState.CHECKED_OUT


def test_zero_length_break_still_uses_the_days_break():
    rec = _checked_in(_at(9))
    rec = accounting.start_break(rec, now=_at(10))
    assert rec.has_used_break is True

    rec = accounting.end_break(rec, now=_at(10))
    assert rec.has_used_break is True
    assert rec.total_break_time == 0

    with pytest.raises(InvalidTransitionError):
        accounting.start_break(rec, now=_at(11))


def test_checkout_while_on_break_closes_the_break():
    rec = _checked_in(_at(9))
    rec = accounting.start_break(rec, now=_at(16))
    rec = accounting.check_out(rec, now=_at(17))

    assert rec.is_on_break is False
    assert rec.total_break_time == 60
    assert rec.hours_worked == 7.0


def test_checkout_without_checkin_is_rejected():
    with pytest.raises(InvalidTransitionError):
        accounting.check_out(None, now=_at(17))


def test_second_checkin_is_rejected():
    rec = _checked_in(_at(9))
    with pytest.raises(InvalidTransitionError):
        accounting.check_in(rec, record_id="rec-2", employee_id="emp-1", now=_at(10))


def test_end_break_without_break_is_rejected():
    rec = _checked_in(_at(9))
    with pytest.raises(InvalidTransitionError):
        accounting.end_break(rec, now=_at(10))


def test_checkout_before_checkin_time_is_rejected():
    rec = _checked_in(_at(9))
    with pytest.raises(InvalidTransitionError):
        accounting.check_out(rec, now=_at(8))


def test_hours_never_negative():
    assert accounting.compute_hours(_at(9), _at(9, 10), 30) == 0.0


def test_live_hours_counts_running_break():
    rec = _checked_in(_at(9))
    rec = accounting.start_break(rec, now=_at(12))

    assert accounting.live_hours(rec, now=_at(13)) == 3.0
    assert accounting.live_hours(None, now=_at(13)) == 0.0
