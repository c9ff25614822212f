"""Attendance time and break accounting.

Pure functions over immutable records; every transition returns a new
record or raises InvalidTransitionError without touching the input.

    not-checked-in -> checked-in <-> on-break -> checked-out

One break per day: ``has_used_break`` flips when the break starts and is
never refunded. Hours worked = (check-out - check-in) - breaks, floored at
zero and rounded to 2 decimals.
"""
from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional

from ..core.enums import AttendanceState
from ..core.exceptions import InvalidTransitionError
from .model import AttendanceRecord


def attendance_state(record: Optional[AttendanceRecord]) -> AttendanceState:
    if record is None or record.check_in is None:
        return AttendanceState.NOT_CHECKED_IN
    if record.check_out is not None:
        return AttendanceState.CHECKED_OUT
    if record.is_on_break:
        return AttendanceState.ON_BREAK
    return AttendanceState.CHECKED_IN


def minutes_between(start: datetime, end: datetime) -> float:
    return round((end - start).total_seconds() / 60, 2)


def compute_hours(check_in: datetime, until: datetime, break_minutes: float) -> float:
    hours = (until - check_in).total_seconds() / 3600 - (break_minutes / 60)
    return round(max(0.0, hours), 2)


def check_in(existing: Optional[AttendanceRecord], *, record_id: str, employee_id: str, now: datetime) -> AttendanceRecord:
    if attendance_state(existing) != AttendanceState.NOT_CHECKED_IN:
        raise InvalidTransitionError("Already checked in today")
    return AttendanceRecord(
        id=record_id,
        employee_id=employee_id,
        date=now.date(),
        check_in=now,
        hours_worked=0.0,
        total_break_time=0.0,
        is_on_break=False,
        has_used_break=False,
    )


def start_break(record: Optional[AttendanceRecord], *, now: datetime) -> AttendanceRecord:
    if attendance_state(record) != AttendanceState.CHECKED_IN or record.has_used_break:
        raise InvalidTransitionError("Cannot start break")
    return replace(record, break_start=now, is_on_break=True, has_used_break=True)


def end_break(record: Optional[AttendanceRecord], *, now: datetime) -> AttendanceRecord:
    if attendance_state(record) != AttendanceState.ON_BREAK or record.break_start is None:
        raise InvalidTransitionError("No active break found")
    total = round(record.total_break_time + minutes_between(record.break_start, now), 2)
    return replace(record, break_end=now, total_break_time=total, is_on_break=False, break_start=None)


def check_out(record: Optional[AttendanceRecord], *, now: datetime) -> AttendanceRecord:
    state = attendance_state(record)
    if state == AttendanceState.NOT_CHECKED_IN:
        raise InvalidTransitionError("No check-in record found")
    if state == AttendanceState.CHECKED_OUT:
        raise InvalidTransitionError("Already checked out")
    if now < record.check_in:
        raise InvalidTransitionError("Check-out time cannot be before check-in time")

    if state == AttendanceState.ON_BREAK:
        record = end_break(record, now=now)

    return replace(
        record,
        check_out=now,
        hours_worked=compute_hours(record.check_in, now, record.total_break_time),
    )


def running_break_minutes(record: AttendanceRecord, now: datetime) -> float:
    total = record.total_break_time
    if record.is_on_break and record.break_start is not None:
        total += minutes_between(record.break_start, now)
    return total


def live_hours(record: Optional[AttendanceRecord], *, now: datetime) -> float:
    """Hours so far today; not persisted."""
    state = attendance_state(record)
    if state == AttendanceState.NOT_CHECKED_IN:
        return 0.0
    if state == AttendanceState.CHECKED_OUT:
        return record.hours_worked
    return compute_hours(record.check_in, now, running_break_minutes(record, now))
