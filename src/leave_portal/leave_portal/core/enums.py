from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for authorization."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class RequestStatus(str, Enum):
    """Review lifecycle shared by leave and comp-off requests."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class LeaveType(str, Enum):
    SICK = "sick"
    VACATION = "vacation"
    PERSONAL = "personal"
    EMERGENCY = "emergency"


class HolidayType(str, Enum):
    NATIONAL = "national"
    REGIONAL = "regional"
    COMPANY = "company"


class NotificationType(str, Enum):
    LEAVE_REQUEST = "leave_request"
    COMPOFF_REQUEST = "compoff_request"
    LEAVE_APPROVED = "leave_approved"
    LEAVE_REJECTED = "leave_rejected"
    COMPOFF_APPROVED = "compoff_approved"
    COMPOFF_REJECTED = "compoff_rejected"
    PROFILE_CHANGE_REQUEST = "profile_change_request"


class AttendanceState(str, Enum):
    """Per-day attendance state machine."""

    NOT_CHECKED_IN = "not-checked-in"
    CHECKED_IN = "checked-in"
    ON_BREAK = "on-break"
    CHECKED_OUT = "checked-out"


class DayStatusType(str, Enum):
    HOLIDAY = "holiday"
    COMPOFF = "compoff"
    LEAVE = "leave"
    PRESENT = "present"
    ABSENT = "absent"
    FUTURE = "future"


class DataSource(str, Enum):
    """Where a write finally landed."""

    REMOTE = "remote"
    LOCAL = "local"


class ChangeAction(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
