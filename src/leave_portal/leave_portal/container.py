from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceTracker
from .calendar.service import CalendarService
from .common.datetime_utils import now_local
from .core.constants import DEFAULT_SESSION_TIMEOUT_MINUTES
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .employees.service import AuthService, EmployeeService
from .holidays.mysql_holiday_repository import MySQLHolidayRepository
from .holidays.repository import HolidayRepository
from .holidays.service import HolidayCalendar
from .local_store.fallback import FallbackStore
from .local_store.store import LocalStore
from .notifications.mysql_notification_repository import MySQLNotificationRepository
from .notifications.repository import NotificationRepository
from .notifications.service import NotificationDispatcher, NotificationInbox
from .realtime.change_feed import ChangeFeed
from .requests.mysql_request_repository import MySQLRequestRepository
from .requests.repository import RequestRepository
from .requests.service import CompOffBook, LeaveRequestBook


@dataclass(frozen=True)
class Container:
    """Shared singletons plus factories for the per-user services."""

    local: FallbackStore
    feed: ChangeFeed

    employees_repo: EmployeeRepository
    attendance_repo: AttendanceRepository
    requests_repo: RequestRepository
    holidays_repo: HolidayRepository
    notifications_repo: NotificationRepository

    auth_service: AuthService
    employee_service: EmployeeService
    dispatcher: NotificationDispatcher

    session_timeout_minutes: int = DEFAULT_SESSION_TIMEOUT_MINUTES
    clock: Callable = now_local

    def attendance_tracker(self, employee_id: str) -> AttendanceTracker:
        return AttendanceTracker(
            employee_id, remote=self.attendance_repo, local=self.local, feed=self.feed, clock=self.clock
        )

    def leave_book(self, employee_id: str, *, is_admin: bool = False) -> LeaveRequestBook:
        return LeaveRequestBook(
            employee_id,
            is_admin=is_admin,
            remote=self.requests_repo,
            local=self.local,
            dispatcher=self.dispatcher,
            feed=self.feed,
            clock=self.clock,
        )

    def comp_off_book(self, employee_id: str, *, is_admin: bool = False) -> CompOffBook:
        return CompOffBook(
            employee_id,
            is_admin=is_admin,
            remote=self.requests_repo,
            local=self.local,
            dispatcher=self.dispatcher,
            feed=self.feed,
            clock=self.clock,
        )

    def holiday_calendar(self, *, is_admin: bool = False) -> HolidayCalendar:
        return HolidayCalendar(is_admin, remote=self.holidays_repo, local=self.local, feed=self.feed, clock=self.clock)

    def inbox(self, user_id: str) -> NotificationInbox:
        return NotificationInbox(user_id, remote=self.notifications_repo, local=self.local, feed=self.feed)

    def calendar_service(self, employee_id: str, *, is_admin: bool = False) -> CalendarService:
        """Calendar over freshly loaded holidays and requests for this viewer."""
        holidays = self.holiday_calendar(is_admin=is_admin)
        leaves = self.leave_book(employee_id, is_admin=is_admin)
        comp_offs = self.comp_off_book(employee_id, is_admin=is_admin)
        for collection in (holidays, leaves, comp_offs):
            collection.load()

        return CalendarService(
            holidays=holidays,
            leaves=leaves,
            comp_offs=comp_offs,
            attendance=self.attendance_repo,
            employees=self.employees_repo,
            local=self.local,
            clock=self.clock,
        )


def build_container(
    *,
    db_config: dict,
    local_store_path: Optional[str] = None,
    session_timeout_minutes: int = DEFAULT_SESSION_TIMEOUT_MINUTES,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_settings(db_config))
    feed = ChangeFeed()
    local = FallbackStore(LocalStore(local_store_path or None))

    employees_repo = MySQLEmployeeRepository(conn, feed)
    attendance_repo = MySQLAttendanceRepository(conn, feed)
    requests_repo = MySQLRequestRepository(conn, feed)
    holidays_repo = MySQLHolidayRepository(conn, feed)
    notifications_repo = MySQLNotificationRepository(conn, feed)

    return Container(
        local=local,
        feed=feed,
        employees_repo=employees_repo,
        attendance_repo=attendance_repo,
        requests_repo=requests_repo,
        holidays_repo=holidays_repo,
        notifications_repo=notifications_repo,
        auth_service=AuthService(employees_repo, local),
        employee_service=EmployeeService(employees_repo),
        dispatcher=NotificationDispatcher(notifications_repo, employees_repo, local),
        session_timeout_minutes=int(session_timeout_minutes),
    )
