from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime

import pytest

from src.leave_portal.leave_portal.core.enums import ChangeAction, RequestStatus, Role
from src.leave_portal.leave_portal.core.exceptions import ConflictError, RemoteUnavailableError
from src.leave_portal.leave_portal.employees.model import RateLimitStatus
from src.leave_portal.leave_portal.local_store.fallback import FallbackStore
from src.leave_portal.leave_portal.local_store.store import LocalStore
from src.leave_portal.leave_portal.notifications.service import NotificationDispatcher
from src.leave_portal.leave_portal.realtime.change_feed import ChangeEvent, ChangeFeed


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class _Remote:
    """Base for in-memory repositories; flip ``down`` to simulate an unreachable backend."""

    table = ""

    def __init__(self, feed: ChangeFeed | None = None):
        self.down = False
        self.feed = feed
        self.calls: list[str] = []

    def _check(self, op: str) -> None:
        self.calls.append(op)
        if self.down:
            raise RemoteUnavailableError(f"{op}: backend unreachable")

    def _publish(self, action: ChangeAction, row: dict, table: str | None = None) -> None:
        if self.feed is not None:
            self.feed.publish(ChangeEvent(table=table or self.table, action=action, row=row))


class FakeAttendanceRepo(_Remote):
    table = "attendance_records"

    def __init__(self, feed=None):
        super().__init__(feed)
        self.records = {}

    def get_for_employee_and_date(self, employee_id, work_date):
        self._check("get")
        return self.records.get((str(employee_id), work_date))

    def get_recent_for_employee(self, employee_id, limit):
        self._check("recent")
        rows = [r for (emp, _), r in self.records.items() if emp == str(employee_id)]
        return sorted(rows, key=lambda r: r.date, reverse=True)[:limit]

    def list_between(self, *, start_date, end_date, employee_id=None):
        self._check("between")
        return [
            r
            for r in self.records.values()
            if start_date <= r.date <= end_date and (employee_id is None or r.employee_id == str(employee_id))
        ]

    def save(self, record):
        self._check("save")
        key = (record.employee_id, record.date)
        action = ChangeAction.UPDATE if key in self.records else ChangeAction.INSERT
        if key in self.records:
            record = replace(record, id=self.records[key].id)
        self.records[key] = record
        self._publish(action, record.to_dict())
        return record


class FakeRequestRepo(_Remote):
    def __init__(self, feed=None):
        super().__init__(feed)
        self.leaves = {}
        self.comp_offs = {}

    def list_leave_requests(self, *, employee_id=None):
        self._check("list_leaves")
        return [r for r in self.leaves.values() if employee_id is None or r.employee_id == employee_id]

    def get_leave_request(self, *, request_id):
        self._check("get_leave")
        return self.leaves.get(request_id)

    def create_leave_request(self, request):
        self._check("create_leave")
        self.leaves[request.id] = request
        self._publish(ChangeAction.INSERT, request.to_dict(), "leave_requests")

    def review_leave_request(self, *, request_id, status, reviewed_by, reviewed_at, admin_comment=None):
        self._check("review_leave")
        return self._review(self.leaves, "leave_requests", request_id, status, reviewed_by, reviewed_at, admin_comment)

    def list_comp_off_requests(self, *, employee_id=None):
        self._check("list_comp_offs")
        return [r for r in self.comp_offs.values() if employee_id is None or r.employee_id == employee_id]

    def get_comp_off_request(self, *, request_id):
        self._check("get_comp_off")
        return self.comp_offs.get(request_id)

    def create_comp_off_request(self, request):
        self._check("create_comp_off")
        self.comp_offs[request.id] = request
        self._publish(ChangeAction.INSERT, request.to_dict(), "comp_off_requests")

    def review_comp_off_request(self, *, request_id, status, reviewed_by, reviewed_at, admin_comment=None):
        self._check("review_comp_off")
        return self._review(
            self.comp_offs, "comp_off_requests", request_id, status, reviewed_by, reviewed_at, admin_comment
        )

    def _review(self, store, table, request_id, status, reviewed_by, reviewed_at, admin_comment):
        req = store.get(request_id)
        if not req or req.status != RequestStatus.PENDING:
            return False
        store[request_id] = replace(
            req, status=status, reviewed_by=reviewed_by, reviewed_at=reviewed_at, admin_comment=admin_comment
        )
        self._publish(ChangeAction.UPDATE, store[request_id].to_dict(), table)
        return True


class FakeHolidayRepo(_Remote):
    table = "holidays"

    def __init__(self, feed=None):
        super().__init__(feed)
        self.holidays = {}

    def list_all(self):
        self._check("list")
        return sorted(self.holidays.values(), key=lambda h: h.date)

    def get_by_date(self, day):
        self._check("by_date")
        return next((h for h in self.holidays.values() if h.date == day), None)

    def upsert(self, holiday):
        self._check("upsert")
        self.holidays[holiday.id] = holiday
        self._publish(ChangeAction.INSERT, holiday.to_dict())

    def delete(self, holiday_id):
        self._check("delete")
        return self.holidays.pop(holiday_id, None) is not None


class FakeNotificationRepo(_Remote):
    table = "notifications"

    def __init__(self, feed=None):
        super().__init__(feed)
        self.items = {}

    def list_for_recipient(self, recipient_id):
        self._check("list")
        rows = [n for n in self.items.values() if n.recipient_id == str(recipient_id)]
        return sorted(rows, key=lambda n: n.created_at, reverse=True)

    def create_many(self, notifications):
        self._check("create_many")
        for n in notifications:
            self.items[n.id] = n

    def mark_read(self, notification_id):
        self._check("mark_read")
        if notification_id not in self.items:
            return False
        self.items[notification_id] = replace(self.items[notification_id], is_read=True)
        return True

    def mark_all_read(self, recipient_id):
        self._check("mark_all_read")
        count = 0
        for key, n in list(self.items.items()):
            if n.recipient_id == str(recipient_id) and not n.is_read:
                self.items[key] = replace(n, is_read=True)
                count += 1
        return count

    def delete(self, notification_id):
        self._check("delete")
        return self.items.pop(notification_id, None) is not None


class FakeEmployeeRepo(_Remote):
    table = "employees"

    def __init__(self, feed=None):
        super().__init__(feed)
        self.employees = {}
        self.rate_limited: set[tuple[str, str]] = set()

    def get_by_id(self, id):
        self._check("get_by_id")
        return self.employees.get(str(id))

    def get_by_email(self, email):
        self._check("get_by_email")
        return next((e for e in self.employees.values() if e.email == email), None)

    def get_by_employee_id(self, employee_id):
        self._check("get_by_employee_id")
        return next((e for e in self.employees.values() if e.employee_id == employee_id), None)

    def create(self, employee):
        self._check("create")
        if employee.id in self.employees:
            raise ConflictError("This record already exists")
        self.employees[employee.id] = employee

    def update_profile(self, id, *, name, phone, department, position):
        self._check("update_profile")
        current = self.employees.get(str(id))
        if not current:
            return False
        self.employees[current.id] = replace(current, name=name, phone=phone, department=department, position=position)
        return True

    def list_all(self):
        self._check("list_all")
        return sorted(self.employees.values(), key=lambda e: e.name)

    def list_admin_ids(self):
        self._check("list_admin_ids")
        return [e.id for e in self.employees.values() if e.role == Role.ADMIN]

    def get_role(self, id):
        self._check("get_role")
        e = self.employees.get(str(id))
        return e.role if e else None

    def check_rate_limit(self, identifier, action, *, max_attempts=5, window_minutes=15):
        self._check("rate_limit")
        if (identifier, action) in self.rate_limited:
            return RateLimitStatus(is_allowed=False, remaining=0, reset_time=datetime(2025, 1, 15, 10, 45))
        return RateLimitStatus(is_allowed=True, remaining=max_attempts - 1)


# -------- Fixtures --------
@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 1, 15, 9, 0, 0))


@pytest.fixture
def today(clock) -> date:
    return clock().date()


@pytest.fixture
def feed():
    return ChangeFeed()


@pytest.fixture
def local():
    return FallbackStore(LocalStore())


@pytest.fixture
def attendance_repo(feed):
    return FakeAttendanceRepo(feed)


@pytest.fixture
def request_repo(feed):
    return FakeRequestRepo(feed)


@pytest.fixture
def holiday_repo(feed):
    return FakeHolidayRepo(feed)


@pytest.fixture
def notification_repo(feed):
    return FakeNotificationRepo(feed)


@pytest.fixture
def employee_repo(feed):
    return FakeEmployeeRepo(feed)


@pytest.fixture
def dispatcher(notification_repo, employee_repo, local, clock):
    return NotificationDispatcher(notification_repo, employee_repo, local, clock=clock)
