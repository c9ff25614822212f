from __future__ import annotations

import pytest

from src.leave_portal.leave_portal.core.enums import DataSource, NotificationType, RequestStatus, Role
from src.leave_portal.leave_portal.core.exceptions import (
    AuthorizationError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from src.leave_portal.leave_portal.employees.model import Employee
from src.leave_portal.leave_portal.local_store.fallback import FallbackStore
from src.leave_portal.leave_portal.local_store.store import LocalStore
from src.leave_portal.leave_portal.requests.service import CompOffBook, LeaveRequestBook, parse_review_action

REASON = "Attending a family wedding"


@pytest.fixture
def admin(employee_repo):
    employee = Employee(id="admin-1", name="Admin Demo", email="admin@company.com", employee_id="ADMIN001",
                        role=Role.ADMIN)
    employee_repo.employees[employee.id] = employee
    return employee


def _leaves(employee_id, request_repo, local, dispatcher, feed, clock, *, is_admin=False):
    return LeaveRequestBook(employee_id, is_admin=is_admin, remote=request_repo, local=local,
                            dispatcher=dispatcher, feed=feed, clock=clock)


def _comp_offs(employee_id, request_repo, local, dispatcher, feed, clock, *, is_admin=False):
    return CompOffBook(employee_id, is_admin=is_admin, remote=request_repo, local=local,
                       dispatcher=dispatcher, feed=feed, clock=clock)


def _submit_leave(book):
    return book.submit(leave_type="vacation", start_date="2025-01-20", end_date="2025-01-22", reason=REASON)


def test_submit_notifies_every_admin(admin, request_repo, local, dispatcher, feed, clock, notification_repo):
    book = _leaves("emp-1", request_repo, local, dispatcher, feed, clock)
    result = _submit_leave(book)

    assert result.source == DataSource.REMOTE
    assert [r.id for r in book.requests] == [result.record.id]
    sent = list(notification_repo.items.values())
    assert len(sent) == 1
    assert sent[0].recipient_id == "admin-1"
    assert sent[0].type == NotificationType.LEAVE_REQUEST
    assert sent[0].title == "New Leave Request"


def test_invalid_leave_is_rejected(request_repo, local, dispatcher, feed, clock):
    book = _leaves("emp-1", request_repo, local, dispatcher, feed, clock)
    with pytest.raises(ValidationError) as exc:
        book.submit(leave_type="vacation", start_date="2025-01-22", end_date="2025-01-20", reason=REASON)
    assert "End date must be after start date" in exc.value.errors
    assert request_repo.leaves == {}


def test_approve_once_notifies_requester_once(admin, request_repo, local, dispatcher, feed, clock, notification_repo):
    request = _submit_leave(_leaves("emp-1", request_repo, local, dispatcher, feed, clock)).record
    notification_repo.items.clear()

    admin_book = _leaves(admin.id, request_repo, local, dispatcher, feed, clock, is_admin=True)
    admin_book.load()
    result = admin_book.review(request.id, "approve", "Enjoy", current_role=Role.ADMIN, reviewer_id=admin.id)

    assert result.record.status == RequestStatus.APPROVED
    assert request_repo.leaves[request.id].status == RequestStatus.APPROVED
    sent = list(notification_repo.items.values())
    assert len(sent) == 1
    assert sent[0].recipient_id == "emp-1"
    assert sent[0].type == NotificationType.LEAVE_APPROVED
    assert sent[0].title == "Leave Request Approved"
    assert sent[0].message == "Your leave request has been approved. Comment: Enjoy"

    with pytest.raises(InvalidTransitionError):
        admin_book.review(request.id, "reject", current_role=Role.ADMIN, reviewer_id=admin.id)
    assert len(notification_repo.items) == 1


def test_only_admins_review(request_repo, local, dispatcher, feed, clock):
    request = _submit_leave(_leaves("emp-1", request_repo, local, dispatcher, feed, clock)).record
    book = _leaves("emp-1", request_repo, local, dispatcher, feed, clock)

    with pytest.raises(AuthorizationError):
        book.review(request.id, "approve", current_role=Role.EMPLOYEE, reviewer_id="emp-1")
    assert request_repo.leaves[request.id].status == RequestStatus.PENDING


def test_unknown_request_and_action(admin, request_repo, local, dispatcher, feed, clock):
    book = _leaves(admin.id, request_repo, local, dispatcher, feed, clock, is_admin=True)
    with pytest.raises(NotFoundError):
        book.review("missing", "approve", current_role=Role.ADMIN, reviewer_id=admin.id)
    with pytest.raises(InvalidTransitionError):
        parse_review_action("maybe")
    assert parse_review_action("Rejected") == RequestStatus.REJECTED


def test_offline_submit_lands_in_both_keys_and_survives_reload(tmp_path, request_repo, dispatcher, feed, clock):
    path = tmp_path / "local.json"
    local = FallbackStore(LocalStore(path))
    request_repo.down = True

    result = _submit_leave(_leaves("emp-1", request_repo, local, dispatcher, feed, clock))
    assert result.source == DataSource.LOCAL
    assert not result.synced
    assert result.record.id.startswith("leave_")

    reopened = FallbackStore(LocalStore(path))
    assert reopened.read_list("leave_requests_emp-1") == [result.record.to_dict()]
    assert reopened.read_list("all_leave_requests") == [result.record.to_dict()]

    mine = _leaves("emp-1", request_repo, reopened, dispatcher, feed, clock)
    mine.load()
    assert mine.requests == [result.record]


def test_offline_review_updates_both_keys(admin, request_repo, local, dispatcher, feed, clock, notification_repo):
    request_repo.down = True
    request = _submit_leave(_leaves("emp-1", request_repo, local, dispatcher, feed, clock)).record

    admin_book = _leaves(admin.id, request_repo, local, dispatcher, feed, clock, is_admin=True)
    admin_book.load()
    result = admin_book.review(request.id, "reject", current_role=Role.ADMIN, reviewer_id=admin.id)

    assert result.source == DataSource.LOCAL
    assert local.read_list("all_leave_requests")[0]["status"] == "rejected"
    assert local.read_list("leave_requests_emp-1")[0]["status"] == "rejected"
    # Requester notification still goes out.
    assert [n.type for n in notification_repo.items.values()] == [NotificationType.LEAVE_REJECTED]


def test_comp_off_flow(admin, request_repo, local, dispatcher, feed, clock, notification_repo):
    book = _comp_offs("emp-1", request_repo, local, dispatcher, feed, clock)
    request = book.submit(work_date="2025-01-12", comp_off_date="2025-01-24", reason=REASON).record

    assert [n.type for n in notification_repo.items.values()] == [NotificationType.COMPOFF_REQUEST]
    notification_repo.items.clear()

    with book:
        admin_book = _comp_offs(admin.id, request_repo, local, dispatcher, feed, clock, is_admin=True)
        admin_book.load()
        admin_book.review(request.id, "approved", current_role=Role.ADMIN, reviewer_id=admin.id)

        # The employee's book reloaded from the change feed.
        assert book.requests[0].status == RequestStatus.APPROVED

    sent = list(notification_repo.items.values())
    assert len(sent) == 1
    assert sent[0].title == "Comp Off Request Approved"
    assert sent[0].message == "Your comp off request has been approved."


def test_employee_view_only_sees_own_requests(request_repo, local, dispatcher, feed, clock):
    _submit_leave(_leaves("emp-1", request_repo, local, dispatcher, feed, clock))
    _submit_leave(_leaves("emp-2", request_repo, local, dispatcher, feed, clock))

    mine = _leaves("emp-1", request_repo, local, dispatcher, feed, clock)
    mine.load()
    everyone = _leaves("admin-1", request_repo, local, dispatcher, feed, clock, is_admin=True)
    everyone.load()

    assert {r.employee_id for r in mine.requests} == {"emp-1"}
    assert len(everyone.requests) == 2
    assert len(everyone.pending()) == 2


def test_long_reasons_are_stored_in_full(request_repo, local, dispatcher, feed, clock):
    reason = "a" * 300
    leave = _leaves("emp-1", request_repo, local, dispatcher, feed, clock).submit(
        leave_type="sick", start_date="2025-01-20", end_date="2025-01-20", reason=reason
    ).record
    comp_off = _comp_offs("emp-1", request_repo, local, dispatcher, feed, clock).submit(
        work_date="2025-01-12", comp_off_date="2025-01-24", reason=reason
    ).record

    assert request_repo.leaves[leave.id].reason == reason
    assert comp_off.reason == reason

    with pytest.raises(ValidationError):
        _leaves("emp-1", request_repo, local, dispatcher, feed, clock).submit(
            leave_type="sick", start_date="2025-01-20", end_date="2025-01-20", reason="a" * 501
        )


def test_offline_review_of_a_remote_request_is_kept(admin, request_repo, local, dispatcher, feed, clock):
    request_repo.down = True
    offline = _submit_leave(_leaves("emp-2", request_repo, local, dispatcher, feed, clock)).record
    request_repo.down = False
    remote = _submit_leave(_leaves("emp-1", request_repo, local, dispatcher, feed, clock)).record

    admin_book = _leaves(admin.id, request_repo, local, dispatcher, feed, clock, is_admin=True)
    admin_book.load()
    request_repo.down = True
    result = admin_book.review(remote.id, "approve", current_role=Role.ADMIN, reviewer_id=admin.id)
    assert result.source == DataSource.LOCAL

    admin_book.load()
    statuses = {r.id: r.status for r in admin_book.requests}
    assert statuses[remote.id] == RequestStatus.APPROVED
    assert statuses[offline.id] == RequestStatus.PENDING
    assert local.read_list("leave_requests_emp-1")[0]["status"] == "approved"


def test_locally_stored_request_is_unknown_once_backend_returns(admin, request_repo, local, dispatcher, feed, clock):
    request_repo.down = True
    offline = _submit_leave(_leaves("emp-1", request_repo, local, dispatcher, feed, clock)).record
    request_repo.down = False

    admin_book = _leaves(admin.id, request_repo, local, dispatcher, feed, clock, is_admin=True)
    with pytest.raises(NotFoundError):
        admin_book.review(offline.id, "approve", current_role=Role.ADMIN, reviewer_id=admin.id)
