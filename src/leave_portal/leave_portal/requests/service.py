from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable, Generic, Optional, Sequence, TypeVar, Union

from ..common.datetime_utils import new_local_id, new_remote_id, now_local, parse_iso_date
from ..common.live import LiveCollection
from ..common.results import WriteResult
from ..common.validators import ensure_valid, sanitize_input, validate_comp_off_request, validate_leave_request
from ..core.constants import REASON_MAX_LENGTH
from ..core.enums import DataSource, LeaveType, NotificationType, RequestStatus, Role
from ..core.exceptions import AuthorizationError, InvalidTransitionError, NotFoundError, RemoteUnavailableError
from ..local_store.fallback import FallbackStore, admin_key, owner_key
from ..notifications.service import NotificationDispatcher
from ..realtime.change_feed import ChangeFeed
from .model import CompOffRequest, LeaveRequest
from .repository import RequestRepository

logger = logging.getLogger(__name__)

R = TypeVar("R", LeaveRequest, CompOffRequest)

_ACTIONS = {
    "approve": RequestStatus.APPROVED,
    "approved": RequestStatus.APPROVED,
    "reject": RequestStatus.REJECTED,
    "rejected": RequestStatus.REJECTED,
}


def parse_review_action(action: Union[str, RequestStatus]) -> RequestStatus:
    if isinstance(action, RequestStatus) and action != RequestStatus.PENDING:
        return action
    status = _ACTIONS.get(str(action or "").strip().lower())
    if status is None:
        raise InvalidTransitionError("Action must be approve or reject")
    return status


class _RequestBook(LiveCollection, Generic[R]):
    """Shared load / submit / review flow for leave and comp-off requests.

    Admins see every request, employees only their own. Remote writes come
    first; when the backend is unreachable the request lands in both the
    owner list and the admin-wide list of the local store.

    Locally stored requests are never pushed to the backend, so once it is
    back a review of a ``leave_<ms>_...`` id answers NotFoundError.
    """

    entity: str = ""
    local_prefix: str = ""
    label: str = ""
    record_cls: type = LeaveRequest
    approved_type: NotificationType = NotificationType.LEAVE_APPROVED
    rejected_type: NotificationType = NotificationType.LEAVE_REJECTED

    def __init__(
        self,
        employee_id: str,
        *,
        is_admin: bool = False,
        remote: RequestRepository,
        local: FallbackStore,
        dispatcher: NotificationDispatcher,
        feed: Optional[ChangeFeed] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        super().__init__(feed)
        self.employee_id = str(employee_id)
        self.is_admin = bool(is_admin)
        self._remote = remote
        self._local = local
        self._dispatcher = dispatcher
        self._clock = clock
        self.requests: list[R] = []

    # -------- Remote hooks (per request kind) --------
    def _remote_list(self, employee_id: Optional[str]) -> Sequence[R]:
        raise NotImplementedError

    def _remote_get(self, request_id: str) -> Optional[R]:
        raise NotImplementedError

    def _remote_create(self, request: R) -> None:
        raise NotImplementedError

    def _remote_review(self, **kwargs) -> bool:
        raise NotImplementedError

    def _submitted_notice(self, request: R) -> tuple[NotificationType, str, str]:
        raise NotImplementedError

    # -------- Keys --------
    @property
    def _view_key(self) -> str:
        return admin_key(self.entity) if self.is_admin else owner_key(self.entity, self.employee_id)

    def subscription_filters(self) -> Optional[dict]:
        return None if self.is_admin else {"employee_id": self.employee_id}

    # -------- Load --------
    def load(self) -> None:
        try:
            self.requests = list(self._remote_list(None if self.is_admin else self.employee_id))
        except RemoteUnavailableError as e:
            logger.warning("%s: remote read failed, using local store (%s)", self.entity, e)
            self._load_local()

    def _load_local(self) -> None:
        items = self._local.read_list(self._view_key) or []
        self.requests = [self.record_cls.from_dict(i) for i in items]

    def pending(self) -> list[R]:
        return [r for r in self.requests if r.status == RequestStatus.PENDING]

    # -------- Submit --------
    def _submit(self, request: R) -> WriteResult[R]:
        try:
            self._remote_create(request)
        except RemoteUnavailableError as e:
            logger.warning("%s: submit stored locally for %s (%s)", self.entity, self.employee_id, e)
            local = replace(request, id=new_local_id(self.local_prefix))
            data = local.to_dict()
            self._local.prepend(owner_key(self.entity, local.employee_id), data)
            self._local.prepend(admin_key(self.entity), data)
            self.requests = [local] + [r for r in self.requests if r.id != local.id]
            return WriteResult(local, DataSource.LOCAL)

        type_, title, message = self._submitted_notice(request)
        self._dispatcher.notify_admins(
            type_,
            title,
            message,
            sender_id=request.employee_id,
            related_id=request.id,
            data=request.to_dict(),
        )
        self.load()
        return WriteResult(request, DataSource.REMOTE)

    # -------- Review --------
    def review(
        self,
        request_id: str,
        action: Union[str, RequestStatus],
        comment: str = "",
        *,
        current_role: Role,
        reviewer_id: str,
    ) -> WriteResult[R]:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only administrators can review requests")

        status = parse_review_action(action)
        comment = sanitize_input(comment) or None
        reviewed_at = self._clock()

        try:
            result = self._review_remote(request_id, status, comment, reviewer_id, reviewed_at)
        except RemoteUnavailableError as e:
            logger.warning("%s: review of %s stored locally (%s)", self.entity, request_id, e)
            result = self._review_local(request_id, status, comment, reviewer_id, reviewed_at)

        self._notify_requester(result.record, status, comment, reviewer_id)
        return result

    def _review_remote(self, request_id, status, comment, reviewer_id, reviewed_at) -> WriteResult[R]:
        current = self._remote_get(str(request_id))
        if current is None:
            raise NotFoundError("Request not found")
        _ensure_pending(current)

        changed = self._remote_review(
            request_id=str(request_id),
            status=status,
            reviewed_by=str(reviewer_id),
            reviewed_at=reviewed_at,
            admin_comment=comment,
        )
        if not changed:
            raise InvalidTransitionError("Request has already been reviewed")

        self.load()
        reviewed = replace(
            current, status=status, admin_comment=comment, reviewed_by=str(reviewer_id), reviewed_at=reviewed_at
        )
        return WriteResult(reviewed, DataSource.REMOTE)

    def _review_local(self, request_id, status, comment, reviewer_id, reviewed_at) -> WriteResult[R]:
        current = self._find_local(str(request_id))
        _ensure_pending(current)

        reviewed = replace(
            current, status=status, admin_comment=comment, reviewed_by=str(reviewer_id), reviewed_at=reviewed_at
        )
        data = reviewed.to_dict()
        match = lambda item: str(item.get("id")) == reviewed.id  # noqa: E731

        scopes = ((admin_key(self.entity), None), (owner_key(self.entity, reviewed.employee_id), reviewed.employee_id))
        for key, owner in scopes:
            if self._local.read_list(key) is None:
                # Key never written: start it from the in-memory view.
                self._local.write_list(key, [
                    r.to_dict() for r in self.requests if owner is None or r.employee_id == owner
                ])
            self._local.upsert(key, data, match)

        self.requests = [reviewed if r.id == reviewed.id else r for r in self.requests]
        return WriteResult(reviewed, DataSource.LOCAL)

    def _find_local(self, request_id: str) -> R:
        for key in (admin_key(self.entity), self._view_key):
            for item in self._local.read_list(key) or []:
                if str(item.get("id")) == request_id:
                    return self.record_cls.from_dict(item)
        for r in self.requests:
            if r.id == request_id:
                return r
        raise NotFoundError("Request not found")

    def _notify_requester(self, request: R, status: RequestStatus, comment: Optional[str], reviewer_id: str) -> None:
        approved = status == RequestStatus.APPROVED
        outcome = "Approved" if approved else "Rejected"
        message = f"Your {self.label.lower()} request has been {status.value}."
        if comment:
            message = f"{message} Comment: {comment}"

        self._dispatcher.notify(
            self.approved_type if approved else self.rejected_type,
            f"{self.label} Request {outcome}",
            message,
            recipient_id=request.employee_id,
            sender_id=str(reviewer_id),
            related_id=request.id,
            data={"status": status.value, "admin_comment": comment},
        )


def _ensure_pending(request) -> None:
    if request.status != RequestStatus.PENDING:
        raise InvalidTransitionError(f"Request has already been {request.status.value}")


class LeaveRequestBook(_RequestBook[LeaveRequest]):
    table = "leave_requests"
    entity = "leave_requests"
    local_prefix = "leave"
    label = "Leave"
    record_cls = LeaveRequest
    approved_type = NotificationType.LEAVE_APPROVED
    rejected_type = NotificationType.LEAVE_REJECTED

    def _remote_list(self, employee_id):
        return self._remote.list_leave_requests(employee_id=employee_id)

    def _remote_get(self, request_id):
        return self._remote.get_leave_request(request_id=request_id)

    def _remote_create(self, request):
        self._remote.create_leave_request(request)

    def _remote_review(self, **kwargs) -> bool:
        return self._remote.review_leave_request(**kwargs)

    def _submitted_notice(self, request: LeaveRequest):
        return (
            NotificationType.LEAVE_REQUEST,
            "New Leave Request",
            f"New {request.type.value} leave request submitted",
        )

    def submit(
        self,
        *,
        leave_type: str,
        start_date: str,
        end_date: str,
        reason: str,
        employee_name: Optional[str] = None,
        employee_number: Optional[str] = None,
    ) -> WriteResult[LeaveRequest]:
        now = self._clock()
        ensure_valid(
            validate_leave_request(
                leave_type=leave_type, start_date=start_date, end_date=end_date, reason=reason, today=now.date()
            )
        )
        request = LeaveRequest(
            id=new_remote_id(),
            employee_id=self.employee_id,
            type=LeaveType(leave_type),
            start_date=parse_iso_date(start_date),
            end_date=parse_iso_date(end_date),
            reason=sanitize_input(reason, max_length=REASON_MAX_LENGTH),
            status=RequestStatus.PENDING,
            applied_date=now,
            employee_name=employee_name,
            employee_number=employee_number,
        )
        return self._submit(request)


class CompOffBook(_RequestBook[CompOffRequest]):
    table = "comp_off_requests"
    entity = "compoff_requests"
    local_prefix = "compoff"
    label = "Comp Off"
    record_cls = CompOffRequest
    approved_type = NotificationType.COMPOFF_APPROVED
    rejected_type = NotificationType.COMPOFF_REJECTED

    def _remote_list(self, employee_id):
        return self._remote.list_comp_off_requests(employee_id=employee_id)

    def _remote_get(self, request_id):
        return self._remote.get_comp_off_request(request_id=request_id)

    def _remote_create(self, request):
        self._remote.create_comp_off_request(request)

    def _remote_review(self, **kwargs) -> bool:
        return self._remote.review_comp_off_request(**kwargs)

    def _submitted_notice(self, request: CompOffRequest):
        return (
            NotificationType.COMPOFF_REQUEST,
            "New Comp Off Request",
            f"Comp off requested for {request.comp_off_date.isoformat()} "
            f"(worked on {request.work_date.isoformat()})",
        )

    def submit(
        self,
        *,
        work_date: str,
        comp_off_date: str,
        reason: str,
        employee_name: Optional[str] = None,
        employee_number: Optional[str] = None,
    ) -> WriteResult[CompOffRequest]:
        now = self._clock()
        ensure_valid(
            validate_comp_off_request(work_date=work_date, comp_off_date=comp_off_date, reason=reason, today=now.date())
        )
        request = CompOffRequest(
            id=new_remote_id(),
            employee_id=self.employee_id,
            work_date=parse_iso_date(work_date),
            comp_off_date=parse_iso_date(comp_off_date),
            reason=sanitize_input(reason, max_length=REASON_MAX_LENGTH),
            status=RequestStatus.PENDING,
            applied_date=now,
            employee_name=employee_name,
            employee_number=employee_number,
        )
        return self._submit(request)
