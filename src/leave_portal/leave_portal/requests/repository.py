from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import RequestStatus
from .model import CompOffRequest, LeaveRequest


class RequestRepository(Protocol):
    """Remote store for leave and comp-off requests.

    ``review_*`` only touches rows that are still pending and returns False otherwise.
    """

    # Leave requests
    def list_leave_requests(self, *, employee_id: Optional[str] = None) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def get_leave_request(self, *, request_id: str) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def create_leave_request(self, request: LeaveRequest) -> None:
        raise NotImplementedError

    def review_leave_request(
        self,
        *,
        request_id: str,
        status: RequestStatus,
        reviewed_by: str,
        reviewed_at: datetime,
        admin_comment: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    # Comp-off requests
    def list_comp_off_requests(self, *, employee_id: Optional[str] = None) -> Sequence[CompOffRequest]:
        raise NotImplementedError

    def get_comp_off_request(self, *, request_id: str) -> Optional[CompOffRequest]:
        raise NotImplementedError

    def create_comp_off_request(self, request: CompOffRequest) -> None:
        raise NotImplementedError

    def review_comp_off_request(
        self,
        *,
        request_id: str,
        status: RequestStatus,
        reviewed_by: str,
        reviewed_at: datetime,
        admin_comment: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError
