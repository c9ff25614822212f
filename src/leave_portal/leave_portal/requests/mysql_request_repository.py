from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import ChangeAction, LeaveType, RequestStatus
from ..database.mysql_base import MySQLRepository, db_cursor, fetchall, fetchone
from .model import CompOffRequest, LeaveRequest
from .repository import RequestRepository

LEAVE_TABLE = "leave_requests"
COMP_OFF_TABLE = "comp_off_requests"


def _to_leave(r: dict) -> LeaveRequest:
    return LeaveRequest(
        id=str(r["id"]),
        employee_id=str(r["employee_id"]),
        type=LeaveType(r["type"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        reason=r["reason"],
        status=RequestStatus(r["status"]),
        applied_date=r["applied_date"],
        admin_comment=r.get("admin_comment"),
        reviewed_at=r.get("reviewed_at"),
        reviewed_by=r.get("reviewed_by"),
        employee_name=r.get("employee_name"),
        employee_number=r.get("employee_number"),
    )


def _to_comp_off(r: dict) -> CompOffRequest:
    return CompOffRequest(
        id=str(r["id"]),
        employee_id=str(r["employee_id"]),
        work_date=r["work_date"],
        comp_off_date=r["comp_off_date"],
        reason=r["reason"],
        status=RequestStatus(r["status"]),
        applied_date=r["applied_date"],
        admin_comment=r.get("admin_comment"),
        reviewed_at=r.get("reviewed_at"),
        reviewed_by=r.get("reviewed_by"),
        employee_name=r.get("employee_name"),
        employee_number=r.get("employee_number"),
    )


class MySQLRequestRepository(MySQLRepository, RequestRepository):
    table = LEAVE_TABLE

    # -------- Leave requests --------
    def list_leave_requests(self, *, employee_id: Optional[str] = None) -> Sequence[LeaveRequest]:
        where = "1=1"
        params: tuple = ()
        if employee_id is not None:
            where = "r.employee_id=%s"
            params = (employee_id,)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT r.id, r.employee_id, r.type, r.start_date, r.end_date, r.reason, r.status,
                       r.applied_date, r.admin_comment, r.reviewed_at, r.reviewed_by,
                       e.name AS employee_name, e.employee_id AS employee_number
                FROM leave_requests r
                LEFT JOIN employees e ON e.id = r.employee_id
                WHERE {where}
                ORDER BY r.applied_date DESC
                """,
                params,
            )
            return [_to_leave(r) for r in fetchall(cur)]

    def get_leave_request(self, *, request_id: str) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, employee_id, type, start_date, end_date, reason, status,
                       applied_date, admin_comment, reviewed_at, reviewed_by
                FROM leave_requests
                WHERE id=%s
                """,
                (request_id,),
            )
            r = fetchone(cur)
            return _to_leave(r) if r else None

    def create_leave_request(self, request: LeaveRequest) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(id, employee_id, type, start_date, end_date, reason, status, applied_date)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    request.id,
                    request.employee_id,
                    request.type.value,
                    request.start_date,
                    request.end_date,
                    request.reason,
                    request.status.value,
                    request.applied_date,
                ),
            )
        self._publish(ChangeAction.INSERT, request.to_dict(), table=LEAVE_TABLE)

    def review_leave_request(
        self,
        *,
        request_id: str,
        status: RequestStatus,
        reviewed_by: str,
        reviewed_at: datetime,
        admin_comment: Optional[str] = None,
    ) -> bool:
        return self._review(LEAVE_TABLE, request_id, status, reviewed_by, reviewed_at, admin_comment)

    # -------- Comp-off requests --------
    def list_comp_off_requests(self, *, employee_id: Optional[str] = None) -> Sequence[CompOffRequest]:
        where = "1=1"
        params: tuple = ()
        if employee_id is not None:
            where = "r.employee_id=%s"
            params = (employee_id,)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT r.id, r.employee_id, r.work_date, r.comp_off_date, r.reason, r.status,
                       r.applied_date, r.admin_comment, r.reviewed_at, r.reviewed_by,
                       e.name AS employee_name, e.employee_id AS employee_number
                FROM comp_off_requests r
                LEFT JOIN employees e ON e.id = r.employee_id
                WHERE {where}
                ORDER BY r.applied_date DESC
                """,
                params,
            )
            return [_to_comp_off(r) for r in fetchall(cur)]

    def get_comp_off_request(self, *, request_id: str) -> Optional[CompOffRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, employee_id, work_date, comp_off_date, reason, status,
                       applied_date, admin_comment, reviewed_at, reviewed_by
                FROM comp_off_requests
                WHERE id=%s
                """,
                (request_id,),
            )
            r = fetchone(cur)
            return _to_comp_off(r) if r else None

    def create_comp_off_request(self, request: CompOffRequest) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO comp_off_requests(id, employee_id, work_date, comp_off_date, reason, status, applied_date)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    request.id,
                    request.employee_id,
                    request.work_date,
                    request.comp_off_date,
                    request.reason,
                    request.status.value,
                    request.applied_date,
                ),
            )
        self._publish(ChangeAction.INSERT, request.to_dict(), table=COMP_OFF_TABLE)

    def review_comp_off_request(
        self,
        *,
        request_id: str,
        status: RequestStatus,
        reviewed_by: str,
        reviewed_at: datetime,
        admin_comment: Optional[str] = None,
    ) -> bool:
        return self._review(COMP_OFF_TABLE, request_id, status, reviewed_by, reviewed_at, admin_comment)

    def _review(
        self,
        table: str,
        request_id: str,
        status: RequestStatus,
        reviewed_by: str,
        reviewed_at: datetime,
        admin_comment: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE {table}
                SET status=%s, admin_comment=%s, reviewed_by=%s, reviewed_at=%s
                WHERE id=%s AND status=%s
                """,
                (
                    status.value,
                    admin_comment,
                    reviewed_by,
                    reviewed_at,
                    request_id,
                    RequestStatus.PENDING.value,
                ),
            )
            changed = cur.rowcount > 0
            cur.execute(f"SELECT employee_id FROM {table} WHERE id=%s", (request_id,))
            row = fetchone(cur)

        if changed:
            self._publish(
                ChangeAction.UPDATE,
                {"id": request_id, "employee_id": str(row["employee_id"]) if row else None, "status": status.value},
                table=table,
            )
        return changed
