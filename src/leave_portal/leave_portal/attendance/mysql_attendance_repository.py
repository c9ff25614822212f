from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import ChangeAction
from ..database.mysql_base import MySQLRepository, db_cursor, fetchall, fetchone
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    id, employee_id, date, check_in, check_out, hours_worked,
    break_start, break_end, total_break_time, is_on_break, has_used_break
"""


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        id=str(r["id"]),
        employee_id=str(r["employee_id"]),
        date=r["date"],
        check_in=r.get("check_in"),
        check_out=r.get("check_out"),
        hours_worked=float(r.get("hours_worked") or 0),
        break_start=r.get("break_start"),
        break_end=r.get("break_end"),
        total_break_time=float(r.get("total_break_time") or 0),
        is_on_break=bool(r.get("is_on_break")),
        has_used_break=bool(r.get("has_used_break")),
    )


class MySQLAttendanceRepository(MySQLRepository, AttendanceRepository):
    table = "attendance_records"

    def get_for_employee_and_date(self, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE employee_id=%s AND date=%s",
                (employee_id, work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_recent_for_employee(self, employee_id: str, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE employee_id=%s
                ORDER BY date DESC
                LIMIT %s
                """,
                (employee_id, int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_between(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_id: Optional[str] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["date BETWEEN %s AND %s"]
        params: list[object] = [start_date, end_date]
        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(employee_id)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE {" AND ".join(clauses)}
                ORDER BY date DESC, employee_id ASC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def save(self, record: AttendanceRecord) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(
                    id, employee_id, date, check_in, check_out, hours_worked,
                    break_start, break_end, total_break_time, is_on_break, has_used_break
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    check_in=VALUES(check_in),
                    check_out=VALUES(check_out),
                    hours_worked=VALUES(hours_worked),
                    break_start=VALUES(break_start),
                    break_end=VALUES(break_end),
                    total_break_time=VALUES(total_break_time),
                    is_on_break=VALUES(is_on_break),
                    has_used_break=VALUES(has_used_break)
                """,
                (
                    record.id,
                    record.employee_id,
                    record.date,
                    record.check_in,
                    record.check_out,
                    record.hours_worked,
                    record.break_start,
                    record.break_end,
                    record.total_break_time,
                    int(record.is_on_break),
                    int(record.has_used_break),
                ),
            )
            # rowcount is 1 for a fresh insert, 2 when the duplicate-key branch updated a row
            action = ChangeAction.INSERT if cur.rowcount == 1 else ChangeAction.UPDATE

        self._publish(action, record.to_dict())
        return record
