from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional, Sequence

from ..core.constants import RATE_LIMIT_BLOCK_MINUTES, RATE_LIMIT_MAX_ATTEMPTS, RATE_LIMIT_WINDOW_MINUTES
from ..core.enums import ChangeAction, Role
from ..database.mysql_base import MySQLRepository, db_cursor, fetchall, fetchone
from .model import Employee, RateLimitStatus
from .repository import EmployeeRepository

_COLUMNS = """
    id, name, email, employee_id, role, password_hash, department, position, phone, is_verified, created_at
"""


def _to_employee(row: dict) -> Employee:
    return Employee(
        id=str(row["id"]),
        name=row["name"],
        email=row["email"],
        employee_id=row["employee_id"],
        role=Role(row["role"]),
        password_hash=row.get("password_hash") or "",
        department=row.get("department"),
        position=row.get("position"),
        phone=row.get("phone"),
        is_verified=bool(row.get("is_verified", False)),
        created_at=row.get("created_at"),
    )


class MySQLEmployeeRepository(MySQLRepository, EmployeeRepository):
    table = "employees"

    def _get_one(self, where: str, value) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE {where}=%s", (value,))
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def get_by_id(self, id: str) -> Optional[Employee]:
        return self._get_one("id", id)

    def get_by_email(self, email: str) -> Optional[Employee]:
        return self._get_one("email", email)

    def get_by_employee_id(self, employee_id: str) -> Optional[Employee]:
        return self._get_one("employee_id", employee_id)

    def create(self, employee: Employee) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO employees(id, name, email, employee_id, role, password_hash,
                                      department, position, phone, is_verified)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    employee.id,
                    employee.name,
                    employee.email,
                    employee.employee_id,
                    employee.role.value,
                    employee.password_hash,
                    employee.department,
                    employee.position,
                    employee.phone,
                    1 if employee.is_verified else 0,
                ),
            )
        self._publish(ChangeAction.INSERT, employee.to_dict())

    def update_profile(
        self,
        id: str,
        *,
        name: str,
        phone: Optional[str],
        department: Optional[str],
        position: Optional[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE employees
                SET name=%s, phone=%s, department=%s, position=%s
                WHERE id=%s
                """,
                (name, phone, department, position, id),
            )
            changed = cur.rowcount > 0
        if changed:
            self._publish(ChangeAction.UPDATE, {"id": id, "name": name})
        return changed

    def list_all(self) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees ORDER BY name ASC")
            return [_to_employee(r) for r in fetchall(cur)]

    def list_admin_ids(self) -> Sequence[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id FROM employees WHERE role=%s", (Role.ADMIN.value,))
            return [str(r["id"]) for r in fetchall(cur)]

    def get_role(self, id: str) -> Optional[Role]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT role FROM employees WHERE id=%s", (id,))
            row = fetchone(cur)
            return Role(row["role"]) if row else None

    def check_rate_limit(
        self,
        identifier: str,
        action: str,
        *,
        max_attempts: int = RATE_LIMIT_MAX_ATTEMPTS,
        window_minutes: int = RATE_LIMIT_WINDOW_MINUTES,
    ) -> RateLimitStatus:
        """Count one attempt; block for an hour once ``max_attempts`` is reached within the window."""
        now = datetime.now()
        window = timedelta(minutes=int(window_minutes))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM rate_limits WHERE window_start < %s", (now - timedelta(hours=1),))
            cur.execute(
                """
                SELECT attempts, window_start, blocked_until
                FROM rate_limits
                WHERE identifier=%s AND action=%s
                FOR UPDATE
                """,
                (identifier, action),
            )
            row = fetchone(cur)

            if row and row.get("blocked_until") and row["blocked_until"] > now:
                return RateLimitStatus(is_allowed=False, remaining=0, reset_time=row["blocked_until"])

            if not row or row["window_start"] < now - window:
                cur.execute(
                    """
                    INSERT INTO rate_limits(identifier, action, attempts, window_start, blocked_until)
                    VALUES(%s,%s,1,%s,NULL)
                    ON DUPLICATE KEY UPDATE attempts=1, window_start=VALUES(window_start), blocked_until=NULL
                    """,
                    (identifier, action, now),
                )
                return RateLimitStatus(is_allowed=True, remaining=int(max_attempts) - 1)

            attempts = int(row["attempts"]) + 1
            if attempts >= int(max_attempts):
                blocked_until = now + timedelta(minutes=RATE_LIMIT_BLOCK_MINUTES)
                cur.execute(
                    "UPDATE rate_limits SET attempts=%s, blocked_until=%s WHERE identifier=%s AND action=%s",
                    (attempts, blocked_until, identifier, action),
                )
                return RateLimitStatus(is_allowed=False, remaining=0, reset_time=blocked_until)

            cur.execute(
                "UPDATE rate_limits SET attempts=%s WHERE identifier=%s AND action=%s",
                (attempts, identifier, action),
            )
            return RateLimitStatus(is_allowed=True, remaining=int(max_attempts) - attempts)
