from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import ChangeAction, HolidayType
from ..database.mysql_base import MySQLRepository, db_cursor, fetchall, fetchone
from .model import Holiday
from .repository import HolidayRepository


def _to_holiday(r: dict) -> Holiday:
    return Holiday(
        id=str(r["id"]),
        name=r["name"],
        date=r["date"],
        type=HolidayType(r["type"]),
        description=r.get("description"),
        is_optional=bool(r.get("is_optional")),
        created_by=r.get("created_by"),
        created_at=r.get("created_at"),
    )


class MySQLHolidayRepository(MySQLRepository, HolidayRepository):
    table = "holidays"

    def list_all(self) -> Sequence[Holiday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, name, date, type, description, is_optional, created_by, created_at
                FROM holidays
                ORDER BY date ASC
                """
            )
            return [_to_holiday(r) for r in fetchall(cur)]

    def get_by_date(self, day: date) -> Optional[Holiday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, name, date, type, description, is_optional, created_by, created_at
                FROM holidays
                WHERE date=%s
                ORDER BY name ASC
                LIMIT 1
                """,
                (day,),
            )
            r = fetchone(cur)
            return _to_holiday(r) if r else None

    def upsert(self, holiday: Holiday) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO holidays(id, name, date, type, description, is_optional, created_by)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    name=VALUES(name),
                    date=VALUES(date),
                    type=VALUES(type),
                    description=VALUES(description),
                    is_optional=VALUES(is_optional)
                """,
                (
                    holiday.id,
                    holiday.name,
                    holiday.date,
                    holiday.type.value,
                    holiday.description,
                    1 if holiday.is_optional else 0,
                    holiday.created_by,
                ),
            )
            action = ChangeAction.INSERT if cur.rowcount == 1 else ChangeAction.UPDATE
        self._publish(action, holiday.to_dict())

    def delete(self, holiday_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM holidays WHERE id=%s", (holiday_id,))
            deleted = cur.rowcount > 0
        if deleted:
            self._publish(ChangeAction.DELETE, {"id": holiday_id})
        return deleted
