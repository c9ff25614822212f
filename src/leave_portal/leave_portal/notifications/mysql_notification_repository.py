from __future__ import annotations

import json
from typing import Sequence

from ..core.enums import ChangeAction, NotificationType
from ..database.mysql_base import MySQLRepository, db_cursor, fetchall, fetchone
from .model import Notification
from .repository import NotificationRepository


def _to_notification(r: dict) -> Notification:
    data = r.get("data")
    if isinstance(data, (str, bytes)) and data:
        data = json.loads(data)
    return Notification(
        id=str(r["id"]),
        type=NotificationType(r["type"]),
        title=r["title"],
        message=r["message"],
        recipient_id=str(r["recipient_id"]),
        sender_id=str(r["sender_id"]),
        related_id=r.get("related_id"),
        is_read=bool(r.get("is_read")),
        created_at=r["created_at"],
        data=data or None,
    )


class MySQLNotificationRepository(MySQLRepository, NotificationRepository):
    table = "notifications"

    def list_for_recipient(self, recipient_id: str) -> Sequence[Notification]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, type, title, message, recipient_id, sender_id, related_id,
                       is_read, created_at, data
                FROM notifications
                WHERE recipient_id=%s
                ORDER BY created_at DESC
                """,
                (recipient_id,),
            )
            return [_to_notification(r) for r in fetchall(cur)]

    def create_many(self, notifications: Sequence[Notification]) -> None:
        if not notifications:
            return
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                """
                INSERT INTO notifications(
                    id, type, title, message, recipient_id, sender_id, related_id, is_read, created_at, data
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                [
                    (
                        n.id,
                        n.type.value,
                        n.title,
                        n.message,
                        n.recipient_id,
                        n.sender_id,
                        n.related_id,
                        int(n.is_read),
                        n.created_at,
                        json.dumps(n.data) if n.data is not None else None,
                    )
                    for n in notifications
                ],
            )
        for n in notifications:
            self._publish(ChangeAction.INSERT, n.to_dict())

    def mark_read(self, notification_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE notifications SET is_read=1 WHERE id=%s", (notification_id,))
            changed = cur.rowcount > 0
            cur.execute("SELECT recipient_id FROM notifications WHERE id=%s", (notification_id,))
            row = fetchone(cur)
        if changed and row:
            self._publish(ChangeAction.UPDATE, {"id": notification_id, "recipient_id": str(row["recipient_id"])})
        return changed

    def mark_all_read(self, recipient_id: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE notifications SET is_read=1 WHERE recipient_id=%s AND is_read=0",
                (recipient_id,),
            )
            count = int(cur.rowcount)
        if count:
            self._publish(ChangeAction.UPDATE, {"recipient_id": recipient_id})
        return count

    def delete(self, notification_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT recipient_id FROM notifications WHERE id=%s", (notification_id,))
            row = fetchone(cur)
            cur.execute("DELETE FROM notifications WHERE id=%s", (notification_id,))
            deleted = cur.rowcount > 0
        if deleted and row:
            self._publish(ChangeAction.DELETE, {"id": notification_id, "recipient_id": str(row["recipient_id"])})
        return deleted
