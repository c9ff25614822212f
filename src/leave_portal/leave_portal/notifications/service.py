from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Optional, Protocol, Sequence

from ..common.datetime_utils import new_local_id, new_remote_id, now_local
from ..common.live import LiveCollection
from ..common.results import WriteResult
from ..core.enums import DataSource, NotificationType
from ..core.exceptions import NotFoundError, RemoteUnavailableError
from ..local_store.fallback import FallbackStore, owner_key
from ..realtime.change_feed import ChangeFeed
from .model import Notification
from .repository import NotificationRepository

logger = logging.getLogger(__name__)

ENTITY = "notifications"


class AdminDirectory(Protocol):
    def list_admin_ids(self) -> Sequence[str]:
        raise NotImplementedError


class NotificationDispatcher:
    """Creates notifications as a side effect of request submission and review.

    Failures here are logged and never propagate to the request flow.
    """

    def __init__(
        self,
        remote: NotificationRepository,
        admins: AdminDirectory,
        local: FallbackStore,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._remote = remote
        self._admins = admins
        self._local = local
        self._clock = clock

    def _build(self, type_: NotificationType, title: str, message: str, *, recipient_id: str, sender_id: str,
               related_id: Optional[str], data: Optional[Any]) -> Notification:
        return Notification(
            id=new_remote_id(),
            type=type_,
            title=title,
            message=message,
            recipient_id=str(recipient_id),
            sender_id=str(sender_id),
            related_id=related_id,
            is_read=False,
            created_at=self._clock(),
            data=data,
        )

    def _deliver(self, notifications: list[Notification]) -> list[WriteResult[Notification]]:
        try:
            self._remote.create_many(notifications)
            return [WriteResult(n, DataSource.REMOTE) for n in notifications]
        except RemoteUnavailableError as e:
            logger.warning("notifications: remote insert failed, storing %d locally (%s)", len(notifications), e)

        results = []
        for n in notifications:
            local = replace(n, id=new_local_id("notification"))
            self._local.prepend(owner_key(ENTITY, local.recipient_id), local.to_dict())
            results.append(WriteResult(local, DataSource.LOCAL))
        return results

    def notify(
        self,
        type_: NotificationType,
        title: str,
        message: str,
        *,
        recipient_id: str,
        sender_id: str,
        related_id: Optional[str] = None,
        data: Optional[Any] = None,
    ) -> WriteResult[Notification]:
        n = self._build(type_, title, message, recipient_id=recipient_id, sender_id=sender_id,
                        related_id=related_id, data=data)
        return self._deliver([n])[0]

    def notify_admins(
        self,
        type_: NotificationType,
        title: str,
        message: str,
        *,
        sender_id: str,
        related_id: Optional[str] = None,
        data: Optional[Any] = None,
    ) -> list[WriteResult[Notification]]:
        try:
            admin_ids = list(self._admins.list_admin_ids())
        except RemoteUnavailableError as e:
            logger.warning("notifications: cannot look up admins, skipping fan-out (%s)", e)
            return []

        batch = [
            self._build(type_, title, message, recipient_id=admin_id, sender_id=sender_id,
                        related_id=related_id, data=data)
            for admin_id in admin_ids
        ]
        return self._deliver(batch)


class NotificationInbox(LiveCollection):
    """A user's notifications with unread count."""

    table = "notifications"

    def __init__(self, user_id: str, *, remote: NotificationRepository, local: FallbackStore,
                 feed: Optional[ChangeFeed] = None):
        super().__init__(feed)
        self.user_id = str(user_id)
        self._remote = remote
        self._local = local
        self.notifications: list[Notification] = []

    def subscription_filters(self) -> Optional[dict]:
        return {"recipient_id": self.user_id}

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self.notifications if not n.is_read)

    @property
    def _key(self) -> str:
        return owner_key(ENTITY, self.user_id)

    def load(self) -> None:
        try:
            self.notifications = list(self._remote.list_for_recipient(self.user_id))
        except RemoteUnavailableError as e:
            logger.warning("notifications: remote read failed for %s, using local store (%s)", self.user_id, e)
            items = self._local.read_list(self._key) or []
            self.notifications = [Notification.from_dict(i) for i in items]

    def _find(self, notification_id: str) -> Notification:
        for n in self.notifications:
            if n.id == notification_id:
                return n
        raise NotFoundError("Notification not found")

    def _local_mark(self, notification_id: Optional[str] = None) -> None:
        """Mark one notification (or all when notification_id is None) read in memory and locally."""
        marked = [
            replace(n, is_read=True) if notification_id is None or n.id == notification_id else n
            for n in self.notifications
        ]
        if notification_id is None:
            self._local.update(self._key, lambda item: True, lambda item: {**item, "is_read": True})
        for n in reversed(marked):
            if notification_id is None or n.id == notification_id:
                self._local.upsert(self._key, n.to_dict(), lambda item, nid=n.id: item.get("id") == nid)
        self.notifications = marked

    def mark_as_read(self, notification_id: str) -> WriteResult[Notification]:
        target = self._find(notification_id)
        try:
            self._remote.mark_read(notification_id)
        except RemoteUnavailableError as e:
            logger.warning("notifications: mark-read stored locally (%s)", e)
            self._local_mark(notification_id)
            return WriteResult(replace(target, is_read=True), DataSource.LOCAL)

        self.load()
        return WriteResult(replace(target, is_read=True), DataSource.REMOTE)

    def mark_all_as_read(self) -> DataSource:
        try:
            self._remote.mark_all_read(self.user_id)
        except RemoteUnavailableError as e:
            logger.warning("notifications: mark-all-read stored locally (%s)", e)
            self._local_mark()
            return DataSource.LOCAL

        self.load()
        return DataSource.REMOTE

    def delete(self, notification_id: str) -> WriteResult[Notification]:
        target = self._find(notification_id)
        try:
            self._remote.delete(notification_id)
        except RemoteUnavailableError as e:
            logger.warning("notifications: delete applied locally (%s)", e)
            self._local.remove(self._key, lambda item: item.get("id") == notification_id)
            self.notifications = [n for n in self.notifications if n.id != notification_id]
            return WriteResult(target, DataSource.LOCAL)

        self.load()
        return WriteResult(target, DataSource.REMOTE)
