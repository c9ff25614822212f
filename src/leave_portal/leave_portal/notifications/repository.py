from __future__ import annotations

from typing import Protocol, Sequence

from .model import Notification


class NotificationRepository(Protocol):
    def list_for_recipient(self, recipient_id: str) -> Sequence[Notification]:
        """Newest first."""

        raise NotImplementedError

    def create_many(self, notifications: Sequence[Notification]) -> None:
        raise NotImplementedError

    def mark_read(self, notification_id: str) -> bool:
        raise NotImplementedError

    def mark_all_read(self, recipient_id: str) -> int:
        raise NotImplementedError

    def delete(self, notification_id: str) -> bool:
        raise NotImplementedError
