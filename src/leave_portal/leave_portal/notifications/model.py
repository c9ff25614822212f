from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..common.datetime_utils import datetime_from_json, datetime_to_json
from ..core.enums import NotificationType


@dataclass(frozen=True)
class Notification:
    id: str
    type: NotificationType
    title: str
    message: str
    recipient_id: str
    sender_id: str
    related_id: Optional[str]
    is_read: bool
    created_at: datetime
    data: Optional[Any] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.value,
            "title": self.title,
            "message": self.message,
            "recipient_id": self.recipient_id,
            "sender_id": self.sender_id,
            "related_id": self.related_id,
            "is_read": self.is_read,
            "created_at": datetime_to_json(self.created_at),
            "data": self.data,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Notification":
        return cls(
            id=str(data["id"]),
            type=NotificationType(data["type"]),
            title=data.get("title") or "",
            message=data.get("message") or "",
            recipient_id=str(data["recipient_id"]),
            sender_id=str(data["sender_id"]),
            related_id=data.get("related_id"),
            is_read=bool(data.get("is_read") or False),
            created_at=datetime_from_json(data.get("created_at")),
            data=data.get("data"),
        )
