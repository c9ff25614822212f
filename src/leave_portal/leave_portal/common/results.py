from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from ..core.enums import DataSource

T = TypeVar("T")


@dataclass(frozen=True)
class WriteResult(Generic[T]):
    """Outcome of a dual-backend write.

    Writes always succeed from the caller's point of view; ``source`` tells
    whether the record reached the remote backend or only the local store.
    """

    record: T
    source: DataSource

    @property
    def success(self) -> bool:
        return True

    @property
    def synced(self) -> bool:
        return self.source == DataSource.REMOTE

    def to_dict(self) -> dict:
        record = self.record.to_dict() if hasattr(self.record, "to_dict") else self.record
        return {"success": True, "source": self.source.value, "synced": self.synced, "data": record}
