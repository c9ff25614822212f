from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Optional

from ..core.enums import ChangeAction

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    action: ChangeAction
    row: dict = field(default_factory=dict)


Listener = Callable[[ChangeEvent], None]


@dataclass
class _Registration:
    table: str
    callback: Listener
    filters: dict


class Subscription:
    def __init__(self, feed: "ChangeFeed", registration: _Registration):
        self._feed = feed
        self._registration: Optional[_Registration] = registration

    @property
    def active(self) -> bool:
        return self._registration is not None

    def unsubscribe(self) -> None:
        if self._registration is not None:
            self._feed._remove(self._registration)
            self._registration = None


class ChangeFeed:
    """In-process change notifications for the remote tables.

    Repositories publish after a successful commit. Filters are column
    equality checks against the changed row (``{"employee_id": "..."}``).
    Listeners run synchronously on the publishing thread.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._registrations: list[_Registration] = []

    def subscribe(self, table: str, callback: Listener, *, filters: Optional[dict] = None) -> Subscription:
        registration = _Registration(table=table, callback=callback, filters=dict(filters or {}))
        with self._lock:
            self._registrations.append(registration)
        return Subscription(self, registration)

    def _remove(self, registration: _Registration) -> None:
        with self._lock:
            self._registrations = [r for r in self._registrations if r is not registration]

    def publish(self, event: ChangeEvent) -> None:
        with self._lock:
            targets = [r for r in self._registrations if r.table == event.table]

        for registration in targets:
            if not all(str(event.row.get(col)) == str(val) for col, val in registration.filters.items()):
                continue
            try:
                registration.callback(event)
            except Exception:
                logger.exception("Change listener for %s failed", event.table)

    def listener_count(self, table: Optional[str] = None) -> int:
        with self._lock:
            if table is None:
                return len(self._registrations)
            return sum(1 for r in self._registrations if r.table == table)
