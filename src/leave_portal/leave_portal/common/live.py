from __future__ import annotations

import logging
from typing import Optional

from ..realtime.change_feed import ChangeEvent, ChangeFeed, Subscription

logger = logging.getLogger(__name__)


class LiveCollection:
    """Base for the per-entity services: in-memory state kept fresh by the change feed.

    Every event triggers a full ``load()``; there is no incremental merge.
    Use as a context manager (or call ``close()``) to drop the subscription.
    """

    table: str = ""

    def __init__(self, feed: Optional[ChangeFeed] = None):
        self._feed = feed
        self._subscription: Optional[Subscription] = None

    def load(self) -> None:
        raise NotImplementedError

    def subscription_filters(self) -> Optional[dict]:
        return None

    def _on_change(self, event: ChangeEvent) -> None:
        logger.debug("%s changed (%s), reloading", event.table, event.action.value)
        self.load()

    @property
    def subscribed(self) -> bool:
        return self._subscription is not None and self._subscription.active

    def subscribe(self) -> None:
        if self._feed is None or self.subscribed:
            return
        self._subscription = self._feed.subscribe(self.table, self._on_change, filters=self.subscription_filters())

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def __enter__(self):
        self.load()
        self.subscribe()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
