from __future__ import annotations

import json
import logging
from typing import Any, Callable, Optional

from ..core.constants import CURRENT_USER_KEY
from .store import LocalStore

logger = logging.getLogger(__name__)

Match = Callable[[dict], bool]


def owner_key(entity: str, owner_id: str) -> str:
    return f"{entity}_{owner_id}"


def admin_key(entity: str) -> str:
    return f"all_{entity}"


class FallbackStore:
    """Typed access to the local store for the entity services.

    Values are JSON documents; lists are kept newest-first.
    """

    def __init__(self, store: LocalStore):
        self._store = store

    @property
    def raw(self) -> LocalStore:
        return self._store

    def read_json(self, key: str) -> Optional[Any]:
        value = self._store.get_item(key)
        if value is None:
            return None
        try:
            return json.loads(value)
        except ValueError:
            logger.warning("Ignoring corrupt local value under %s", key)
            return None

    def write_json(self, key: str, value: Any) -> None:
        self._store.set_item(key, json.dumps(value, ensure_ascii=False))

    def read_list(self, key: str) -> Optional[list[dict]]:
        """Return the list under key, or None when the key was never written."""
        value = self.read_json(key)
        if value is None:
            return None
        if not isinstance(value, list):
            logger.warning("Expected a list under %s, found %s", key, type(value).__name__)
            return None
        return value

    def write_list(self, key: str, items: list[dict]) -> None:
        self.write_json(key, items)

    def prepend(self, key: str, item: dict, *, replace: Optional[Match] = None, limit: Optional[int] = None) -> list[dict]:
        items = self.read_list(key) or []
        if replace is not None:
            items = [i for i in items if not replace(i)]
        items.insert(0, item)
        if limit is not None:
            items = items[:limit]
        self.write_list(key, items)
        return items

    def update(self, key: str, match: Match, change: Callable[[dict], dict]) -> Optional[list[dict]]:
        """Apply change to every matching item; None when the key does not exist."""
        items = self.read_list(key)
        if items is None:
            return None
        items = [change(i) if match(i) else i for i in items]
        self.write_list(key, items)
        return items

    def upsert(self, key: str, item: dict, match: Match) -> list[dict]:
        """Replace the items matching match with item, or prepend item when none match."""
        items = self.read_list(key) or []
        if any(match(i) for i in items):
            items = [item if match(i) else i for i in items]
        else:
            items.insert(0, item)
        self.write_list(key, items)
        return items

    def remove(self, key: str, match: Match) -> list[dict]:
        items = [i for i in (self.read_list(key) or []) if not match(i)]
        self.write_list(key, items)
        return items

    # Session persistence across reloads
    def set_current_user(self, user: dict) -> None:
        self.write_json(CURRENT_USER_KEY, user)

    def get_current_user(self) -> Optional[dict]:
        value = self.read_json(CURRENT_USER_KEY)
        return value if isinstance(value, dict) else None

    def clear_current_user(self) -> None:
        self._store.remove_item(CURRENT_USER_KEY)
