from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class LocalStore:
    """Flat key -> JSON-string map, the server-side twin of browser local storage.

    With a path the map is written to a single JSON file after every change
    (atomic replace); without one it only lives in memory.
    """

    def __init__(self, path: Optional[str | Path] = None):
        self._path = Path(path) if path else None
        self._lock = threading.RLock()
        self._items: dict[str, str] = {}
        if self._path and self._path.exists():
            self._items = self._read_file(self._path)

    @staticmethod
    def _read_file(path: Path) -> dict[str, str]:
        try:
            raw = json.loads(path.read_text(encoding="utf-8") or "{}")
        except (OSError, ValueError):
            logger.warning("Local store file %s is unreadable, starting empty", path)
            return {}
        if not isinstance(raw, dict):
            return {}
        return {str(k): str(v) for k, v in raw.items()}

    def _flush(self) -> None:
        if not self._path:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=str(self._path.parent), prefix=".local_store_")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(self._items, fh, ensure_ascii=False)
            os.replace(tmp, self._path)
        except OSError:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            self._items[key] = str(value)
            self._flush()

    def remove_item(self, key: str) -> None:
        with self._lock:
            if self._items.pop(key, None) is not None:
                self._flush()

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._items.keys())

    def clear(self) -> None:
        with self._lock:
            self._items.clear()
            self._flush()
