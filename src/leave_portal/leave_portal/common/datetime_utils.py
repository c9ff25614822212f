from __future__ import annotations

import secrets
import time as _time
import uuid
from datetime import date, datetime
from typing import Optional


def parse_iso_date(value: str) -> date:
    """Parse a YYYY-MM-DD string into a local calendar date.

    Built from the components so no timezone conversion can shift the day.
    Raises ValueError on malformed input.
    """
    parts = (value or "").strip().split("-")
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        raise ValueError(f"Invalid date string: {value!r}")
    year, month, day = (int(p) for p in parts)
    return date(year, month, day)


def format_iso_date(value: date) -> str:
    return value.strftime("%Y-%m-%d")


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def datetime_to_json(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def datetime_from_json(value) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def date_from_json(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_iso_date(str(value))


def new_remote_id() -> str:
    return str(uuid.uuid4())


def new_local_id(prefix: str) -> str:
    """Id for records created while the backend is unreachable, e.g. ``leave_1719650000000_k3j9x2m1a``."""
    return f"{prefix}_{int(_time.time() * 1000)}_{secrets.token_hex(5)[:9]}"
