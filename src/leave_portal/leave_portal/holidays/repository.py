from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import Holiday


class HolidayRepository(Protocol):
    def list_all(self) -> Sequence[Holiday]:
        raise NotImplementedError

    def get_by_date(self, day: date) -> Optional[Holiday]:
        raise NotImplementedError

    def upsert(self, holiday: Holiday) -> None:
        raise NotImplementedError

    def delete(self, holiday_id: str) -> bool:
        raise NotImplementedError
