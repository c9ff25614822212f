from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, Optional

from ..common.datetime_utils import new_remote_id, now_local, parse_iso_date
from ..common.live import LiveCollection
from ..common.results import WriteResult
from ..common.validators import ValidationResult, ensure_valid, sanitize_input, validate_date
from ..core.constants import HOLIDAYS_KEY
from ..core.enums import DataSource, HolidayType
from ..core.exceptions import AuthorizationError, NotFoundError, RemoteUnavailableError
from ..local_store.fallback import FallbackStore
from ..realtime.change_feed import ChangeFeed
from .model import Holiday
from .repository import HolidayRepository

logger = logging.getLogger(__name__)

# (slug, name, MM-DD, description)
DEFAULT_HOLIDAYS = (
    ("republic-day", "Republic Day", "01-26",
     "National holiday celebrating the adoption of the Constitution of India"),
    ("holi", "Holi", "03-13", "Festival of colors"),
    ("independence-day", "Independence Day", "08-15",
     "National holiday celebrating India's independence from British rule"),
    ("gandhi-jayanti", "Gandhi Jayanti", "10-02", "National holiday celebrating the birth of Mahatma Gandhi"),
    ("diwali", "Diwali", "11-12", "Festival of lights"),
    ("christmas", "Christmas", "12-25", "Christian festival celebrating the birth of Jesus Christ"),
)


def default_holidays(year: int, *, created_at: Optional[datetime] = None) -> list[Holiday]:
    return [
        Holiday(
            id=f"{slug}-{year}",
            name=name,
            date=parse_iso_date(f"{year}-{month_day}"),
            type=HolidayType.NATIONAL,
            description=description,
            is_optional=False,
            created_at=created_at,
        )
        for slug, name, month_day, description in DEFAULT_HOLIDAYS
    ]


def validate_holiday(*, name: Optional[str], day: Optional[str], type_: Optional[str]) -> ValidationResult:
    errors: list[str] = []
    if len(sanitize_input(name or "")) < 2:
        errors.append("Holiday name must be at least 2 characters long")

    date_check = validate_date(day, required=True)
    if not date_check.is_valid:
        errors.append(f"Date: {date_check.error}")

    if type_ and type_ not in {t.value for t in HolidayType}:
        errors.append("Invalid holiday type")
    return ValidationResult(not errors, errors)


class HolidayCalendar(LiveCollection):
    """Company holiday list.

    When neither the backend nor the local store has any holidays, the
    default national holidays for the current year are seeded locally.
    Only administrators may add, edit or remove holidays.
    """

    table = "holidays"

    def __init__(
        self,
        is_admin: bool = False,
        *,
        remote: HolidayRepository,
        local: FallbackStore,
        feed: Optional[ChangeFeed] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        super().__init__(feed)
        self.is_admin = bool(is_admin)
        self._remote = remote
        self._local = local
        self._clock = clock
        self.holidays: list[Holiday] = []

    def load(self) -> None:
        try:
            self.holidays = list(self._remote.list_all())
            return
        except RemoteUnavailableError as e:
            logger.warning("holidays: remote read failed, using local store (%s)", e)

        items = self._local.read_list(HOLIDAYS_KEY)
        if items is not None:
            self.holidays = [Holiday.from_dict(i) for i in items]
            return

        now = self._clock()
        self.holidays = default_holidays(now.year, created_at=now)
        self._persist_local()
        logger.info("holidays: seeded %d default holidays for %d", len(self.holidays), now.year)

    def _persist_local(self) -> None:
        self.holidays.sort(key=lambda h: h.date)
        self._local.write_list(HOLIDAYS_KEY, [h.to_dict() for h in self.holidays])

    def _require_admin(self) -> None:
        if not self.is_admin:
            raise AuthorizationError("Only administrators can manage holidays")

    def save(
        self,
        *,
        name: str,
        day: str,
        type_: str = HolidayType.NATIONAL.value,
        description: Optional[str] = None,
        is_optional: bool = False,
        holiday_id: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> WriteResult[Holiday]:
        """Create a holiday, or replace the one with ``holiday_id``."""
        self._require_admin()
        ensure_valid(validate_holiday(name=name, day=day, type_=type_))

        holiday = Holiday(
            id=holiday_id or new_remote_id(),
            name=sanitize_input(name),
            date=parse_iso_date(day),
            type=HolidayType(type_ or HolidayType.NATIONAL.value),
            description=sanitize_input(description) or None,
            is_optional=bool(is_optional),
            created_by=created_by,
            created_at=self._clock(),
        )

        try:
            self._remote.upsert(holiday)
        except RemoteUnavailableError as e:
            logger.warning("holidays: save of %s stored locally (%s)", holiday.id, e)
            self.holidays = [h for h in self.holidays if h.id != holiday.id] + [holiday]
            self._persist_local()
            return WriteResult(holiday, DataSource.LOCAL)

        self.load()
        return WriteResult(holiday, DataSource.REMOTE)

    def delete(self, holiday_id: str) -> DataSource:
        self._require_admin()

        try:
            deleted = self._remote.delete(holiday_id)
        except RemoteUnavailableError as e:
            logger.warning("holidays: delete of %s applied locally (%s)", holiday_id, e)
            if not any(h.id == holiday_id for h in self.holidays):
                raise NotFoundError("Holiday not found")
            self.holidays = [h for h in self.holidays if h.id != holiday_id]
            self._persist_local()
            return DataSource.LOCAL

        if not deleted:
            raise NotFoundError("Holiday not found")
        self.load()
        return DataSource.REMOTE

    def get_by_date(self, day: date) -> Optional[Holiday]:
        try:
            return self._remote.get_by_date(day)
        except RemoteUnavailableError:
            return next((h for h in self.holidays if h.date == day), None)

    def get_by_year(self, year: int) -> list[Holiday]:
        return sorted((h for h in self.holidays if h.date.year == int(year)), key=lambda h: h.date)
