from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Optional

from ..common.datetime_utils import format_iso_date, new_remote_id, now_local
from ..common.live import LiveCollection
from ..common.results import WriteResult
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import AttendanceState, DataSource
from ..core.exceptions import RemoteUnavailableError
from ..local_store.fallback import FallbackStore
from ..realtime.change_feed import ChangeFeed
from . import accounting
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

Transition = Callable[[Optional[AttendanceRecord], datetime], AttendanceRecord]


def local_day_key(employee_id: str, day: date) -> str:
    return f"attendance_{employee_id}_{format_iso_date(day)}"


def local_history_key(employee_id: str) -> str:
    return f"attendance_history_{employee_id}"


class AttendanceTracker(LiveCollection):
    """Today's attendance and recent history for one employee.

    Reads and writes go to the remote repository first; when it is
    unreachable the tracker works against the local fallback store.
    Guard violations raise InvalidTransitionError and leave state untouched.
    """

    table = "attendance_records"

    def __init__(
        self,
        employee_id: str,
        *,
        remote: AttendanceRepository,
        local: FallbackStore,
        feed: Optional[ChangeFeed] = None,
        clock: Callable[[], datetime] = now_local,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ):
        super().__init__(feed)
        self.employee_id = str(employee_id)
        self._remote = remote
        self._local = local
        self._clock = clock
        self._history_limit = int(history_limit)

        self.today: Optional[AttendanceRecord] = None
        self.history: list[AttendanceRecord] = []

    def subscription_filters(self) -> Optional[dict]:
        return {"employee_id": self.employee_id}

    @property
    def state(self) -> AttendanceState:
        return accounting.attendance_state(self.today)

    # -------- Load --------
    def load(self) -> None:
        day = self._clock().date()
        self.today = self._fetch_today(day)
        self.history = self._fetch_history()

    def _fetch_today(self, day: date) -> Optional[AttendanceRecord]:
        try:
            return self._remote.get_for_employee_and_date(self.employee_id, day)
        except RemoteUnavailableError as e:
            logger.warning("attendance: remote read failed for %s, using local store (%s)", self.employee_id, e)
            return self._read_local_day(day)

    def _fetch_history(self) -> list[AttendanceRecord]:
        try:
            return list(self._remote.get_recent_for_employee(self.employee_id, self._history_limit))
        except RemoteUnavailableError as e:
            logger.warning("attendance: remote history failed for %s, using local store (%s)", self.employee_id, e)
            items = self._local.read_list(local_history_key(self.employee_id)) or []
            return [AttendanceRecord.from_dict(i) for i in items]

    def _read_local_day(self, day: date) -> Optional[AttendanceRecord]:
        data = self._local.read_json(local_day_key(self.employee_id, day))
        return AttendanceRecord.from_dict(data) if isinstance(data, dict) else None

    def _current(self, day: date) -> Optional[AttendanceRecord]:
        try:
            self.today = self._remote.get_for_employee_and_date(self.employee_id, day)
        except RemoteUnavailableError:
            # Keep what we already hold for today; the local copy may lag behind it.
            if self.today is None or self.today.date != day:
                self.today = self._read_local_day(day)
        return self.today

    # -------- Mutations --------
    def check_in(self, *, now: Optional[datetime] = None) -> WriteResult[AttendanceRecord]:
        return self._apply(
            "check-in",
            lambda current, at: accounting.check_in(
                current, record_id=new_remote_id(), employee_id=self.employee_id, now=at
            ),
            now,
        )

    def start_break(self, *, now: Optional[datetime] = None) -> WriteResult[AttendanceRecord]:
        return self._apply("start-break", lambda current, at: accounting.start_break(current, now=at), now)

    def end_break(self, *, now: Optional[datetime] = None) -> WriteResult[AttendanceRecord]:
        return self._apply("end-break", lambda current, at: accounting.end_break(current, now=at), now)

    def check_out(self, *, now: Optional[datetime] = None) -> WriteResult[AttendanceRecord]:
        return self._apply("check-out", lambda current, at: accounting.check_out(current, now=at), now)

    def hours_so_far(self, *, now: Optional[datetime] = None) -> float:
        return accounting.live_hours(self.today, now=now or self._clock())

    def _apply(self, operation: str, transition: Transition, now: Optional[datetime]) -> WriteResult[AttendanceRecord]:
        now = now or self._clock()
        current = self._current(now.date())
        updated = transition(current, now)

        try:
            self._remote.save(updated)
        except RemoteUnavailableError as e:
            logger.warning("attendance: %s for %s stored locally (%s)", operation, self.employee_id, e)
            if current is None:
                updated = replace(updated, id=local_day_key(self.employee_id, updated.date))
            self._save_local(updated)
            return WriteResult(updated, DataSource.LOCAL)

        self.load()
        return WriteResult(updated, DataSource.REMOTE)

    def _save_local(self, record: AttendanceRecord) -> None:
        self._local.write_json(local_day_key(self.employee_id, record.date), record.to_dict())
        history = self._local.prepend(
            local_history_key(self.employee_id),
            record.to_dict(),
            replace=lambda item: item.get("date") == format_iso_date(record.date),
            limit=self._history_limit,
        )
        self.today = record
        self.history = [AttendanceRecord.from_dict(i) for i in history]
