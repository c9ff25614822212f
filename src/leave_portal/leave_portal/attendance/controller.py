from __future__ import annotations

from flask import Flask

from ..common.web import current_user, login_required, ok, written
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def _tracker():
        tracker = container.attendance_tracker(current_user().id)
        tracker.load()
        return tracker

    def _snapshot(tracker) -> dict:
        return {
            "state": tracker.state.value,
            "today": tracker.today.to_dict() if tracker.today else None,
            "hours_so_far": tracker.hours_so_far(),
            "history": [r.to_dict() for r in tracker.history],
        }

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance")
    @login_required
    def attendance():
        return ok(_snapshot(_tracker()))

    @app.route("/api/attendance/checkin", methods=["POST"], endpoint="check_in")
    @login_required
    def check_in():
        return written(_tracker().check_in())

    @app.route("/api/attendance/break/start", methods=["POST"], endpoint="start_break")
    @login_required
    def start_break():
        return written(_tracker().start_break())

    @app.route("/api/attendance/break/end", methods=["POST"], endpoint="end_break")
    @login_required
    def end_break():
        return written(_tracker().end_break())

    @app.route("/api/attendance/checkout", methods=["POST"], endpoint="check_out")
    @login_required
    def check_out():
        return written(_tracker().check_out())
