from __future__ import annotations

from flask import Flask

from ..common.web import admin_required, current_user, login_required, ok, payload, written
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def _leaves():
        user = current_user()
        book = container.leave_book(user.id, is_admin=user.is_admin)
        book.load()
        return book

    def _comp_offs():
        user = current_user()
        book = container.comp_off_book(user.id, is_admin=user.is_admin)
        book.load()
        return book

    def _review(book, request_id: str):
        data = payload()
        user = current_user()
        return written(
            book.review(
                request_id,
                data.get("action", ""),
                data.get("comment", ""),
                current_role=user.role,
                reviewer_id=user.id,
            )
        )

    # -------- Leave requests --------
    @app.route("/api/leaves", methods=["GET"], endpoint="leaves")
    @login_required
    def leaves():
        return ok([r.to_dict() for r in _leaves().requests])

    @app.route("/api/leaves", methods=["POST"], endpoint="submit_leave")
    @login_required
    def submit_leave():
        data = payload()
        user = current_user()
        result = _leaves().submit(
            leave_type=data.get("type", ""),
            start_date=data.get("start_date", ""),
            end_date=data.get("end_date", ""),
            reason=data.get("reason", ""),
            employee_name=user.name,
            employee_number=user.employee_id,
        )
        return written(result, 201)

    @app.route("/api/leaves/<request_id>/review", methods=["POST"], endpoint="review_leave")
    @admin_required
    def review_leave(request_id: str):
        return _review(_leaves(), request_id)

    # -------- Comp-off requests --------
    @app.route("/api/compoffs", methods=["GET"], endpoint="comp_offs")
    @login_required
    def comp_offs():
        return ok([r.to_dict() for r in _comp_offs().requests])

    @app.route("/api/compoffs", methods=["POST"], endpoint="submit_comp_off")
    @login_required
    def submit_comp_off():
        data = payload()
        user = current_user()
        result = _comp_offs().submit(
            work_date=data.get("work_date", ""),
            comp_off_date=data.get("comp_off_date", ""),
            reason=data.get("reason", ""),
            employee_name=user.name,
            employee_number=user.employee_id,
        )
        return written(result, 201)

    @app.route("/api/compoffs/<request_id>/review", methods=["POST"], endpoint="review_comp_off")
    @admin_required
    def review_comp_off(request_id: str):
        return _review(_comp_offs(), request_id)
