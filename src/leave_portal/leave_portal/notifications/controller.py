from __future__ import annotations

from flask import Flask

from ..common.web import current_user, login_required, ok, written
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def _inbox():
        inbox = container.inbox(current_user().id)
        inbox.load()
        return inbox

    @app.route("/api/notifications", methods=["GET"], endpoint="notifications")
    @login_required
    def notifications():
        inbox = _inbox()
        return ok([n.to_dict() for n in inbox.notifications], unread_count=inbox.unread_count)

    @app.route("/api/notifications/<notification_id>/read", methods=["POST"], endpoint="mark_notification_read")
    @login_required
    def mark_notification_read(notification_id: str):
        return written(_inbox().mark_as_read(notification_id))

    @app.route("/api/notifications/read-all", methods=["POST"], endpoint="mark_all_notifications_read")
    @login_required
    def mark_all_notifications_read():
        source = _inbox().mark_all_as_read()
        return ok(None, source=source.value, synced=source.value == "remote")

    @app.route("/api/notifications/<notification_id>", methods=["DELETE"], endpoint="delete_notification")
    @login_required
    def delete_notification(notification_id: str):
        return written(_inbox().delete(notification_id))
