from __future__ import annotations

from flask import Flask, g, request

from ..common.http import login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/notifications", methods=["GET"], endpoint="notifications_list")
    @login_required
    def notifications_list():
        limit = request.args.get("limit", default=50, type=int)
        items = container.notification_service.list_for_user(g.current_user.user_id, limit=limit)
        return ok(
            {
                "items": [n.to_payload() for n in items],
                "unread": container.notification_service.unread_count(g.current_user.user_id),
            }
        )

    @app.route("/api/notifications/<int:notification_id>/read", methods=["POST"], endpoint="notifications_mark_read")
    @login_required
    def notifications_mark_read(notification_id: int):
        container.notification_service.mark_read(user_id=g.current_user.user_id, notification_id=notification_id)
        return ok()

    @app.route("/api/notifications/read-all", methods=["POST"], endpoint="notifications_mark_all_read")
    @login_required
    def notifications_mark_all_read():
        updated = container.notification_service.mark_all_read(g.current_user.user_id)
        return ok({"updated": updated})
