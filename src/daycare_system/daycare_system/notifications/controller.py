from __future__ import annotations

from flask import Flask, request

from ..common.http import current_principal, int_list_arg, json_body, login_required, ok, optional_bool
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/notifications", methods=["GET"], endpoint="notifications_list")
    @login_required
    def list_notifications():
        items = container.notification_service.list_mine(
            current_principal(),
            unread_only=optional_bool(request.args, "unread") or False,
            limit=request.args.get("limit", type=int) or 50,
        )
        return ok([n.to_dict() for n in items], count=len(items))

    @app.route("/api/notifications/unread-count", methods=["GET"], endpoint="notifications_unread_count")
    @login_required
    def unread_count():
        return ok({"unread": container.notification_service.unread_count(current_principal())})

    @app.route("/api/notifications/read", methods=["PUT"], endpoint="notifications_mark_read")
    @login_required
    def mark_read():
        ids = int_list_arg(json_body(), "ids")
        updated = container.notification_service.mark_read(current_principal(), ids)
        return ok({"updated": updated})
