from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_iso_datetime
from ..common.http import current_principal, int_arg, json_body, login_required, ok, optional_bool
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..container import Container
from .service import AttendanceDetails


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance/checkin", methods=["POST"], endpoint="attendance_checkin")
    @login_required
    def checkin():
        data = json_body()
        record = container.attendance_service.check_in(
            current_principal(),
            int_arg(data, "child_id"),
            notes=data.get("notes"),
        )
        return ok(record.to_dict(), status=201)

    @app.route("/api/attendance/<int:attendance_id>/checkout", methods=["PUT"], endpoint="attendance_checkout")
    @login_required
    def checkout(attendance_id: int):
        data = json_body()
        record = container.attendance_service.check_out(current_principal(), attendance_id, notes=data.get("notes"))
        return ok(record.to_dict())

    @app.route("/api/attendance/<int:attendance_id>", methods=["PUT"], endpoint="attendance_update")
    @login_required
    def update(attendance_id: int):
        data = json_body()
        meals = data.get("meals") or {}
        nap = data.get("nap_time") or {}
        details = AttendanceDetails(
            status=data.get("status"),
            notes=data.get("notes"),
            breakfast=optional_bool(meals, "breakfast"),
            lunch=optional_bool(meals, "lunch"),
            snack=optional_bool(meals, "snack"),
            nap_start=parse_iso_datetime(nap.get("start")),
            nap_end=parse_iso_datetime(nap.get("end")),
        )
        record = container.attendance_service.update_details(current_principal(), attendance_id, details)
        return ok(record.to_dict())

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    @login_required
    def today():
        records = container.attendance_service.list_today(current_principal())
        return ok([r.to_dict() for r in records], count=len(records))

    @app.route("/api/attendance/child/<int:child_id>", methods=["GET"], endpoint="attendance_child_history")
    @login_required
    def child_history(child_id: int):
        limit = request.args.get("limit", type=int) or DEFAULT_HISTORY_LIMIT
        records = container.attendance_service.child_history(current_principal(), child_id, limit=limit)
        return ok([r.to_dict() for r in records], count=len(records))
