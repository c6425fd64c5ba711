from __future__ import annotations

from flask import Flask, request

from ..common.http import current_principal, int_arg, json_body, login_required, ok, optional_bool
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/medical-alerts", methods=["POST"], endpoint="medical_alerts_report")
    @login_required
    def report():
        data = json_body()
        alert = container.medical_alert_service.report_alert(
            current_principal(),
            int_arg(data, "child_id"),
            type=data.get("type", ""),
            severity=data.get("severity", ""),
            description=data.get("description", ""),
            treatment=data.get("treatment"),
        )
        return ok(alert.to_dict(), status=201)

    @app.route("/api/medical-alerts", methods=["GET"], endpoint="medical_alerts_list")
    @login_required
    def list_alerts():
        alerts = container.medical_alert_service.list_alerts(
            current_principal(),
            child_id=request.args.get("child_id", type=int),
            unresolved_only=optional_bool(request.args, "unresolved") or False,
        )
        return ok([a.to_dict() for a in alerts], count=len(alerts))

    @app.route("/api/medical-alerts/<int:alert_id>/resolve", methods=["PUT"], endpoint="medical_alerts_resolve")
    @login_required
    def resolve(alert_id: int):
        data = json_body()
        alert = container.medical_alert_service.resolve_alert(current_principal(), alert_id, notes=data.get("notes"))
        return ok(alert.to_dict())
