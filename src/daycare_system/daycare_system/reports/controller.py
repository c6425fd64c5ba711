from __future__ import annotations

from flask import Flask, request

from ..common.http import current_principal, date_arg, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/admin/dashboard", methods=["GET"], endpoint="reports_dashboard")
    @login_required
    def dashboard():
        return ok(container.report_service.dashboard_stats(current_principal()))

    @app.route("/api/admin/reports/<report_type>", methods=["GET"], endpoint="reports_generate")
    @login_required
    def generate_report(report_type: str):
        rows = container.report_service.generate_report(
            current_principal(),
            report_type,
            start=date_arg(request.args, "start"),
            end=date_arg(request.args, "end"),
        )
        return ok(rows, count=len(rows), report_type=report_type)
