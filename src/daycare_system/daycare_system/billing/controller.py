from __future__ import annotations

from flask import Flask, request

from ..common.http import current_principal, date_arg, decimal_arg, int_arg, json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/payments/generate", methods=["POST"], endpoint="payments_generate")
    @login_required
    def generate():
        data = json_body()
        period_start = date_arg(data, "period_start")
        period_end = date_arg(data, "period_end")
        due_date = date_arg(data, "due_date", required=False)

        child_id = int_arg(data, "child_id", required=False)
        if child_id is not None:
            invoice = container.billing_service.generate_invoice_for_child(
                current_principal(),
                child_id,
                period_start=period_start,
                period_end=period_end,
                due_date=due_date,
            )
            invoices = [invoice] if invoice else []
        else:
            invoices = container.billing_service.generate_batch_invoices(
                current_principal(),
                period_start=period_start,
                period_end=period_end,
                due_date=due_date,
            )
        return ok(
            [i.to_dict() for i in invoices],
            status=201,
            count=len(invoices),
            message=f"Generated {len(invoices)} invoices",
        )

    @app.route("/api/payments", methods=["GET"], endpoint="payments_list")
    @login_required
    def list_payments():
        invoices = container.billing_service.list_invoices(
            current_principal(),
            status=request.args.get("status"),
            child_id=request.args.get("child_id", type=int),
        )
        return ok([i.to_dict() for i in invoices], count=len(invoices))

    @app.route("/api/payments/export.csv", methods=["GET"], endpoint="payments_export_csv")
    @login_required
    def export_csv():
        period_start = date_arg(request.args, "start")
        period_end = date_arg(request.args, "end")
        body = container.billing_service.export_csv(
            current_principal(), period_start=period_start, period_end=period_end
        )
        filename = f"invoices_{period_start.strftime('%Y%m%d')}_{period_end.strftime('%Y%m%d')}.csv"
        return app.response_class(
            body.encode("utf-8-sig"),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route("/api/payments/<int:invoice_id>", methods=["GET"], endpoint="payments_get")
    @login_required
    def get_payment(invoice_id: int):
        return ok(container.billing_service.get_invoice(current_principal(), invoice_id).to_dict())

    @app.route("/api/payments/<int:invoice_id>", methods=["PUT"], endpoint="payments_update")
    @login_required
    def update_payment(invoice_id: int):
        data = json_body()
        invoice = container.billing_service.update_invoice(
            current_principal(),
            invoice_id,
            status=data.get("status"),
            due_date=date_arg(data, "due_date", required=False),
        )
        return ok(invoice.to_dict())

    @app.route("/api/payments/<int:invoice_id>/discount", methods=["POST"], endpoint="payments_discount")
    @login_required
    def discount(invoice_id: int):
        data = json_body()
        invoice = container.billing_service.apply_invoice_discount(
            current_principal(),
            invoice_id,
            kind=data.get("type", ""),
            value=decimal_arg(data, "value"),
        )
        return ok(invoice.to_dict())

    @app.route("/api/payments/<int:invoice_id>/pay", methods=["POST"], endpoint="payments_pay")
    @login_required
    def pay(invoice_id: int):
        data = json_body()
        invoice = container.billing_service.process_payment(
            current_principal(),
            invoice_id,
            payment_method=data.get("payment_method", ""),
            transaction_id=data.get("transaction_id"),
        )
        return ok(invoice.to_dict(), message="Payment processed successfully")
