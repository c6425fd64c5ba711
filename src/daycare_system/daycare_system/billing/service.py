from __future__ import annotations

import csv
import io
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Optional, Sequence

from ..attendance.repository import AttendanceRepository
from ..authorization.model import Principal
from ..authorization.policy import AuthorizationPolicy
from ..children.model import Child
from ..children.repository import ChildRepository
from ..common.datetime_utils import now_local
from ..common.validators import parse_enum
from ..core.constants import DEFAULT_INVOICE_DUE_DAYS
from ..core.enums import (
    Action,
    AttendanceStatus,
    InvoiceStatus,
    NotificationType,
    PaymentMethod,
    ResourceKind,
    Role,
)
from ..core.exceptions import AlreadyProcessedError, NotFoundError, ValidationError
from ..core.logging import get_logger
from ..notifications.service import NotificationService
from .calculator.base import DailyRateCalculator
from .invoicing import (
    apply_discount,
    compute_child_invoice,
    compute_taxes,
    format_invoice_number,
    round_money,
    validate_period,
)
from .model import Invoice, RateSchedule
from .repository import InvoiceRepository
from .state_machine import InvoiceStateMachine

logger = get_logger("billing")

CSV_FIELDS = [
    "invoice_number",
    "child_id",
    "parent_id",
    "period_start",
    "period_end",
    "amount",
    "discount",
    "tax_amount",
    "total_amount",
    "status",
    "due_date",
    "payment_date",
    "payment_method",
]


class BillingService:
    """Use cases: invoice runs, invoice maintenance and payments."""

    def __init__(
        self,
        invoices: InvoiceRepository,
        children: ChildRepository,
        attendance: AttendanceRepository,
        policy: AuthorizationPolicy,
        *,
        rates: Optional[RateSchedule] = None,
        notifications: Optional[NotificationService] = None,
        due_days: int = DEFAULT_INVOICE_DUE_DAYS,
        calculator: Optional[DailyRateCalculator] = None,
    ):
        self._invoices = invoices
        self._children = children
        self._attendance = attendance
        self._policy = policy
        self._rates = rates or RateSchedule()
        self._notifications = notifications
        self._due_days = int(due_days)
        self._calculator = calculator

    def _get_existing(self, invoice_id: int) -> Invoice:
        invoice = self._invoices.get_by_id(int(invoice_id))
        if not invoice:
            raise NotFoundError("Payment not found")
        return invoice

    def _default_due_date(self, period_end: date, due_date: Optional[date]) -> date:
        return due_date or period_end + timedelta(days=self._due_days)

    def _invoice_child(self, child: Child, period_start: date, period_end: date, due_date: date) -> Optional[Invoice]:
        records = self._attendance.find(
            child_id=child.child_id,
            start_date=period_start,
            end_date=period_end,
            status=AttendanceStatus.PRESENT,
        )
        draft = compute_child_invoice(
            child,
            records,
            period_start,
            period_end,
            due_date,
            self._rates,
            calculator=self._calculator,
        )
        if draft is None:
            logger.debug("no billable attendance for child %s", child.child_id)
            return None

        invoice_number = format_invoice_number(self._invoices.next_invoice_sequence())
        invoice_id = self._invoices.create(invoice_number=invoice_number, draft=draft)
        logger.info("invoice %s created for child %s (total %s)", invoice_number, child.child_id, draft.total_amount)
        return self._get_existing(invoice_id)

    def generate_invoice_for_child(
        self,
        principal: Optional[Principal],
        child_id: int,
        *,
        period_start: date,
        period_end: date,
        due_date: Optional[date] = None,
    ) -> Optional[Invoice]:
        self._policy.require(principal, ResourceKind.PAYMENT, Action.CREATE)
        validate_period(period_start, period_end)

        child = self._children.get_by_id(int(child_id))
        if not child:
            raise NotFoundError("Child not found")
        return self._invoice_child(child, period_start, period_end, self._default_due_date(period_end, due_date))

    def generate_batch_invoices(
        self,
        principal: Optional[Principal],
        *,
        period_start: date,
        period_end: date,
        due_date: Optional[date] = None,
    ) -> list[Invoice]:
        """Invoice every active child for the period.

        Halts at the first failing child and re-raises; invoices written
        before the failure are kept.
        """

        self._policy.require(principal, ResourceKind.PAYMENT, Action.CREATE)
        validate_period(period_start, period_end)
        due = self._default_due_date(period_end, due_date)

        children = self._children.list_active()
        logger.info("invoice run %s..%s started for %d child(ren)", period_start, period_end, len(children))

        created: list[Invoice] = []
        for child in children:
            try:
                invoice = self._invoice_child(child, period_start, period_end, due)
            except Exception:
                logger.exception(
                    "invoice run halted at child %s after %d invoice(s)", child.child_id, len(created)
                )
                raise
            if invoice is not None:
                created.append(invoice)

        logger.info("invoice run %s..%s finished: %d invoice(s)", period_start, period_end, len(created))
        return created

    def list_invoices(
        self,
        principal: Optional[Principal],
        *,
        status: Optional[str] = None,
        child_id: Optional[int] = None,
    ) -> Sequence[Invoice]:
        decision = self._policy.require(principal, ResourceKind.PAYMENT, Action.LIST)
        return self._invoices.list(
            status=parse_enum(InvoiceStatus, status, "status") if status else None,
            child_id=int(child_id) if child_id else None,
            **decision.scope_kwargs(),
        )

    def get_invoice(self, principal: Optional[Principal], invoice_id: int) -> Invoice:
        invoice = self._get_existing(invoice_id)
        self._policy.require(principal, ResourceKind.PAYMENT, Action.READ, invoice)
        return invoice

    def update_invoice(
        self,
        principal: Optional[Principal],
        invoice_id: int,
        *,
        status: Optional[str] = None,
        due_date: Optional[date] = None,
    ) -> Invoice:
        invoice = self._get_existing(invoice_id)
        self._policy.require(principal, ResourceKind.PAYMENT, Action.UPDATE, invoice)

        new_status = invoice.status
        if status:
            new_status = parse_enum(InvoiceStatus, status, "status")
            if new_status != invoice.status:
                InvoiceStateMachine.validate_transition(invoice.status, new_status)

        self._invoices.update_status(
            invoice_id=invoice.invoice_id,
            status=new_status,
            due_date=due_date or invoice.due_date,
        )
        if new_status != invoice.status:
            logger.info("invoice %s: %s -> %s", invoice.invoice_number, invoice.status.value, new_status.value)
        return self._get_existing(invoice.invoice_id)

    def apply_invoice_discount(
        self,
        principal: Optional[Principal],
        invoice_id: int,
        *,
        kind: str,
        value: Decimal,
    ) -> Invoice:
        """Discount the subtotal of a pending invoice and recompute tax and total."""

        invoice = self._get_existing(invoice_id)
        self._policy.require(principal, ResourceKind.PAYMENT, Action.UPDATE, invoice)
        if not InvoiceStateMachine.can_modify_amounts(invoice.status):
            raise ValidationError("Discounts can only be applied to pending invoices")

        discounted = apply_discount(invoice.amount, kind, value)
        discount = round_money(invoice.amount - discounted)
        tax, total = compute_taxes(max(invoice.amount - discount, Decimal("0")), self._rates)

        if not self._invoices.update_amounts(
            invoice_id=invoice.invoice_id,
            discount=discount,
            tax_amount=tax,
            total_amount=total,
        ):
            raise ValidationError("Discounts can only be applied to pending invoices")
        logger.info("invoice %s discounted by %s", invoice.invoice_number, discount)
        return self._get_existing(invoice.invoice_id)

    def process_payment(
        self,
        principal: Optional[Principal],
        invoice_id: int,
        *,
        payment_method: str,
        transaction_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Invoice:
        invoice = self._get_existing(invoice_id)
        self._policy.require(principal, ResourceKind.PAYMENT, Action.PAY, invoice)

        if invoice.status == InvoiceStatus.PAID:
            raise AlreadyProcessedError("Payment already processed")
        InvoiceStateMachine.validate_transition(invoice.status, InvoiceStatus.PAID)

        method = parse_enum(PaymentMethod, payment_method, "payment method")
        now = now or now_local()
        if not self._invoices.mark_paid(
            invoice_id=invoice.invoice_id,
            payment_method=method,
            transaction_id=(transaction_id or "").strip() or None,
            payment_date=now,
        ):
            # lost a race with another payment of the same invoice
            raise AlreadyProcessedError("Payment already processed")

        logger.info("invoice %s paid by user %s via %s", invoice.invoice_number, principal.user_id, method.value)
        if self._notifications:
            self._notifications.notify(
                invoice.parent_id,
                type=NotificationType.PAYMENT,
                title="Payment Received",
                message=f"Payment of ${invoice.total_amount} for invoice {invoice.invoice_number} has been received",
                related_entity="payment",
                related_id=invoice.invoice_id,
                now=now,
            )
        return self._get_existing(invoice.invoice_id)

    def export_csv(self, principal: Optional[Principal], *, period_start: date, period_end: date) -> str:
        self._policy.require_role(principal, Role.ADMIN)
        validate_period(period_start, period_end)

        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for invoice in self._invoices.list(period_start=period_start, period_end=period_end):
            writer.writerow(
                {
                    "invoice_number": invoice.invoice_number,
                    "child_id": invoice.child_id,
                    "parent_id": invoice.parent_id,
                    "period_start": invoice.period_start.isoformat(),
                    "period_end": invoice.period_end.isoformat(),
                    "amount": f"{round_money(invoice.amount)}",
                    "discount": f"{invoice.discount}",
                    "tax_amount": f"{invoice.tax_amount}",
                    "total_amount": f"{invoice.total_amount}",
                    "status": invoice.status.value,
                    "due_date": invoice.due_date.isoformat(),
                    "payment_date": invoice.payment_date.isoformat() if invoice.payment_date else "",
                    "payment_method": invoice.payment_method.value if invoice.payment_method else "",
                }
            )
        return out.getvalue()
