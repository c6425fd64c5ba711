"""Pure invoice arithmetic: drafts, discounts and invoice numbers.

Nothing here touches storage or logs; the billing service wires it to
repositories.
"""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from ..attendance.model import AttendanceRecord
from ..children.model import Child
from ..common.validators import parse_enum
from ..core.constants import INVOICE_NUMBER_PREFIX, INVOICE_NUMBER_WIDTH
from ..core.enums import AttendanceStatus, DiscountKind
from ..core.exceptions import InvalidPeriodError, ValidationError
from .calculator.base import DailyRateCalculator
from .calculator.standard_calculator import StandardDailyRateCalculator
from .model import InvoiceDraft, InvoiceLineItem, RateSchedule

CENTS = Decimal("0.01")
ZERO = Decimal("0")


def round_money(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def validate_period(period_start: date, period_end: date) -> None:
    if period_end < period_start:
        raise InvalidPeriodError(
            f"Billing period end {period_end.isoformat()} is before start {period_start.isoformat()}"
        )


def billable_records(records: Iterable[AttendanceRecord]) -> list[AttendanceRecord]:
    """Present records with a checkout; anything else never reaches an invoice."""
    return [r for r in records if r.status == AttendanceStatus.PRESENT and r.duration_minutes is not None]


def compute_taxes(subtotal: Decimal, rates: RateSchedule) -> tuple[Decimal, Decimal]:
    """Return ``(tax, total)`` rounded to cents, half-up."""
    tax = round_money(subtotal * rates.tax_rate)
    total = round_money(subtotal + tax)
    return tax, total


def compute_child_invoice(
    child: Child,
    attendance_records: Iterable[AttendanceRecord],
    period_start: date,
    period_end: date,
    due_date: date,
    rates: RateSchedule,
    *,
    calculator: Optional[DailyRateCalculator] = None,
) -> Optional[InvoiceDraft]:
    """Price one child's attendance for a period.

    Returns ``None`` when no record qualifies; that is "nothing to bill", not
    an error. Records are assumed to be already restricted to the period.
    """

    validate_period(period_start, period_end)
    calculator = calculator or StandardDailyRateCalculator()

    qualifying = billable_records(attendance_records)
    if not qualifying:
        return None

    lines = []
    for record in qualifying:
        hours = Decimal(record.duration_minutes) / Decimal(60)
        lines.append(
            InvoiceLineItem(
                description=f"Attendance on {record.work_date.isoformat()}",
                amount=calculator.day_amount(record, rates),
                quantity=1,
                hours=round_money(hours),
            )
        )

    subtotal = sum((line.amount for line in lines), ZERO)
    tax, total = compute_taxes(subtotal, rates)

    return InvoiceDraft(
        child_id=child.child_id,
        parent_id=child.parent_id,
        period_start=period_start,
        period_end=period_end,
        month=period_start.month,
        year=period_start.year,
        amount=subtotal,
        tax_amount=tax,
        total_amount=total,
        due_date=due_date,
        line_items=tuple(lines),
    )


def apply_discount(amount: Decimal, kind: str | DiscountKind, value: Decimal) -> Decimal:
    """Subtract a percentage or fixed discount, never going below zero."""
    discount_kind = kind if isinstance(kind, DiscountKind) else parse_enum(DiscountKind, kind, "discount type")
    value = Decimal(str(value))
    if value < ZERO:
        raise ValidationError("Discount value cannot be negative")

    if discount_kind == DiscountKind.PERCENTAGE:
        reduced = amount - amount * value / Decimal(100)
    else:
        reduced = amount - value
    return max(reduced, ZERO)


def format_invoice_number(sequence: int) -> str:
    return f"{INVOICE_NUMBER_PREFIX}{int(sequence):0{INVOICE_NUMBER_WIDTH}d}"
