from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence

from ..core.constants import (
    DEFAULT_FULL_DAY_HOURS,
    DEFAULT_FULL_DAY_RATE,
    DEFAULT_HOURLY_RATE,
    DEFAULT_TAX_RATE,
)
from ..core.enums import InvoiceStatus, PaymentMethod


@dataclass(frozen=True)
class RateSchedule:
    """Billing rates, passed explicitly instead of living as module globals."""

    hourly_rate: Decimal = Decimal(DEFAULT_HOURLY_RATE)
    full_day_hours: Decimal = Decimal(DEFAULT_FULL_DAY_HOURS)
    full_day_rate: Decimal = Decimal(DEFAULT_FULL_DAY_RATE)
    tax_rate: Decimal = Decimal(DEFAULT_TAX_RATE)

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any]) -> "RateSchedule":
        def _dec(key: str, default: str) -> Decimal:
            value = settings.get(key)
            return Decimal(str(value)) if value not in (None, "") else Decimal(default)

        return cls(
            hourly_rate=_dec("HOURLY_RATE", DEFAULT_HOURLY_RATE),
            full_day_hours=_dec("FULL_DAY_HOURS", DEFAULT_FULL_DAY_HOURS),
            full_day_rate=_dec("FULL_DAY_RATE", DEFAULT_FULL_DAY_RATE),
            tax_rate=_dec("TAX_RATE", DEFAULT_TAX_RATE),
        )


@dataclass(frozen=True)
class InvoiceLineItem:
    description: str
    amount: Decimal
    quantity: int = 1
    hours: Optional[Decimal] = None

    def to_dict(self) -> dict:
        return {
            "description": self.description,
            "amount": str(self.amount),
            "quantity": self.quantity,
            "hours": str(self.hours) if self.hours is not None else None,
        }


@dataclass(frozen=True)
class InvoiceDraft:
    """Computed, not yet numbered or persisted invoice for one child."""

    child_id: int
    parent_id: int
    period_start: date
    period_end: date
    month: int
    year: int
    amount: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    due_date: date
    line_items: Sequence[InvoiceLineItem] = field(default_factory=tuple)
    status: InvoiceStatus = InvoiceStatus.PENDING


@dataclass(frozen=True)
class Invoice:
    """Domain entity: a persisted invoice (the original system calls it a payment)."""

    invoice_id: int
    invoice_number: str
    parent_id: int
    child_id: int
    period_start: date
    period_end: date
    month: int
    year: int
    amount: Decimal
    discount: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    status: InvoiceStatus
    due_date: date
    line_items: Sequence[InvoiceLineItem] = field(default_factory=tuple)
    payment_date: Optional[datetime] = None
    payment_method: Optional[PaymentMethod] = None
    transaction_id: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def subtotal_after_discount(self) -> Decimal:
        return max(self.amount - self.discount, Decimal("0"))

    def to_dict(self) -> dict:
        return {
            "invoice_id": self.invoice_id,
            "invoice_number": self.invoice_number,
            "parent_id": self.parent_id,
            "child_id": self.child_id,
            "billing_period": {
                "start_date": self.period_start.isoformat(),
                "end_date": self.period_end.isoformat(),
                "month": self.month,
                "year": self.year,
            },
            "amount": str(self.amount),
            "discount": str(self.discount),
            "tax_amount": str(self.tax_amount),
            "total_amount": str(self.total_amount),
            "status": self.status.value,
            "due_date": self.due_date.isoformat(),
            "payment_date": self.payment_date.isoformat() if self.payment_date else None,
            "payment_method": self.payment_method.value if self.payment_method else None,
            "transaction_id": self.transaction_id,
            "items": [item.to_dict() for item in self.line_items],
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
