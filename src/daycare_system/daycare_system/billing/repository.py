from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import InvoiceStatus, PaymentMethod
from .model import Invoice, InvoiceDraft


class InvoiceRepository(Protocol):
    """Repository interface for Invoice (with its line items)."""

    def next_invoice_sequence(self) -> int:
        """Atomically reserve the next invoice sequence value (1, 2, 3...)."""

        raise NotImplementedError

    def create(self, *, invoice_number: str, draft: InvoiceDraft) -> int:
        raise NotImplementedError

    def get_by_id(self, invoice_id: int) -> Optional[Invoice]:
        raise NotImplementedError

    def list(
        self,
        *,
        parent_id: Optional[int] = None,
        child_id: Optional[int] = None,
        status: Optional[InvoiceStatus] = None,
        period_start: Optional[date] = None,
        period_end: Optional[date] = None,
    ) -> Sequence[Invoice]:
        raise NotImplementedError

    def update_status(self, *, invoice_id: int, status: InvoiceStatus, due_date: date) -> bool:
        raise NotImplementedError

    def update_amounts(
        self,
        *,
        invoice_id: int,
        discount: Decimal,
        tax_amount: Decimal,
        total_amount: Decimal,
    ) -> bool:
        raise NotImplementedError

    def mark_paid(
        self,
        *,
        invoice_id: int,
        payment_method: PaymentMethod,
        transaction_id: Optional[str],
        payment_date: datetime,
    ) -> bool:
        """Flip a pending invoice to paid. False when it was not pending any more."""

        raise NotImplementedError
