"""Invoice state machine with transition validation."""

from __future__ import annotations

from ..core.enums import InvoiceStatus
from ..core.exceptions import InvalidTransitionError


class InvoiceStateMachine:
    """State machine for invoice status transitions.

    Allowed transitions:
    - pending → paid | overdue | cancelled
    - paid → overdue | cancelled
    - overdue, cancelled: terminal
    """

    VALID_TRANSITIONS: dict[InvoiceStatus, list[InvoiceStatus]] = {
        InvoiceStatus.PENDING: [InvoiceStatus.PAID, InvoiceStatus.OVERDUE, InvoiceStatus.CANCELLED],
        InvoiceStatus.PAID: [InvoiceStatus.OVERDUE, InvoiceStatus.CANCELLED],
        InvoiceStatus.OVERDUE: [],
        InvoiceStatus.CANCELLED: [],
    }

    # Statuses where amounts (discounts) can still be changed
    AMOUNTS_MUTABLE = {InvoiceStatus.PENDING}

    @classmethod
    def can_transition(cls, from_status: InvoiceStatus, to_status: InvoiceStatus) -> bool:
        return to_status in cls.VALID_TRANSITIONS.get(from_status, [])

    @classmethod
    def validate_transition(cls, from_status: InvoiceStatus, to_status: InvoiceStatus) -> None:
        if not cls.can_transition(from_status, to_status):
            reason = "terminal status" if cls.is_terminal(from_status) else None
            raise InvalidTransitionError(from_status.value, to_status.value, reason)

    @classmethod
    def is_terminal(cls, status: InvoiceStatus) -> bool:
        return not cls.VALID_TRANSITIONS.get(status)

    @classmethod
    def can_modify_amounts(cls, status: InvoiceStatus) -> bool:
        return status in cls.AMOUNTS_MUTABLE

    @classmethod
    def get_next_statuses(cls, current_status: InvoiceStatus) -> list[InvoiceStatus]:
        return list(cls.VALID_TRANSITIONS.get(current_status, []))
