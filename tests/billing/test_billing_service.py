from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal

import pytest

from src.daycare_system.daycare_system.core.enums import InvoiceStatus, NotificationType, PaymentMethod
from src.daycare_system.daycare_system.core.exceptions import (
    AlreadyProcessedError,
    AuthorizationError,
    InvalidPeriodError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from tests.fakes import ADMIN, OTHER_PARENT, PARENT, TEACHER, make_record

START = date(2026, 3, 1)
END = date(2026, 3, 31)


@pytest.fixture
def attended(world):
    world.attendance.add(make_record(1, child_id=10, day=date(2026, 3, 2), minutes=480))
    world.attendance.add(make_record(2, child_id=10, day=date(2026, 3, 3), minutes=300))
    world.attendance.add(make_record(3, child_id=11, day=date(2026, 3, 2), minutes=60))
    # outside the period
    world.attendance.add(make_record(4, child_id=12, day=date(2026, 2, 27), minutes=480))
    return world


def _run(services, principal=ADMIN, **kwargs):
    return services.billing_service.generate_batch_invoices(principal, period_start=START, period_end=END, **kwargs)


def test_batch_invoices_every_active_child_with_attendance(services, attended):
    invoices = _run(services)

    assert [i.child_id for i in invoices] == [10, 11]
    assert [i.invoice_number for i in invoices] == ["INV-000001", "INV-000002"]
    assert invoices[0].total_amount == Decimal("192.50")
    assert invoices[1].total_amount == Decimal("16.50")
    assert invoices[0].due_date == date(2026, 4, 15)


def test_invoice_numbers_keep_increasing_across_runs(services, attended):
    first = _run(services)
    second = services.billing_service.generate_invoice_for_child(ADMIN, 10, period_start=START, period_end=END)

    numbers = [i.invoice_number for i in first] + [second.invoice_number]
    assert numbers == sorted(numbers)
    assert len(set(numbers)) == 3


def test_single_child_without_attendance_yields_nothing(services, attended):
    assert services.billing_service.generate_invoice_for_child(ADMIN, 12, period_start=START, period_end=END) is None


def test_unknown_child_is_not_found(services):
    with pytest.raises(NotFoundError):
        services.billing_service.generate_invoice_for_child(ADMIN, 999, period_start=START, period_end=END)


@pytest.mark.parametrize("principal", [PARENT, TEACHER])
def test_only_admin_generates_invoices(services, attended, principal):
    with pytest.raises(AuthorizationError):
        _run(services, principal)


def test_invalid_period_creates_nothing(services, attended):
    with pytest.raises(InvalidPeriodError):
        services.billing_service.generate_batch_invoices(ADMIN, period_start=END, period_end=START)
    assert attended.invoices.list() == []


def test_batch_halts_on_first_failure_and_keeps_earlier_invoices(services, attended, monkeypatch):
    original_find = attended.attendance.find

    def failing_find(*, child_id, **kwargs):
        if child_id == 11:
            raise RuntimeError("database went away")
        return original_find(child_id=child_id, **kwargs)

    monkeypatch.setattr(attended.attendance, "find", failing_find)

    with pytest.raises(RuntimeError):
        _run(services)

    assert [i.child_id for i in attended.invoices.list()] == [10]


def test_parents_only_see_their_own_invoices(services, attended):
    _run(services)

    mine = services.billing_service.list_invoices(PARENT)
    assert {i.parent_id for i in mine} == {PARENT.user_id}

    with pytest.raises(AuthorizationError):
        services.billing_service.get_invoice(OTHER_PARENT, mine[0].invoice_id)


def test_parent_pays_own_invoice_and_is_notified(services, attended, fixed_now):
    invoice = _run(services)[0]

    paid = services.billing_service.process_payment(
        PARENT, invoice.invoice_id, payment_method="card", transaction_id="tx-1", now=fixed_now
    )

    assert paid.status == InvoiceStatus.PAID
    assert paid.payment_method == PaymentMethod.CARD
    assert paid.payment_date == fixed_now
    note = attended.notifications.list_for_user(PARENT.user_id)[0]
    assert note.type == NotificationType.PAYMENT
    assert invoice.invoice_number in note.message


def test_paying_twice_is_rejected_without_changes(services, attended, fixed_now):
    invoice = _run(services)[0]
    services.billing_service.process_payment(PARENT, invoice.invoice_id, payment_method="cash", now=fixed_now)
    before = attended.invoices.get_by_id(invoice.invoice_id)

    with pytest.raises(AlreadyProcessedError):
        services.billing_service.process_payment(
            ADMIN, invoice.invoice_id, payment_method="card", transaction_id="tx-2", now=datetime(2026, 4, 1)
        )

    assert attended.invoices.get_by_id(invoice.invoice_id) == before


def test_other_parent_cannot_pay(services, attended):
    invoice = _run(services)[0]
    with pytest.raises(AuthorizationError):
        services.billing_service.process_payment(OTHER_PARENT, invoice.invoice_id, payment_method="cash")


def test_cancelled_invoice_cannot_be_paid(services, attended):
    invoice = _run(services)[0]
    services.billing_service.update_invoice(ADMIN, invoice.invoice_id, status="cancelled")

    with pytest.raises(InvalidTransitionError):
        services.billing_service.process_payment(PARENT, invoice.invoice_id, payment_method="cash")


def test_unknown_payment_method_is_rejected(services, attended):
    invoice = _run(services)[0]
    with pytest.raises(ValidationError):
        services.billing_service.process_payment(PARENT, invoice.invoice_id, payment_method="bitcoin")


def test_admin_update_follows_transitions(services, attended):
    invoice = _run(services)[0]

    updated = services.billing_service.update_invoice(
        ADMIN, invoice.invoice_id, status="overdue", due_date=date(2026, 5, 1)
    )
    assert updated.status == InvoiceStatus.OVERDUE
    assert updated.due_date == date(2026, 5, 1)

    with pytest.raises(InvalidTransitionError):
        services.billing_service.update_invoice(ADMIN, invoice.invoice_id, status="pending")


def test_parent_cannot_update_invoice(services, attended):
    invoice = _run(services)[0]
    with pytest.raises(AuthorizationError):
        services.billing_service.update_invoice(PARENT, invoice.invoice_id, status="cancelled")


def test_discount_recomputes_tax_and_total(services, attended):
    invoice = _run(services)[0]

    discounted = services.billing_service.apply_invoice_discount(
        ADMIN, invoice.invoice_id, kind="percentage", value=Decimal("20")
    )

    assert discounted.amount == Decimal("175")
    assert discounted.discount == Decimal("35.00")
    assert discounted.tax_amount == Decimal("14.00")
    assert discounted.total_amount == Decimal("154.00")


def test_discount_only_on_pending_invoices(services, attended):
    invoice = _run(services)[0]
    attended.invoices.add(replace(attended.invoices.get_by_id(invoice.invoice_id), status=InvoiceStatus.PAID))

    with pytest.raises(ValidationError):
        services.billing_service.apply_invoice_discount(ADMIN, invoice.invoice_id, kind="fixed", value=Decimal("5"))


def test_csv_export_lists_period_invoices(services, attended):
    _run(services)

    body = services.billing_service.export_csv(ADMIN, period_start=START, period_end=END)
    lines = body.strip().splitlines()

    assert lines[0].startswith("invoice_number,child_id,parent_id")
    assert len(lines) == 3
    assert any(line.startswith("INV-000001,10,3") for line in lines)


def test_csv_export_is_admin_only(services):
    with pytest.raises(AuthorizationError):
        services.billing_service.export_csv(TEACHER, period_start=START, period_end=END)
