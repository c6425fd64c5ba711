from datetime import date
from decimal import Decimal

import pytest

from src.daycare_system.daycare_system.activities.service import ParticipantInput
from src.daycare_system.daycare_system.billing.invoicing import compute_child_invoice
from src.daycare_system.daycare_system.billing.model import RateSchedule
from src.daycare_system.daycare_system.core.enums import AttendanceStatus, PaymentMethod
from src.daycare_system.daycare_system.core.exceptions import (
    AuthorizationError,
    InvalidPeriodError,
    ValidationError,
)
from tests.fakes import ADMIN, PARENT, TEACHER, UNASSIGNED_TEACHER, make_record

MARCH_START = date(2026, 3, 1)
MARCH_END = date(2026, 3, 31)


@pytest.fixture
def busy_month(services, world, fixed_now):
    day = fixed_now.date()
    world.attendance.add(make_record(1, child_id=10, day=day, minutes=480))
    world.attendance.add(make_record(2, child_id=10, day=date(2026, 3, 3), minutes=300))
    world.attendance.add(make_record(3, child_id=11, day=day, minutes=None, status=AttendanceStatus.ABSENT))
    world.attendance.add(make_record(4, child_id=12, day=day, minutes=60))

    for seq, child_id in enumerate((10, 12), start=1):
        child = world.children.get_by_id(child_id)
        records = world.attendance.find(child_id=child_id, start_date=MARCH_START, end_date=MARCH_END)
        draft = compute_child_invoice(child, records, MARCH_START, MARCH_END, date(2026, 4, 15), RateSchedule())
        world.invoices.create(invoice_number=f"INV-{seq:06d}", draft=draft)
    world.invoices.mark_paid(invoice_id=2, payment_method=PaymentMethod.CASH, transaction_id=None, payment_date=fixed_now)

    services.activity_service.record_activity(
        TEACHER,
        title="Finger painting",
        type="creative",
        participants=[ParticipantInput(10), ParticipantInput(11)],
        now=fixed_now,
    )
    services.activity_service.record_activity(
        ADMIN,
        title="Relay race",
        type="physical",
        classroom_id=2,
        participants=[ParticipantInput(12)],
        now=fixed_now,
    )
    return day


def test_admin_dashboard_counts_everything(services, busy_month):
    stats = services.report_service.dashboard_stats(ADMIN, today=busy_month)

    assert stats == {
        "total_children": 3,
        "today_attendance": 2,
        "today_activities": 2,
        "total_parents": 2,
        "total_employees": 2,
        "pending_payments": 1,
    }


def test_teacher_dashboard_covers_own_classroom_only(services, busy_month):
    stats = services.report_service.dashboard_stats(TEACHER, today=busy_month)

    assert stats == {"total_children": 2, "today_attendance": 1, "today_activities": 1}


def test_dashboard_is_denied_to_parents_and_unassigned_teachers(services, busy_month):
    with pytest.raises(AuthorizationError):
        services.report_service.dashboard_stats(PARENT, today=busy_month)
    with pytest.raises(AuthorizationError):
        services.report_service.dashboard_stats(UNASSIGNED_TEACHER, today=busy_month)


def test_attendance_report_skips_children_without_presence(services, busy_month):
    rows = services.report_service.generate_report(ADMIN, "attendance", start=MARCH_START, end=MARCH_END)

    assert rows == [
        {"child_id": 10, "child_name": "Kid10 Nguyen", "total_days": 2, "average_duration": 390},
        {"child_id": 12, "child_name": "Kid12 Nguyen", "total_days": 1, "average_duration": 60},
    ]
    teacher_rows = services.report_service.generate_report(TEACHER, "attendance", start=MARCH_START, end=MARCH_END)
    assert [r["child_id"] for r in teacher_rows] == [10]


def test_payments_report_groups_by_status(services, busy_month):
    rows = services.report_service.generate_report(ADMIN, "payments", start=MARCH_START, end=MARCH_END)

    assert rows == [
        {"status": "paid", "count": 1, "total_amount": "16.50"},
        {"status": "pending", "count": 1, "total_amount": "192.50"},
    ]
    assert Decimal(rows[1]["total_amount"]) == Decimal("192.5")


def test_payments_report_is_admin_only(services, busy_month):
    with pytest.raises(AuthorizationError):
        services.report_service.generate_report(TEACHER, "payments", start=MARCH_START, end=MARCH_END)
    with pytest.raises(AuthorizationError):
        services.report_service.generate_report(PARENT, "attendance", start=MARCH_START, end=MARCH_END)


def test_activities_report_groups_by_type(services, busy_month):
    rows = services.report_service.generate_report(ADMIN, "activities", start=MARCH_START, end=MARCH_END)

    assert rows == [
        {"type": "creative", "count": 1, "total_participants": 2},
        {"type": "physical", "count": 1, "total_participants": 1},
    ]
    teacher_rows = services.report_service.generate_report(TEACHER, "activities", start=MARCH_START, end=MARCH_END)
    assert [r["type"] for r in teacher_rows] == ["creative"]


def test_unknown_report_type_and_bad_period_are_rejected(services):
    with pytest.raises(ValidationError):
        services.report_service.generate_report(ADMIN, "weather", start=MARCH_START, end=MARCH_END)
    with pytest.raises(InvalidPeriodError):
        services.report_service.generate_report(ADMIN, "attendance", start=MARCH_END, end=MARCH_START)
