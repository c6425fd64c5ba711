from datetime import date, datetime, timedelta

import pytest

from src.daycare_system.daycare_system.attendance.service import AttendanceDetails
from src.daycare_system.daycare_system.core.enums import AttendanceStatus, NotificationType
from src.daycare_system.daycare_system.core.exceptions import (
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from tests.fakes import ADMIN, OTHER_PARENT, PARENT, TEACHER, UNASSIGNED_TEACHER, make_child, make_record


def test_checkin_creates_record_and_notifies_parent(services, world, fixed_now):
    record = services.attendance_service.check_in(TEACHER, 10, notes="dropped off by dad", now=fixed_now)

    assert record.work_date == fixed_now.date()
    assert record.check_in_time == fixed_now
    assert record.status == AttendanceStatus.PRESENT
    assert record.recorded_by == TEACHER.user_id
    assert record.duration_minutes is None

    (note,) = world.notifications.list_for_user(PARENT.user_id)
    assert note.type == NotificationType.ATTENDANCE
    assert note.title == "Child Checked In"


def test_second_checkin_same_day_is_rejected(services, fixed_now):
    services.attendance_service.check_in(TEACHER, 10, now=fixed_now)
    with pytest.raises(ValidationError):
        services.attendance_service.check_in(TEACHER, 10, now=fixed_now + timedelta(hours=1))


def test_checkin_next_day_is_allowed(services, fixed_now):
    services.attendance_service.check_in(TEACHER, 10, now=fixed_now)
    record = services.attendance_service.check_in(TEACHER, 10, now=fixed_now + timedelta(days=1))
    assert record.work_date == date(2026, 3, 3)


def test_parents_cannot_check_in(services, fixed_now):
    with pytest.raises(AuthorizationError):
        services.attendance_service.check_in(PARENT, 10, now=fixed_now)


def test_employee_checks_in_only_roster_children(services, fixed_now):
    with pytest.raises(AuthorizationError):
        services.attendance_service.check_in(TEACHER, 12, now=fixed_now)
    with pytest.raises(AuthorizationError):
        services.attendance_service.check_in(UNASSIGNED_TEACHER, 10, now=fixed_now)


def test_inactive_child_cannot_be_checked_in(services, world, fixed_now):
    world.children.add(make_child(20, parent_id=3, is_active=False))
    with pytest.raises(ValidationError):
        services.attendance_service.check_in(ADMIN, 20, now=fixed_now)


def test_unknown_child_is_not_found(services, fixed_now):
    with pytest.raises(NotFoundError):
        services.attendance_service.check_in(ADMIN, 999, now=fixed_now)


def test_checkout_derives_duration_and_notifies(services, world, fixed_now):
    record = services.attendance_service.check_in(TEACHER, 10, now=fixed_now)

    done = services.attendance_service.check_out(TEACHER, record.attendance_id, now=fixed_now + timedelta(hours=7, minutes=30))

    assert done.duration_minutes == 450
    last = world.notifications.list_for_user(PARENT.user_id)[0]
    assert last.title == "Child Checked Out"
    assert "Total hours: 7.50" in last.message


def test_checkout_twice_is_rejected(services, fixed_now):
    record = services.attendance_service.check_in(TEACHER, 10, now=fixed_now)
    services.attendance_service.check_out(TEACHER, record.attendance_id, now=fixed_now + timedelta(hours=2))

    with pytest.raises(ValidationError):
        services.attendance_service.check_out(TEACHER, record.attendance_id, now=fixed_now + timedelta(hours=3))


def test_checkout_before_checkin_is_rejected(services, fixed_now):
    record = services.attendance_service.check_in(TEACHER, 10, now=fixed_now)
    with pytest.raises(ValidationError):
        services.attendance_service.check_out(TEACHER, record.attendance_id, now=fixed_now - timedelta(minutes=5))


def test_meals_and_nap_can_be_recorded_after_checkout(services, fixed_now):
    record = services.attendance_service.check_in(TEACHER, 10, now=fixed_now)
    services.attendance_service.check_out(TEACHER, record.attendance_id, now=fixed_now + timedelta(hours=8))

    updated = services.attendance_service.update_details(
        TEACHER,
        record.attendance_id,
        AttendanceDetails(
            lunch=True,
            nap_start=datetime(2026, 3, 2, 12, 30),
            nap_end=datetime(2026, 3, 2, 14, 0),
            notes="slept well",
        ),
    )

    assert updated.lunch and not updated.breakfast
    assert updated.nap_minutes == 90
    assert updated.note == "slept well"
    assert updated.duration_minutes == 480


def test_nap_end_before_start_is_rejected(services, fixed_now):
    record = services.attendance_service.check_in(TEACHER, 10, now=fixed_now)
    with pytest.raises(ValidationError):
        services.attendance_service.update_details(
            TEACHER,
            record.attendance_id,
            AttendanceDetails(nap_start=datetime(2026, 3, 2, 14, 0), nap_end=datetime(2026, 3, 2, 13, 0)),
        )


def test_today_is_scoped_per_role(services, fixed_now):
    services.attendance_service.check_in(TEACHER, 10, now=fixed_now)
    services.attendance_service.check_in(TEACHER, 11, now=fixed_now)
    services.attendance_service.check_in(ADMIN, 12, now=fixed_now)
    today = fixed_now.date()

    assert {r.child_id for r in services.attendance_service.list_today(ADMIN, today=today)} == {10, 11, 12}
    assert {r.child_id for r in services.attendance_service.list_today(TEACHER, today=today)} == {10, 11}
    assert {r.child_id for r in services.attendance_service.list_today(OTHER_PARENT, today=today)} == {11, 12}


def test_history_returns_latest_first_with_limit(services, world):
    for i in range(5):
        world.attendance.add(make_record(i + 1, child_id=10, day=date(2026, 2, 2 + i), minutes=300))

    history = services.attendance_service.child_history(PARENT, 10, limit=3)

    assert [r.work_date.day for r in history] == [6, 5, 4]


def test_history_of_other_family_is_forbidden(services):
    with pytest.raises(AuthorizationError):
        services.attendance_service.child_history(OTHER_PARENT, 10)
