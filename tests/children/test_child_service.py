from datetime import date

import pytest

from src.daycare_system.daycare_system.children.service import ChildUpdate
from src.daycare_system.daycare_system.core.enums import NotificationType
from src.daycare_system.daycare_system.core.exceptions import AuthorizationError, ValidationError
from tests.fakes import ADMIN, OTHER_PARENT, PARENT, TEACHER, make_child


def _register(services, principal, **overrides):
    data = dict(
        first_name="Lan",
        last_name="Pham",
        date_of_birth=date(2024, 1, 10),
        gender="female",
        today=date(2026, 3, 2),
    )
    data.update(overrides)
    return services.child_service.register_child(principal, **data)


def test_parent_registers_child_for_themselves(services, world):
    child = _register(services, PARENT, parent_id=OTHER_PARENT.user_id)

    assert child.parent_id == PARENT.user_id
    assert child.enrollment_date == date(2026, 3, 2)
    admin_notes = world.notifications.list_for_user(ADMIN.user_id)
    assert admin_notes[0].type == NotificationType.SYSTEM


def test_admin_must_name_the_parent(services):
    with pytest.raises(ValidationError):
        _register(services, ADMIN)
    assert _register(services, ADMIN, parent_id=4).parent_id == 4


def test_future_birth_date_is_rejected(services):
    with pytest.raises(ValidationError):
        _register(services, PARENT, date_of_birth=date(2027, 1, 1))


def test_invalid_gender_is_rejected(services):
    with pytest.raises(ValidationError):
        _register(services, PARENT, gender="x")


def test_employee_cannot_register_children(services):
    with pytest.raises(AuthorizationError):
        _register(services, TEACHER)


def test_listing_is_scoped(services):
    assert {c.child_id for c in services.child_service.list_children(PARENT)} == {10}
    assert {c.child_id for c in services.child_service.list_children(OTHER_PARENT)} == {11, 12}
    assert {c.child_id for c in services.child_service.list_children(TEACHER)} == {10, 11}
    assert {c.child_id for c in services.child_service.list_children(ADMIN)} == {10, 11, 12}


def test_moving_into_a_full_classroom_is_refused(services, world):
    world.children.add(make_child(30, parent_id=3, classroom_id=2))
    world.children.add(make_child(31, parent_id=3, classroom_id=2))

    with pytest.raises(ValidationError):
        services.child_service.update_child(ADMIN, 12, ChildUpdate(classroom_id=2))


def test_admin_moves_child_and_roster_follows(services, world):
    services.child_service.update_child(ADMIN, 12, ChildUpdate(classroom_id=2))

    assert 12 in world.classrooms.get_by_id(2).child_ids


def test_parent_cannot_update_child(services):
    with pytest.raises(AuthorizationError):
        services.child_service.update_child(PARENT, 10, ChildUpdate(first_name="New"))


def test_deactivate_clears_classroom(services, world):
    services.child_service.deactivate_child(ADMIN, 10)

    child = world.children.get_by_id(10)
    assert not child.is_active
    assert child.classroom_id is None
    assert 10 not in world.classrooms.get_by_id(1).child_ids
