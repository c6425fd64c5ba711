import pytest

from src.daycare_system.daycare_system.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from tests.fakes import ADMIN, PARENT, TEACHER, UNASSIGNED_TEACHER


def test_employee_gets_assigned_classroom(services):
    classroom = services.classroom_service.get_my_classroom(TEACHER)
    assert classroom.name == "Sunflowers"
    assert classroom.child_ids == frozenset({10, 11})


def test_employee_without_classroom(services):
    with pytest.raises(NotFoundError):
        services.classroom_service.get_my_classroom(UNASSIGNED_TEACHER)


def test_my_classroom_is_for_employees(services):
    with pytest.raises(AuthorizationError):
        services.classroom_service.get_my_classroom(PARENT)


def test_list_is_scoped_for_employees(services):
    assert [c.classroom_id for c in services.classroom_service.list_classrooms(TEACHER)] == [1]
    assert len(services.classroom_service.list_classrooms(ADMIN)) == 2
    with pytest.raises(AuthorizationError):
        services.classroom_service.list_classrooms(PARENT)


def test_admin_creates_classroom_with_teacher(services):
    classroom = services.classroom_service.create_classroom(
        ADMIN, name="Rainbows", capacity="10", min_age_months=24, max_age_months=48, assigned_teacher_id=5
    )
    assert classroom.capacity == 10
    assert classroom.assigned_teacher_id == 5
    assert classroom.has_capacity()


@pytest.mark.parametrize(
    "overrides",
    [
        {"capacity": 0},
        {"name": " "},
        {"min_age_months": 50, "max_age_months": 10},
        {"assigned_teacher_id": 3},
    ],
)
def test_invalid_classrooms_are_rejected(services, overrides):
    data = dict(name="Rainbows", capacity=10, min_age_months=0, max_age_months=48)
    data.update(overrides)
    with pytest.raises(ValidationError):
        services.classroom_service.create_classroom(ADMIN, **data)


def test_employee_cannot_create_classrooms(services):
    with pytest.raises(AuthorizationError):
        services.classroom_service.create_classroom(TEACHER, name="X", capacity=5)


def test_capacity_overview(services):
    rows = {r["name"]: r for r in services.classroom_service.capacity_overview(ADMIN)}
    assert rows["Sunflowers"]["current_count"] == 2
    assert rows["Sunflowers"]["available"] == 10
    assert rows["Butterflies"]["has_capacity"]
