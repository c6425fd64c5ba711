from __future__ import annotations

from datetime import datetime

import pytest

from src.daycare_system.daycare_system.authorization.policy import AuthorizationPolicy
from src.daycare_system.daycare_system.container import build_services
from tests.fakes import build_world


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 3, 2, 8, 15, 0)


@pytest.fixture
def world():
    return build_world()


@pytest.fixture
def policy(world):
    return AuthorizationPolicy(world.classrooms)


@pytest.fixture
def services(world):
    return build_services(
        users_repo=world.users,
        classrooms_repo=world.classrooms,
        children_repo=world.children,
        attendance_repo=world.attendance,
        invoices_repo=world.invoices,
        notifications_repo=world.notifications,
        alerts_repo=world.alerts,
        activities_repo=world.activities,
        child_notes_repo=world.child_notes,
    )
