from datetime import datetime

import pytest
from werkzeug.security import check_password_hash

from src.daycare_system.daycare_system.authorization.model import Principal
from src.daycare_system.daycare_system.core.enums import Role
from src.daycare_system.daycare_system.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from tests.fakes import ADMIN, PARENT, TEACHER


def test_login_success_records_last_login(services, world, fixed_now):
    user = services.auth_service.authenticate("teacher", "secret123", now=fixed_now)

    assert user.user_id == TEACHER.user_id
    assert user.role == Role.EMPLOYEE
    assert user.to_principal() == Principal(user_id=2, role="employee", full_name="Teacher")
    assert world.users.last_logins[TEACHER.user_id] == fixed_now


@pytest.mark.parametrize("username,password", [("teacher", "wrong"), ("ghost", "secret123"), ("", "")])
def test_login_failure_is_generic(services, username, password):
    with pytest.raises(AuthenticationError) as exc:
        services.auth_service.authenticate(username, password)
    assert str(exc.value) == "Invalid username or password"


def test_inactive_user_cannot_login(services):
    services.user_service.update_account(ADMIN, TEACHER.user_id, is_active=False)
    with pytest.raises(AuthenticationError):
        services.auth_service.authenticate("teacher", "secret123")


def test_corrupted_hash_is_a_failed_login(services, world):
    uid = world.users.create_user(
        full_name="Legacy", username="legacy", password_hash="CHANGE_ME", role=Role.PARENT, phone=None
    )
    assert uid
    with pytest.raises(AuthenticationError):
        services.auth_service.authenticate("legacy", "CHANGE_ME")


def test_admin_creates_account_with_hashed_password(services, world):
    user = services.user_service.create_account(
        ADMIN, full_name="New Parent", username="newparent", password="abcdef", role="parent", phone=" 0123 "
    )

    assert user.role == Role.PARENT
    assert user.phone == "0123"
    assert check_password_hash(world.users.get_by_username("newparent").password_hash, "abcdef")


@pytest.mark.parametrize(
    "overrides",
    [
        {"password": "abc"},
        {"username": "teacher"},
        {"role": "superuser"},
        {"full_name": ""},
    ],
)
def test_invalid_accounts_are_rejected(services, overrides):
    data = dict(full_name="X", username="x1", password="abcdef", role="employee")
    data.update(overrides)
    with pytest.raises(ValidationError):
        services.user_service.create_account(ADMIN, **data)


@pytest.mark.parametrize("principal", [PARENT, TEACHER])
def test_only_admin_manages_users(services, principal):
    with pytest.raises(AuthorizationError) as exc:
        services.user_service.list_users(principal)
    assert str(exc.value) == "Only administrators can manage users"


def test_list_users_by_role(services):
    assert {u.username for u in services.user_service.list_users(ADMIN, role="employee")} == {"teacher", "teacher2"}


def test_admin_cannot_delete_self(services):
    with pytest.raises(ValidationError):
        services.user_service.delete_user(ADMIN, ADMIN.user_id)


def test_delete_user(services):
    services.user_service.delete_user(ADMIN, PARENT.user_id)
    with pytest.raises(NotFoundError):
        services.user_service.get_user(ADMIN, PARENT.user_id)


def test_current_user_requires_session(services):
    with pytest.raises(AuthenticationError):
        services.auth_service.current_user(None)
    assert services.auth_service.current_user(PARENT).username == "parent"


def test_last_login_passthrough_default_time(services, world):
    services.auth_service.authenticate("parent", "secret123")
    assert isinstance(world.users.last_logins[PARENT.user_id], datetime)
