from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..authorization.model import Principal
from ..authorization.policy import AuthorizationPolicy
from ..common.datetime_utils import now_local
from ..common.validators import parse_enum, require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import Action, ResourceKind, Role
from ..core.exceptions import AuthenticationError, NotFoundError, ValidationError
from ..core.logging import get_logger
from .model import User
from .repository import UserRepository

logger = get_logger("users")


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    user_id: int
    full_name: str
    role: Role

    def to_principal(self) -> Principal:
        return Principal(user_id=self.user_id, role=self.role.value, full_name=self.full_name)


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, username: str, password: str, *, now: Optional[datetime] = None) -> SessionUser:
        user = self._users.get_by_username((username or "").strip())
        if not user or not user.is_active:
            raise AuthenticationError("Invalid username or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # placeholder or corrupted hash values
            ok = False

        if not ok:
            raise AuthenticationError("Invalid username or password")

        self._users.set_last_login(user.user_id, when=now or now_local())
        logger.info("user %s logged in", user.user_id)
        return SessionUser(user_id=user.user_id, full_name=user.full_name, role=user.role)

    def current_user(self, principal: Optional[Principal]) -> User:
        if principal is None:
            raise AuthenticationError("Not authorized to access this route")
        user = self._users.get_by_id(principal.user_id)
        if not user or not user.is_active:
            raise AuthenticationError("Not authorized to access this route")
        return user


class UserService:
    """Use case: manage user accounts (admin)."""

    def __init__(self, users: UserRepository, policy: AuthorizationPolicy):
        self._users = users
        self._policy = policy

    def _get_existing(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        return user

    def list_users(self, principal: Optional[Principal], *, role: Optional[str] = None) -> Sequence[User]:
        self._policy.require(principal, ResourceKind.USER, Action.LIST)
        role_filter = parse_enum(Role, role, "role") if role else None
        return self._users.list_all(role=role_filter)

    def get_user(self, principal: Optional[Principal], user_id: int) -> User:
        user = self._get_existing(user_id)
        self._policy.require(principal, ResourceKind.USER, Action.READ, user)
        return user

    def create_account(
        self,
        principal: Optional[Principal],
        *,
        full_name: str,
        username: str,
        password: str,
        role: str,
        phone: Optional[str] = None,
    ) -> User:
        self._policy.require(principal, ResourceKind.USER, Action.CREATE)

        full_name = require_non_empty(full_name, "Full name")
        username = require_non_empty(username, "Username")
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        account_role = parse_enum(Role, role, "role")

        if self._users.get_by_username(username):
            raise ValidationError("Username already exists")

        user_id = self._users.create_user(
            full_name=full_name,
            username=username,
            password_hash=generate_password_hash(password),
            role=account_role,
            phone=(phone or "").strip() or None,
        )
        logger.info("user %s (%s) created by %s", user_id, account_role.value, principal.user_id)
        return self._get_existing(user_id)

    def update_account(
        self,
        principal: Optional[Principal],
        user_id: int,
        *,
        full_name: Optional[str] = None,
        phone: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> User:
        user = self._get_existing(user_id)
        self._policy.require(principal, ResourceKind.USER, Action.UPDATE, user)

        if is_active is False and user.user_id == principal.user_id:
            raise ValidationError("You cannot deactivate your own account")

        self._users.update_user(
            user_id=user.user_id,
            full_name=require_non_empty(full_name, "Full name") if full_name is not None else user.full_name,
            phone=phone if phone is not None else user.phone,
            is_active=is_active if is_active is not None else user.is_active,
        )
        return self._get_existing(user.user_id)

    def delete_user(self, principal: Optional[Principal], user_id: int) -> None:
        user = self._get_existing(user_id)
        self._policy.require(principal, ResourceKind.USER, Action.DELETE, user)

        if user.user_id == principal.user_id:
            raise ValidationError("You cannot delete your own account")

        self._users.delete_by_id(user.user_id)
        logger.info("user %s deleted by %s", user.user_id, principal.user_id)
