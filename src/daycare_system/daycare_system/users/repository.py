from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Note (DIP): the service layer depends on this interface, not on a concrete DB.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[User]:
        raise NotImplementedError

    def create_user(
        self,
        *,
        full_name: str,
        username: str,
        password_hash: str,
        role: Role,
        phone: Optional[str],
    ) -> int:
        raise NotImplementedError

    def update_user(self, *, user_id: int, full_name: str, phone: Optional[str], is_active: bool) -> bool:
        raise NotImplementedError

    def set_last_login(self, user_id: int, *, when: datetime) -> None:
        raise NotImplementedError

    def delete_by_id(self, user_id: int) -> bool:
        raise NotImplementedError

    def list_all(self, *, role: Optional[Role] = None) -> Sequence[User]:
        raise NotImplementedError
