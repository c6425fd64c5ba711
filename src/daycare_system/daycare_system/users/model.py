from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: a parent, employee or admin account.

    Note: plain data object, no DB access code here.
    """

    user_id: int
    full_name: str
    username: str
    password_hash: str
    role: Role
    phone: Optional[str] = None
    is_active: bool = True
    last_login: Optional[datetime] = None

    def to_public_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "full_name": self.full_name,
            "username": self.username,
            "role": self.role.value,
            "phone": self.phone,
            "is_active": self.is_active,
            "last_login": self.last_login.isoformat() if self.last_login else None,
        }
