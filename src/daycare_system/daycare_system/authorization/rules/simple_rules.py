from __future__ import annotations

from typing import Any

from ...core.enums import Action
from ..directory import ClassroomDirectory
from ..model import AccessDecision, Principal
from .base import AccessRule


class AllowAllRule(AccessRule):
    """Full access, no scope filter (administrators)."""

    def check(self, principal: Principal, action: Action, resource: Any, directory: ClassroomDirectory) -> AccessDecision:
        return AccessDecision.allow()

    def scope(self, principal: Principal, action: Action, directory: ClassroomDirectory) -> AccessDecision:
        return AccessDecision.allow()


class DenyRule(AccessRule):
    """Unconditional denial with a fixed message."""

    def __init__(self, message: str):
        super().__init__()
        self.message = message

    def check(self, principal: Principal, action: Action, resource: Any, directory: ClassroomDirectory) -> AccessDecision:
        return AccessDecision.deny(self.message)

    def scope(self, principal: Principal, action: Action, directory: ClassroomDirectory) -> AccessDecision:
        return AccessDecision.deny(self.message)
