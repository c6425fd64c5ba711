from __future__ import annotations

from typing import Any, Optional

from ...core.enums import Action
from ..directory import ClassroomDirectory
from ..model import AccessDecision, Principal, ScopeFilter
from .base import AccessRule


class OwnershipRule(AccessRule):
    """Allow when ``resource.<field>`` is the principal's id (parents and their children/invoices)."""

    def __init__(self, *, field: str = "parent_id", message: str, actions: Optional[set[Action]] = None):
        super().__init__(actions=actions)
        self.field = field
        self.message = message

    def check(self, principal: Principal, action: Action, resource: Any, directory: ClassroomDirectory) -> AccessDecision:
        owner = getattr(resource, self.field, None)
        if owner is None or int(owner) != int(principal.user_id):
            return AccessDecision.deny(self.message)
        return AccessDecision.allow()

    def scope(self, principal: Principal, action: Action, directory: ClassroomDirectory) -> AccessDecision:
        return AccessDecision.allow(ScopeFilter(self.field, int(principal.user_id)))
