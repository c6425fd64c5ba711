from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, FrozenSet, Optional

from ...core.enums import Action
from ..directory import ClassroomDirectory
from ..model import AccessDecision, Principal


class AccessRule(ABC):
    """Strategy Pattern: one rule per (role, resource kind) pair.

    ``check`` decides on a single resource, ``scope`` resolves list-style
    requests into a filter. Rules hold no mutable state.
    """

    actions: Optional[FrozenSet[Action]] = None

    def __init__(self, *, actions: Optional[set[Action]] = None):
        if actions is not None:
            self.actions = frozenset(actions)

    def permits(self, action: Action) -> bool:
        return self.actions is None or action in self.actions

    @abstractmethod
    def check(
        self,
        principal: Principal,
        action: Action,
        resource: Any,
        directory: ClassroomDirectory,
    ) -> AccessDecision:
        raise NotImplementedError

    @abstractmethod
    def scope(self, principal: Principal, action: Action, directory: ClassroomDirectory) -> AccessDecision:
        raise NotImplementedError
