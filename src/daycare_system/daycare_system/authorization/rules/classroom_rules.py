from __future__ import annotations

from typing import Any, Optional

from ...core.enums import Action
from ..directory import ClassroomDirectory
from ..model import AccessDecision, Principal, ScopeFilter
from .base import AccessRule

NO_CLASSROOM = "No classroom assigned"


class ClassroomRosterRule(AccessRule):
    """Employees reach a child (or the child's records) only via their classroom roster.

    ``resource`` is usually the child and its id is read from ``child_id``.
    Classroom-wide records such as activities carry no child; for those the
    resource's ``classroom_id`` must be the employee's classroom.
    """

    def __init__(
        self,
        *,
        message: str = "Child not in your classroom",
        classroom_message: str = "Not authorized to access another classroom's records",
        actions: Optional[set[Action]] = None,
    ):
        super().__init__(actions=actions)
        self.message = message
        self.classroom_message = classroom_message

    def check(self, principal: Principal, action: Action, resource: Any, directory: ClassroomDirectory) -> AccessDecision:
        classroom = directory.get_by_teacher(int(principal.user_id))
        if classroom is None:
            return AccessDecision.deny(NO_CLASSROOM)

        child_id = getattr(resource, "child_id", None)
        if child_id is None:
            if getattr(resource, "classroom_id", None) != classroom.classroom_id:
                return AccessDecision.deny(self.classroom_message)
            return AccessDecision.allow()

        if int(child_id) not in classroom.child_ids:
            return AccessDecision.deny(self.message)
        return AccessDecision.allow()

    def scope(self, principal: Principal, action: Action, directory: ClassroomDirectory) -> AccessDecision:
        classroom = directory.get_by_teacher(int(principal.user_id))
        if classroom is None:
            return AccessDecision.deny(NO_CLASSROOM)
        return AccessDecision.allow(ScopeFilter("classroom_id", classroom.classroom_id))


class AssignedTeacherRule(AccessRule):
    """Employees reach only the classroom they are assigned to."""

    def __init__(self, *, message: str = "Not authorized to access this classroom", actions: Optional[set[Action]] = None):
        super().__init__(actions=actions)
        self.message = message

    def check(self, principal: Principal, action: Action, resource: Any, directory: ClassroomDirectory) -> AccessDecision:
        teacher = getattr(resource, "assigned_teacher_id", None)
        if teacher is None or int(teacher) != int(principal.user_id):
            return AccessDecision.deny(self.message)
        return AccessDecision.allow()

    def scope(self, principal: Principal, action: Action, directory: ClassroomDirectory) -> AccessDecision:
        return AccessDecision.allow(ScopeFilter("assigned_teacher_id", int(principal.user_id)))
