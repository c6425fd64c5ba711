from __future__ import annotations

from typing import Optional, Sequence

from ..authorization.model import Principal
from ..authorization.policy import AuthorizationPolicy
from ..children.model import Child
from ..children.repository import ChildRepository
from ..common.validators import require_non_empty, require_positive_int
from ..core.enums import Action, ResourceKind, Role
from ..core.exceptions import NotFoundError, ValidationError
from ..users.repository import UserRepository
from .model import Classroom
from .repository import ClassroomRepository


class ClassroomService:
    def __init__(
        self,
        classrooms: ClassroomRepository,
        children: ChildRepository,
        users: UserRepository,
        policy: AuthorizationPolicy,
    ):
        self._classrooms = classrooms
        self._children = children
        self._users = users
        self._policy = policy

    def _get_existing(self, classroom_id: int) -> Classroom:
        classroom = self._classrooms.get_by_id(int(classroom_id))
        if not classroom:
            raise NotFoundError("Classroom not found")
        return classroom

    def _require_teacher(self, teacher_id: Optional[int]) -> Optional[int]:
        if teacher_id is None:
            return None
        teacher = self._users.get_by_id(int(teacher_id))
        if not teacher or teacher.role != Role.EMPLOYEE:
            raise ValidationError("Assigned teacher must be an employee account")
        return teacher.user_id

    def get_my_classroom(self, principal: Optional[Principal]) -> Classroom:
        self._policy.require_role(principal, Role.EMPLOYEE)
        classroom = self._classrooms.get_by_teacher(principal.user_id)
        if not classroom:
            raise NotFoundError("No classroom assigned")
        return classroom

    def list_my_classroom_children(self, principal: Optional[Principal]) -> Sequence[Child]:
        classroom = self.get_my_classroom(principal)
        return self._children.list(classroom_id=classroom.classroom_id, active_only=True)

    def list_classrooms(self, principal: Optional[Principal]) -> Sequence[Classroom]:
        decision = self._policy.require(principal, ResourceKind.CLASSROOM, Action.LIST)
        return self._classrooms.list_all(**decision.scope_kwargs())

    def get_classroom(self, principal: Optional[Principal], classroom_id: int) -> Classroom:
        classroom = self._get_existing(classroom_id)
        self._policy.require(principal, ResourceKind.CLASSROOM, Action.READ, classroom)
        return classroom

    def create_classroom(
        self,
        principal: Optional[Principal],
        *,
        name: str,
        capacity,
        min_age_months: int = 0,
        max_age_months: int = 72,
        assigned_teacher_id: Optional[int] = None,
    ) -> Classroom:
        self._policy.require(principal, ResourceKind.CLASSROOM, Action.CREATE)

        name = require_non_empty(name, "Classroom name")
        capacity = require_positive_int(capacity, "Capacity")
        if int(min_age_months) < 0 or int(min_age_months) > int(max_age_months):
            raise ValidationError("Invalid age group")

        classroom_id = self._classrooms.create(
            name=name,
            capacity=capacity,
            min_age_months=int(min_age_months),
            max_age_months=int(max_age_months),
            assigned_teacher_id=self._require_teacher(assigned_teacher_id),
        )
        return self._get_existing(classroom_id)

    def assign_teacher(self, principal: Optional[Principal], classroom_id: int, teacher_id: Optional[int]) -> Classroom:
        classroom = self._get_existing(classroom_id)
        self._policy.require(principal, ResourceKind.CLASSROOM, Action.UPDATE, classroom)
        self._classrooms.assign_teacher(classroom_id=classroom.classroom_id, teacher_id=self._require_teacher(teacher_id))
        return self._get_existing(classroom.classroom_id)

    def capacity_overview(self, principal: Optional[Principal]) -> list[dict]:
        self._policy.require(principal, ResourceKind.REPORT, Action.READ)
        out: list[dict] = []
        for c in self.list_classrooms(principal):
            out.append(
                {
                    "classroom_id": c.classroom_id,
                    "name": c.name,
                    "capacity": c.capacity,
                    "current_count": c.current_count,
                    "available": max(c.capacity - c.current_count, 0),
                    "has_capacity": c.has_capacity(),
                }
            )
        return out
