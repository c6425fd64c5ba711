from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Classroom


class ClassroomRepository(Protocol):
    def get_by_id(self, classroom_id: int) -> Optional[Classroom]:
        raise NotImplementedError

    def get_by_teacher(self, teacher_id: int) -> Optional[Classroom]:
        raise NotImplementedError

    def list_all(self, *, assigned_teacher_id: Optional[int] = None) -> Sequence[Classroom]:
        raise NotImplementedError

    def create(
        self,
        *,
        name: str,
        capacity: int,
        min_age_months: int,
        max_age_months: int,
        assigned_teacher_id: Optional[int],
    ) -> int:
        raise NotImplementedError

    def assign_teacher(self, *, classroom_id: int, teacher_id: Optional[int]) -> bool:
        raise NotImplementedError
