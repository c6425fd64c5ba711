from __future__ import annotations

from typing import Optional, Protocol

from ..classrooms.model import Classroom


class ClassroomDirectory(Protocol):
    """Lookup the policy needs to resolve an employee's classroom roster."""

    def get_by_teacher(self, teacher_id: int) -> Optional[Classroom]:
        raise NotImplementedError
