from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class Classroom:
    """Domain entity: a classroom and its roster (ids of enrolled children)."""

    classroom_id: int
    name: str
    capacity: int
    min_age_months: int
    max_age_months: int
    assigned_teacher_id: Optional[int]
    child_ids: frozenset[int] = field(default_factory=frozenset)
    is_active: bool = True

    @property
    def current_count(self) -> int:
        return len(self.child_ids)

    def has_capacity(self) -> bool:
        return self.current_count < self.capacity

    def is_age_appropriate(self, age_months: int) -> bool:
        return self.min_age_months <= age_months <= self.max_age_months

    def to_dict(self) -> dict:
        return {
            "classroom_id": self.classroom_id,
            "name": self.name,
            "capacity": self.capacity,
            "current_count": self.current_count,
            "age_group": {"min_age": self.min_age_months, "max_age": self.max_age_months},
            "assigned_teacher_id": self.assigned_teacher_id,
            "children": sorted(self.child_ids),
            "is_active": self.is_active,
        }
