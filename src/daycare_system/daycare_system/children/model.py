from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import Gender, Mood


@dataclass(frozen=True)
class Child:
    """Domain entity: an enrolled child, owned by one parent account."""

    child_id: int
    first_name: str
    last_name: str
    date_of_birth: date
    gender: Gender
    parent_id: int
    enrollment_date: date
    classroom_id: Optional[int] = None
    allergies: Optional[str] = None
    special_needs: Optional[str] = None
    is_active: bool = True

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def age_months(self, today: date) -> int:
        months = (today.year - self.date_of_birth.year) * 12 + (today.month - self.date_of_birth.month)
        if today.day < self.date_of_birth.day:
            months -= 1
        return max(months, 0)

    def to_dict(self) -> dict:
        return {
            "child_id": self.child_id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "date_of_birth": self.date_of_birth.isoformat(),
            "gender": self.gender.value,
            "parent_id": self.parent_id,
            "classroom_id": self.classroom_id,
            "allergies": self.allergies,
            "special_needs": self.special_needs,
            "enrollment_date": self.enrollment_date.isoformat(),
            "is_active": self.is_active,
        }


@dataclass(frozen=True)
class ChildNote:
    """A staff observation about one child (daily note)."""

    note_id: int
    child_id: int
    author_id: int
    category: str
    note: str
    created_at: datetime
    mood: Optional[Mood] = None

    def to_dict(self) -> dict:
        return {
            "note_id": self.note_id,
            "child_id": self.child_id,
            "author_id": self.author_id,
            "category": self.category,
            "note": self.note,
            "mood": self.mood.value if self.mood else None,
            "created_at": self.created_at.isoformat(),
        }
