from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import Gender, Mood
from .model import Child, ChildNote


class ChildRepository(Protocol):
    def get_by_id(self, child_id: int) -> Optional[Child]:
        raise NotImplementedError

    def list(
        self,
        *,
        parent_id: Optional[int] = None,
        classroom_id: Optional[int] = None,
        active_only: bool = False,
    ) -> Sequence[Child]:
        raise NotImplementedError

    def list_active(self) -> Sequence[Child]:
        raise NotImplementedError

    def create(
        self,
        *,
        first_name: str,
        last_name: str,
        date_of_birth: date,
        gender: Gender,
        parent_id: int,
        enrollment_date: date,
        allergies: Optional[str] = None,
        special_needs: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def update(
        self,
        *,
        child_id: int,
        first_name: str,
        last_name: str,
        classroom_id: Optional[int],
        allergies: Optional[str],
        special_needs: Optional[str],
        is_active: bool,
    ) -> bool:
        raise NotImplementedError


class ChildNoteRepository(Protocol):
    def create(
        self,
        *,
        child_id: int,
        author_id: int,
        category: str,
        note: str,
        mood: Optional[Mood],
        created_at: datetime,
    ) -> int:
        raise NotImplementedError

    def get_by_id(self, note_id: int) -> Optional[ChildNote]:
        raise NotImplementedError

    def list_for_child(self, child_id: int, *, limit: int) -> Sequence[ChildNote]:
        """Newest first."""

        raise NotImplementedError
