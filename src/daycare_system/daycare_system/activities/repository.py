from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import ActivityStatus, ActivityType, Mood
from .model import Activity, ActivityParticipant


class ActivityRepository(Protocol):
    """Repository interface for Activity (with its participants)."""

    def get_by_id(self, activity_id: int) -> Optional[Activity]:
        raise NotImplementedError

    def list(
        self,
        *,
        classroom_id: Optional[int] = None,
        parent_id: Optional[int] = None,
        child_id: Optional[int] = None,
        conducted_by: Optional[int] = None,
        type: Optional[ActivityType] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> Sequence[Activity]:
        """Newest first. ``parent_id`` matches activities with one of that parent's children."""

        raise NotImplementedError

    def create(
        self,
        *,
        title: str,
        type: ActivityType,
        conducted_by: int,
        activity_date: date,
        classroom_id: Optional[int],
        description: Optional[str],
        start_time: Optional[datetime],
        end_time: Optional[datetime],
        status: ActivityStatus,
        materials: Sequence[str],
        learning_objectives: Sequence[str],
        participants: Sequence[ActivityParticipant],
        created_at: datetime,
    ) -> int:
        raise NotImplementedError

    def update(
        self,
        *,
        activity_id: int,
        title: str,
        type: ActivityType,
        description: Optional[str],
        start_time: Optional[datetime],
        end_time: Optional[datetime],
        status: ActivityStatus,
        materials: Sequence[str],
        learning_objectives: Sequence[str],
    ) -> bool:
        raise NotImplementedError

    def delete(self, activity_id: int) -> bool:
        raise NotImplementedError

    def save_observation(
        self,
        *,
        activity_id: int,
        child_id: int,
        observations: Optional[str],
        mood: Optional[Mood],
    ) -> None:
        """Insert the participant or overwrite its observations and mood."""

        raise NotImplementedError
