from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import ActivityStatus, ActivityType, Mood


@dataclass(frozen=True)
class ActivityParticipant:
    """One child taking part in an activity, with the staff's observations."""

    child_id: int
    observations: Optional[str] = None
    mood: Optional[Mood] = None

    def to_dict(self) -> dict:
        return {
            "child_id": self.child_id,
            "observations": self.observations,
            "mood": self.mood.value if self.mood else None,
        }


@dataclass(frozen=True)
class Activity:
    """Domain entity: a logged classroom activity.

    Access is decided through ``classroom_id``; the participants are children
    of that classroom.
    """

    activity_id: int
    title: str
    type: ActivityType
    conducted_by: int
    activity_date: date
    classroom_id: Optional[int] = None
    description: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    status: ActivityStatus = ActivityStatus.PLANNED
    materials: tuple[str, ...] = ()
    learning_objectives: tuple[str, ...] = ()
    participants: tuple[ActivityParticipant, ...] = field(default_factory=tuple)
    created_at: Optional[datetime] = None

    @property
    def participant_ids(self) -> frozenset[int]:
        return frozenset(p.child_id for p in self.participants)

    def participant(self, child_id: int) -> Optional[ActivityParticipant]:
        return next((p for p in self.participants if p.child_id == int(child_id)), None)

    def to_dict(self) -> dict:
        return {
            "activity_id": self.activity_id,
            "title": self.title,
            "description": self.description,
            "type": self.type.value,
            "classroom_id": self.classroom_id,
            "conducted_by": self.conducted_by,
            "date": self.activity_date.isoformat(),
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "status": self.status.value,
            "materials": list(self.materials),
            "learning_objectives": list(self.learning_objectives),
            "participants": [p.to_dict() for p in self.participants],
        }
