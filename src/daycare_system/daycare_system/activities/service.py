from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from ..authorization.model import Principal
from ..authorization.policy import AuthorizationPolicy
from ..children.model import Child
from ..children.repository import ChildRepository
from ..common.datetime_utils import now_local
from ..common.validators import parse_enum, require_non_empty
from ..core.constants import CHILD_ACTIVITY_LIMIT
from ..core.enums import Action, ActivityStatus, ActivityType, Mood, NotificationType, ResourceKind, Role
from ..core.exceptions import NotFoundError, ValidationError
from ..core.logging import get_logger
from ..notifications.service import NotificationService
from .model import Activity, ActivityParticipant
from .repository import ActivityRepository

logger = get_logger("activities")


@dataclass(frozen=True)
class ParticipantInput:
    child_id: int
    observations: Optional[str] = None
    mood: Optional[str] = None


@dataclass(frozen=True)
class ActivityUpdate:
    title: Optional[str] = None
    description: Optional[str] = None
    type: Optional[str] = None
    status: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    materials: Optional[Sequence[str]] = None
    learning_objectives: Optional[Sequence[str]] = None


def _parse_mood(value: Optional[str]) -> Optional[Mood]:
    return parse_enum(Mood, value, "mood") if value else None


def _clean_list(values: Optional[Iterable[str]]) -> tuple[str, ...]:
    if isinstance(values, str):
        raise ValidationError("Expected a list of strings")
    return tuple(str(v).strip() for v in values or () if v and str(v).strip())


def _check_times(start_time: Optional[datetime], end_time: Optional[datetime]) -> None:
    if start_time and end_time and end_time < start_time:
        raise ValidationError("Activity end time cannot be before its start time")


class ActivityService:
    """Use cases: log classroom activities and the children's part in them."""

    def __init__(
        self,
        activities: ActivityRepository,
        children: ChildRepository,
        policy: AuthorizationPolicy,
        notifications: Optional[NotificationService] = None,
    ):
        self._activities = activities
        self._children = children
        self._policy = policy
        self._notifications = notifications

    def _get_child(self, child_id: int) -> Child:
        child = self._children.get_by_id(int(child_id))
        if not child:
            raise NotFoundError("Child not found")
        return child

    def _get_existing(self, activity_id: int) -> Activity:
        activity = self._activities.get_by_id(int(activity_id))
        if not activity:
            raise NotFoundError("Activity not found")
        return activity

    def record_activity(
        self,
        principal: Optional[Principal],
        *,
        title: str,
        type: str,
        activity_date: Optional[date] = None,
        description: Optional[str] = None,
        classroom_id: Optional[int] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
        status: Optional[str] = None,
        materials: Optional[Sequence[str]] = None,
        learning_objectives: Optional[Sequence[str]] = None,
        participants: Sequence[ParticipantInput] = (),
        now: Optional[datetime] = None,
    ) -> Activity:
        self._policy.require_role(principal, Role.EMPLOYEE, Role.ADMIN)
        decision = self._policy.require(principal, ResourceKind.ACTIVITY, Action.CREATE)
        # Employees always log activities for their own classroom.
        if decision.scope is not None:
            classroom_id = decision.scope.value

        title = require_non_empty(title, "Activity title")
        activity_type = parse_enum(ActivityType, type, "activity type")
        activity_status = parse_enum(ActivityStatus, status, "status") if status else ActivityStatus.PLANNED
        _check_times(start_time, end_time)
        now = now or now_local()

        children: list[Child] = []
        rows: list[ActivityParticipant] = []
        for item in participants:
            child = self._get_child(item.child_id)
            if any(c.child_id == child.child_id for c in children):
                raise ValidationError(f"Child {child.child_id} is listed twice")
            self._policy.require(principal, ResourceKind.ACTIVITY, Action.CREATE, child)
            children.append(child)
            rows.append(
                ActivityParticipant(
                    child_id=child.child_id,
                    observations=(item.observations or "").strip() or None,
                    mood=_parse_mood(item.mood),
                )
            )

        description = (description or "").strip() or None
        activity_id = self._activities.create(
            title=title,
            type=activity_type,
            conducted_by=principal.user_id,
            activity_date=activity_date or (start_time.date() if start_time else now.date()),
            classroom_id=int(classroom_id) if classroom_id else None,
            description=description,
            start_time=start_time,
            end_time=end_time,
            status=activity_status,
            materials=_clean_list(materials),
            learning_objectives=_clean_list(learning_objectives),
            participants=rows,
            created_at=now,
        )
        logger.info(
            "activity %s (%s) recorded by %s with %d participant(s)",
            activity_id,
            activity_type.value,
            principal.user_id,
            len(rows),
        )

        if self._notifications:
            for child in children:
                self._notifications.notify(
                    child.parent_id,
                    type=NotificationType.ACTIVITY,
                    title="New Activity Recorded",
                    message=f"{child.first_name} participated in {title}. {description or ''}".strip(),
                    related_entity="activity",
                    related_id=activity_id,
                    now=now,
                )
        return self._get_existing(activity_id)

    def list_activities(
        self,
        principal: Optional[Principal],
        *,
        classroom_id: Optional[int] = None,
        on_date: Optional[date] = None,
        type: Optional[str] = None,
    ) -> Sequence[Activity]:
        filters: dict = {"classroom_id": int(classroom_id)} if classroom_id else {}
        scope = self._policy.scope_for(principal, ResourceKind.ACTIVITY)
        if scope is not None:
            filters.update(scope.as_kwargs())
        if on_date is not None:
            filters.update(start_date=on_date, end_date=on_date)
        if type:
            filters["type"] = parse_enum(ActivityType, type, "activity type")
        return self._activities.list(**filters)

    def get_activity(self, principal: Optional[Principal], activity_id: int) -> Activity:
        activity = self._get_existing(activity_id)
        self._policy.require(principal, ResourceKind.ACTIVITY, Action.READ, activity)
        return activity

    def update_activity(self, principal: Optional[Principal], activity_id: int, changes: ActivityUpdate) -> Activity:
        activity = self._get_existing(activity_id)
        self._policy.require(principal, ResourceKind.ACTIVITY, Action.UPDATE, activity)

        start_time = changes.start_time or activity.start_time
        end_time = changes.end_time or activity.end_time
        _check_times(start_time, end_time)

        self._activities.update(
            activity_id=activity.activity_id,
            title=require_non_empty(changes.title, "Activity title") if changes.title is not None else activity.title,
            type=parse_enum(ActivityType, changes.type, "activity type") if changes.type else activity.type,
            description=changes.description if changes.description is not None else activity.description,
            start_time=start_time,
            end_time=end_time,
            status=parse_enum(ActivityStatus, changes.status, "status") if changes.status else activity.status,
            materials=_clean_list(changes.materials) if changes.materials is not None else activity.materials,
            learning_objectives=(
                _clean_list(changes.learning_objectives)
                if changes.learning_objectives is not None
                else activity.learning_objectives
            ),
        )
        return self._get_existing(activity.activity_id)

    def delete_activity(self, principal: Optional[Principal], activity_id: int) -> None:
        activity = self._get_existing(activity_id)
        self._policy.require(principal, ResourceKind.ACTIVITY, Action.DELETE, activity)
        self._activities.delete(activity.activity_id)
        logger.info("activity %s deleted by %s", activity.activity_id, principal.user_id)

    def add_observation(
        self,
        principal: Optional[Principal],
        activity_id: int,
        child_id: int,
        *,
        observations: Optional[str] = None,
        mood: Optional[str] = None,
    ) -> Activity:
        """Record (or overwrite) what staff observed about one child during an activity."""

        activity = self._get_existing(activity_id)
        self._policy.require(principal, ResourceKind.ACTIVITY, Action.UPDATE, activity)
        child = self._get_child(child_id)
        self._policy.require(principal, ResourceKind.ACTIVITY, Action.UPDATE, child)

        self._activities.save_observation(
            activity_id=activity.activity_id,
            child_id=child.child_id,
            observations=(observations or "").strip() or None,
            mood=_parse_mood(mood),
        )
        return self._get_existing(activity.activity_id)

    def list_my_activities(self, principal: Optional[Principal]) -> Sequence[Activity]:
        self._policy.require_role(principal, Role.EMPLOYEE)
        return self._activities.list(conducted_by=principal.user_id)

    def child_activities(
        self,
        principal: Optional[Principal],
        child_id: int,
        *,
        limit: int = CHILD_ACTIVITY_LIMIT,
    ) -> Sequence[Activity]:
        child = self._get_child(child_id)
        self._policy.require(principal, ResourceKind.ACTIVITY, Action.READ, child)
        return self._activities.list(child_id=child.child_id, limit=limit)
