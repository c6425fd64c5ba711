from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Sequence

from ..authorization.model import Principal
from ..authorization.policy import AuthorizationPolicy
from ..classrooms.repository import ClassroomRepository
from ..common.datetime_utils import now_local
from ..common.validators import parse_enum, require_non_empty
from ..core.constants import DEFAULT_HISTORY_LIMIT, DEFAULT_NOTE_CATEGORY, NOTE_PREVIEW_LENGTH
from ..core.enums import Action, Gender, Mood, NotificationType, ResourceKind, Role
from ..core.exceptions import NotFoundError, ValidationError
from ..core.logging import get_logger
from ..notifications.service import NotificationService
from .model import Child, ChildNote
from .repository import ChildNoteRepository, ChildRepository

logger = get_logger("children")


@dataclass(frozen=True)
class ChildUpdate:
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    classroom_id: Optional[int] = None
    clear_classroom: bool = False
    allergies: Optional[str] = None
    special_needs: Optional[str] = None
    is_active: Optional[bool] = None


class ChildService:
    def __init__(
        self,
        children: ChildRepository,
        classrooms: ClassroomRepository,
        policy: AuthorizationPolicy,
        notifications: Optional[NotificationService] = None,
    ):
        self._children = children
        self._classrooms = classrooms
        self._policy = policy
        self._notifications = notifications

    def get_existing(self, child_id: int) -> Child:
        child = self._children.get_by_id(int(child_id))
        if not child:
            raise NotFoundError("Child not found")
        return child

    def register_child(
        self,
        principal: Optional[Principal],
        *,
        first_name: str,
        last_name: str,
        date_of_birth: date,
        gender: str,
        parent_id: Optional[int] = None,
        allergies: Optional[str] = None,
        special_needs: Optional[str] = None,
        today: Optional[date] = None,
    ) -> Child:
        decision = self._policy.require(principal, ResourceKind.CHILD, Action.CREATE)
        # Parents always register for themselves; the scope pins the owner.
        owner_id = decision.scope.value if decision.scope else parent_id
        if not owner_id:
            raise ValidationError("parent_id is required")

        today = today or date.today()
        first_name = require_non_empty(first_name, "First name")
        last_name = require_non_empty(last_name, "Last name")
        if date_of_birth > today:
            raise ValidationError("Date of birth cannot be in the future")

        child_id = self._children.create(
            first_name=first_name,
            last_name=last_name,
            date_of_birth=date_of_birth,
            gender=parse_enum(Gender, gender, "gender"),
            parent_id=int(owner_id),
            enrollment_date=today,
            allergies=(allergies or "").strip() or None,
            special_needs=(special_needs or "").strip() or None,
        )
        logger.info("child %s registered for parent %s", child_id, owner_id)

        if self._notifications:
            self._notifications.notify_role(
                Role.ADMIN,
                type=NotificationType.SYSTEM,
                title="New Child Registration",
                message=f"{principal.full_name or 'A parent'} registered a new child: {first_name} {last_name}",
                related_entity="child",
                related_id=child_id,
            )
        return self.get_existing(child_id)

    def list_children(self, principal: Optional[Principal], *, active_only: bool = False) -> Sequence[Child]:
        decision = self._policy.require(principal, ResourceKind.CHILD, Action.LIST)
        return self._children.list(active_only=active_only, **decision.scope_kwargs())

    def get_child(self, principal: Optional[Principal], child_id: int) -> Child:
        child = self.get_existing(child_id)
        self._policy.require(principal, ResourceKind.CHILD, Action.READ, child)
        return child

    def update_child(self, principal: Optional[Principal], child_id: int, changes: ChildUpdate) -> Child:
        child = self.get_existing(child_id)
        self._policy.require(principal, ResourceKind.CHILD, Action.UPDATE, child)

        classroom_id = child.classroom_id
        if changes.clear_classroom:
            classroom_id = None
        elif changes.classroom_id is not None and changes.classroom_id != child.classroom_id:
            classroom = self._classrooms.get_by_id(int(changes.classroom_id))
            if not classroom:
                raise NotFoundError("Classroom not found")
            if not classroom.has_capacity():
                raise ValidationError(f"Classroom '{classroom.name}' is at full capacity")
            classroom_id = classroom.classroom_id

        self._children.update(
            child_id=child.child_id,
            first_name=require_non_empty(changes.first_name, "First name") if changes.first_name is not None else child.first_name,
            last_name=require_non_empty(changes.last_name, "Last name") if changes.last_name is not None else child.last_name,
            classroom_id=classroom_id,
            allergies=changes.allergies if changes.allergies is not None else child.allergies,
            special_needs=changes.special_needs if changes.special_needs is not None else child.special_needs,
            is_active=changes.is_active if changes.is_active is not None else child.is_active,
        )
        return self.get_existing(child.child_id)

    def deactivate_child(self, principal: Optional[Principal], child_id: int) -> Child:
        child = self.get_existing(child_id)
        self._policy.require(principal, ResourceKind.CHILD, Action.DELETE, child)
        return self.update_child(principal, child.child_id, ChildUpdate(is_active=False, clear_classroom=True))


def _preview(text: str) -> str:
    if len(text) <= NOTE_PREVIEW_LENGTH:
        return text
    return text[:NOTE_PREVIEW_LENGTH] + "..."


class ChildNoteService:
    """Daily notes written by classroom staff about a child; the parent is notified."""

    def __init__(
        self,
        notes: ChildNoteRepository,
        children: ChildRepository,
        policy: AuthorizationPolicy,
        notifications: Optional[NotificationService] = None,
    ):
        self._notes = notes
        self._children = children
        self._policy = policy
        self._notifications = notifications

    def _get_child(self, child_id: int) -> Child:
        child = self._children.get_by_id(int(child_id))
        if not child:
            raise NotFoundError("Child not found")
        return child

    def add_note(
        self,
        principal: Optional[Principal],
        child_id: int,
        *,
        note: str,
        category: Optional[str] = None,
        mood: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ChildNote:
        child = self._get_child(child_id)
        self._policy.require(principal, ResourceKind.CHILD_NOTE, Action.CREATE, child)

        text = require_non_empty(note, "Note")
        now = now or now_local()
        note_id = self._notes.create(
            child_id=child.child_id,
            author_id=principal.user_id,
            category=(category or "").strip() or DEFAULT_NOTE_CATEGORY,
            note=text,
            mood=parse_enum(Mood, mood, "mood") if mood else None,
            created_at=now,
        )
        logger.info("note %s added for child %s by %s", note_id, child.child_id, principal.user_id)

        if self._notifications:
            self._notifications.notify(
                child.parent_id,
                type=NotificationType.ACTIVITY,
                title="New Daily Note",
                message=f"New note added for {child.first_name}: {_preview(text)}",
                related_entity="child_note",
                related_id=note_id,
                now=now,
            )
        return self._notes.get_by_id(note_id)

    def list_notes(
        self,
        principal: Optional[Principal],
        child_id: int,
        *,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> Sequence[ChildNote]:
        child = self._get_child(child_id)
        self._policy.require(principal, ResourceKind.CHILD_NOTE, Action.READ, child)
        return self._notes.list_for_child(child.child_id, limit=limit)
