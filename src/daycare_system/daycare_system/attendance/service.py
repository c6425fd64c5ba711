from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Sequence

from ..authorization.model import Principal
from ..authorization.policy import AuthorizationPolicy
from ..children.model import Child
from ..children.repository import ChildRepository
from ..common.datetime_utils import now_local
from ..common.validators import parse_enum
from ..core.constants import DEFAULT_HISTORY_LIMIT
from ..core.enums import Action, AttendanceStatus, NotificationType, ResourceKind, Role
from ..core.exceptions import NotFoundError, ValidationError
from ..core.logging import get_logger
from ..notifications.service import NotificationService
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = get_logger("attendance")


@dataclass(frozen=True)
class AttendanceDetails:
    """Fields staff may fill in during or after the day."""

    status: Optional[str] = None
    notes: Optional[str] = None
    breakfast: Optional[bool] = None
    lunch: Optional[bool] = None
    snack: Optional[bool] = None
    nap_start: Optional[datetime] = None
    nap_end: Optional[datetime] = None


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        children: ChildRepository,
        policy: AuthorizationPolicy,
        notifications: Optional[NotificationService] = None,
    ):
        self._attendance = attendance
        self._children = children
        self._policy = policy
        self._notifications = notifications

    def _get_child(self, child_id: int) -> Child:
        child = self._children.get_by_id(int(child_id))
        if not child:
            raise NotFoundError("Child not found")
        return child

    def _get_record(self, attendance_id: int) -> AttendanceRecord:
        record = self._attendance.get_by_id(int(attendance_id))
        if not record:
            raise NotFoundError("Attendance record not found")
        return record

    def _notify_parent(self, child: Child, record_id: int, *, title: str, message: str, now: datetime) -> None:
        if not self._notifications:
            return
        self._notifications.notify(
            child.parent_id,
            type=NotificationType.ATTENDANCE,
            title=title,
            message=message,
            related_entity="attendance",
            related_id=record_id,
            now=now,
        )

    def check_in(
        self,
        principal: Optional[Principal],
        child_id: int,
        *,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        self._policy.require_role(principal, Role.EMPLOYEE, Role.ADMIN)
        now = now or now_local()
        today = now.date()

        child = self._get_child(child_id)
        self._policy.require(principal, ResourceKind.ATTENDANCE, Action.CREATE, child)
        if not child.is_active:
            raise ValidationError("Child is not active")

        if self._attendance.get_for_child_and_date(child.child_id, today):
            raise ValidationError("Child is already checked in today")

        record_id = self._attendance.create_checkin(
            child_id=child.child_id,
            work_date=today,
            check_in_time=now,
            recorded_by=principal.user_id,
            note=(notes or "").strip() or None,
        )
        logger.info("child %s checked in by %s", child.child_id, principal.user_id)

        self._notify_parent(
            child,
            record_id,
            title="Child Checked In",
            message=f"{child.full_name} has been checked in at {now.strftime('%H:%M')}",
            now=now,
        )
        return self._get_record(record_id)

    def check_out(
        self,
        principal: Optional[Principal],
        attendance_id: int,
        *,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        self._policy.require_role(principal, Role.EMPLOYEE, Role.ADMIN)
        now = now or now_local()

        record = self._get_record(attendance_id)
        child = self._get_child(record.child_id)
        self._policy.require(principal, ResourceKind.ATTENDANCE, Action.UPDATE, child)

        if record.is_checked_out:
            raise ValidationError("Child is already checked out")
        if now < record.check_in_time:
            raise ValidationError("Check-out time cannot be before check-in time")

        note = (notes or "").strip() or record.note
        if not self._attendance.update_checkout(attendance_id=record.attendance_id, check_out_time=now, note=note):
            raise ValidationError("Child is already checked out")

        updated = self._get_record(record.attendance_id)
        hours = round((updated.duration_minutes or 0) / 60, 2)
        logger.info("child %s checked out by %s after %.2fh", child.child_id, principal.user_id, hours)

        self._notify_parent(
            child,
            updated.attendance_id,
            title="Child Checked Out",
            message=f"{child.full_name} has been checked out at {now.strftime('%H:%M')}. Total hours: {hours:.2f}",
            now=now,
        )
        return updated

    def update_details(
        self,
        principal: Optional[Principal],
        attendance_id: int,
        details: AttendanceDetails,
    ) -> AttendanceRecord:
        record = self._get_record(attendance_id)
        child = self._get_child(record.child_id)
        self._policy.require(principal, ResourceKind.ATTENDANCE, Action.UPDATE, child)

        nap_start = details.nap_start if details.nap_start is not None else record.nap_start
        nap_end = details.nap_end if details.nap_end is not None else record.nap_end
        if nap_start and nap_end and nap_end < nap_start:
            raise ValidationError("Nap end cannot be before nap start")

        self._attendance.update_details(
            attendance_id=record.attendance_id,
            status=parse_enum(AttendanceStatus, details.status, "status") if details.status else record.status,
            note=details.notes if details.notes is not None else record.note,
            breakfast=details.breakfast if details.breakfast is not None else record.breakfast,
            lunch=details.lunch if details.lunch is not None else record.lunch,
            snack=details.snack if details.snack is not None else record.snack,
            nap_start=nap_start,
            nap_end=nap_end,
        )
        return self._get_record(record.attendance_id)

    def list_today(self, principal: Optional[Principal], *, today: Optional[date] = None) -> Sequence[AttendanceRecord]:
        decision = self._policy.require(principal, ResourceKind.ATTENDANCE, Action.LIST)
        return self._attendance.list_for_date(today or now_local().date(), **decision.scope_kwargs())

    def child_history(
        self,
        principal: Optional[Principal],
        child_id: int,
        *,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> Sequence[AttendanceRecord]:
        child = self._get_child(child_id)
        self._policy.require(principal, ResourceKind.ATTENDANCE, Action.READ, child)
        return self._attendance.get_recent_for_child(child.child_id, limit)
