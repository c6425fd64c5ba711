from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_child_and_date(self, child_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_recent_for_child(self, child_id: int, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def find(
        self,
        *,
        child_id: int,
        start_date: date,
        end_date: date,
        status: Optional[AttendanceStatus] = None,
    ) -> Sequence[AttendanceRecord]:
        """Records of one child with ``start_date <= work_date <= end_date``."""

        raise NotImplementedError

    def list_for_date(
        self,
        work_date: date,
        *,
        classroom_id: Optional[int] = None,
        parent_id: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def create_checkin(
        self,
        *,
        child_id: int,
        work_date: date,
        check_in_time: datetime,
        recorded_by: int,
        status: AttendanceStatus = AttendanceStatus.PRESENT,
        note: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def update_checkout(self, *, attendance_id: int, check_out_time: datetime, note: Optional[str] = None) -> bool:
        raise NotImplementedError

    def update_details(
        self,
        *,
        attendance_id: int,
        status: AttendanceStatus,
        note: Optional[str],
        breakfast: bool,
        lunch: bool,
        snack: bool,
        nap_start: Optional[datetime],
        nap_end: Optional[datetime],
    ) -> bool:
        raise NotImplementedError
