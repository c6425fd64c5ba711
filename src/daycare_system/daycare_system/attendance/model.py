from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import minutes_between
from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one child's attendance for one calendar day.

    ``duration_minutes`` is derived from check-in/check-out on every read and is
    never stored on its own.
    """

    attendance_id: int
    child_id: int
    work_date: date
    check_in_time: datetime
    check_out_time: Optional[datetime]
    status: AttendanceStatus
    recorded_by: int
    note: Optional[str] = None
    breakfast: bool = False
    lunch: bool = False
    snack: bool = False
    nap_start: Optional[datetime] = None
    nap_end: Optional[datetime] = None

    @property
    def duration_minutes(self) -> Optional[int]:
        if self.check_out_time is None:
            return None
        return minutes_between(self.check_in_time, self.check_out_time)

    @property
    def nap_minutes(self) -> Optional[int]:
        if self.nap_start is None or self.nap_end is None:
            return None
        return minutes_between(self.nap_start, self.nap_end)

    @property
    def is_checked_out(self) -> bool:
        return self.check_out_time is not None

    def to_dict(self) -> dict:
        return {
            "attendance_id": self.attendance_id,
            "child_id": self.child_id,
            "date": self.work_date.isoformat(),
            "check_in": self.check_in_time.isoformat(),
            "check_out": self.check_out_time.isoformat() if self.check_out_time else None,
            "duration": self.duration_minutes,
            "status": self.status.value,
            "recorded_by": self.recorded_by,
            "notes": self.note,
            "meals": {"breakfast": self.breakfast, "lunch": self.lunch, "snack": self.snack},
            "nap_time": {
                "start": self.nap_start.isoformat() if self.nap_start else None,
                "end": self.nap_end.isoformat() if self.nap_end else None,
                "duration": self.nap_minutes,
            },
        }
