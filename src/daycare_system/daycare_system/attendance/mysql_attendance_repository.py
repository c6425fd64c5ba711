from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from mysql.connector import errors as mysql_errors

from ..core.enums import AttendanceStatus
from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    ar.attendance_id, ar.child_id, ar.work_date, ar.check_in_time, ar.check_out_time, ar.status,
    ar.recorded_by, ar.note, ar.breakfast, ar.lunch, ar.snack, ar.nap_start, ar.nap_end
"""


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        child_id=int(r["child_id"]),
        work_date=r["work_date"],
        check_in_time=r["check_in_time"],
        check_out_time=r.get("check_out_time"),
        status=AttendanceStatus(r["status"]),
        recorded_by=int(r["recorded_by"]),
        note=r.get("note"),
        breakfast=bool(r.get("breakfast")),
        lunch=bool(r.get("lunch")),
        snack=bool(r.get("snack")),
        nap_start=r.get("nap_start"),
        nap_end=r.get("nap_end"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records ar WHERE ar.attendance_id=%s", (attendance_id,))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_for_child_and_date(self, child_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records ar WHERE ar.child_id=%s AND ar.work_date=%s",
                (child_id, work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_recent_for_child(self, child_id: int, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records ar
                WHERE ar.child_id=%s
                ORDER BY ar.work_date DESC
                LIMIT %s
                """,
                (child_id, int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def find(
        self,
        *,
        child_id: int,
        start_date: date,
        end_date: date,
        status: Optional[AttendanceStatus] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["ar.child_id=%s", "ar.work_date BETWEEN %s AND %s"]
        params: list[object] = [int(child_id), start_date, end_date]
        if status is not None:
            clauses.append("ar.status=%s")
            params.append(status.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records ar
                WHERE {' AND '.join(clauses)}
                ORDER BY ar.work_date ASC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_date(
        self,
        work_date: date,
        *,
        classroom_id: Optional[int] = None,
        parent_id: Optional[int] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["ar.work_date=%s"]
        params: list[object] = [work_date]
        if classroom_id is not None:
            clauses.append("c.classroom_id=%s")
            params.append(int(classroom_id))
        if parent_id is not None:
            clauses.append("c.parent_id=%s")
            params.append(int(parent_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records ar
                JOIN children c ON c.child_id = ar.child_id
                WHERE {' AND '.join(clauses)}
                ORDER BY ar.check_in_time DESC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

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
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(child_id, work_date, check_in_time, status, recorded_by, note)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (child_id, work_date, check_in_time, status.value, recorded_by, note),
                )
                return int(cur.lastrowid)
        except mysql_errors.IntegrityError:
            # uq_attendance_child_date: a concurrent check-in won
            raise ValidationError("Child is already checked in today")

    def update_checkout(self, *, attendance_id: int, check_out_time: datetime, note: Optional[str] = None) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out_time=%s, note=%s
                WHERE attendance_id=%s AND check_out_time IS NULL
                """,
                (check_out_time, note, attendance_id),
            )
            return cur.rowcount > 0

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET status=%s, note=%s, breakfast=%s, lunch=%s, snack=%s, nap_start=%s, nap_end=%s
                WHERE attendance_id=%s
                """,
                (status.value, note, int(breakfast), int(lunch), int(snack), nap_start, nap_end, int(attendance_id)),
            )
            return cur.rowcount > 0
