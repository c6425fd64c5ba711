from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import AlertSeverity, AlertType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import MedicalAlert
from .repository import MedicalAlertRepository

_COLUMNS = """
    ma.alert_id, ma.child_id, ma.type, ma.severity, ma.description, ma.treatment, ma.reported_by,
    ma.reported_at, ma.is_resolved, ma.resolved_by, ma.resolved_at, ma.notes
"""


def _to_alert(r: dict) -> MedicalAlert:
    return MedicalAlert(
        alert_id=int(r["alert_id"]),
        child_id=int(r["child_id"]),
        type=AlertType(r["type"]),
        severity=AlertSeverity(r["severity"]),
        description=r["description"],
        reported_by=int(r["reported_by"]),
        reported_at=r["reported_at"],
        treatment=r.get("treatment"),
        is_resolved=bool(r.get("is_resolved")),
        resolved_by=int(r["resolved_by"]) if r.get("resolved_by") is not None else None,
        resolved_at=r.get("resolved_at"),
        notes=r.get("notes"),
    )


class MySQLMedicalAlertRepository(MedicalAlertRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, alert_id: int) -> Optional[MedicalAlert]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM medical_alerts ma WHERE ma.alert_id=%s", (int(alert_id),))
            r = fetchone(cur)
            return _to_alert(r) if r else None

    def create(
        self,
        *,
        child_id: int,
        type: AlertType,
        severity: AlertSeverity,
        description: str,
        treatment: Optional[str],
        reported_by: int,
        reported_at: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO medical_alerts(child_id, type, severity, description, treatment, reported_by, reported_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (child_id, type.value, severity.value, description, treatment, reported_by, reported_at),
            )
            return int(cur.lastrowid)

    def list(
        self,
        *,
        child_id: Optional[int] = None,
        parent_id: Optional[int] = None,
        classroom_id: Optional[int] = None,
        unresolved_only: bool = False,
    ) -> Sequence[MedicalAlert]:
        clauses = ["1=1"]
        params: list[object] = []
        if child_id is not None:
            clauses.append("ma.child_id=%s")
            params.append(int(child_id))
        if parent_id is not None:
            clauses.append("c.parent_id=%s")
            params.append(int(parent_id))
        if classroom_id is not None:
            clauses.append("c.classroom_id=%s")
            params.append(int(classroom_id))
        if unresolved_only:
            clauses.append("ma.is_resolved=0")

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM medical_alerts ma
                JOIN children c ON c.child_id = ma.child_id
                WHERE {' AND '.join(clauses)}
                ORDER BY ma.reported_at DESC
                """,
                tuple(params),
            )
            return [_to_alert(r) for r in fetchall(cur)]

    def resolve(self, *, alert_id: int, resolved_by: int, resolved_at: datetime, notes: Optional[str]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE medical_alerts
                SET is_resolved=1, resolved_by=%s, resolved_at=%s, notes=%s
                WHERE alert_id=%s AND is_resolved=0
                """,
                (resolved_by, resolved_at, notes, int(alert_id)),
            )
            return cur.rowcount > 0
