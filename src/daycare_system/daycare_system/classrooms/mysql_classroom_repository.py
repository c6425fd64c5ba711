from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Classroom
from .repository import ClassroomRepository

_COLUMNS = "classroom_id, name, capacity, min_age_months, max_age_months, assigned_teacher_id, is_active"


class MySQLClassroomRepository(ClassroomRepository):
    """Classrooms; the roster is read from ``children.classroom_id``."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _hydrate(self, cur, rows: list[dict]) -> list[Classroom]:
        if not rows:
            return []
        ids = [int(r["classroom_id"]) for r in rows]
        cur.execute(
            f"""
            SELECT classroom_id, child_id
            FROM children
            WHERE is_active=1 AND classroom_id IN ({in_clause(ids)})
            """,
            tuple(ids),
        )
        roster: dict[int, set[int]] = {cid: set() for cid in ids}
        for r in fetchall(cur):
            roster[int(r["classroom_id"])].add(int(r["child_id"]))

        return [
            Classroom(
                classroom_id=int(r["classroom_id"]),
                name=r["name"],
                capacity=int(r["capacity"]),
                min_age_months=int(r["min_age_months"]),
                max_age_months=int(r["max_age_months"]),
                assigned_teacher_id=int(r["assigned_teacher_id"]) if r.get("assigned_teacher_id") else None,
                child_ids=frozenset(roster[int(r["classroom_id"])]),
                is_active=bool(r.get("is_active", True)),
            )
            for r in rows
        ]

    def get_by_id(self, classroom_id: int) -> Optional[Classroom]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM classrooms WHERE classroom_id=%s", (classroom_id,))
            row = fetchone(cur)
            items = self._hydrate(cur, [row] if row else [])
            return items[0] if items else None

    def get_by_teacher(self, teacher_id: int) -> Optional[Classroom]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM classrooms WHERE assigned_teacher_id=%s AND is_active=1 ORDER BY classroom_id LIMIT 1",
                (teacher_id,),
            )
            row = fetchone(cur)
            items = self._hydrate(cur, [row] if row else [])
            return items[0] if items else None

    def list_all(self, *, assigned_teacher_id: Optional[int] = None) -> Sequence[Classroom]:
        with db_cursor(self._conn_factory) as (_, cur):
            if assigned_teacher_id is None:
                cur.execute(f"SELECT {_COLUMNS} FROM classrooms ORDER BY name")
            else:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM classrooms WHERE assigned_teacher_id=%s ORDER BY name",
                    (int(assigned_teacher_id),),
                )
            return self._hydrate(cur, fetchall(cur))

    def create(
        self,
        *,
        name: str,
        capacity: int,
        min_age_months: int,
        max_age_months: int,
        assigned_teacher_id: Optional[int],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO classrooms(name, capacity, min_age_months, max_age_months, assigned_teacher_id)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (name, capacity, min_age_months, max_age_months, assigned_teacher_id),
            )
            return int(cur.lastrowid)

    def assign_teacher(self, *, classroom_id: int, teacher_id: Optional[int]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE classrooms SET assigned_teacher_id=%s WHERE classroom_id=%s",
                (teacher_id, classroom_id),
            )
            return cur.rowcount > 0
