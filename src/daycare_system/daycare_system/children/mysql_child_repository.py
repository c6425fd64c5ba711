from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import Gender
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Child
from .repository import ChildRepository

_COLUMNS = """
    child_id, first_name, last_name, date_of_birth, gender, parent_id, classroom_id,
    allergies, special_needs, is_active, enrollment_date
"""


def _to_child(r: dict) -> Child:
    return Child(
        child_id=int(r["child_id"]),
        first_name=r["first_name"],
        last_name=r["last_name"],
        date_of_birth=r["date_of_birth"],
        gender=Gender(r["gender"]),
        parent_id=int(r["parent_id"]),
        enrollment_date=r["enrollment_date"],
        classroom_id=int(r["classroom_id"]) if r.get("classroom_id") else None,
        allergies=r.get("allergies"),
        special_needs=r.get("special_needs"),
        is_active=bool(r.get("is_active", True)),
    )


class MySQLChildRepository(ChildRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, child_id: int) -> Optional[Child]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM children WHERE child_id=%s", (child_id,))
            row = fetchone(cur)
            return _to_child(row) if row else None

    def list(
        self,
        *,
        parent_id: Optional[int] = None,
        classroom_id: Optional[int] = None,
        active_only: bool = False,
    ) -> Sequence[Child]:
        clauses: list[str] = []
        params: list[object] = []

        if parent_id is not None:
            clauses.append("parent_id=%s")
            params.append(int(parent_id))
        if classroom_id is not None:
            clauses.append("classroom_id=%s")
            params.append(int(classroom_id))
        if active_only:
            clauses.append("is_active=1")

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM children {where} ORDER BY first_name, last_name", tuple(params))
            return [_to_child(r) for r in fetchall(cur)]

    def list_active(self) -> Sequence[Child]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM children WHERE is_active=1 ORDER BY child_id")
            return [_to_child(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        first_name: str,
        last_name: str,
        date_of_birth: date,
        gender: Gender,
        parent_id: int,
        enrollment_date: date,
        allergies: Optional[str] = None,
        special_needs: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO children(first_name, last_name, date_of_birth, gender, parent_id,
                                     enrollment_date, allergies, special_needs)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (first_name, last_name, date_of_birth, gender.value, parent_id, enrollment_date, allergies, special_needs),
            )
            return int(cur.lastrowid)

    def update(
        self,
        *,
        child_id: int,
        first_name: str,
        last_name: str,
        classroom_id: Optional[int],
        allergies: Optional[str],
        special_needs: Optional[str],
        is_active: bool,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE children
                SET first_name=%s, last_name=%s, classroom_id=%s, allergies=%s, special_needs=%s, is_active=%s
                WHERE child_id=%s
                """,
                (first_name, last_name, classroom_id, allergies, special_needs, 1 if is_active else 0, child_id),
            )
            return cur.rowcount > 0
