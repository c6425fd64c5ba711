from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import ActivityStatus, ActivityType, Mood
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Activity, ActivityParticipant
from .repository import ActivityRepository

_COLUMNS = """
    a.activity_id, a.title, a.description, a.type, a.classroom_id, a.conducted_by, a.activity_date,
    a.start_time, a.end_time, a.status, a.materials, a.learning_objectives, a.created_at
"""


def _split_lines(value: Optional[str]) -> tuple[str, ...]:
    return tuple(line for line in (value or "").splitlines() if line.strip())


def _join_lines(values: Sequence[str]) -> Optional[str]:
    return "\n".join(values) or None


def _to_participant(r: dict) -> ActivityParticipant:
    return ActivityParticipant(
        child_id=int(r["child_id"]),
        observations=r.get("observations"),
        mood=Mood(r["mood"]) if r.get("mood") else None,
    )


def _to_activity(r: dict, participants: Sequence[ActivityParticipant]) -> Activity:
    return Activity(
        activity_id=int(r["activity_id"]),
        title=r["title"],
        type=ActivityType(r["type"]),
        conducted_by=int(r["conducted_by"]),
        activity_date=r["activity_date"],
        classroom_id=int(r["classroom_id"]) if r.get("classroom_id") else None,
        description=r.get("description"),
        start_time=r.get("start_time"),
        end_time=r.get("end_time"),
        status=ActivityStatus(r["status"]),
        materials=_split_lines(r.get("materials")),
        learning_objectives=_split_lines(r.get("learning_objectives")),
        participants=tuple(participants),
        created_at=r.get("created_at"),
    )


class MySQLActivityRepository(ActivityRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _load_participants(self, cur, activity_ids: Sequence[int]) -> dict[int, list[ActivityParticipant]]:
        by_activity: dict[int, list[ActivityParticipant]] = defaultdict(list)
        if not activity_ids:
            return by_activity
        cur.execute(
            f"""
            SELECT activity_id, child_id, observations, mood
            FROM activity_participants
            WHERE activity_id IN ({in_clause(activity_ids)})
            ORDER BY activity_id, child_id
            """,
            tuple(activity_ids),
        )
        for r in fetchall(cur):
            by_activity[int(r["activity_id"])].append(_to_participant(r))
        return by_activity

    def get_by_id(self, activity_id: int) -> Optional[Activity]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM activities a WHERE a.activity_id=%s", (int(activity_id),))
            r = fetchone(cur)
            if not r:
                return None
            participants = self._load_participants(cur, [int(r["activity_id"])])
            return _to_activity(r, participants[int(r["activity_id"])])

    def list(
        self,
        *,
        classroom_id: Optional[int] = None,
        parent_id: Optional[int] = None,
        child_id: Optional[int] = None,
        conducted_by: Optional[int] = None,
        type: Optional[ActivityType] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        limit: Optional[int] = None,
    ) -> Sequence[Activity]:
        clauses = ["1=1"]
        params: list[object] = []
        if classroom_id is not None:
            clauses.append("a.classroom_id=%s")
            params.append(int(classroom_id))
        if conducted_by is not None:
            clauses.append("a.conducted_by=%s")
            params.append(int(conducted_by))
        if type is not None:
            clauses.append("a.type=%s")
            params.append(type.value)
        if start_date is not None:
            clauses.append("a.activity_date >= %s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("a.activity_date <= %s")
            params.append(end_date)
        if child_id is not None:
            clauses.append(
                "EXISTS (SELECT 1 FROM activity_participants ap WHERE ap.activity_id = a.activity_id AND ap.child_id=%s)"
            )
            params.append(int(child_id))
        if parent_id is not None:
            clauses.append(
                """
                EXISTS (
                    SELECT 1 FROM activity_participants ap
                    JOIN children c ON c.child_id = ap.child_id
                    WHERE ap.activity_id = a.activity_id AND c.parent_id=%s
                )
                """
            )
            params.append(int(parent_id))

        sql = f"""
            SELECT {_COLUMNS}
            FROM activities a
            WHERE {' AND '.join(clauses)}
            ORDER BY a.activity_date DESC, a.activity_id DESC
        """
        if limit is not None:
            sql += " LIMIT %s"
            params.append(int(limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            rows = fetchall(cur)
            participants = self._load_participants(cur, [int(r["activity_id"]) for r in rows])
            return [_to_activity(r, participants[int(r["activity_id"])]) for r in rows]

    def create(
        self,
        *,
        title: str,
        type: ActivityType,
        conducted_by: int,
        activity_date: date,
        classroom_id: Optional[int],
        description: Optional[str],
        start_time: Optional[datetime],
        end_time: Optional[datetime],
        status: ActivityStatus,
        materials: Sequence[str],
        learning_objectives: Sequence[str],
        participants: Sequence[ActivityParticipant],
        created_at: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO activities(
                    title, description, type, classroom_id, conducted_by, activity_date,
                    start_time, end_time, status, materials, learning_objectives, created_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    title,
                    description,
                    type.value,
                    classroom_id,
                    conducted_by,
                    activity_date,
                    start_time,
                    end_time,
                    status.value,
                    _join_lines(materials),
                    _join_lines(learning_objectives),
                    created_at,
                ),
            )
            activity_id = int(cur.lastrowid)
            if participants:
                cur.executemany(
                    """
                    INSERT INTO activity_participants(activity_id, child_id, observations, mood)
                    VALUES(%s,%s,%s,%s)
                    """,
                    [
                        (activity_id, p.child_id, p.observations, p.mood.value if p.mood else None)
                        for p in participants
                    ],
                )
            return activity_id

    def update(
        self,
        *,
        activity_id: int,
        title: str,
        type: ActivityType,
        description: Optional[str],
        start_time: Optional[datetime],
        end_time: Optional[datetime],
        status: ActivityStatus,
        materials: Sequence[str],
        learning_objectives: Sequence[str],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE activities
                SET title=%s, type=%s, description=%s, start_time=%s, end_time=%s, status=%s,
                    materials=%s, learning_objectives=%s
                WHERE activity_id=%s
                """,
                (
                    title,
                    type.value,
                    description,
                    start_time,
                    end_time,
                    status.value,
                    _join_lines(materials),
                    _join_lines(learning_objectives),
                    int(activity_id),
                ),
            )
            return cur.rowcount > 0

    def delete(self, activity_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            # activity_participants rows go with it (ON DELETE CASCADE)
            cur.execute("DELETE FROM activities WHERE activity_id=%s", (int(activity_id),))
            return cur.rowcount > 0

    def save_observation(
        self,
        *,
        activity_id: int,
        child_id: int,
        observations: Optional[str],
        mood: Optional[Mood],
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO activity_participants(activity_id, child_id, observations, mood)
                VALUES(%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE observations=VALUES(observations), mood=VALUES(mood)
                """,
                (int(activity_id), int(child_id), observations, mood.value if mood else None),
            )
