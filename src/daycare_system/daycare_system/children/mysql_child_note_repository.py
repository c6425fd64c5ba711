from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import Mood
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import ChildNote
from .repository import ChildNoteRepository

_COLUMNS = "note_id, child_id, author_id, category, note, mood, created_at"


def _to_note(r: dict) -> ChildNote:
    return ChildNote(
        note_id=int(r["note_id"]),
        child_id=int(r["child_id"]),
        author_id=int(r["author_id"]),
        category=r["category"],
        note=r["note"],
        created_at=r["created_at"],
        mood=Mood(r["mood"]) if r.get("mood") else None,
    )


class MySQLChildNoteRepository(ChildNoteRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        child_id: int,
        author_id: int,
        category: str,
        note: str,
        mood: Optional[Mood],
        created_at: datetime,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO child_notes(child_id, author_id, category, note, mood, created_at)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (child_id, author_id, category, note, mood.value if mood else None, created_at),
            )
            return int(cur.lastrowid)

    def get_by_id(self, note_id: int) -> Optional[ChildNote]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM child_notes WHERE note_id=%s", (int(note_id),))
            r = fetchone(cur)
            return _to_note(r) if r else None

    def list_for_child(self, child_id: int, *, limit: int) -> Sequence[ChildNote]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM child_notes
                WHERE child_id=%s
                ORDER BY created_at DESC, note_id DESC
                LIMIT %s
                """,
                (int(child_id), int(limit)),
            )
            return [_to_note(r) for r in fetchall(cur)]
