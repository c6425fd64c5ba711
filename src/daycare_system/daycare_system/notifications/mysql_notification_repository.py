from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import NotificationPriority, NotificationType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Notification
from .repository import NotificationRepository


class MySQLNotificationRepository(NotificationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        user_id: int,
        type: NotificationType,
        title: str,
        message: str,
        priority: NotificationPriority,
        created_at: datetime,
        related_entity: Optional[str] = None,
        related_id: Optional[int] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO notifications(user_id, type, title, message, priority, related_entity, related_id, created_at)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (user_id, type.value, title, message, priority.value, related_entity, related_id, created_at),
            )
            return int(cur.lastrowid)

    def list_for_user(self, user_id: int, *, unread_only: bool = False, limit: int = 50) -> Sequence[Notification]:
        where = "user_id=%s AND is_read=0" if unread_only else "user_id=%s"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT notification_id, user_id, type, title, message, priority,
                       related_entity, related_id, is_read, created_at
                FROM notifications
                WHERE {where}
                ORDER BY created_at DESC, notification_id DESC
                LIMIT %s
                """,
                (user_id, int(limit)),
            )
            return [
                Notification(
                    notification_id=int(r["notification_id"]),
                    user_id=int(r["user_id"]),
                    type=NotificationType(r["type"]),
                    title=r["title"],
                    message=r["message"],
                    priority=NotificationPriority(r["priority"]),
                    created_at=r["created_at"],
                    related_entity=r.get("related_entity"),
                    related_id=r.get("related_id"),
                    is_read=bool(r.get("is_read")),
                )
                for r in fetchall(cur)
            ]

    def count_unread(self, user_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM notifications WHERE user_id=%s AND is_read=0", (user_id,))
            row = fetchone(cur)
            return int(row["n"]) if row else 0

    def mark_read(self, *, user_id: int, notification_ids: Sequence[int]) -> int:
        ids = [int(i) for i in notification_ids]
        if not ids:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE notifications SET is_read=1 WHERE user_id=%s AND notification_id IN ({in_clause(ids)})",
                (user_id, *ids),
            )
            return cur.rowcount
