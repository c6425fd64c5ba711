from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import NotificationPriority, NotificationType
from .model import Notification


class NotificationRepository(Protocol):
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
        raise NotImplementedError

    def list_for_user(self, user_id: int, *, unread_only: bool = False, limit: int = 50) -> Sequence[Notification]:
        raise NotImplementedError

    def count_unread(self, user_id: int) -> int:
        raise NotImplementedError

    def mark_read(self, *, user_id: int, notification_ids: Sequence[int]) -> int:
        """Mark the given notifications read; ids owned by other users are ignored."""

        raise NotImplementedError
