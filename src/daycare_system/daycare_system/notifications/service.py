from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Sequence

from ..authorization.model import Principal
from ..common.datetime_utils import now_local
from ..core.enums import NotificationPriority, NotificationType, Role
from ..core.exceptions import AuthenticationError
from ..core.logging import get_logger
from ..users.repository import UserRepository
from .model import Notification
from .repository import NotificationRepository

logger = get_logger("notifications")


class NotificationService:
    """Use case: create per-user notifications and let users read their own."""

    def __init__(self, notifications: NotificationRepository, users: Optional[UserRepository] = None):
        self._notifications = notifications
        self._users = users

    def notify(
        self,
        user_id: int,
        *,
        type: NotificationType,
        title: str,
        message: str,
        priority: NotificationPriority = NotificationPriority.MEDIUM,
        related_entity: Optional[str] = None,
        related_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> int:
        return self._notifications.create(
            user_id=int(user_id),
            type=type,
            title=title,
            message=message,
            priority=priority,
            created_at=now or now_local(),
            related_entity=related_entity,
            related_id=related_id,
        )

    def notify_many(self, user_ids: Iterable[int], **kwargs) -> list[int]:
        # Same recipient twice gets a single notification
        unique_ids = list(dict.fromkeys(int(u) for u in user_ids))
        return [self.notify(uid, **kwargs) for uid in unique_ids]

    def notify_role(self, role: Role, **kwargs) -> list[int]:
        if not self._users:
            return []
        recipients = [u.user_id for u in self._users.list_all(role=role) if u.is_active]
        logger.debug("notifying %d %s user(s): %s", len(recipients), role.value, kwargs.get("title"))
        return self.notify_many(recipients, **kwargs)

    @staticmethod
    def _require_principal(principal: Optional[Principal]) -> Principal:
        if principal is None:
            raise AuthenticationError("Not authorized to access this route")
        return principal

    def list_mine(self, principal: Optional[Principal], *, unread_only: bool = False, limit: int = 50) -> Sequence[Notification]:
        principal = self._require_principal(principal)
        return self._notifications.list_for_user(principal.user_id, unread_only=unread_only, limit=limit)

    def unread_count(self, principal: Optional[Principal]) -> int:
        principal = self._require_principal(principal)
        return self._notifications.count_unread(principal.user_id)

    def mark_read(self, principal: Optional[Principal], notification_ids: Sequence[int]) -> int:
        principal = self._require_principal(principal)
        return self._notifications.mark_read(user_id=principal.user_id, notification_ids=notification_ids)
