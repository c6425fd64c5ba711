from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import NotificationPriority, NotificationType


@dataclass(frozen=True)
class Notification:
    notification_id: int
    user_id: int
    type: NotificationType
    title: str
    message: str
    priority: NotificationPriority
    created_at: datetime
    related_entity: Optional[str] = None
    related_id: Optional[int] = None
    is_read: bool = False

    def to_dict(self) -> dict:
        return {
            "notification_id": self.notification_id,
            "type": self.type.value,
            "title": self.title,
            "message": self.message,
            "priority": self.priority.value,
            "related_entity": self.related_entity,
            "related_id": self.related_id,
            "is_read": self.is_read,
            "created_at": self.created_at.isoformat(),
        }
