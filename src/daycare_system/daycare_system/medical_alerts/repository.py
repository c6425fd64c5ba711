from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AlertSeverity, AlertType
from .model import MedicalAlert


class MedicalAlertRepository(Protocol):
    def get_by_id(self, alert_id: int) -> Optional[MedicalAlert]:
        raise NotImplementedError

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
        raise NotImplementedError

    def list(
        self,
        *,
        child_id: Optional[int] = None,
        parent_id: Optional[int] = None,
        classroom_id: Optional[int] = None,
        unresolved_only: bool = False,
    ) -> Sequence[MedicalAlert]:
        raise NotImplementedError

    def resolve(self, *, alert_id: int, resolved_by: int, resolved_at: datetime, notes: Optional[str]) -> bool:
        raise NotImplementedError
