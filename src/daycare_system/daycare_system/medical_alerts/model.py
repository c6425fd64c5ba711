from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import AlertSeverity, AlertType


@dataclass(frozen=True)
class MedicalAlert:
    alert_id: int
    child_id: int
    type: AlertType
    severity: AlertSeverity
    description: str
    reported_by: int
    reported_at: datetime
    treatment: Optional[str] = None
    is_resolved: bool = False
    resolved_by: Optional[int] = None
    resolved_at: Optional[datetime] = None
    notes: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "alert_id": self.alert_id,
            "child_id": self.child_id,
            "type": self.type.value,
            "severity": self.severity.value,
            "description": self.description,
            "treatment": self.treatment,
            "reported_by": self.reported_by,
            "reported_at": self.reported_at.isoformat(),
            "is_resolved": self.is_resolved,
            "resolved_by": self.resolved_by,
            "resolved_at": self.resolved_at.isoformat() if self.resolved_at else None,
            "notes": self.notes,
        }
