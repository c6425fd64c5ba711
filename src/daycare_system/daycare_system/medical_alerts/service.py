from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..authorization.model import Principal
from ..authorization.policy import AuthorizationPolicy
from ..children.model import Child
from ..children.repository import ChildRepository
from ..common.datetime_utils import now_local
from ..common.validators import parse_enum, require_non_empty
from ..core.enums import (
    Action,
    AlertSeverity,
    AlertType,
    NotificationPriority,
    NotificationType,
    ResourceKind,
    Role,
)
from ..core.exceptions import NotFoundError, ValidationError
from ..core.logging import get_logger
from ..notifications.service import NotificationService
from .model import MedicalAlert
from .repository import MedicalAlertRepository

logger = get_logger("medical_alerts")


class MedicalAlertService:
    def __init__(
        self,
        alerts: MedicalAlertRepository,
        children: ChildRepository,
        policy: AuthorizationPolicy,
        notifications: Optional[NotificationService] = None,
    ):
        self._alerts = alerts
        self._children = children
        self._policy = policy
        self._notifications = notifications

    def _get_child(self, child_id: int) -> Child:
        child = self._children.get_by_id(int(child_id))
        if not child:
            raise NotFoundError("Child not found")
        return child

    def _get_existing(self, alert_id: int) -> MedicalAlert:
        alert = self._alerts.get_by_id(int(alert_id))
        if not alert:
            raise NotFoundError("Medical alert not found")
        return alert

    def report_alert(
        self,
        principal: Optional[Principal],
        child_id: int,
        *,
        type: str,
        severity: str,
        description: str,
        treatment: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> MedicalAlert:
        self._policy.require_role(principal, Role.EMPLOYEE, Role.ADMIN)
        child = self._get_child(child_id)
        self._policy.require(principal, ResourceKind.MEDICAL_ALERT, Action.CREATE, child)

        alert_type = parse_enum(AlertType, type, "alert type")
        alert_severity = parse_enum(AlertSeverity, severity, "severity")
        description = require_non_empty(description, "Description")
        now = now or now_local()

        alert_id = self._alerts.create(
            child_id=child.child_id,
            type=alert_type,
            severity=alert_severity,
            description=description,
            treatment=(treatment or "").strip() or None,
            reported_by=principal.user_id,
            reported_at=now,
        )
        logger.info("medical alert %s (%s) reported for child %s", alert_id, alert_severity.value, child.child_id)

        if self._notifications:
            critical = alert_severity == AlertSeverity.CRITICAL
            self._notifications.notify(
                child.parent_id,
                type=NotificationType.MEDICAL,
                title="Medical Alert",
                message=f"Medical alert for {child.full_name}: {description}",
                priority=NotificationPriority.HIGH if critical else NotificationPriority.MEDIUM,
                related_entity="medical_alert",
                related_id=alert_id,
                now=now,
            )
        return self._get_existing(alert_id)

    def list_alerts(
        self,
        principal: Optional[Principal],
        *,
        child_id: Optional[int] = None,
        unresolved_only: bool = False,
    ) -> Sequence[MedicalAlert]:
        if child_id is not None:
            child = self._get_child(child_id)
            self._policy.require(principal, ResourceKind.MEDICAL_ALERT, Action.READ, child)
            return self._alerts.list(child_id=child.child_id, unresolved_only=unresolved_only)

        decision = self._policy.require(principal, ResourceKind.MEDICAL_ALERT, Action.LIST)
        return self._alerts.list(unresolved_only=unresolved_only, **decision.scope_kwargs())

    def resolve_alert(
        self,
        principal: Optional[Principal],
        alert_id: int,
        *,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> MedicalAlert:
        alert = self._get_existing(alert_id)
        child = self._get_child(alert.child_id)
        self._policy.require(principal, ResourceKind.MEDICAL_ALERT, Action.UPDATE, child)

        if alert.is_resolved:
            raise ValidationError("Medical alert is already resolved")

        if not self._alerts.resolve(
            alert_id=alert.alert_id,
            resolved_by=principal.user_id,
            resolved_at=now or now_local(),
            notes=(notes or "").strip() or None,
        ):
            raise ValidationError("Medical alert is already resolved")
        logger.info("medical alert %s resolved by %s", alert.alert_id, principal.user_id)
        return self._get_existing(alert.alert_id)
