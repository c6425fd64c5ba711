from __future__ import annotations

from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Optional

from ..activities.repository import ActivityRepository
from ..attendance.repository import AttendanceRepository
from ..authorization.model import Principal
from ..authorization.policy import AuthorizationPolicy
from ..billing.invoicing import round_money, validate_period
from ..billing.repository import InvoiceRepository
from ..children.repository import ChildRepository
from ..common.datetime_utils import now_local
from ..common.validators import parse_enum
from ..core.enums import Action, AttendanceStatus, InvoiceStatus, ResourceKind, ReportType, Role
from ..core.logging import get_logger
from ..users.repository import UserRepository

logger = get_logger("reports")


class ReportService:
    """Dashboard counters and period reports built from the other repositories.

    Employees see figures for their own classroom only; money figures are for
    administrators.
    """

    def __init__(
        self,
        users: UserRepository,
        children: ChildRepository,
        attendance: AttendanceRepository,
        invoices: InvoiceRepository,
        activities: ActivityRepository,
        policy: AuthorizationPolicy,
    ):
        self._users = users
        self._children = children
        self._attendance = attendance
        self._invoices = invoices
        self._activities = activities
        self._policy = policy

    def _active_users(self, role: Role) -> int:
        return sum(1 for u in self._users.list_all(role=role) if u.is_active)

    def dashboard_stats(self, principal: Optional[Principal], *, today: Optional[date] = None) -> dict:
        scope = self._policy.scope_for(principal, ResourceKind.REPORT, Action.READ)
        filters = scope.as_kwargs() if scope is not None else {}
        today = today or now_local().date()

        stats = {
            "total_children": len(self._children.list(active_only=True, **filters)),
            "today_attendance": sum(
                1
                for r in self._attendance.list_for_date(today, **filters)
                if r.status == AttendanceStatus.PRESENT
            ),
            "today_activities": len(self._activities.list(start_date=today, end_date=today, **filters)),
        }
        if scope is None:
            stats.update(
                total_parents=self._active_users(Role.PARENT),
                total_employees=self._active_users(Role.EMPLOYEE),
                pending_payments=len(self._invoices.list(status=InvoiceStatus.PENDING)),
            )
        return stats

    def generate_report(
        self,
        principal: Optional[Principal],
        report_type: str,
        *,
        start: date,
        end: date,
    ) -> list[dict]:
        kind = parse_enum(ReportType, report_type, "report type")
        scope = self._policy.scope_for(principal, ResourceKind.REPORT, Action.READ)
        filters = scope.as_kwargs() if scope is not None else {}
        validate_period(start, end)
        logger.info("%s report %s..%s for user %s", kind.value, start, end, principal.user_id)

        if kind == ReportType.ATTENDANCE:
            return self._attendance_report(start, end, filters)
        if kind == ReportType.PAYMENTS:
            self._policy.require(principal, ResourceKind.PAYMENT, Action.LIST)
            return self._payments_report(start, end)
        return self._activities_report(start, end, filters)

    def _attendance_report(self, start: date, end: date, filters: dict) -> list[dict]:
        rows = []
        for child in self._children.list(**filters):
            records = [
                r
                for r in self._attendance.find(child_id=child.child_id, start_date=start, end_date=end)
                if r.status == AttendanceStatus.PRESENT
            ]
            if not records:
                continue
            durations = [r.duration_minutes for r in records if r.duration_minutes is not None]
            rows.append(
                {
                    "child_id": child.child_id,
                    "child_name": child.full_name,
                    "total_days": len(records),
                    "average_duration": round(sum(durations) / len(durations)) if durations else None,
                }
            )
        return rows

    def _payments_report(self, start: date, end: date) -> list[dict]:
        totals: dict[InvoiceStatus, list] = defaultdict(lambda: [0, Decimal("0")])
        for invoice in self._invoices.list(period_start=start, period_end=end):
            bucket = totals[invoice.status]
            bucket[0] += 1
            bucket[1] += invoice.total_amount
        return [
            {"status": status.value, "count": count, "total_amount": str(round_money(amount))}
            for status, (count, amount) in sorted(totals.items(), key=lambda kv: kv[0].value)
        ]

    def _activities_report(self, start: date, end: date, filters: dict) -> list[dict]:
        totals: dict = defaultdict(lambda: {"count": 0, "total_participants": 0})
        for activity in self._activities.list(start_date=start, end_date=end, **filters):
            bucket = totals[activity.type.value]
            bucket["count"] += 1
            bucket["total_participants"] += len(activity.participants)
        return [{"type": t, **totals[t]} for t in sorted(totals)]
