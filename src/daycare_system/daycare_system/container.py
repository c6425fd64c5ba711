from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .activities.mysql_activity_repository import MySQLActivityRepository
from .activities.service import ActivityService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .authorization.policy import AuthorizationPolicy
from .billing.model import RateSchedule
from .billing.mysql_invoice_repository import MySQLInvoiceRepository
from .billing.service import BillingService
from .children.mysql_child_note_repository import MySQLChildNoteRepository
from .children.mysql_child_repository import MySQLChildRepository
from .children.service import ChildNoteService, ChildService
from .classrooms.mysql_classroom_repository import MySQLClassroomRepository
from .classrooms.service import ClassroomService
from .core.constants import DEFAULT_INVOICE_DUE_DAYS
from .database.connection import DBConfig, DatabaseConnection
from .medical_alerts.mysql_medical_alert_repository import MySQLMedicalAlertRepository
from .medical_alerts.service import MedicalAlertService
from .notifications.mysql_notification_repository import MySQLNotificationRepository
from .notifications.service import NotificationService
from .reports.service import ReportService
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    """Services the controllers talk to.

    Repositories are not exposed; tests build a Container from in-memory fakes.
    """

    policy: AuthorizationPolicy
    auth_service: AuthService
    user_service: UserService
    child_service: ChildService
    classroom_service: ClassroomService
    attendance_service: AttendanceService
    billing_service: BillingService
    notification_service: NotificationService
    medical_alert_service: MedicalAlertService
    activity_service: ActivityService
    child_note_service: ChildNoteService
    report_service: ReportService


def build_services(
    *,
    users_repo,
    classrooms_repo,
    children_repo,
    attendance_repo,
    invoices_repo,
    notifications_repo,
    alerts_repo,
    activities_repo,
    child_notes_repo,
    rates: Optional[RateSchedule] = None,
    invoice_due_days: int = DEFAULT_INVOICE_DUE_DAYS,
) -> Container:
    policy = AuthorizationPolicy(classrooms_repo)
    notification_service = NotificationService(notifications_repo, users_repo)

    return Container(
        policy=policy,
        auth_service=AuthService(users_repo),
        user_service=UserService(users_repo, policy),
        child_service=ChildService(children_repo, classrooms_repo, policy, notification_service),
        classroom_service=ClassroomService(classrooms_repo, children_repo, users_repo, policy),
        attendance_service=AttendanceService(attendance_repo, children_repo, policy, notification_service),
        billing_service=BillingService(
            invoices_repo,
            children_repo,
            attendance_repo,
            policy,
            rates=rates,
            notifications=notification_service,
            due_days=invoice_due_days,
        ),
        notification_service=notification_service,
        medical_alert_service=MedicalAlertService(alerts_repo, children_repo, policy, notification_service),
        activity_service=ActivityService(activities_repo, children_repo, policy, notification_service),
        child_note_service=ChildNoteService(child_notes_repo, children_repo, policy, notification_service),
        report_service=ReportService(
            users_repo, children_repo, attendance_repo, invoices_repo, activities_repo, policy
        ),
    )


def build_container(
    *,
    db_config: dict,
    rates: Optional[RateSchedule] = None,
    invoice_due_days: int = DEFAULT_INVOICE_DUE_DAYS,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return build_services(
        users_repo=MySQLUserRepository(conn),
        classrooms_repo=MySQLClassroomRepository(conn),
        children_repo=MySQLChildRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        invoices_repo=MySQLInvoiceRepository(conn),
        notifications_repo=MySQLNotificationRepository(conn),
        alerts_repo=MySQLMedicalAlertRepository(conn),
        activities_repo=MySQLActivityRepository(conn),
        child_notes_repo=MySQLChildNoteRepository(conn),
        rates=rates,
        invoice_due_days=invoice_due_days,
    )
