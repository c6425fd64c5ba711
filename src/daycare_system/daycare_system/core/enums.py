from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Account role used for authorization."""

    PARENT = "parent"
    EMPLOYEE = "employee"
    ADMIN = "admin"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    SICK = "sick"
    VACATION = "vacation"


class InvoiceStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    BANK_TRANSFER = "bank_transfer"
    CHECK = "check"


class DiscountKind(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class ResourceKind(str, Enum):
    """What a request is about, as seen by the authorization policy."""

    CHILD = "child"
    CLASSROOM = "classroom"
    ATTENDANCE = "attendance"
    PAYMENT = "payment"
    MEDICAL_ALERT = "medical_alert"
    USER = "user"
    REPORT = "report"
    ACTIVITY = "activity"
    CHILD_NOTE = "child_note"


class Action(str, Enum):
    LIST = "list"
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    PAY = "pay"


class NotificationType(str, Enum):
    ATTENDANCE = "attendance"
    ACTIVITY = "activity"
    PAYMENT = "payment"
    MEDICAL = "medical"
    SYSTEM = "system"


class NotificationPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class AlertType(str, Enum):
    ALLERGY = "allergy"
    MEDICATION = "medication"
    CONDITION = "condition"
    INCIDENT = "incident"


class AlertSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"


class ActivityType(str, Enum):
    EDUCATIONAL = "educational"
    CREATIVE = "creative"
    PHYSICAL = "physical"
    SOCIAL = "social"
    MUSICAL = "musical"


class ActivityStatus(str, Enum):
    PLANNED = "planned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Mood(str, Enum):
    HAPPY = "happy"
    CALM = "calm"
    EXCITED = "excited"
    TIRED = "tired"
    SAD = "sad"


class ReportType(str, Enum):
    ATTENDANCE = "attendance"
    PAYMENTS = "payments"
    ACTIVITIES = "activities"
