"""Example: price a month of attendance with the billing layer (no Flask, no database).

Controllers stay thin; the arithmetic lives in plain functions you can call directly.
"""

import sys
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from src.daycare_system.daycare_system.attendance.model import AttendanceRecord
from src.daycare_system.daycare_system.billing.invoicing import apply_discount, compute_child_invoice
from src.daycare_system.daycare_system.billing.model import RateSchedule
from src.daycare_system.daycare_system.children.model import Child
from src.daycare_system.daycare_system.core.enums import AttendanceStatus, Gender


def main():
    child = Child(
        child_id=1,
        first_name="Mia",
        last_name="Tran",
        date_of_birth=date(2023, 4, 2),
        gender=Gender.FEMALE,
        parent_id=3,
        enrollment_date=date(2025, 9, 1),
    )
    records = [
        AttendanceRecord(
            attendance_id=1,
            child_id=1,
            work_date=date(2026, 3, 2),
            check_in_time=datetime(2026, 3, 2, 8, 0),
            check_out_time=datetime(2026, 3, 2, 16, 0),
            status=AttendanceStatus.PRESENT,
            recorded_by=2,
        ),
        AttendanceRecord(
            attendance_id=2,
            child_id=1,
            work_date=date(2026, 3, 3),
            check_in_time=datetime(2026, 3, 3, 8, 0),
            check_out_time=datetime(2026, 3, 3, 13, 0),
            status=AttendanceStatus.PRESENT,
            recorded_by=2,
        ),
    ]

    draft = compute_child_invoice(child, records, date(2026, 3, 1), date(2026, 3, 31), date(2026, 4, 15), RateSchedule())
    for line in draft.line_items:
        print(f"{line.description}: {line.hours}h -> {line.amount}")
    print("subtotal", draft.amount, "tax", draft.tax_amount, "total", draft.total_amount)
    print("with 10% off:", apply_discount(draft.amount, "percentage", Decimal("10")))


if __name__ == "__main__":
    main()
