from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from ...attendance.model import AttendanceRecord
from ...core.constants import LINE_AMOUNT_PLACES
from ..model import RateSchedule
from .base import DailyRateCalculator

MINUTES_PER_HOUR = Decimal(60)
LINE_AMOUNT_QUANTUM = Decimal(LINE_AMOUNT_PLACES)


class StandardDailyRateCalculator(DailyRateCalculator):
    """Standard rule: flat full-day rate at or above the threshold, otherwise hours * hourly rate.

    The threshold is applied to each attendance record on its own, never to
    totals across days.
    Hourly amounts are kept at the stored line precision of four places.
    """

    def day_amount(self, record: AttendanceRecord, rates: RateSchedule) -> Decimal:
        minutes = record.duration_minutes
        if minutes is None:
            return Decimal("0")
        hours = Decimal(minutes) / MINUTES_PER_HOUR
        if hours >= rates.full_day_hours:
            return rates.full_day_rate
        amount = Decimal(minutes) * rates.hourly_rate / MINUTES_PER_HOUR
        return amount.quantize(LINE_AMOUNT_QUANTUM, rounding=ROUND_HALF_UP)
