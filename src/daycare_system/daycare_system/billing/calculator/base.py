from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from ...attendance.model import AttendanceRecord
from ..model import RateSchedule


class DailyRateCalculator(ABC):
    """Calculator interface (Strategy Pattern for pricing one attended day)."""

    @abstractmethod
    def day_amount(self, record: AttendanceRecord, rates: RateSchedule) -> Decimal:
        raise NotImplementedError
