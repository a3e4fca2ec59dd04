from __future__ import annotations

from datetime import datetime

from .base import HoursCalculator


class StandardHoursCalculator(HoursCalculator):
    """Standard rule: (out - in) - unpaid break minutes, not below 0, 2 decimals."""

    def total_hours(self, clock_in: datetime, clock_out: datetime, break_minutes: int) -> float:
        hours = (clock_out - clock_in).total_seconds() / 3600
        hours -= int(break_minutes or 0) / 60
        return round(max(hours, 0.0), 2)
