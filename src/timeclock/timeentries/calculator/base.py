from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime


class HoursCalculator(ABC):
    """Calculator interface (Strategy Pattern for worked hours)."""

    @abstractmethod
    def total_hours(self, clock_in: datetime, clock_out: datetime, break_minutes: int) -> float:
        raise NotImplementedError
