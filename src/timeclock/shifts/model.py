from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Optional


@dataclass(frozen=True)
class Shift:
    """A scheduled shift owned by one employee. Swaps reassign ``employee_id``."""

    shift_id: int
    organization_id: int
    employee_id: int
    employee_name: str
    shift_date: date
    start_time: time
    end_time: time
    position: Optional[str] = None
    status: str = "scheduled"
