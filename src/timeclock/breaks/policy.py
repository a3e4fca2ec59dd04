from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.constants import BREAK_BUFFER_MINUTES, DEFAULT_SCHEDULED_BREAK_MINUTES, MIN_UNPAID_BREAK_MINUTES
from ..core.enums import BreakType
from ..core.exceptions import BreakTooShortError


@dataclass(frozen=True)
class BreakPolicy:
    """Break duration rules.

    The buffer absorbs clock drift and UI latency: it lowers the minimum an unpaid break
    must last and raises the point at which a break counts as too long.
    """

    min_unpaid_minutes: int = MIN_UNPAID_BREAK_MINUTES
    buffer_minutes: int = BREAK_BUFFER_MINUTES
    default_scheduled_minutes: int = DEFAULT_SCHEDULED_BREAK_MINUTES

    @property
    def min_allowed_unpaid_minutes(self) -> int:
        return self.min_unpaid_minutes - self.buffer_minutes

    def check_minimum(self, break_type: BreakType, actual_minutes: int, *, force: bool = False) -> None:
        if force or break_type != BreakType.UNPAID:
            return
        if actual_minutes < self.min_allowed_unpaid_minutes:
            raise BreakTooShortError(self.min_allowed_unpaid_minutes - actual_minutes)

    def overage_minutes(self, actual_minutes: int, scheduled_minutes: int) -> Optional[int]:
        """Minutes over schedule when past the buffer, else None."""

        if actual_minutes > scheduled_minutes + self.buffer_minutes:
            return actual_minutes - scheduled_minutes
        return None
