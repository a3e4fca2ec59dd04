from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import ViolationStatus
from .model import BreakViolation, NewBreakViolation


class BreakViolationRepository(Protocol):
    def create(self, violation: NewBreakViolation) -> int:
        raise NotImplementedError

    def get_by_id(self, *, organization_id: int, violation_id: int) -> Optional[BreakViolation]:
        raise NotImplementedError

    def review(
        self,
        *,
        organization_id: int,
        violation_id: int,
        status: ViolationStatus,
        reviewed_by: int,
        reviewed_by_name: str,
        reviewed_at: datetime,
        review_notes: Optional[str] = None,
    ) -> bool:
        """pending -> status. False when the violation was already reviewed."""

        raise NotImplementedError

    def list(
        self,
        *,
        organization_id: int,
        status: Optional[ViolationStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        employee_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[BreakViolation]:
        raise NotImplementedError
