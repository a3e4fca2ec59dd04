from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import AdjustmentStatus
from .model import AdjustmentReview, EntryCorrection, NewTimeAdjustment, TimeAdjustment


class TimeAdjustmentRepository(Protocol):
    def create(self, adjustment: NewTimeAdjustment) -> int:
        raise NotImplementedError

    def get_by_id(self, *, organization_id: int, adjustment_id: int) -> Optional[TimeAdjustment]:
        raise NotImplementedError

    def list(
        self,
        *,
        organization_id: int,
        employee_id: Optional[int] = None,
        status: Optional[AdjustmentStatus] = None,
        limit: int = 200,
    ) -> Sequence[TimeAdjustment]:
        raise NotImplementedError

    def close(
        self,
        *,
        organization_id: int,
        adjustment_id: int,
        status: AdjustmentStatus,
        review: Optional[AdjustmentReview] = None,
    ) -> bool:
        """pending -> rejected or cancelled without touching the entry. False when no longer pending."""

        raise NotImplementedError

    def approve(
        self,
        *,
        organization_id: int,
        adjustment_id: int,
        review: AdjustmentReview,
        correction: EntryCorrection,
    ) -> bool:
        """pending -> approved and the entry correction, in one transaction.

        False when the request is no longer pending. Raises ConflictError, writing nothing,
        when the entry is no longer adjustable.
        """

        raise NotImplementedError
