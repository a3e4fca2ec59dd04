from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AdjustmentStatus, AdjustmentType, TimeEntryStatus
from ..core.transitions import check_transition


@dataclass(frozen=True)
class NewTimeAdjustment:
    organization_id: int
    employee_id: int
    employee_name: str
    entry_id: int
    request_type: AdjustmentType
    original_date: date
    original_clock_in: datetime
    original_clock_out: Optional[datetime]
    requested_clock_in: Optional[datetime]
    requested_clock_out: Optional[datetime]
    reason: str
    employee_notes: Optional[str] = None


@dataclass(frozen=True)
class TimeAdjustment:
    """An employee's request to correct the clock times of one of their entries."""

    adjustment_id: int
    organization_id: int
    employee_id: int
    employee_name: str
    entry_id: int
    request_type: AdjustmentType
    original_date: date
    original_clock_in: datetime
    original_clock_out: Optional[datetime]
    requested_clock_in: Optional[datetime]
    requested_clock_out: Optional[datetime]
    reason: str
    status: AdjustmentStatus
    employee_notes: Optional[str] = None
    reviewed_by: Optional[int] = None
    reviewed_by_name: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    admin_response: Optional[str] = None
    admin_notes: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class AdjustmentReview:
    reviewed_by: int
    reviewed_by_name: str
    reviewed_at: datetime
    admin_response: Optional[str] = None
    admin_notes: Optional[str] = None


@dataclass(frozen=True)
class EntryCorrection:
    """New clock times for an entry, applied only while it is still adjustable."""

    entry_id: int
    clock_in: datetime
    clock_out: datetime
    total_hours: float


# Active entries have no clock-out yet; approved ones are final.
ADJUSTABLE_ENTRY_STATUSES = frozenset({TimeEntryStatus.COMPLETED, TimeEntryStatus.PENDING_APPROVAL})

ADJUSTMENT_TRANSITIONS = {
    AdjustmentStatus.PENDING: frozenset(
        {AdjustmentStatus.APPROVED, AdjustmentStatus.REJECTED, AdjustmentStatus.CANCELLED}
    ),
    AdjustmentStatus.APPROVED: frozenset(),
    AdjustmentStatus.REJECTED: frozenset(),
    AdjustmentStatus.CANCELLED: frozenset(),
}


def check_adjustment_transition(current: AdjustmentStatus, target: AdjustmentStatus) -> None:
    check_transition(ADJUSTMENT_TRANSITIONS, entity="time_adjustment", current=current, target=target)


def adjustment_type_for(requested_clock_in: Optional[datetime], requested_clock_out: Optional[datetime]) -> AdjustmentType:
    if requested_clock_in and requested_clock_out:
        return AdjustmentType.MODIFY_ENTRY
    if requested_clock_in:
        return AdjustmentType.CLOCK_IN
    return AdjustmentType.CLOCK_OUT
