from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import BreakType, PunchType, ViolationStatus, ViolationType
from ..core.transitions import check_transition
from ..punches.model import NewPunch, Punch, PunchMeta


@dataclass(frozen=True)
class BreakInfo:
    """An open break: latest break_start with no matching break_end."""

    punch_id: int
    started_at: datetime
    break_type: BreakType
    scheduled_minutes: int


@dataclass(frozen=True)
class BreakClosure:
    """A break end that passed the policy checks but has not been written yet."""

    start: Punch
    ended_at: datetime
    actual_minutes: int
    break_type: BreakType
    scheduled_minutes: int
    overage_minutes: Optional[int] = None

    @property
    def unpaid_minutes(self) -> int:
        return 0 if self.break_type == BreakType.PAID else self.actual_minutes

    @property
    def paid_minutes(self) -> int:
        return self.actual_minutes if self.break_type == BreakType.PAID else 0

    def end_punch(self, notes: Optional[str] = None) -> NewPunch:
        return NewPunch(
            punch_type=PunchType.BREAK_END,
            timestamp=self.ended_at,
            meta=PunchMeta(break_type=self.break_type, scheduled_minutes=self.scheduled_minutes, notes=notes),
        )


@dataclass(frozen=True)
class BreakEndResult:
    actual_minutes: int
    break_type: BreakType
    scheduled_minutes: int
    violation_created: bool
    violation_type: Optional[ViolationType]
    punch: Punch

    @property
    def was_overtime(self) -> bool:
        return self.violation_type == ViolationType.BREAK_TOO_LONG


@dataclass(frozen=True)
class NewBreakViolation:
    organization_id: int
    employee_id: int
    employee_name: str
    punch_id: Optional[int]
    violation_type: ViolationType
    violation_date: date
    break_type: BreakType
    scheduled_minutes: int
    actual_minutes: int
    difference_minutes: int
    break_start: datetime
    break_end: datetime
    notes: Optional[str] = None


@dataclass(frozen=True)
class BreakViolation:
    violation_id: int
    organization_id: int
    employee_id: int
    employee_name: str
    punch_id: Optional[int]
    violation_type: ViolationType
    violation_date: date
    break_type: Optional[BreakType]
    scheduled_minutes: Optional[int]
    actual_minutes: Optional[int]
    difference_minutes: Optional[int]
    break_start: Optional[datetime]
    break_end: Optional[datetime]
    status: ViolationStatus
    reviewed_by: Optional[int] = None
    reviewed_by_name: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    review_notes: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


REVIEW_OUTCOMES = frozenset({ViolationStatus.ACKNOWLEDGED, ViolationStatus.EXCUSED, ViolationStatus.WARNED})

VIOLATION_TRANSITIONS = {
    ViolationStatus.PENDING: REVIEW_OUTCOMES,
    ViolationStatus.ACKNOWLEDGED: frozenset(),
    ViolationStatus.EXCUSED: frozenset(),
    ViolationStatus.WARNED: frozenset(),
}


def check_violation_transition(current: ViolationStatus, target: ViolationStatus) -> None:
    check_transition(VIOLATION_TRANSITIONS, entity="break_violation", current=current, target=target)
