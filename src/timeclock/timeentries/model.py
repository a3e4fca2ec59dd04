from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import TimeEntryStatus
from ..core.transitions import check_transition


@dataclass(frozen=True)
class TimeEntry:
    """Daily summary derived from one employee's punches."""

    entry_id: int
    organization_id: int
    employee_id: int
    work_date: date
    clock_in: datetime
    clock_out: Optional[datetime]
    break_minutes: int = 0
    unpaid_break_minutes: int = 0
    paid_break_minutes: int = 0
    total_hours: float = 0.0
    status: TimeEntryStatus = TimeEntryStatus.ACTIVE
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None


TIME_ENTRY_TRANSITIONS = {
    TimeEntryStatus.ACTIVE: frozenset({TimeEntryStatus.COMPLETED}),
    TimeEntryStatus.COMPLETED: frozenset({TimeEntryStatus.PENDING_APPROVAL}),
    TimeEntryStatus.PENDING_APPROVAL: frozenset({TimeEntryStatus.APPROVED}),
    TimeEntryStatus.APPROVED: frozenset(),
}


def check_time_entry_transition(current: TimeEntryStatus, target: TimeEntryStatus) -> None:
    check_transition(TIME_ENTRY_TRANSITIONS, entity="time_entry", current=current, target=target)


@dataclass(frozen=True)
class BulkApproval:
    approved: tuple[TimeEntry, ...]
    skipped: tuple[int, ...]
