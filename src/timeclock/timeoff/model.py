from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import RequestStatus, TimeOffType
from ..core.transitions import check_transition


@dataclass(frozen=True)
class NewTimeOffRequest:
    organization_id: int
    employee_id: int
    employee_name: str
    time_off_type: TimeOffType
    start_date: date
    end_date: date
    total_days: float
    reason: Optional[str] = None


@dataclass(frozen=True)
class TimeOffRequest:
    request_id: int
    organization_id: int
    employee_id: int
    employee_name: str
    time_off_type: TimeOffType
    start_date: date
    end_date: date
    total_days: float
    status: RequestStatus
    reason: Optional[str] = None
    manager_id: Optional[int] = None
    manager_name: Optional[str] = None
    responded_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


TIME_OFF_TRANSITIONS = {
    RequestStatus.PENDING: frozenset({RequestStatus.APPROVED, RequestStatus.REJECTED}),
    RequestStatus.APPROVED: frozenset(),
    RequestStatus.REJECTED: frozenset(),
}


def check_time_off_transition(current: RequestStatus, target: RequestStatus) -> None:
    check_transition(TIME_OFF_TRANSITIONS, entity="time_off_request", current=current, target=target)
