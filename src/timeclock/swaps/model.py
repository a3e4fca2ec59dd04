from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional

from ..core.enums import SwapStatus, SwapType
from ..core.transitions import check_transition


@dataclass(frozen=True)
class NewShiftSwap:
    organization_id: int
    requester_id: int
    requester_name: str
    requester_shift_id: int
    swap_type: SwapType
    target_employee_id: Optional[int] = None
    target_employee_name: Optional[str] = None
    target_shift_id: Optional[int] = None
    reason: Optional[str] = None


@dataclass(frozen=True)
class ShiftSwap:
    swap_id: int
    organization_id: int
    requester_id: int
    requester_name: str
    requester_shift_id: int
    target_employee_id: Optional[int]
    target_employee_name: Optional[str]
    target_shift_id: Optional[int]
    swap_type: SwapType
    status: SwapStatus
    reason: Optional[str] = None
    responded_at: Optional[datetime] = None
    manager_id: Optional[int] = None
    manager_name: Optional[str] = None
    manager_decided_at: Optional[datetime] = None
    manager_notes: Optional[str] = None
    cancel_reason: Optional[str] = None
    completed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @property
    def is_open_giveaway(self) -> bool:
        return self.swap_type == SwapType.GIVEAWAY and self.target_employee_id is None


@dataclass(frozen=True)
class ShiftReassignment:
    """Move one shift from its expected current owner to a new one."""

    shift_id: int
    from_employee_id: int
    to_employee_id: int
    to_employee_name: str


@dataclass(frozen=True)
class SwapStats:
    total: int = 0
    pending: int = 0
    manager_pending: int = 0
    approved: int = 0
    rejected: int = 0
    cancelled: int = 0
    by_type: Dict[str, int] = field(default_factory=dict)
    approval_rate: float = 0.0

    @property
    def action_required(self) -> int:
        return self.pending + self.manager_pending


SWAP_TRANSITIONS = {
    SwapStatus.PENDING: frozenset({SwapStatus.MANAGER_PENDING, SwapStatus.REJECTED, SwapStatus.CANCELLED}),
    SwapStatus.MANAGER_PENDING: frozenset(
        {SwapStatus.MANAGER_APPROVED, SwapStatus.MANAGER_REJECTED, SwapStatus.CANCELLED}
    ),
    SwapStatus.MANAGER_APPROVED: frozenset({SwapStatus.COMPLETED}),
    SwapStatus.COMPLETED: frozenset(),
    SwapStatus.REJECTED: frozenset(),
    SwapStatus.MANAGER_REJECTED: frozenset(),
    SwapStatus.CANCELLED: frozenset(),
}

# Non-terminal statuses: a shift referenced by one of these cannot join another swap.
ACTIVE_SWAP_STATUSES = frozenset({SwapStatus.PENDING, SwapStatus.MANAGER_PENDING, SwapStatus.MANAGER_APPROVED})


def check_swap_transition(current: SwapStatus, target: SwapStatus) -> None:
    check_transition(SWAP_TRANSITIONS, entity="shift_swap", current=current, target=target)
