from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import SwapStatus, SwapType
from .model import NewShiftSwap, ShiftReassignment, ShiftSwap


class ShiftSwapRepository(Protocol):
    def create(self, swap: NewShiftSwap) -> int:
        """Insert a pending swap.

        Raises ShiftSwapConflictError when an active swap already references either shift.
        """

        raise NotImplementedError

    def get_by_id(self, *, organization_id: int, swap_id: int) -> Optional[ShiftSwap]:
        raise NotImplementedError

    def find_active_for_shifts(self, *, organization_id: int, shift_ids: Iterable[int]) -> Sequence[ShiftSwap]:
        raise NotImplementedError

    # Every state step below is conditional on the expected current status and returns
    # False when the row has already moved on.
    def respond(
        self,
        *,
        organization_id: int,
        swap_id: int,
        status: SwapStatus,
        responded_at: datetime,
        target_employee_id: Optional[int] = None,
        target_employee_name: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    def decide(
        self,
        *,
        organization_id: int,
        swap_id: int,
        status: SwapStatus,
        manager_id: int,
        manager_name: str,
        decided_at: datetime,
        notes: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    def cancel(
        self,
        *,
        organization_id: int,
        swap_id: int,
        from_status: SwapStatus,
        reason: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    def complete(
        self,
        *,
        organization_id: int,
        swap_id: int,
        reassignments: Sequence[ShiftReassignment],
        completed_at: datetime,
    ) -> bool:
        """manager_approved -> completed plus every shift reassignment, all or nothing."""

        raise NotImplementedError

    def list(
        self,
        *,
        organization_id: int,
        statuses: Optional[Iterable[SwapStatus]] = None,
        swap_type: Optional[SwapType] = None,
        requester_id: Optional[int] = None,
        target_employee_id: Optional[int] = None,
        involving_employee_id: Optional[int] = None,
        open_only: bool = False,
        created_from: Optional[datetime] = None,
        created_to: Optional[datetime] = None,
        limit: int = 200,
    ) -> Sequence[ShiftSwap]:
        raise NotImplementedError
