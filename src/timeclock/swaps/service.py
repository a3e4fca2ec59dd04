from __future__ import annotations

import logging
from collections import Counter
from datetime import date, datetime, time
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import optional_text, parse_enum
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import SwapStatus, SwapType
from ..core.exceptions import AuthorizationError, NotFoundError, ShiftSwapConflictError, ValidationError
from ..employees.repository import EmployeeDirectory
from ..employees.service import require_approver, require_employee
from ..shifts.model import Shift
from ..shifts.repository import ShiftRepository
from .model import ACTIVE_SWAP_STATUSES, NewShiftSwap, ShiftReassignment, ShiftSwap, SwapStats, check_swap_transition
from .repository import ShiftSwapRepository

logger = logging.getLogger(__name__)


class ShiftSwapService:
    """Shift swap workflow.

    pending -> manager_pending -> manager_approved -> completed, with rejected,
    manager_rejected and cancelled as the other terminal states. Every step is a
    conditional update; the loser of a race sees InvalidTransitionError naming the
    status the winner left behind.
    """

    def __init__(self, swaps: ShiftSwapRepository, shifts: ShiftRepository, directory: EmployeeDirectory):
        self._swaps = swaps
        self._shifts = shifts
        self._directory = directory

    def _require_shift(self, *, organization_id: int, shift_id: int) -> Shift:
        shift = self._shifts.get_by_id(organization_id=int(organization_id), shift_id=int(shift_id))
        if not shift:
            raise NotFoundError(f"Shift {shift_id} not found")
        return shift

    def get_swap(self, *, organization_id: int, swap_id: int) -> ShiftSwap:
        swap = self._swaps.get_by_id(organization_id=int(organization_id), swap_id=int(swap_id))
        if not swap:
            raise NotFoundError(f"Shift swap {swap_id} not found")
        return swap

    def _after_conditional_update(self, moved: bool, swap: ShiftSwap, target: SwapStatus) -> ShiftSwap:
        current = self.get_swap(organization_id=swap.organization_id, swap_id=swap.swap_id)
        if not moved:
            check_swap_transition(current.status, target)
        logger.info("Swap %s: %s -> %s", swap.swap_id, swap.status.value, current.status.value)
        return current

    def create_swap(
        self,
        *,
        organization_id: int,
        requester_id: int,
        requester_shift_id: int,
        swap_type: SwapType | str,
        target_employee_id: Optional[int] = None,
        target_shift_id: Optional[int] = None,
        reason: Optional[str] = None,
    ) -> ShiftSwap:
        swap_type = parse_enum(SwapType, swap_type, "Swap type")
        requester = require_employee(self._directory, organization_id=organization_id, employee_id=requester_id)

        shift = self._require_shift(organization_id=organization_id, shift_id=requester_shift_id)
        if shift.employee_id != requester.employee_id:
            raise AuthorizationError("You can only offer your own shifts")

        if swap_type == SwapType.SWAP:
            if target_employee_id is None or target_shift_id is None:
                raise ValidationError("A swap needs a target employee and a target shift")
        elif swap_type == SwapType.PICKUP:
            if target_employee_id is None:
                raise ValidationError("A pickup needs the employee taking the shift")
        if swap_type != SwapType.SWAP and target_shift_id is not None:
            raise ValidationError(f"A {swap_type.value} does not take a target shift")

        target = None
        if target_employee_id is not None:
            if int(target_employee_id) == requester.employee_id:
                raise ValidationError("Requester and target must be different employees")
            target = require_employee(self._directory, organization_id=organization_id, employee_id=target_employee_id)

        if target_shift_id is not None:
            target_shift = self._require_shift(organization_id=organization_id, shift_id=target_shift_id)
            if target is None or target_shift.employee_id != target.employee_id:
                raise ValidationError("Target shift does not belong to the target employee")

        shift_ids = [shift.shift_id] + ([int(target_shift_id)] if target_shift_id is not None else [])
        if self._swaps.find_active_for_shifts(organization_id=organization_id, shift_ids=shift_ids):
            raise ShiftSwapConflictError("Shift already has an active swap request")

        swap_id = self._swaps.create(
            NewShiftSwap(
                organization_id=int(organization_id),
                requester_id=requester.employee_id,
                requester_name=requester.full_name,
                requester_shift_id=shift.shift_id,
                swap_type=swap_type,
                target_employee_id=target.employee_id if target else None,
                target_employee_name=target.full_name if target else None,
                target_shift_id=int(target_shift_id) if target_shift_id is not None else None,
                reason=optional_text(reason),
            )
        )
        logger.info(
            "Swap %s created: %s of shift %s by employee %s",
            swap_id,
            swap_type.value,
            shift.shift_id,
            requester.employee_id,
        )
        return self.get_swap(organization_id=organization_id, swap_id=swap_id)

    def respond_to_swap(
        self,
        *,
        organization_id: int,
        swap_id: int,
        accept: bool,
        responder_id: int,
        now: Optional[datetime] = None,
    ) -> ShiftSwap:
        swap = self.get_swap(organization_id=organization_id, swap_id=swap_id)
        target = SwapStatus.MANAGER_PENDING if accept else SwapStatus.REJECTED
        check_swap_transition(swap.status, target)

        responder = require_employee(self._directory, organization_id=organization_id, employee_id=responder_id)
        bind_id = bind_name = None
        if swap.is_open_giveaway:
            if responder.employee_id == swap.requester_id:
                raise ValidationError("You cannot pick up your own shift")
            if not accept:
                raise ValidationError("Open giveaways can only be accepted; the requester may cancel instead")
            bind_id, bind_name = responder.employee_id, responder.full_name
        elif swap.target_employee_id != responder.employee_id:
            raise AuthorizationError("Only the target employee can respond to this swap")

        moved = self._swaps.respond(
            organization_id=int(organization_id),
            swap_id=swap.swap_id,
            status=target,
            responded_at=now or now_local(),
            target_employee_id=bind_id,
            target_employee_name=bind_name,
        )
        return self._after_conditional_update(moved, swap, target)

    def manager_decide_swap(
        self,
        *,
        organization_id: int,
        swap_id: int,
        manager_id: int,
        approve: bool,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ShiftSwap:
        manager = require_approver(self._directory, organization_id=organization_id, employee_id=manager_id)
        swap = self.get_swap(organization_id=organization_id, swap_id=swap_id)
        target = SwapStatus.MANAGER_APPROVED if approve else SwapStatus.MANAGER_REJECTED
        check_swap_transition(swap.status, target)

        moved = self._swaps.decide(
            organization_id=int(organization_id),
            swap_id=swap.swap_id,
            status=target,
            manager_id=manager.employee_id,
            manager_name=manager.full_name,
            decided_at=now or now_local(),
            notes=optional_text(notes),
        )
        return self._after_conditional_update(moved, swap, target)

    def execute_swap(
        self,
        *,
        organization_id: int,
        swap_id: int,
        executor_id: int,
        now: Optional[datetime] = None,
    ) -> ShiftSwap:
        """Hand the shifts over. Only a manager or admin may execute an approved swap."""

        executor = require_approver(self._directory, organization_id=organization_id, employee_id=executor_id)
        swap = self.get_swap(organization_id=organization_id, swap_id=swap_id)
        check_swap_transition(swap.status, SwapStatus.COMPLETED)
        if swap.target_employee_id is None:
            raise ValidationError("Swap has no target employee to hand the shift to")

        moves = [
            ShiftReassignment(
                shift_id=swap.requester_shift_id,
                from_employee_id=swap.requester_id,
                to_employee_id=swap.target_employee_id,
                to_employee_name=swap.target_employee_name or "",
            )
        ]
        if swap.swap_type == SwapType.SWAP:
            if swap.target_shift_id is None:
                raise ValidationError("Swap has no target shift")
            moves.append(
                ShiftReassignment(
                    shift_id=swap.target_shift_id,
                    from_employee_id=swap.target_employee_id,
                    to_employee_id=swap.requester_id,
                    to_employee_name=swap.requester_name,
                )
            )

        moved = self._swaps.complete(
            organization_id=int(organization_id),
            swap_id=swap.swap_id,
            reassignments=moves,
            completed_at=now or now_local(),
        )
        logger.info("Swap %s executed by %s", swap.swap_id, executor.employee_id)
        return self._after_conditional_update(moved, swap, SwapStatus.COMPLETED)

    def cancel_swap(
        self,
        *,
        organization_id: int,
        swap_id: int,
        requester_id: Optional[int] = None,
        reason: Optional[str] = None,
    ) -> ShiftSwap:
        swap = self.get_swap(organization_id=organization_id, swap_id=swap_id)
        if requester_id is not None and swap.requester_id != int(requester_id):
            raise AuthorizationError("Only the requester can cancel this swap")
        check_swap_transition(swap.status, SwapStatus.CANCELLED)

        moved = self._swaps.cancel(
            organization_id=int(organization_id),
            swap_id=swap.swap_id,
            from_status=swap.status,
            reason=optional_text(reason),
        )
        return self._after_conditional_update(moved, swap, SwapStatus.CANCELLED)

    def list_swaps(
        self,
        *,
        organization_id: int,
        status: Optional[SwapStatus | str] = None,
        swap_type: Optional[SwapType | str] = None,
        requester_id: Optional[int] = None,
        target_employee_id: Optional[int] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[ShiftSwap]:
        return self._swaps.list(
            organization_id=int(organization_id),
            statuses=[parse_enum(SwapStatus, status, "Status")] if status else None,
            swap_type=parse_enum(SwapType, swap_type, "Swap type") if swap_type else None,
            requester_id=requester_id,
            target_employee_id=target_employee_id,
            limit=int(limit),
        )

    def list_employee_swaps(
        self,
        *,
        organization_id: int,
        employee_id: int,
        include_closed: bool = False,
    ) -> Sequence[ShiftSwap]:
        return self._swaps.list(
            organization_id=int(organization_id),
            statuses=None if include_closed else ACTIVE_SWAP_STATUSES,
            involving_employee_id=int(employee_id),
        )

    def list_open_giveaways(self, *, organization_id: int) -> Sequence[ShiftSwap]:
        return self._swaps.list(
            organization_id=int(organization_id),
            statuses=[SwapStatus.PENDING],
            swap_type=SwapType.GIVEAWAY,
            open_only=True,
        )

    def list_pending_manager_approvals(self, *, organization_id: int) -> Sequence[ShiftSwap]:
        return self._swaps.list(organization_id=int(organization_id), statuses=[SwapStatus.MANAGER_PENDING])

    def swap_stats(
        self,
        *,
        organization_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> SwapStats:
        swaps = self._swaps.list(
            organization_id=int(organization_id),
            created_from=datetime.combine(start_date, time.min) if start_date else None,
            created_to=datetime.combine(end_date, time.max) if end_date else None,
            limit=100000,
        )
        counts = Counter(s.status for s in swaps)
        total = len(swaps)
        approved = counts[SwapStatus.MANAGER_APPROVED] + counts[SwapStatus.COMPLETED]
        undecided = counts[SwapStatus.CANCELLED] + counts[SwapStatus.PENDING] + counts[SwapStatus.MANAGER_PENDING]
        decided = total - undecided
        by_type = Counter(s.swap_type.value for s in swaps)

        return SwapStats(
            total=total,
            pending=counts[SwapStatus.PENDING],
            manager_pending=counts[SwapStatus.MANAGER_PENDING],
            approved=approved,
            rejected=counts[SwapStatus.REJECTED] + counts[SwapStatus.MANAGER_REJECTED],
            cancelled=counts[SwapStatus.CANCELLED],
            by_type={t.value: by_type.get(t.value, 0) for t in SwapType},
            approval_rate=round(approved / decided * 100, 1) if decided > 0 else 0.0,
        )
