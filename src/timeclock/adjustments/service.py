from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.validators import optional_text, parse_enum, require_non_empty, require_positive
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import AdjustmentStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..employees.repository import EmployeeDirectory
from ..employees.service import require_approver, require_employee
from ..timeentries.calculator.base import HoursCalculator
from ..timeentries.calculator.standard_calculator import StandardHoursCalculator
from ..timeentries.model import TimeEntry
from ..timeentries.repository import TimeEntryRepository
from .model import (
    ADJUSTABLE_ENTRY_STATUSES,
    AdjustmentReview,
    EntryCorrection,
    NewTimeAdjustment,
    TimeAdjustment,
    adjustment_type_for,
    check_adjustment_transition,
)
from .repository import TimeAdjustmentRepository

logger = logging.getLogger(__name__)


class TimeAdjustmentService:
    """Employee requests to correct clock times, reviewed by a manager.

    Approval rewrites the entry's clock_in / clock_out and total_hours. The punch ledger is
    left as it was recorded.
    """

    def __init__(
        self,
        adjustments: TimeAdjustmentRepository,
        entries: TimeEntryRepository,
        directory: EmployeeDirectory,
        *,
        calculator: HoursCalculator | None = None,
    ):
        self._adjustments = adjustments
        self._entries = entries
        self._directory = directory
        self._calculator = calculator or StandardHoursCalculator()

    def create_request(
        self,
        *,
        organization_id: int,
        employee_id: int,
        entry_id: int,
        reason: str,
        requested_clock_in: Optional[datetime] = None,
        requested_clock_out: Optional[datetime] = None,
        employee_notes: Optional[str] = None,
    ) -> TimeAdjustment:
        reason = require_non_empty(reason, "Reason")
        if requested_clock_in is None and requested_clock_out is None:
            raise ValidationError("Request a new clock in or clock out time")

        employee = require_employee(self._directory, organization_id=organization_id, employee_id=employee_id)
        entry = self._require_entry(organization_id, require_positive(entry_id, "Entry id"))
        if entry.employee_id != employee.employee_id:
            raise AuthorizationError("You can only adjust your own time entries")
        self._check_adjustable(entry)

        if requested_clock_in is not None and requested_clock_in.date() != entry.work_date:
            raise ValidationError(f"Clock in must stay on {entry.work_date}")
        self._corrected_times(entry, requested_clock_in, requested_clock_out)

        adjustment_id = self._adjustments.create(
            NewTimeAdjustment(
                organization_id=int(organization_id),
                employee_id=employee.employee_id,
                employee_name=employee.full_name,
                entry_id=entry.entry_id,
                request_type=adjustment_type_for(requested_clock_in, requested_clock_out),
                original_date=entry.work_date,
                original_clock_in=entry.clock_in,
                original_clock_out=entry.clock_out,
                requested_clock_in=requested_clock_in,
                requested_clock_out=requested_clock_out,
                reason=reason,
                employee_notes=optional_text(employee_notes),
            )
        )
        logger.info("Time adjustment %s requested by employee %s for entry %s", adjustment_id, employee_id, entry_id)
        return self.get_request(organization_id=organization_id, adjustment_id=adjustment_id)

    def get_request(self, *, organization_id: int, adjustment_id: int) -> TimeAdjustment:
        adj = self._adjustments.get_by_id(organization_id=int(organization_id), adjustment_id=int(adjustment_id))
        if not adj:
            raise NotFoundError(f"Time adjustment {adjustment_id} not found")
        return adj

    def list_requests(
        self,
        *,
        organization_id: int,
        employee_id: Optional[int] = None,
        status: Optional[AdjustmentStatus | str] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[TimeAdjustment]:
        return self._adjustments.list(
            organization_id=int(organization_id),
            employee_id=employee_id,
            status=parse_enum(AdjustmentStatus, status, "Status") if status else None,
            limit=int(limit),
        )

    def list_pending(self, *, organization_id: int, limit: int = DEFAULT_LIST_LIMIT) -> Sequence[TimeAdjustment]:
        return self.list_requests(organization_id=organization_id, status=AdjustmentStatus.PENDING, limit=limit)

    def cancel_request(self, *, organization_id: int, adjustment_id: int, employee_id: int) -> TimeAdjustment:
        adj = self.get_request(organization_id=organization_id, adjustment_id=adjustment_id)
        if adj.employee_id != int(employee_id):
            raise AuthorizationError("Only the requester can cancel this adjustment")
        check_adjustment_transition(adj.status, AdjustmentStatus.CANCELLED)

        moved = self._adjustments.close(
            organization_id=int(organization_id),
            adjustment_id=adj.adjustment_id,
            status=AdjustmentStatus.CANCELLED,
        )
        return self._after_conditional_update(moved, adj, AdjustmentStatus.CANCELLED)

    def reject_request(
        self,
        *,
        organization_id: int,
        adjustment_id: int,
        reviewer_id: int,
        admin_notes: str,
        admin_response: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> TimeAdjustment:
        reviewer = require_approver(self._directory, organization_id=organization_id, employee_id=reviewer_id)
        admin_notes = require_non_empty(admin_notes, "Rejection reason")
        adj = self.get_request(organization_id=organization_id, adjustment_id=adjustment_id)
        check_adjustment_transition(adj.status, AdjustmentStatus.REJECTED)

        moved = self._adjustments.close(
            organization_id=int(organization_id),
            adjustment_id=adj.adjustment_id,
            status=AdjustmentStatus.REJECTED,
            review=AdjustmentReview(
                reviewed_by=reviewer.employee_id,
                reviewed_by_name=reviewer.full_name,
                reviewed_at=now or now_local(),
                admin_response=optional_text(admin_response),
                admin_notes=admin_notes,
            ),
        )
        return self._after_conditional_update(moved, adj, AdjustmentStatus.REJECTED)

    def approve_request(
        self,
        *,
        organization_id: int,
        adjustment_id: int,
        reviewer_id: int,
        admin_response: Optional[str] = None,
        admin_notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> TimeAdjustment:
        """Approve and apply the requested times to the entry as it is now.

        Total hours are recomputed with the entry's current unpaid break minutes.
        """

        reviewer = require_approver(self._directory, organization_id=organization_id, employee_id=reviewer_id)
        adj = self.get_request(organization_id=organization_id, adjustment_id=adjustment_id)
        check_adjustment_transition(adj.status, AdjustmentStatus.APPROVED)

        entry = self._require_entry(organization_id, adj.entry_id)
        self._check_adjustable(entry)
        clock_in, clock_out = self._corrected_times(entry, adj.requested_clock_in, adj.requested_clock_out)

        moved = self._adjustments.approve(
            organization_id=int(organization_id),
            adjustment_id=adj.adjustment_id,
            review=AdjustmentReview(
                reviewed_by=reviewer.employee_id,
                reviewed_by_name=reviewer.full_name,
                reviewed_at=now or now_local(),
                admin_response=optional_text(admin_response),
                admin_notes=optional_text(admin_notes),
            ),
            correction=EntryCorrection(
                entry_id=entry.entry_id,
                clock_in=clock_in,
                clock_out=clock_out,
                total_hours=self._calculator.total_hours(clock_in, clock_out, entry.break_minutes),
            ),
        )
        if moved:
            logger.info(
                "Entry %s corrected by adjustment %s: %s - %s",
                entry.entry_id,
                adj.adjustment_id,
                clock_in,
                clock_out,
            )
        return self._after_conditional_update(moved, adj, AdjustmentStatus.APPROVED)

    def _require_entry(self, organization_id: int, entry_id: int) -> TimeEntry:
        entry = self._entries.get_by_id(organization_id=int(organization_id), entry_id=int(entry_id))
        if not entry:
            raise NotFoundError(f"Time entry {entry_id} not found")
        return entry

    @staticmethod
    def _check_adjustable(entry: TimeEntry) -> None:
        if entry.status not in ADJUSTABLE_ENTRY_STATUSES:
            raise ValidationError(f"A {entry.status.value} time entry cannot be adjusted")

    @staticmethod
    def _corrected_times(
        entry: TimeEntry,
        requested_clock_in: Optional[datetime],
        requested_clock_out: Optional[datetime],
    ) -> tuple[datetime, datetime]:
        clock_in = requested_clock_in or entry.clock_in
        clock_out = requested_clock_out or entry.clock_out
        if clock_out is None or clock_out <= clock_in:
            raise ValidationError("Clock out must be after clock in")
        return clock_in, clock_out

    def _after_conditional_update(self, moved: bool, adj: TimeAdjustment, target: AdjustmentStatus) -> TimeAdjustment:
        current = self.get_request(organization_id=adj.organization_id, adjustment_id=adj.adjustment_id)
        if not moved:
            check_adjustment_transition(current.status, target)
        logger.info("Time adjustment %s: %s -> %s", adj.adjustment_id, adj.status.value, current.status.value)
        return current
