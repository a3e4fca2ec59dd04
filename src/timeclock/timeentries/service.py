from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

from ..breaks.service import BreakService
from ..common.datetime_utils import minutes_between, now_local
from ..common.validators import optional_text, require_positive
from ..core.constants import AUTO_END_BREAK_NOTE
from ..core.enums import PunchType, TimeEntryStatus
from ..core.exceptions import AuthorizationError, InvalidTransitionError, NotFoundError, StoreUnavailableError, ValidationError
from ..database.locks import EmployeeLocks
from ..employees.repository import EmployeeDirectory
from ..employees.service import require_approver, require_employee
from ..punches.model import NewPunch, PunchMeta
from ..punches.service import PunchLedger
from .calculator.base import HoursCalculator
from .calculator.standard_calculator import StandardHoursCalculator
from .model import BulkApproval, TimeEntry, check_time_entry_transition
from .repository import TimeEntryRepository

logger = logging.getLogger(__name__)


class TimeEntryService:
    def __init__(
        self,
        ledger: PunchLedger,
        entries: TimeEntryRepository,
        directory: EmployeeDirectory,
        locks: EmployeeLocks,
        breaks: BreakService,
        *,
        calculator: HoursCalculator | None = None,
    ):
        self._ledger = ledger
        self._entries = entries
        self._directory = directory
        self._locks = locks
        self._breaks = breaks
        self._calculator = calculator or StandardHoursCalculator()

    def clock_in(
        self,
        *,
        organization_id: int,
        employee_id: int,
        notes: Optional[str] = None,
        location: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> TimeEntry:
        now = now or now_local()
        today = now.date()
        require_employee(self._directory, organization_id=organization_id, employee_id=employee_id)

        with self._locks.hold(organization_id=organization_id, employee_id=employee_id):
            active = self._entries.get_active(organization_id=organization_id, employee_id=employee_id)
            if active:
                if active.work_date == today:
                    logger.debug("Employee %s already clocked in for %s", employee_id, today)
                    return active
                raise InvalidTransitionError(
                    f"Entry for {active.work_date} is still active, clock out first",
                    entity="time_entry",
                    current=active.status.value,
                    target=TimeEntryStatus.ACTIVE.value,
                )

            existing = self._entries.get_for_date(organization_id=organization_id, employee_id=employee_id, work_date=today)
            if existing:
                raise InvalidTransitionError(
                    f"Already clocked out for {today}",
                    entity="time_entry",
                    current=existing.status.value,
                    target=TimeEntryStatus.ACTIVE.value,
                )

            entry = self._entries.open_entry(
                organization_id=organization_id,
                employee_id=employee_id,
                work_date=today,
                punch=NewPunch(
                    punch_type=PunchType.CLOCK_IN,
                    timestamp=now,
                    meta=PunchMeta(location=optional_text(location), notes=optional_text(notes)),
                ),
            )

        logger.info("Employee %s clocked in at %s (entry %s)", employee_id, now, entry.entry_id)
        return entry

    def clock_out(
        self,
        *,
        organization_id: int,
        employee_id: int,
        notes: Optional[str] = None,
        location: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Optional[TimeEntry]:
        """Close the active entry. Returns None when there is nothing to close.

        An open break, even one started before clock-in, is ended in the same write.
        """

        now = now or now_local()

        with self._locks.hold(organization_id=organization_id, employee_id=employee_id):
            entry = self._entries.get_active(organization_id=organization_id, employee_id=employee_id)
            if not entry:
                logger.debug("Clock-out for employee %s with no active entry", employee_id)
                return None

            punches = []
            closure = None
            start = self._ledger.open_break_start(organization_id=organization_id, employee_id=employee_id)
            if start:
                logger.warning("Auto-ending open break %s for employee %s on clock out", start.punch_id, employee_id)
                closure = self._breaks.plan_break_end(start=start, now=now, force=True)
                punches.append(closure.end_punch(AUTO_END_BREAK_NOTE))
            punches.append(
                NewPunch(
                    punch_type=PunchType.CLOCK_OUT,
                    timestamp=now,
                    meta=PunchMeta(location=optional_text(location), notes=optional_text(notes)),
                )
            )

            unpaid_minutes = paid_minutes = 0
            if closure:
                # Only the part of the break inside this shift counts against it.
                overlap = minutes_between(max(start.timestamp, entry.clock_in), now)
                unpaid_minutes = min(closure.unpaid_minutes, overlap)
                paid_minutes = min(closure.paid_minutes, overlap)
            total_hours = self._calculator.total_hours(entry.clock_in, now, entry.break_minutes + unpaid_minutes)
            stored = self._entries.close_entry(
                organization_id=organization_id,
                employee_id=employee_id,
                entry_id=entry.entry_id,
                clock_out=now,
                total_hours=total_hours,
                punches=punches,
                unpaid_minutes=unpaid_minutes,
                paid_minutes=paid_minutes,
            )
            completed = self._entries.get_by_id(organization_id=organization_id, entry_id=entry.entry_id)
            if stored is None:
                if completed is None or completed.status == TimeEntryStatus.ACTIVE:
                    raise StoreUnavailableError(f"Time entry {entry.entry_id} changed during clock out")
                check_time_entry_transition(completed.status, TimeEntryStatus.COMPLETED)

        if closure:
            self._breaks.finish_break_end(
                organization_id=organization_id,
                employee_id=employee_id,
                closure=closure,
                punch=stored[0],
            )
        logger.info("Employee %s clocked out at %s, %.2f hours", employee_id, now, total_hours)
        return completed

    def get_active_entry(self, *, organization_id: int, employee_id: int) -> Optional[TimeEntry]:
        return self._entries.get_active(organization_id=int(organization_id), employee_id=int(employee_id))

    def get_entry(self, *, organization_id: int, entry_id: int) -> TimeEntry:
        entry = self._entries.get_by_id(organization_id=int(organization_id), entry_id=int(entry_id))
        if not entry:
            raise NotFoundError(f"Time entry {entry_id} not found")
        return entry

    def list_entries(
        self,
        *,
        organization_id: int,
        start_date: date,
        end_date: date,
        employee_id: Optional[int] = None,
    ) -> Sequence[TimeEntry]:
        if end_date < start_date:
            raise ValidationError("End date must be on or after start date")
        return self._entries.list_range(
            organization_id=int(organization_id),
            start_date=start_date,
            end_date=end_date,
            employee_id=employee_id,
        )

    def submit_entry(self, *, organization_id: int, employee_id: int, entry_id: int) -> TimeEntry:
        entry = self.get_entry(organization_id=organization_id, entry_id=entry_id)
        if entry.employee_id != int(employee_id):
            raise AuthorizationError("Only the owner can submit a time entry")
        return self._advance(entry, TimeEntryStatus.PENDING_APPROVAL)

    def approve_entry(
        self,
        *,
        organization_id: int,
        manager_id: int,
        entry_id: int,
        now: Optional[datetime] = None,
    ) -> TimeEntry:
        manager = require_approver(self._directory, organization_id=organization_id, employee_id=manager_id)
        entry = self.get_entry(organization_id=organization_id, entry_id=entry_id)
        return self._advance(
            entry,
            TimeEntryStatus.APPROVED,
            approved_by=manager.employee_id,
            approved_at=now or now_local(),
        )

    def approve_entries(
        self,
        *,
        organization_id: int,
        manager_id: int,
        entry_ids: Sequence[int],
        now: Optional[datetime] = None,
    ) -> BulkApproval:
        """Approve every listed entry that is pending approval; the rest are skipped, not failed."""

        manager = require_approver(self._directory, organization_id=organization_id, employee_id=manager_id)
        if isinstance(entry_ids, (str, bytes)) or not entry_ids:
            raise ValidationError("Entry ids must be a non-empty list")
        ids = [require_positive(i, "Entry id") for i in entry_ids]
        now = now or now_local()

        approved = []
        skipped = []
        for entry_id in dict.fromkeys(ids):
            entry = self._entries.get_by_id(organization_id=int(organization_id), entry_id=entry_id)
            if not entry or entry.status != TimeEntryStatus.PENDING_APPROVAL:
                skipped.append(entry_id)
                continue
            moved = self._entries.transition(
                organization_id=entry.organization_id,
                entry_id=entry_id,
                from_status=TimeEntryStatus.PENDING_APPROVAL,
                to_status=TimeEntryStatus.APPROVED,
                approved_by=manager.employee_id,
                approved_at=now,
            )
            if not moved:
                skipped.append(entry_id)
                continue
            approved.append(self.get_entry(organization_id=organization_id, entry_id=entry_id))

        logger.info(
            "Manager %s bulk-approved %s time entries, skipped %s",
            manager.employee_id,
            len(approved),
            len(skipped),
        )
        return BulkApproval(approved=tuple(approved), skipped=tuple(skipped))

    def _advance(
        self,
        entry: TimeEntry,
        target: TimeEntryStatus,
        *,
        approved_by: Optional[int] = None,
        approved_at: Optional[datetime] = None,
    ) -> TimeEntry:
        check_time_entry_transition(entry.status, target)
        moved = self._entries.transition(
            organization_id=entry.organization_id,
            entry_id=entry.entry_id,
            from_status=entry.status,
            to_status=target,
            approved_by=approved_by,
            approved_at=approved_at,
        )
        current = self.get_entry(organization_id=entry.organization_id, entry_id=entry.entry_id)
        if not moved:
            check_time_entry_transition(current.status, target)
        logger.info("Time entry %s: %s -> %s", entry.entry_id, entry.status.value, target.value)
        return current
