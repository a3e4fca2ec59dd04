from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import minutes_between, now_local
from ..common.validators import optional_text, parse_enum, require_positive
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import BreakType, PunchType, ViolationStatus, ViolationType
from ..core.exceptions import AlreadyOnBreakError, NoActiveBreakError, NotFoundError
from ..database.locks import EmployeeLocks
from ..employees.repository import EmployeeDirectory
from ..employees.service import require_approver, require_employee
from ..punches.model import Punch, PunchMeta
from ..punches.service import PunchLedger
from ..timeentries.repository import TimeEntryRepository
from .model import BreakClosure, BreakEndResult, BreakInfo, BreakViolation, NewBreakViolation, check_violation_transition
from .policy import BreakPolicy
from .repository import BreakViolationRepository

logger = logging.getLogger(__name__)


class BreakService:
    def __init__(
        self,
        ledger: PunchLedger,
        entries: TimeEntryRepository,
        violations: BreakViolationRepository,
        directory: EmployeeDirectory,
        locks: EmployeeLocks,
        *,
        policy: Optional[BreakPolicy] = None,
    ):
        self._ledger = ledger
        self._entries = entries
        self._violations = violations
        self._directory = directory
        self._locks = locks
        self._policy = policy or BreakPolicy()

    def start_break(
        self,
        *,
        organization_id: int,
        employee_id: int,
        break_type: BreakType | str,
        scheduled_minutes: int,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Punch:
        now = now or now_local()
        break_type = parse_enum(BreakType, break_type, "Break type")
        scheduled_minutes = require_positive(scheduled_minutes, "Scheduled minutes")
        require_employee(self._directory, organization_id=organization_id, employee_id=employee_id)

        with self._locks.hold(organization_id=organization_id, employee_id=employee_id):
            if self._ledger.open_break_start(organization_id=organization_id, employee_id=employee_id):
                raise AlreadyOnBreakError(
                    "Employee is already on break",
                    entity="break",
                    current=PunchType.BREAK_START.value,
                    target=PunchType.BREAK_START.value,
                )

            punch = self._ledger.record_punch(
                organization_id=organization_id,
                employee_id=employee_id,
                punch_type=PunchType.BREAK_START,
                timestamp=now,
                meta=PunchMeta(
                    break_type=break_type,
                    scheduled_minutes=scheduled_minutes,
                    notes=optional_text(notes),
                ),
            )

        logger.info(
            "Break started for employee %s: %s, scheduled %s min",
            employee_id,
            break_type.value,
            scheduled_minutes,
        )
        return punch

    def end_break(
        self,
        *,
        organization_id: int,
        employee_id: int,
        notes: Optional[str] = None,
        force: bool = False,
        now: Optional[datetime] = None,
    ) -> BreakEndResult:
        now = now or now_local()

        with self._locks.hold(organization_id=organization_id, employee_id=employee_id):
            start = self._ledger.open_break_start(organization_id=organization_id, employee_id=employee_id)
            if not start:
                raise NoActiveBreakError("No active break found")

            closure = self.plan_break_end(start=start, now=now, force=force)
            punch, folded = self._entries.record_break_end(
                organization_id=organization_id,
                employee_id=employee_id,
                punch=closure.end_punch(optional_text(notes)),
                unpaid_minutes=closure.unpaid_minutes,
                paid_minutes=closure.paid_minutes,
            )
            if not folded:
                logger.debug("No active time entry for employee %s, break minutes not folded", employee_id)

            return self.finish_break_end(
                organization_id=organization_id,
                employee_id=employee_id,
                closure=closure,
                punch=punch,
            )

    def plan_break_end(self, *, start: Punch, now: datetime, force: bool = False) -> BreakClosure:
        """Apply the break rules to ending ``start`` at ``now``. Writes nothing.

        Raises BreakTooShortError for an unpaid break under the minimum unless forced.
        """

        actual_minutes = minutes_between(start.timestamp, now)
        break_type = start.break_type or BreakType.UNPAID
        scheduled_minutes = start.scheduled_minutes or self._policy.default_scheduled_minutes

        self._policy.check_minimum(break_type, actual_minutes, force=force)

        return BreakClosure(
            start=start,
            ended_at=now,
            actual_minutes=actual_minutes,
            break_type=break_type,
            scheduled_minutes=scheduled_minutes,
            overage_minutes=self._policy.overage_minutes(actual_minutes, scheduled_minutes),
        )

    def finish_break_end(
        self,
        *,
        organization_id: int,
        employee_id: int,
        closure: BreakClosure,
        punch: Punch,
    ) -> BreakEndResult:
        """Bookkeeping after the break_end punch is stored: the overage violation, if any."""

        violation_type: Optional[ViolationType] = None
        violation_created = False
        if closure.overage_minutes is not None:
            violation_type = ViolationType.BREAK_TOO_LONG
            logger.info(
                "Break too long for employee %s: %s min vs scheduled %s min",
                employee_id,
                closure.actual_minutes,
                closure.scheduled_minutes,
            )
            violation_created = self._record_violation(
                organization_id=organization_id,
                employee_id=employee_id,
                closure=closure,
            )

        logger.info(
            "Break ended for employee %s: %s min (%s)",
            employee_id,
            closure.actual_minutes,
            closure.break_type.value,
        )
        return BreakEndResult(
            actual_minutes=closure.actual_minutes,
            break_type=closure.break_type,
            scheduled_minutes=closure.scheduled_minutes,
            violation_created=violation_created,
            violation_type=violation_type,
            punch=punch,
        )

    def _record_violation(self, *, organization_id: int, employee_id: int, closure: BreakClosure) -> bool:
        # Best effort: a missing violation record is acceptable, a blocked break end is not.
        try:
            employee = self._directory.get_by_id(organization_id=organization_id, employee_id=employee_id)
            self._violations.create(
                NewBreakViolation(
                    organization_id=int(organization_id),
                    employee_id=int(employee_id),
                    employee_name=employee.full_name if employee else "Unknown",
                    punch_id=closure.start.punch_id,
                    violation_type=ViolationType.BREAK_TOO_LONG,
                    violation_date=closure.ended_at.date(),
                    break_type=closure.break_type,
                    scheduled_minutes=closure.scheduled_minutes,
                    actual_minutes=closure.actual_minutes,
                    difference_minutes=closure.overage_minutes,
                    break_start=closure.start.timestamp,
                    break_end=closure.ended_at,
                    notes=f"Break exceeded scheduled duration by {closure.overage_minutes} minutes",
                )
            )
            return True
        except Exception:
            logger.warning("Failed to record break violation for employee %s", employee_id, exc_info=True)
            return False

    def get_active_break(self, *, organization_id: int, employee_id: int) -> Optional[BreakInfo]:
        start = self._ledger.open_break_start(organization_id=organization_id, employee_id=employee_id)
        if not start:
            return None
        return BreakInfo(
            punch_id=start.punch_id,
            started_at=start.timestamp,
            break_type=start.break_type or BreakType.UNPAID,
            scheduled_minutes=start.scheduled_minutes or self._policy.default_scheduled_minutes,
        )

    def break_history(self, *, organization_id: int, employee_id: int, work_date: date) -> Sequence[Punch]:
        return self._ledger.break_history(organization_id=organization_id, employee_id=employee_id, work_date=work_date)

    def get_violation(self, *, organization_id: int, violation_id: int) -> BreakViolation:
        violation = self._violations.get_by_id(organization_id=int(organization_id), violation_id=int(violation_id))
        if not violation:
            raise NotFoundError(f"Break violation {violation_id} not found")
        return violation

    def list_violations(
        self,
        *,
        organization_id: int,
        status: Optional[ViolationStatus | str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        employee_id: Optional[int] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[BreakViolation]:
        return self._violations.list(
            organization_id=int(organization_id),
            status=parse_enum(ViolationStatus, status, "Status") if status else None,
            start_date=start_date,
            end_date=end_date,
            employee_id=employee_id,
            limit=int(limit),
        )

    def review_violation(
        self,
        *,
        organization_id: int,
        violation_id: int,
        reviewer_id: int,
        new_status: ViolationStatus | str,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> BreakViolation:
        """Record a reviewer's decision. Reviewed violations are final; a second review raises."""

        now = now or now_local()
        new_status = parse_enum(ViolationStatus, new_status, "Status")
        reviewer = require_approver(self._directory, organization_id=organization_id, employee_id=reviewer_id)

        violation = self.get_violation(organization_id=organization_id, violation_id=violation_id)
        check_violation_transition(violation.status, new_status)

        reviewed = self._violations.review(
            organization_id=int(organization_id),
            violation_id=int(violation_id),
            status=new_status,
            reviewed_by=reviewer.employee_id,
            reviewed_by_name=reviewer.full_name,
            reviewed_at=now,
            review_notes=optional_text(notes),
        )
        if not reviewed:
            # Another reviewer got there first.
            current = self.get_violation(organization_id=organization_id, violation_id=violation_id)
            check_violation_transition(current.status, new_status)

        logger.info("Violation %s reviewed by %s: %s", violation_id, reviewer.employee_id, new_status.value)
        return self.get_violation(organization_id=organization_id, violation_id=violation_id)
