from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import TimeEntryStatus
from ..punches.model import NewPunch, Punch
from .model import TimeEntry


class TimeEntryRepository(Protocol):
    def get_by_id(self, *, organization_id: int, entry_id: int) -> Optional[TimeEntry]:
        raise NotImplementedError

    def get_active(self, *, organization_id: int, employee_id: int) -> Optional[TimeEntry]:
        """The employee's single active entry, whatever its date."""

        raise NotImplementedError

    def get_for_date(self, *, organization_id: int, employee_id: int, work_date: date) -> Optional[TimeEntry]:
        raise NotImplementedError

    def open_entry(
        self,
        *,
        organization_id: int,
        employee_id: int,
        work_date: date,
        punch: NewPunch,
    ) -> TimeEntry:
        """Append the clock_in punch and create the active entry in one transaction."""

        raise NotImplementedError

    def record_break_end(
        self,
        *,
        organization_id: int,
        employee_id: int,
        punch: NewPunch,
        unpaid_minutes: int = 0,
        paid_minutes: int = 0,
    ) -> tuple[Punch, bool]:
        """Append the break_end punch and fold its minutes into the employee's active entry, if any.

        Unpaid minutes also count as deducted break. Returns the punch and whether an entry was updated.
        """

        raise NotImplementedError

    def close_entry(
        self,
        *,
        organization_id: int,
        employee_id: int,
        entry_id: int,
        clock_out: datetime,
        total_hours: float,
        punches: Sequence[NewPunch],
        unpaid_minutes: int = 0,
        paid_minutes: int = 0,
    ) -> Optional[list[Punch]]:
        """active -> completed together with the closing punches.

        Returns the stored punches, or None having written nothing when the entry is no longer active.
        """

        raise NotImplementedError

    def transition(
        self,
        *,
        organization_id: int,
        entry_id: int,
        from_status: TimeEntryStatus,
        to_status: TimeEntryStatus,
        approved_by: Optional[int] = None,
        approved_at: Optional[datetime] = None,
    ) -> bool:
        """Conditional status update; False when the entry is not in from_status."""

        raise NotImplementedError

    def list_range(
        self,
        *,
        organization_id: int,
        start_date: date,
        end_date: date,
        employee_id: Optional[int] = None,
    ) -> Sequence[TimeEntry]:
        raise NotImplementedError
