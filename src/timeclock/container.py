from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .adjustments.mysql_adjustment_repository import MySQLTimeAdjustmentRepository
from .adjustments.repository import TimeAdjustmentRepository
from .adjustments.service import TimeAdjustmentService
from .breaks.mysql_violation_repository import MySQLBreakViolationRepository
from .breaks.policy import BreakPolicy
from .breaks.repository import BreakViolationRepository
from .breaks.service import BreakService
from .database.connection import DBConfig, DatabaseConnection
from .database.locks import EmployeeLocks, MySQLEmployeeLocks
from .employees.mysql_employee_repository import MySQLEmployeeDirectory
from .employees.repository import EmployeeDirectory
from .punches.mysql_punch_repository import MySQLPunchRepository
from .punches.repository import PunchRepository
from .punches.service import PunchLedger
from .reports.service import TimesheetReportService
from .shifts.mysql_shift_repository import MySQLShiftRepository
from .shifts.repository import ShiftRepository
from .swaps.mysql_swap_repository import MySQLShiftSwapRepository
from .swaps.repository import ShiftSwapRepository
from .swaps.service import ShiftSwapService
from .timeentries.mysql_time_entry_repository import MySQLTimeEntryRepository
from .timeentries.repository import TimeEntryRepository
from .timeentries.service import TimeEntryService
from .timeoff.mysql_time_off_repository import MySQLTimeOffRepository
from .timeoff.repository import TimeOffRepository
from .timeoff.service import TimeOffService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    employee_directory: EmployeeDirectory
    punches_repo: PunchRepository
    time_entries_repo: TimeEntryRepository
    violations_repo: BreakViolationRepository
    shifts_repo: ShiftRepository
    swaps_repo: ShiftSwapRepository
    time_off_repo: TimeOffRepository
    adjustments_repo: TimeAdjustmentRepository
    locks: EmployeeLocks

    punch_ledger: PunchLedger
    break_service: BreakService
    time_entry_service: TimeEntryService
    swap_service: ShiftSwapService
    time_off_service: TimeOffService
    adjustment_service: TimeAdjustmentService
    report_service: TimesheetReportService


def assemble_container(
    *,
    employee_directory: EmployeeDirectory,
    punches_repo: PunchRepository,
    time_entries_repo: TimeEntryRepository,
    violations_repo: BreakViolationRepository,
    shifts_repo: ShiftRepository,
    swaps_repo: ShiftSwapRepository,
    time_off_repo: TimeOffRepository,
    adjustments_repo: TimeAdjustmentRepository,
    locks: EmployeeLocks,
    break_policy: Optional[BreakPolicy] = None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    punch_ledger = PunchLedger(punches_repo)
    break_service = BreakService(
        punch_ledger,
        time_entries_repo,
        violations_repo,
        employee_directory,
        locks,
        policy=break_policy,
    )
    time_entry_service = TimeEntryService(punch_ledger, time_entries_repo, employee_directory, locks, break_service)
    swap_service = ShiftSwapService(swaps_repo, shifts_repo, employee_directory)
    time_off_service = TimeOffService(time_off_repo, employee_directory)
    adjustment_service = TimeAdjustmentService(adjustments_repo, time_entries_repo, employee_directory)
    report_service = TimesheetReportService(time_entries_repo, employee_directory)

    return Container(
        conn=conn,
        employee_directory=employee_directory,
        punches_repo=punches_repo,
        time_entries_repo=time_entries_repo,
        violations_repo=violations_repo,
        shifts_repo=shifts_repo,
        swaps_repo=swaps_repo,
        time_off_repo=time_off_repo,
        adjustments_repo=adjustments_repo,
        locks=locks,
        punch_ledger=punch_ledger,
        break_service=break_service,
        time_entry_service=time_entry_service,
        swap_service=swap_service,
        time_off_service=time_off_service,
        adjustment_service=adjustment_service,
        report_service=report_service,
    )


def build_container(
    *,
    db_config: dict,
    lock_timeout_seconds: float = 10,
    break_policy: Optional[BreakPolicy] = None,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return assemble_container(
        employee_directory=MySQLEmployeeDirectory(conn),
        punches_repo=MySQLPunchRepository(conn),
        time_entries_repo=MySQLTimeEntryRepository(conn),
        violations_repo=MySQLBreakViolationRepository(conn),
        shifts_repo=MySQLShiftRepository(conn),
        swaps_repo=MySQLShiftSwapRepository(conn),
        time_off_repo=MySQLTimeOffRepository(conn),
        adjustments_repo=MySQLTimeAdjustmentRepository(conn),
        locks=MySQLEmployeeLocks(conn, timeout_seconds=lock_timeout_seconds),
        break_policy=break_policy,
        conn=conn,
    )
