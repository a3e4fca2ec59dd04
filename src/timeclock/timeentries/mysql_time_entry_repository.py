from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import TimeEntryStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from ..punches.model import NewPunch, Punch
from ..punches.mysql_punch_repository import insert_punch
from .model import TimeEntry
from .repository import TimeEntryRepository

_COLUMNS = """
    entry_id, organization_id, employee_id, work_date, clock_in, clock_out,
    break_minutes, unpaid_break_minutes, paid_break_minutes, total_hours,
    status, approved_by, approved_at
"""


def _to_entry(r: dict) -> TimeEntry:
    return TimeEntry(
        entry_id=int(r["entry_id"]),
        organization_id=int(r["organization_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        clock_in=r["clock_in"],
        clock_out=r.get("clock_out"),
        break_minutes=int(r.get("break_minutes") or 0),
        unpaid_break_minutes=int(r.get("unpaid_break_minutes") or 0),
        paid_break_minutes=int(r.get("paid_break_minutes") or 0),
        total_hours=float(r.get("total_hours") or 0),
        status=TimeEntryStatus(r["status"]),
        approved_by=r.get("approved_by"),
        approved_at=r.get("approved_at"),
    )


class MySQLTimeEntryRepository(TimeEntryRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, *, organization_id: int, entry_id: int) -> Optional[TimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM time_entries WHERE organization_id=%s AND entry_id=%s",
                (int(organization_id), int(entry_id)),
            )
            r = fetchone(cur)
            return _to_entry(r) if r else None

    def get_active(self, *, organization_id: int, employee_id: int) -> Optional[TimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM time_entries
                WHERE organization_id=%s AND employee_id=%s AND status=%s
                ORDER BY clock_in DESC
                LIMIT 1
                """,
                (int(organization_id), int(employee_id), TimeEntryStatus.ACTIVE.value),
            )
            r = fetchone(cur)
            return _to_entry(r) if r else None

    def get_for_date(self, *, organization_id: int, employee_id: int, work_date: date) -> Optional[TimeEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM time_entries
                WHERE organization_id=%s AND employee_id=%s AND work_date=%s
                """,
                (int(organization_id), int(employee_id), work_date),
            )
            r = fetchone(cur)
            return _to_entry(r) if r else None

    def open_entry(
        self,
        *,
        organization_id: int,
        employee_id: int,
        work_date: date,
        punch: NewPunch,
    ) -> TimeEntry:
        with db_cursor(self._conn_factory) as (_, cur):
            insert_punch(cur, organization_id=organization_id, employee_id=employee_id, punch=punch)
            # A duplicate day or second active entry hits a unique key and rolls the punch back too.
            cur.execute(
                """
                INSERT INTO time_entries(organization_id, employee_id, work_date, clock_in, status)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (
                    int(organization_id),
                    int(employee_id),
                    work_date,
                    punch.timestamp,
                    TimeEntryStatus.ACTIVE.value,
                ),
            )
            return TimeEntry(
                entry_id=int(cur.lastrowid),
                organization_id=int(organization_id),
                employee_id=int(employee_id),
                work_date=work_date,
                clock_in=punch.timestamp,
                clock_out=None,
            )

    def record_break_end(
        self,
        *,
        organization_id: int,
        employee_id: int,
        punch: NewPunch,
        unpaid_minutes: int = 0,
        paid_minutes: int = 0,
    ) -> tuple[Punch, bool]:
        with db_cursor(self._conn_factory) as (_, cur):
            written = insert_punch(cur, organization_id=organization_id, employee_id=employee_id, punch=punch)
            cur.execute(
                """
                UPDATE time_entries
                SET break_minutes=break_minutes+%s,
                    unpaid_break_minutes=unpaid_break_minutes+%s,
                    paid_break_minutes=paid_break_minutes+%s
                WHERE organization_id=%s AND employee_id=%s AND status=%s
                """,
                (
                    int(unpaid_minutes),
                    int(unpaid_minutes),
                    int(paid_minutes),
                    int(organization_id),
                    int(employee_id),
                    TimeEntryStatus.ACTIVE.value,
                ),
            )
            return written, cur.rowcount > 0

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE time_entries
                SET clock_out=%s,
                    total_hours=%s,
                    status=%s,
                    break_minutes=break_minutes+%s,
                    unpaid_break_minutes=unpaid_break_minutes+%s,
                    paid_break_minutes=paid_break_minutes+%s
                WHERE organization_id=%s AND entry_id=%s AND employee_id=%s AND status=%s
                """,
                (
                    clock_out,
                    float(total_hours),
                    TimeEntryStatus.COMPLETED.value,
                    int(unpaid_minutes),
                    int(unpaid_minutes),
                    int(paid_minutes),
                    int(organization_id),
                    int(entry_id),
                    int(employee_id),
                    TimeEntryStatus.ACTIVE.value,
                ),
            )
            if cur.rowcount != 1:
                return None

            return [
                insert_punch(cur, organization_id=organization_id, employee_id=employee_id, punch=punch)
                for punch in punches
            ]

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE time_entries
                SET status=%s,
                    approved_by=COALESCE(%s, approved_by),
                    approved_at=COALESCE(%s, approved_at)
                WHERE organization_id=%s AND entry_id=%s AND status=%s
                """,
                (
                    to_status.value,
                    approved_by,
                    approved_at,
                    int(organization_id),
                    int(entry_id),
                    from_status.value,
                ),
            )
            return cur.rowcount > 0

    def list_range(
        self,
        *,
        organization_id: int,
        start_date: date,
        end_date: date,
        employee_id: Optional[int] = None,
    ) -> Sequence[TimeEntry]:
        clauses = ["organization_id=%s", "work_date BETWEEN %s AND %s"]
        params: list[object] = [int(organization_id), start_date, end_date]
        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM time_entries
                WHERE {" AND ".join(clauses)}
                ORDER BY work_date DESC, employee_id ASC
                """,
                tuple(params),
            )
            return [_to_entry(r) for r in fetchall(cur)]
