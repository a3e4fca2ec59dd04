from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import BreakType, ViolationStatus, ViolationType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import BreakViolation, NewBreakViolation
from .repository import BreakViolationRepository

_COLUMNS = """
    violation_id, organization_id, employee_id, employee_name, punch_id,
    violation_type, violation_date, break_type, scheduled_minutes, actual_minutes,
    difference_minutes, break_start, break_end, status, reviewed_by, reviewed_by_name,
    reviewed_at, review_notes, notes, created_at
"""


def _to_violation(r: dict) -> BreakViolation:
    return BreakViolation(
        violation_id=int(r["violation_id"]),
        organization_id=int(r["organization_id"]),
        employee_id=int(r["employee_id"]),
        employee_name=r["employee_name"],
        punch_id=r.get("punch_id"),
        violation_type=ViolationType(r["violation_type"]),
        violation_date=r["violation_date"],
        break_type=BreakType(r["break_type"]) if r.get("break_type") else None,
        scheduled_minutes=r.get("scheduled_minutes"),
        actual_minutes=r.get("actual_minutes"),
        difference_minutes=r.get("difference_minutes"),
        break_start=r.get("break_start"),
        break_end=r.get("break_end"),
        status=ViolationStatus(r["status"]),
        reviewed_by=r.get("reviewed_by"),
        reviewed_by_name=r.get("reviewed_by_name"),
        reviewed_at=r.get("reviewed_at"),
        review_notes=r.get("review_notes"),
        notes=r.get("notes"),
        created_at=r.get("created_at"),
    )


class MySQLBreakViolationRepository(BreakViolationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, violation: NewBreakViolation) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO break_violations(
                    organization_id, employee_id, employee_name, punch_id, violation_type,
                    violation_date, break_type, scheduled_minutes, actual_minutes,
                    difference_minutes, break_start, break_end, status, notes
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(violation.organization_id),
                    int(violation.employee_id),
                    violation.employee_name,
                    violation.punch_id,
                    violation.violation_type.value,
                    violation.violation_date,
                    violation.break_type.value,
                    int(violation.scheduled_minutes),
                    int(violation.actual_minutes),
                    int(violation.difference_minutes),
                    violation.break_start,
                    violation.break_end,
                    ViolationStatus.PENDING.value,
                    violation.notes,
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, *, organization_id: int, violation_id: int) -> Optional[BreakViolation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM break_violations WHERE organization_id=%s AND violation_id=%s",
                (int(organization_id), int(violation_id)),
            )
            r = fetchone(cur)
            return _to_violation(r) if r else None

    def review(
        self,
        *,
        organization_id: int,
        violation_id: int,
        status: ViolationStatus,
        reviewed_by: int,
        reviewed_by_name: str,
        reviewed_at: datetime,
        review_notes: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE break_violations
                SET status=%s, reviewed_by=%s, reviewed_by_name=%s, reviewed_at=%s, review_notes=%s
                WHERE organization_id=%s AND violation_id=%s AND status=%s
                """,
                (
                    status.value,
                    int(reviewed_by),
                    reviewed_by_name,
                    reviewed_at,
                    review_notes,
                    int(organization_id),
                    int(violation_id),
                    ViolationStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0

    def list(
        self,
        *,
        organization_id: int,
        status: Optional[ViolationStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        employee_id: Optional[int] = None,
        limit: int = 200,
    ) -> Sequence[BreakViolation]:
        clauses = ["organization_id=%s"]
        params: list[object] = [int(organization_id)]

        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        if start_date is not None:
            clauses.append("violation_date>=%s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("violation_date<=%s")
            params.append(end_date)
        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM break_violations
                WHERE {" AND ".join(clauses)}
                ORDER BY created_at DESC, violation_id DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_to_violation(r) for r in fetchall(cur)]
