from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import AdjustmentStatus, AdjustmentType
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import (
    ADJUSTABLE_ENTRY_STATUSES,
    AdjustmentReview,
    EntryCorrection,
    NewTimeAdjustment,
    TimeAdjustment,
)
from .repository import TimeAdjustmentRepository

_COLUMNS = """
    adjustment_id, organization_id, employee_id, employee_name, entry_id, request_type,
    original_date, original_clock_in, original_clock_out, requested_clock_in, requested_clock_out,
    reason, employee_notes, status, reviewed_by, reviewed_by_name, reviewed_at,
    admin_response, admin_notes, created_at
"""

_ADJUSTABLE = tuple(s.value for s in sorted(ADJUSTABLE_ENTRY_STATUSES, key=lambda s: s.value))


def _to_adjustment(r: dict) -> TimeAdjustment:
    return TimeAdjustment(
        adjustment_id=int(r["adjustment_id"]),
        organization_id=int(r["organization_id"]),
        employee_id=int(r["employee_id"]),
        employee_name=r["employee_name"],
        entry_id=int(r["entry_id"]),
        request_type=AdjustmentType(r["request_type"]),
        original_date=r["original_date"],
        original_clock_in=r["original_clock_in"],
        original_clock_out=r.get("original_clock_out"),
        requested_clock_in=r.get("requested_clock_in"),
        requested_clock_out=r.get("requested_clock_out"),
        reason=r["reason"],
        status=AdjustmentStatus(r["status"]),
        employee_notes=r.get("employee_notes"),
        reviewed_by=r.get("reviewed_by"),
        reviewed_by_name=r.get("reviewed_by_name"),
        reviewed_at=r.get("reviewed_at"),
        admin_response=r.get("admin_response"),
        admin_notes=r.get("admin_notes"),
        created_at=r.get("created_at"),
    )


def _close_from_pending(cur, organization_id: int, adjustment_id: int, status: AdjustmentStatus, review) -> bool:
    cur.execute(
        """
        UPDATE time_adjustment_requests
        SET status=%s, reviewed_by=%s, reviewed_by_name=%s, reviewed_at=%s,
            admin_response=%s, admin_notes=%s
        WHERE organization_id=%s AND adjustment_id=%s AND status=%s
        """,
        (
            status.value,
            review.reviewed_by if review else None,
            review.reviewed_by_name if review else None,
            review.reviewed_at if review else None,
            review.admin_response if review else None,
            review.admin_notes if review else None,
            int(organization_id),
            int(adjustment_id),
            AdjustmentStatus.PENDING.value,
        ),
    )
    return cur.rowcount == 1


class MySQLTimeAdjustmentRepository(TimeAdjustmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, adjustment: NewTimeAdjustment) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO time_adjustment_requests(
                    organization_id, employee_id, employee_name, entry_id, request_type,
                    original_date, original_clock_in, original_clock_out,
                    requested_clock_in, requested_clock_out, reason, employee_notes, status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(adjustment.organization_id),
                    int(adjustment.employee_id),
                    adjustment.employee_name,
                    int(adjustment.entry_id),
                    adjustment.request_type.value,
                    adjustment.original_date,
                    adjustment.original_clock_in,
                    adjustment.original_clock_out,
                    adjustment.requested_clock_in,
                    adjustment.requested_clock_out,
                    adjustment.reason,
                    adjustment.employee_notes,
                    AdjustmentStatus.PENDING.value,
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, *, organization_id: int, adjustment_id: int) -> Optional[TimeAdjustment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM time_adjustment_requests WHERE organization_id=%s AND adjustment_id=%s",
                (int(organization_id), int(adjustment_id)),
            )
            r = fetchone(cur)
            return _to_adjustment(r) if r else None

    def list(
        self,
        *,
        organization_id: int,
        employee_id: Optional[int] = None,
        status: Optional[AdjustmentStatus] = None,
        limit: int = 200,
    ) -> Sequence[TimeAdjustment]:
        clauses = ["organization_id=%s"]
        params: list[object] = [int(organization_id)]

        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM time_adjustment_requests
                WHERE {where}
                ORDER BY created_at DESC, adjustment_id DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_to_adjustment(r) for r in fetchall(cur)]

    def close(
        self,
        *,
        organization_id: int,
        adjustment_id: int,
        status: AdjustmentStatus,
        review: Optional[AdjustmentReview] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            return _close_from_pending(cur, organization_id, adjustment_id, status, review)

    def approve(
        self,
        *,
        organization_id: int,
        adjustment_id: int,
        review: AdjustmentReview,
        correction: EntryCorrection,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            if not _close_from_pending(cur, organization_id, adjustment_id, AdjustmentStatus.APPROVED, review):
                return False

            cur.execute(
                "SELECT status FROM time_entries WHERE organization_id=%s AND entry_id=%s FOR UPDATE",
                (int(organization_id), int(correction.entry_id)),
            )
            row = fetchone(cur)
            if not row or row["status"] not in _ADJUSTABLE:
                # Raising inside the block rolls the request update back.
                raise ConflictError(f"Time entry {correction.entry_id} can no longer be adjusted")

            cur.execute(
                f"""
                UPDATE time_entries
                SET clock_in=%s, clock_out=%s, total_hours=%s
                WHERE organization_id=%s AND entry_id=%s AND status IN ({in_clause(_ADJUSTABLE)})
                """,
                (
                    correction.clock_in,
                    correction.clock_out,
                    float(correction.total_hours),
                    int(organization_id),
                    int(correction.entry_id),
                    *_ADJUSTABLE,
                ),
            )
            return True
