from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import BreakType, PunchType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import NewPunch, Punch, PunchMeta
from .repository import PunchRepository

_COLUMNS = """
    punch_id, organization_id, employee_id, punch_type, punched_at,
    break_type, scheduled_minutes, location, notes
"""


def _to_punch(r: dict) -> Punch:
    return Punch(
        punch_id=int(r["punch_id"]),
        organization_id=int(r["organization_id"]),
        employee_id=int(r["employee_id"]),
        punch_type=PunchType(r["punch_type"]),
        timestamp=r["punched_at"],
        break_type=BreakType(r["break_type"]) if r.get("break_type") else None,
        scheduled_minutes=int(r["scheduled_minutes"]) if r.get("scheduled_minutes") is not None else None,
        location=r.get("location"),
        notes=r.get("notes"),
    )


def insert_punch(cur, *, organization_id: int, employee_id: int, punch: NewPunch) -> Punch:
    """INSERT on an open cursor, so the caller decides what else joins the transaction."""

    meta = punch.meta
    cur.execute(
        """
        INSERT INTO time_punches(
            organization_id, employee_id, punch_type, punched_at,
            break_type, scheduled_minutes, location, notes
        )
        VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
        """,
        (
            int(organization_id),
            int(employee_id),
            punch.punch_type.value,
            punch.timestamp,
            meta.break_type.value if meta.break_type else None,
            meta.scheduled_minutes,
            meta.location,
            meta.notes,
        ),
    )
    return Punch(
        punch_id=int(cur.lastrowid),
        organization_id=int(organization_id),
        employee_id=int(employee_id),
        punch_type=punch.punch_type,
        timestamp=punch.timestamp,
        break_type=meta.break_type,
        scheduled_minutes=meta.scheduled_minutes,
        location=meta.location,
        notes=meta.notes,
    )


class MySQLPunchRepository(PunchRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def append(
        self,
        *,
        organization_id: int,
        employee_id: int,
        punch_type: PunchType,
        timestamp: datetime,
        meta: PunchMeta,
    ) -> Punch:
        with db_cursor(self._conn_factory) as (_, cur):
            return insert_punch(
                cur,
                organization_id=organization_id,
                employee_id=employee_id,
                punch=NewPunch(punch_type=punch_type, timestamp=timestamp, meta=meta),
            )

    def most_recent(
        self,
        *,
        organization_id: int,
        employee_id: int,
        punch_type: Optional[PunchType] = None,
    ) -> Optional[Punch]:
        clauses = ["organization_id=%s", "employee_id=%s"]
        params: list[object] = [int(organization_id), int(employee_id)]
        if punch_type is not None:
            clauses.append("punch_type=%s")
            params.append(punch_type.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM time_punches
                WHERE {" AND ".join(clauses)}
                ORDER BY punched_at DESC, punch_id DESC
                LIMIT 1
                """,
                tuple(params),
            )
            r = fetchone(cur)
            return _to_punch(r) if r else None

    def list_range(
        self,
        *,
        organization_id: int,
        employee_id: int,
        start: datetime,
        end: datetime,
        punch_types: Optional[Sequence[PunchType]] = None,
    ) -> Sequence[Punch]:
        clauses = ["organization_id=%s", "employee_id=%s", "punched_at BETWEEN %s AND %s"]
        params: list[object] = [int(organization_id), int(employee_id), start, end]
        if punch_types:
            clauses.append(f"punch_type IN ({in_clause(punch_types)})")
            params.extend(t.value for t in punch_types)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM time_punches
                WHERE {" AND ".join(clauses)}
                ORDER BY punched_at ASC, punch_id ASC
                """,
                tuple(params),
            )
            return [_to_punch(r) for r in fetchall(cur)]
