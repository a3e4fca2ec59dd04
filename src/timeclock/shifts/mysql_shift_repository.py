from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, normalize_mysql_time
from .model import Shift
from .repository import ShiftRepository


def to_shift(r: dict) -> Shift:
    return Shift(
        shift_id=int(r["shift_id"]),
        organization_id=int(r["organization_id"]),
        employee_id=int(r["employee_id"]),
        employee_name=r["employee_name"],
        shift_date=r["shift_date"],
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        position=r.get("position"),
        status=r.get("status") or "scheduled",
    )


class MySQLShiftRepository(ShiftRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, *, organization_id: int, shift_id: int) -> Optional[Shift]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT shift_id, organization_id, employee_id, employee_name,
                       shift_date, start_time, end_time, position, status
                FROM shifts
                WHERE organization_id=%s AND shift_id=%s
                """,
                (int(organization_id), int(shift_id)),
            )
            r = fetchone(cur)
            return to_shift(r) if r else None
