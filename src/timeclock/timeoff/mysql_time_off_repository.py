from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import RequestStatus, TimeOffType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import NewTimeOffRequest, TimeOffRequest
from .repository import TimeOffRepository

_COLUMNS = """
    request_id, organization_id, employee_id, employee_name, time_off_type,
    start_date, end_date, total_days, reason, status, manager_id, manager_name,
    responded_at, created_at
"""


def _to_request(r: dict) -> TimeOffRequest:
    return TimeOffRequest(
        request_id=int(r["request_id"]),
        organization_id=int(r["organization_id"]),
        employee_id=int(r["employee_id"]),
        employee_name=r["employee_name"],
        time_off_type=TimeOffType(r["time_off_type"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        total_days=float(r["total_days"]),
        status=RequestStatus(r["status"]),
        reason=r.get("reason"),
        manager_id=r.get("manager_id"),
        manager_name=r.get("manager_name"),
        responded_at=r.get("responded_at"),
        created_at=r.get("created_at"),
    )


class MySQLTimeOffRepository(TimeOffRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, request: NewTimeOffRequest) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO time_off_requests(
                    organization_id, employee_id, employee_name, time_off_type,
                    start_date, end_date, total_days, reason, status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(request.organization_id),
                    int(request.employee_id),
                    request.employee_name,
                    request.time_off_type.value,
                    request.start_date,
                    request.end_date,
                    float(request.total_days),
                    request.reason,
                    RequestStatus.PENDING.value,
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, *, organization_id: int, request_id: int) -> Optional[TimeOffRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM time_off_requests WHERE organization_id=%s AND request_id=%s",
                (int(organization_id), int(request_id)),
            )
            r = fetchone(cur)
            return _to_request(r) if r else None

    def decide(
        self,
        *,
        organization_id: int,
        request_id: int,
        status: RequestStatus,
        manager_id: int,
        manager_name: str,
        responded_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE time_off_requests
                SET status=%s, manager_id=%s, manager_name=%s, responded_at=%s
                WHERE organization_id=%s AND request_id=%s AND status=%s
                """,
                (
                    status.value,
                    int(manager_id),
                    manager_name,
                    responded_at,
                    int(organization_id),
                    int(request_id),
                    RequestStatus.PENDING.value,
                ),
            )
            return cur.rowcount == 1

    def list(
        self,
        *,
        organization_id: int,
        employee_id: Optional[int] = None,
        status: Optional[RequestStatus] = None,
        limit: int = 200,
    ) -> Sequence[TimeOffRequest]:
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
                FROM time_off_requests
                WHERE {where}
                ORDER BY created_at DESC, request_id DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_to_request(r) for r in fetchall(cur)]
