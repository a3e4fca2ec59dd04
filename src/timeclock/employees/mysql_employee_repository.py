from __future__ import annotations

from typing import Optional

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Employee
from .repository import EmployeeDirectory


class MySQLEmployeeDirectory(EmployeeDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, *, organization_id: int, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT employee_id, organization_id, full_name, role, is_active
                FROM employees
                WHERE organization_id=%s AND employee_id=%s
                """,
                (int(organization_id), int(employee_id)),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Employee(
                employee_id=int(r["employee_id"]),
                organization_id=int(r["organization_id"]),
                full_name=r["full_name"],
                role=Role(r["role"]),
                is_active=bool(r["is_active"]),
            )
