from __future__ import annotations

from ..core.exceptions import AuthorizationError, NotFoundError
from .model import Employee
from .repository import EmployeeDirectory


def require_employee(directory: EmployeeDirectory, *, organization_id: int, employee_id: int) -> Employee:
    employee = directory.get_by_id(organization_id=int(organization_id), employee_id=int(employee_id))
    if not employee or not employee.is_active:
        raise NotFoundError(f"Employee {employee_id} not found")
    return employee


def require_approver(directory: EmployeeDirectory, *, organization_id: int, employee_id: int) -> Employee:
    employee = require_employee(directory, organization_id=organization_id, employee_id=employee_id)
    if not employee.can_approve:
        raise AuthorizationError("Only managers can make this decision")
    return employee
