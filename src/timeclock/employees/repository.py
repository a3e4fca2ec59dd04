from __future__ import annotations

from typing import Optional, Protocol

from .model import Employee


class EmployeeDirectory(Protocol):
    """Resolves employee ids to display names and roles within one organization."""

    def get_by_id(self, *, organization_id: int, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError
