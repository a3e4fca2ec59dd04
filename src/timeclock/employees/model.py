from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import Role


@dataclass(frozen=True)
class Employee:
    """Directory record: who an employee id refers to and what they may approve."""

    employee_id: int
    organization_id: int
    full_name: str
    role: Role
    is_active: bool = True

    @property
    def can_approve(self) -> bool:
        return self.role in {Role.ADMIN, Role.MANAGER}
