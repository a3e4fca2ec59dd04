from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthorizationError(DomainError):
    """Raised when an employee lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced employee, shift, swap, entry or request is missing."""


class InvalidTransitionError(DomainError):
    """A state-machine step was attempted from the wrong status."""

    def __init__(self, message: str, *, entity: str = "", current: Optional[str] = None, target: Optional[str] = None):
        super().__init__(message)
        self.entity = entity
        self.current = current
        self.target = target


class AlreadyOnBreakError(InvalidTransitionError):
    """Break start requested while a break is still open."""


class NoActiveBreakError(DomainError):
    """Break end requested with no open break."""


class BreakTooShortError(DomainError):
    """Unpaid break ended before the minimum duration."""

    def __init__(self, remaining_minutes: int):
        super().__init__(f"Break too short, {remaining_minutes} minute(s) remaining")
        self.remaining_minutes = int(remaining_minutes)


class ConflictError(DomainError):
    """Raised when a write collides with a uniqueness rule in the store."""


class ShiftSwapConflictError(ConflictError):
    """Another in-flight swap already references the same shift."""


class StoreUnavailableError(DomainError):
    """Persistence failure."""
