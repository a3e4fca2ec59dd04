from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Employee role used for authorization checks."""

    ADMIN = "admin"
    MANAGER = "manager"
    STAFF = "staff"


class PunchType(str, Enum):
    CLOCK_IN = "clock_in"
    CLOCK_OUT = "clock_out"
    BREAK_START = "break_start"
    BREAK_END = "break_end"


class BreakType(str, Enum):
    PAID = "paid"
    UNPAID = "unpaid"


class TimeEntryStatus(str, Enum):
    """Lifecycle of the daily time entry."""

    ACTIVE = "active"
    COMPLETED = "completed"
    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"


class ViolationType(str, Enum):
    BREAK_TOO_SHORT = "break_too_short"
    BREAK_TOO_LONG = "break_too_long"
    MISSED_BREAK = "missed_break"


class ViolationStatus(str, Enum):
    PENDING = "pending"
    ACKNOWLEDGED = "acknowledged"
    EXCUSED = "excused"
    WARNED = "warned"


class SwapType(str, Enum):
    SWAP = "swap"
    GIVEAWAY = "giveaway"
    PICKUP = "pickup"


class SwapStatus(str, Enum):
    """Shift swap workflow states."""

    PENDING = "pending"
    MANAGER_PENDING = "manager_pending"
    MANAGER_APPROVED = "manager_approved"
    COMPLETED = "completed"
    REJECTED = "rejected"
    MANAGER_REJECTED = "manager_rejected"
    CANCELLED = "cancelled"


class TimeOffType(str, Enum):
    VACATION = "vacation"
    SICK = "sick"
    PERSONAL = "personal"
    UNPAID = "unpaid"


class RequestStatus(str, Enum):
    """Approval state shared by time-off requests."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class AdjustmentType(str, Enum):
    """Which recorded times an adjustment request corrects."""

    CLOCK_IN = "clock_in"
    CLOCK_OUT = "clock_out"
    MODIFY_ENTRY = "modify_entry"


class AdjustmentStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
