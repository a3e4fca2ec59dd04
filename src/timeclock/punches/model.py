from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from ..core.enums import BreakType, PunchType


@dataclass(frozen=True)
class PunchMeta:
    """Optional details carried by a punch."""

    break_type: Optional[BreakType] = None
    scheduled_minutes: Optional[int] = None
    location: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class Punch:
    """Immutable clock or break boundary event."""

    punch_id: int
    organization_id: int
    employee_id: int
    punch_type: PunchType
    timestamp: datetime
    break_type: Optional[BreakType] = None
    scheduled_minutes: Optional[int] = None
    location: Optional[str] = None
    notes: Optional[str] = None

    @property
    def sort_key(self) -> tuple[datetime, int]:
        return self.timestamp, self.punch_id


@dataclass(frozen=True)
class NewPunch:
    """A punch to be written together with the time entry change it belongs to."""

    punch_type: PunchType
    timestamp: datetime
    meta: PunchMeta = field(default_factory=PunchMeta)
