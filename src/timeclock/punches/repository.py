from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import PunchType
from .model import Punch, PunchMeta


class PunchRepository(Protocol):
    """Append-only punch storage. Nothing here updates or deletes a punch."""

    def append(
        self,
        *,
        organization_id: int,
        employee_id: int,
        punch_type: PunchType,
        timestamp: datetime,
        meta: PunchMeta,
    ) -> Punch:
        raise NotImplementedError

    def most_recent(
        self,
        *,
        organization_id: int,
        employee_id: int,
        punch_type: Optional[PunchType] = None,
    ) -> Optional[Punch]:
        """Latest punch by (timestamp, id), optionally restricted to one type."""

        raise NotImplementedError

    def list_range(
        self,
        *,
        organization_id: int,
        employee_id: int,
        start: datetime,
        end: datetime,
        punch_types: Optional[Sequence[PunchType]] = None,
    ) -> Sequence[Punch]:
        raise NotImplementedError
