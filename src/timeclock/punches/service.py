from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import day_bounds
from ..core.enums import PunchType
from .model import Punch, PunchMeta
from .repository import PunchRepository

logger = logging.getLogger(__name__)

BREAK_BOUNDARIES = (PunchType.BREAK_START, PunchType.BREAK_END)


class PunchLedger:
    """Append-only log of raw clock and break events.

    The ledger never checks sequence legality; callers do that with ``open_break_start``
    and the active entry while holding the employee lock. Clock punches and break ends
    are written by the time entry repository in the same transaction as the entry change.
    """

    def __init__(self, punches: PunchRepository):
        self._punches = punches

    def record_punch(
        self,
        *,
        organization_id: int,
        employee_id: int,
        punch_type: PunchType,
        timestamp: datetime,
        meta: Optional[PunchMeta] = None,
    ) -> Punch:
        punch = self._punches.append(
            organization_id=int(organization_id),
            employee_id=int(employee_id),
            punch_type=punch_type,
            timestamp=timestamp,
            meta=meta or PunchMeta(),
        )
        logger.debug("Recorded %s punch %s for employee %s", punch_type.value, punch.punch_id, employee_id)
        return punch

    def most_recent_punch(self, *, organization_id: int, employee_id: int) -> Optional[Punch]:
        return self._punches.most_recent(organization_id=int(organization_id), employee_id=int(employee_id))

    def punches_in_range(
        self,
        *,
        organization_id: int,
        employee_id: int,
        start: datetime,
        end: datetime,
    ) -> Sequence[Punch]:
        return self._punches.list_range(
            organization_id=int(organization_id),
            employee_id=int(employee_id),
            start=start,
            end=end,
        )

    def open_break_start(self, *, organization_id: int, employee_id: int) -> Optional[Punch]:
        """Latest break_start with no break_end recorded after it, else None."""

        start = self._punches.most_recent(
            organization_id=int(organization_id),
            employee_id=int(employee_id),
            punch_type=PunchType.BREAK_START,
        )
        if not start:
            return None

        end = self._punches.most_recent(
            organization_id=int(organization_id),
            employee_id=int(employee_id),
            punch_type=PunchType.BREAK_END,
        )
        if end and end.sort_key > start.sort_key:
            return None
        return start

    def break_history(self, *, organization_id: int, employee_id: int, work_date: date) -> Sequence[Punch]:
        start, end = day_bounds(work_date)
        return self._punches.list_range(
            organization_id=int(organization_id),
            employee_id=int(employee_id),
            start=start,
            end=end,
            punch_types=BREAK_BOUNDARIES,
        )
