from __future__ import annotations

import math
from datetime import date, datetime, time


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_iso_datetime(value: str) -> datetime:
    """Parse YYYY-MM-DDTHH:MM[:SS] into a naive local datetime."""
    return datetime.strptime(value[:19], "%Y-%m-%dT%H:%M:%S" if len(value) > 16 else "%Y-%m-%dT%H:%M")


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def minutes_between(start: datetime, end: datetime) -> int:
    """Whole minutes from start to end, halves rounded up."""
    return int(math.floor((end - start).total_seconds() / 60 + 0.5))


def inclusive_days(start: date, end: date) -> int:
    return (end - start).days + 1


def day_bounds(work_date: date) -> tuple[datetime, datetime]:
    return datetime.combine(work_date, time.min), datetime.combine(work_date, time.max)
