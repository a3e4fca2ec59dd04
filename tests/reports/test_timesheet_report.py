from __future__ import annotations

from datetime import date, datetime

import pytest

from fakes import ORG, build_fake_container
from timeclock.core.exceptions import ValidationError


def _work_day(c, employee_id, day, start, end):
    c.time_entry_service.clock_in(organization_id=ORG, employee_id=employee_id, now=datetime(2026, 1, day, *start))
    c.time_entry_service.clock_out(organization_id=ORG, employee_id=employee_id, now=datetime(2026, 1, day, *end))


@pytest.fixture
def c():
    c = build_fake_container()
    _work_day(c, 1, 5, (8, 0), (12, 0))
    _work_day(c, 2, 5, (8, 0), (16, 30))
    _work_day(c, 1, 6, (9, 0), (13, 15))
    # Still clocked in.
    c.time_entry_service.clock_in(organization_id=ORG, employee_id=3, now=datetime(2026, 1, 6, 10, 0))
    return c


def test_rows_and_summary(c):
    report = c.report_service.build_hours_report(organization_id=ORG, start=date(2026, 1, 5), end=date(2026, 1, 6))

    assert len(report.rows) == 4
    open_row = next(r for r in report.rows if r["employee_id"] == 3)
    assert open_row["clock_in"] == "10:00"
    assert open_row["clock_out"] == "-"
    assert open_row["status"] == "active"

    assert [s["full_name"] for s in report.summary] == ["Bob Staff", "Alice Staff", "Carol Staff"]
    alice = report.summary[1]
    assert alice["total_hours"] == 8.25
    assert alice["entry_count"] == 2


def test_single_employee_filter(c):
    report = c.report_service.build_hours_report(
        organization_id=ORG, start=date(2026, 1, 5), end=date(2026, 1, 5), employee_id=1
    )

    assert [r["work_date"] for r in report.rows] == ["2026-01-05"]
    assert report.summary == [
        {
            "employee_id": 1,
            "full_name": "Alice Staff",
            "total_hours": 4.0,
            "unpaid_break_minutes": 0,
            "paid_break_minutes": 0,
            "entry_count": 1,
        }
    ]


def test_reversed_range_is_rejected(c):
    with pytest.raises(ValidationError):
        c.report_service.build_hours_report(organization_id=ORG, start=date(2026, 1, 6), end=date(2026, 1, 5))
