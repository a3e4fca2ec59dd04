from __future__ import annotations

from datetime import date, datetime

from fakes import ORG, FakePunchRepository
from timeclock.core.enums import BreakType, PunchType
from timeclock.punches.model import PunchMeta
from timeclock.punches.service import PunchLedger


def _ledger():
    repo = FakePunchRepository()
    return PunchLedger(repo), repo


def test_record_punch_appends_without_sequence_checks():
    ledger, repo = _ledger()
    # Two clock-outs in a row are accepted; legality is the caller's job.
    ledger.record_punch(organization_id=ORG, employee_id=1, punch_type=PunchType.CLOCK_OUT, timestamp=datetime(2026, 1, 5, 9))
    ledger.record_punch(organization_id=ORG, employee_id=1, punch_type=PunchType.CLOCK_OUT, timestamp=datetime(2026, 1, 5, 10))

    assert [p.punch_type for p in repo.punches] == [PunchType.CLOCK_OUT, PunchType.CLOCK_OUT]


def test_most_recent_punch_is_by_timestamp():
    ledger, _ = _ledger()
    ledger.record_punch(organization_id=ORG, employee_id=1, punch_type=PunchType.CLOCK_IN, timestamp=datetime(2026, 1, 5, 12))
    ledger.record_punch(organization_id=ORG, employee_id=1, punch_type=PunchType.BREAK_START, timestamp=datetime(2026, 1, 5, 9))

    last = ledger.most_recent_punch(organization_id=ORG, employee_id=1)
    assert last.punch_type == PunchType.CLOCK_IN
    assert ledger.most_recent_punch(organization_id=ORG, employee_id=2) is None


def test_open_break_start_ignores_closed_breaks():
    ledger, _ = _ledger()
    meta = PunchMeta(break_type=BreakType.PAID, scheduled_minutes=15)
    ledger.record_punch(organization_id=ORG, employee_id=1, punch_type=PunchType.BREAK_START, timestamp=datetime(2026, 1, 5, 10), meta=meta)
    ledger.record_punch(organization_id=ORG, employee_id=1, punch_type=PunchType.BREAK_END, timestamp=datetime(2026, 1, 5, 10, 15), meta=meta)
    assert ledger.open_break_start(organization_id=ORG, employee_id=1) is None

    start = ledger.record_punch(
        organization_id=ORG, employee_id=1, punch_type=PunchType.BREAK_START, timestamp=datetime(2026, 1, 5, 13), meta=meta
    )
    assert ledger.open_break_start(organization_id=ORG, employee_id=1) == start


def test_punches_in_range_and_break_history():
    ledger, _ = _ledger()
    for ts, kind in [
        (datetime(2026, 1, 4, 23, 0), PunchType.BREAK_START),
        (datetime(2026, 1, 5, 8, 0), PunchType.CLOCK_IN),
        (datetime(2026, 1, 5, 12, 0), PunchType.BREAK_START),
        (datetime(2026, 1, 5, 12, 30), PunchType.BREAK_END),
        (datetime(2026, 1, 5, 17, 0), PunchType.CLOCK_OUT),
    ]:
        ledger.record_punch(organization_id=ORG, employee_id=1, punch_type=kind, timestamp=ts)

    day = ledger.punches_in_range(
        organization_id=ORG, employee_id=1, start=datetime(2026, 1, 5), end=datetime(2026, 1, 5, 23, 59)
    )
    assert [p.punch_type for p in day] == [
        PunchType.CLOCK_IN,
        PunchType.BREAK_START,
        PunchType.BREAK_END,
        PunchType.CLOCK_OUT,
    ]

    history = ledger.break_history(organization_id=ORG, employee_id=1, work_date=date(2026, 1, 5))
    assert [p.punch_type for p in history] == [PunchType.BREAK_START, PunchType.BREAK_END]
