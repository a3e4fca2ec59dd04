from __future__ import annotations

from dataclasses import replace
from datetime import datetime

import pytest

from fakes import ORG, build_fake_container
from timeclock.core.enums import AdjustmentStatus, AdjustmentType, PunchType, TimeEntryStatus
from timeclock.core.exceptions import (
    AuthorizationError,
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)


def at(hour, minute=0, day=5):
    return datetime(2026, 1, day, hour, minute)


@pytest.fixture
def c():
    return build_fake_container()


def _worked(c, employee_id=1, start=at(8), end=at(16, 30), unpaid_break=30):
    svc = c.time_entry_service
    svc.clock_in(organization_id=ORG, employee_id=employee_id, now=start)
    if unpaid_break:
        c.break_service.start_break(
            organization_id=ORG, employee_id=employee_id, break_type="unpaid", scheduled_minutes=30, now=at(12)
        )
        c.break_service.end_break(organization_id=ORG, employee_id=employee_id, now=at(12, unpaid_break))
    return svc.clock_out(organization_id=ORG, employee_id=employee_id, now=end)


def _request(c, entry, **overrides):
    kwargs = dict(
        organization_id=ORG,
        employee_id=entry.employee_id,
        entry_id=entry.entry_id,
        reason="Forgot to clock in at the door",
        requested_clock_in=at(7, 30),
    )
    kwargs.update(overrides)
    return c.adjustment_service.create_request(**kwargs)


def test_create_records_originals_and_derives_type(c):
    entry = _worked(c)

    adj = _request(c, entry, employee_notes="  badge reader was down ")

    assert adj.status == AdjustmentStatus.PENDING
    assert adj.request_type == AdjustmentType.CLOCK_IN
    assert adj.employee_name == "Alice Staff"
    assert adj.original_date == entry.work_date
    assert adj.original_clock_in == at(8)
    assert adj.original_clock_out == at(16, 30)
    assert adj.employee_notes == "badge reader was down"

    out_only = _request(c, entry, requested_clock_in=None, requested_clock_out=at(17))
    both = _request(c, entry, requested_clock_out=at(17))
    assert out_only.request_type == AdjustmentType.CLOCK_OUT
    assert both.request_type == AdjustmentType.MODIFY_ENTRY


def test_approval_corrects_entry_and_recomputes_hours(c):
    entry = _worked(c)
    assert entry.total_hours == 8.0
    adj = _request(c, entry, requested_clock_out=at(17))

    approved = c.adjustment_service.approve_request(
        organization_id=ORG, adjustment_id=adj.adjustment_id, reviewer_id=9, admin_notes="checked camera", now=at(18)
    )

    assert approved.status == AdjustmentStatus.APPROVED
    assert approved.reviewed_by == 9
    assert approved.reviewed_by_name == "Maria Manager"
    assert approved.reviewed_at == at(18)
    assert approved.admin_notes == "checked camera"

    corrected = c.time_entry_service.get_entry(organization_id=ORG, entry_id=entry.entry_id)
    assert corrected.clock_in == at(7, 30)
    assert corrected.clock_out == at(17)
    # 9.5 hours on the clock less the 30 minute unpaid break.
    assert corrected.total_hours == 9.0
    assert corrected.status == TimeEntryStatus.COMPLETED
    # The ledger keeps what was punched.
    clock_in = [p for p in c.punches_repo.punches if p.punch_type == PunchType.CLOCK_IN][0]
    assert clock_in.timestamp == at(8)


def test_rejection_needs_a_reason_and_leaves_entry_alone(c):
    entry = _worked(c)
    adj = _request(c, entry)

    with pytest.raises(ValidationError):
        c.adjustment_service.reject_request(
            organization_id=ORG, adjustment_id=adj.adjustment_id, reviewer_id=9, admin_notes="  "
        )

    rejected = c.adjustment_service.reject_request(
        organization_id=ORG, adjustment_id=adj.adjustment_id, reviewer_id=9, admin_notes="no evidence"
    )
    assert rejected.status == AdjustmentStatus.REJECTED
    assert rejected.admin_notes == "no evidence"
    assert c.time_entry_service.get_entry(organization_id=ORG, entry_id=entry.entry_id).clock_in == at(8)

    with pytest.raises(InvalidTransitionError) as exc:
        c.adjustment_service.approve_request(organization_id=ORG, adjustment_id=adj.adjustment_id, reviewer_id=9)
    assert exc.value.current == AdjustmentStatus.REJECTED.value


def test_only_approvers_review_and_only_owner_cancels(c):
    entry = _worked(c)
    adj = _request(c, entry)

    with pytest.raises(AuthorizationError):
        c.adjustment_service.approve_request(organization_id=ORG, adjustment_id=adj.adjustment_id, reviewer_id=1)
    with pytest.raises(AuthorizationError):
        c.adjustment_service.cancel_request(organization_id=ORG, adjustment_id=adj.adjustment_id, employee_id=2)

    cancelled = c.adjustment_service.cancel_request(organization_id=ORG, adjustment_id=adj.adjustment_id, employee_id=1)
    assert cancelled.status == AdjustmentStatus.CANCELLED
    assert cancelled.reviewed_by is None

    with pytest.raises(InvalidTransitionError):
        c.adjustment_service.cancel_request(organization_id=ORG, adjustment_id=adj.adjustment_id, employee_id=1)


@pytest.mark.parametrize(
    "overrides",
    [
        {"reason": "   "},
        {"requested_clock_in": None},
        {"requested_clock_in": at(7, 30, day=6)},
        {"requested_clock_in": at(17)},
        {"requested_clock_in": None, "requested_clock_out": at(7)},
        {"entry_id": None},
    ],
)
def test_create_rejects_invalid_input(c, overrides):
    entry = _worked(c)
    with pytest.raises(ValidationError):
        _request(c, entry, **overrides)
    assert c.adjustment_service.list_requests(organization_id=ORG) == []


def test_create_checks_ownership_and_entry_state(c):
    entry = _worked(c)
    with pytest.raises(AuthorizationError):
        _request(c, entry, employee_id=2)
    with pytest.raises(NotFoundError):
        _request(c, entry, entry_id=404)

    active = c.time_entry_service.clock_in(organization_id=ORG, employee_id=3, now=at(8))
    with pytest.raises(ValidationError):
        _request(c, active)


def test_approval_fails_when_entry_was_approved_meanwhile(c):
    entry = _worked(c)
    adj = _request(c, entry)
    c.time_entry_service.submit_entry(organization_id=ORG, employee_id=1, entry_id=entry.entry_id)
    c.time_entry_service.approve_entry(organization_id=ORG, manager_id=9, entry_id=entry.entry_id)

    with pytest.raises(ValidationError):
        c.adjustment_service.approve_request(organization_id=ORG, adjustment_id=adj.adjustment_id, reviewer_id=9)

    assert c.adjustment_service.get_request(organization_id=ORG, adjustment_id=adj.adjustment_id).status == (
        AdjustmentStatus.PENDING
    )


def test_entry_approved_during_adjustment_approval_rolls_back_both(c):
    entry = _worked(c)
    adj = _request(c, entry)
    repo = c.adjustments_repo
    original = repo.approve

    def approve_after_entry_locked(**kwargs):
        c.time_entries_repo.entries[entry.entry_id] = replace(
            c.time_entries_repo.entries[entry.entry_id], status=TimeEntryStatus.APPROVED
        )
        return original(**kwargs)

    repo.approve = approve_after_entry_locked

    with pytest.raises(ConflictError):
        c.adjustment_service.approve_request(organization_id=ORG, adjustment_id=adj.adjustment_id, reviewer_id=9)

    assert c.adjustment_service.get_request(organization_id=ORG, adjustment_id=adj.adjustment_id).status == (
        AdjustmentStatus.PENDING
    )
    assert c.time_entries_repo.entries[entry.entry_id].clock_in == at(8)


def test_approval_that_loses_to_a_cancel_reports_cancelled(c):
    entry = _worked(c)
    adj = _request(c, entry)
    repo = c.adjustments_repo
    original = repo.approve

    def approve_after_cancel(**kwargs):
        repo.adjustments[adj.adjustment_id] = replace(repo.adjustments[adj.adjustment_id], status=AdjustmentStatus.CANCELLED)
        return original(**kwargs)

    repo.approve = approve_after_cancel

    with pytest.raises(InvalidTransitionError) as exc:
        c.adjustment_service.approve_request(organization_id=ORG, adjustment_id=adj.adjustment_id, reviewer_id=9)

    assert exc.value.current == AdjustmentStatus.CANCELLED.value
    assert c.time_entries_repo.entries[entry.entry_id].clock_in == at(8)


def test_list_filters(c):
    alice = _worked(c, employee_id=1)
    bob = _worked(c, employee_id=2)
    first = _request(c, alice)
    second = _request(c, bob)
    c.adjustment_service.cancel_request(organization_id=ORG, adjustment_id=first.adjustment_id, employee_id=1)

    pending = c.adjustment_service.list_pending(organization_id=ORG)
    assert [a.adjustment_id for a in pending] == [second.adjustment_id]

    mine = c.adjustment_service.list_requests(organization_id=ORG, employee_id=1)
    assert [a.adjustment_id for a in mine] == [first.adjustment_id]

    with pytest.raises(ValidationError):
        c.adjustment_service.list_requests(organization_id=ORG, status="maybe")
