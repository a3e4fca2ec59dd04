from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime

import pytest

from fakes import ORG, build_fake_container
from timeclock.core.enums import RequestStatus, TimeOffType
from timeclock.core.exceptions import AuthorizationError, InvalidTransitionError, NotFoundError, ValidationError


@pytest.fixture
def svc():
    return build_fake_container().time_off_service


def _request(svc, **overrides):
    kwargs = dict(
        organization_id=ORG,
        employee_id=1,
        time_off_type="vacation",
        start_date=date(2026, 4, 6),
        end_date=date(2026, 4, 8),
    )
    kwargs.update(overrides)
    return svc.create_request(**kwargs)


def test_total_days_defaults_to_inclusive_day_count(svc):
    req = _request(svc, reason="  family trip ")

    assert req.total_days == 3.0
    assert req.status == RequestStatus.PENDING
    assert req.time_off_type == TimeOffType.VACATION
    assert req.employee_name == "Alice Staff"
    assert req.reason == "family trip"


def test_explicit_half_day(svc):
    req = _request(svc, start_date=date(2026, 4, 6), end_date=date(2026, 4, 6), total_days=0.5)
    assert req.total_days == 0.5


@pytest.mark.parametrize(
    "overrides",
    [
        {"end_date": date(2026, 4, 5)},
        {"total_days": 0},
        {"total_days": -1},
        {"total_days": "lots"},
        {"time_off_type": "sabbatical"},
    ],
)
def test_invalid_requests_are_rejected(svc, overrides):
    with pytest.raises(ValidationError):
        _request(svc, **overrides)


def test_manager_approves(svc):
    req = _request(svc)

    approved = svc.approve_request(organization_id=ORG, request_id=req.request_id, manager_id=9)

    assert approved.status == RequestStatus.APPROVED
    assert approved.manager_id == 9
    assert approved.manager_name == "Maria Manager"
    assert approved.responded_at is not None


def test_staff_cannot_decide(svc):
    req = _request(svc)

    with pytest.raises(AuthorizationError):
        svc.reject_request(organization_id=ORG, request_id=req.request_id, manager_id=2)

    assert svc.get_request(organization_id=ORG, request_id=req.request_id).status == RequestStatus.PENDING


def test_decisions_are_final(svc):
    req = _request(svc)
    svc.reject_request(organization_id=ORG, request_id=req.request_id, manager_id=9)

    with pytest.raises(InvalidTransitionError) as exc:
        svc.approve_request(organization_id=ORG, request_id=req.request_id, manager_id=9)
    assert exc.value.current == "rejected"


def test_unknown_request(svc):
    with pytest.raises(NotFoundError):
        svc.approve_request(organization_id=ORG, request_id=404, manager_id=9)


def test_list_pending_and_by_employee(svc):
    first = _request(svc)
    _request(svc, employee_id=2)
    svc.approve_request(organization_id=ORG, request_id=first.request_id, manager_id=9)

    pending = svc.list_pending(organization_id=ORG)
    assert [r.employee_id for r in pending] == [2]

    mine = svc.list_requests(organization_id=ORG, employee_id=1)
    assert [r.status for r in mine] == [RequestStatus.APPROVED]


def test_decision_that_loses_to_another_manager_reports_winner():
    c = build_fake_container()
    svc = c.time_off_service
    req = _request(svc)
    repo = c.time_off_repo
    original = repo.decide

    def decide_after_competitor(**kwargs):
        repo.requests[req.request_id] = replace(
            repo.requests[req.request_id],
            status=RequestStatus.REJECTED,
            manager_id=8,
            manager_name="Omar Manager",
            responded_at=datetime(2026, 4, 1, 9, 0),
        )
        return original(**kwargs)

    repo.decide = decide_after_competitor

    with pytest.raises(InvalidTransitionError) as exc:
        svc.approve_request(organization_id=ORG, request_id=req.request_id, manager_id=9)

    assert exc.value.current == RequestStatus.REJECTED.value
    current = svc.get_request(organization_id=ORG, request_id=req.request_id)
    assert current.manager_name == "Omar Manager"
    assert current.responded_at == datetime(2026, 4, 1, 9, 0)
