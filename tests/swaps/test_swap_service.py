from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime

import pytest

from fakes import ORG, build_fake_container
from timeclock.core.enums import Role, SwapStatus, SwapType
from timeclock.core.exceptions import (
    AuthorizationError,
    InvalidTransitionError,
    NotFoundError,
    ShiftSwapConflictError,
    ValidationError,
)


@pytest.fixture
def c():
    c = build_fake_container()
    for shift_id, emp_id in ((101, 1), (102, 2), (103, 3), (104, 1)):
        c.shifts_repo.add(shift_id, c.employee_directory.get_by_id(organization_id=ORG, employee_id=emp_id))
    return c


def _swap(c, **kwargs):
    args = dict(
        organization_id=ORG,
        requester_id=1,
        requester_shift_id=101,
        swap_type="swap",
        target_employee_id=2,
        target_shift_id=102,
    )
    args.update(kwargs)
    return c.swap_service.create_swap(**args)


def _approved(c, swap):
    svc = c.swap_service
    svc.respond_to_swap(organization_id=ORG, swap_id=swap.swap_id, accept=True, responder_id=swap.target_employee_id or 3)
    return svc.manager_decide_swap(organization_id=ORG, swap_id=swap.swap_id, manager_id=9, approve=True)


def test_full_swap_exchanges_shift_owners(c):
    swap = _swap(c, reason="doctor appointment")
    assert swap.status == SwapStatus.PENDING
    assert swap.requester_name == "Alice Staff"
    assert swap.target_employee_name == "Bob Staff"

    accepted = c.swap_service.respond_to_swap(organization_id=ORG, swap_id=swap.swap_id, accept=True, responder_id=2)
    assert accepted.status == SwapStatus.MANAGER_PENDING
    assert accepted.responded_at is not None

    approved = c.swap_service.manager_decide_swap(
        organization_id=ORG, swap_id=swap.swap_id, manager_id=9, approve=True, notes="ok"
    )
    assert approved.status == SwapStatus.MANAGER_APPROVED
    assert approved.manager_name == "Maria Manager"
    assert approved.manager_notes == "ok"

    done = c.swap_service.execute_swap(organization_id=ORG, swap_id=swap.swap_id, executor_id=9)
    assert done.status == SwapStatus.COMPLETED
    assert done.completed_at is not None
    assert c.shifts_repo.shifts[101].employee_id == 2
    assert c.shifts_repo.shifts[101].employee_name == "Bob Staff"
    assert c.shifts_repo.shifts[102].employee_id == 1


@pytest.mark.parametrize("stop_at", ["pending", "rejected", "manager_rejected"])
def test_execute_only_after_manager_approval(c, stop_at):
    swap = _swap(c)
    if stop_at == "rejected":
        c.swap_service.respond_to_swap(organization_id=ORG, swap_id=swap.swap_id, accept=False, responder_id=2)
    elif stop_at == "manager_rejected":
        c.swap_service.respond_to_swap(organization_id=ORG, swap_id=swap.swap_id, accept=True, responder_id=2)
        c.swap_service.manager_decide_swap(organization_id=ORG, swap_id=swap.swap_id, manager_id=9, approve=False)

    with pytest.raises(InvalidTransitionError) as exc:
        c.swap_service.execute_swap(organization_id=ORG, swap_id=swap.swap_id, executor_id=9)
    assert exc.value.current == stop_at
    assert c.shifts_repo.shifts[101].employee_id == 1
    assert c.shifts_repo.shifts[102].employee_id == 2


def test_manager_cannot_decide_before_target_accepts(c):
    swap = _swap(c)
    with pytest.raises(InvalidTransitionError):
        c.swap_service.manager_decide_swap(organization_id=ORG, swap_id=swap.swap_id, manager_id=9, approve=True)


def test_only_managers_decide(c):
    swap = _swap(c)
    c.swap_service.respond_to_swap(organization_id=ORG, swap_id=swap.swap_id, accept=True, responder_id=2)
    with pytest.raises(AuthorizationError):
        c.swap_service.manager_decide_swap(organization_id=ORG, swap_id=swap.swap_id, manager_id=3, approve=True)


def test_only_named_target_responds(c):
    swap = _swap(c)
    with pytest.raises(AuthorizationError):
        c.swap_service.respond_to_swap(organization_id=ORG, swap_id=swap.swap_id, accept=True, responder_id=3)


def test_executing_twice_fails(c):
    swap = _approved(c, _swap(c))
    c.swap_service.execute_swap(organization_id=ORG, swap_id=swap.swap_id, executor_id=9)
    with pytest.raises(InvalidTransitionError) as exc:
        c.swap_service.execute_swap(organization_id=ORG, swap_id=swap.swap_id, executor_id=9)
    assert exc.value.current == SwapStatus.COMPLETED.value


def test_create_validations(c):
    with pytest.raises(AuthorizationError):
        _swap(c, requester_shift_id=102)
    with pytest.raises(ValidationError):
        _swap(c, target_shift_id=None)
    with pytest.raises(ValidationError):
        _swap(c, target_shift_id=103)
    with pytest.raises(ValidationError):
        _swap(c, target_employee_id=1, target_shift_id=104)
    with pytest.raises(ValidationError):
        _swap(c, swap_type="pickup", target_employee_id=None, target_shift_id=None)
    with pytest.raises(ValidationError):
        _swap(c, swap_type="giveaway", target_employee_id=None, target_shift_id=102)
    with pytest.raises(ValidationError):
        _swap(c, swap_type="trade")
    with pytest.raises(NotFoundError):
        _swap(c, requester_shift_id=999)


def test_conflicting_active_swap_is_rejected(c):
    _swap(c)
    with pytest.raises(ShiftSwapConflictError):
        _swap(c, requester_id=3, requester_shift_id=103, target_employee_id=2, target_shift_id=102)
    with pytest.raises(ShiftSwapConflictError):
        _swap(c, swap_type="giveaway", target_employee_id=None, target_shift_id=None)


def test_shift_is_free_again_after_cancel(c):
    swap = _swap(c)
    cancelled = c.swap_service.cancel_swap(organization_id=ORG, swap_id=swap.swap_id, requester_id=1, reason="plans changed")
    assert cancelled.status == SwapStatus.CANCELLED
    assert cancelled.cancel_reason == "plans changed"
    assert cancelled.manager_notes is None

    again = _swap(c)
    assert again.status == SwapStatus.PENDING


def test_cancel_rules(c):
    swap = _swap(c)
    with pytest.raises(AuthorizationError):
        c.swap_service.cancel_swap(organization_id=ORG, swap_id=swap.swap_id, requester_id=2)

    _approved(c, swap)
    with pytest.raises(InvalidTransitionError):
        c.swap_service.cancel_swap(organization_id=ORG, swap_id=swap.swap_id, requester_id=1)


def test_open_giveaway_is_claimed_by_responder(c):
    giveaway = _swap(c, swap_type=SwapType.GIVEAWAY, target_employee_id=None, target_shift_id=None)
    assert giveaway.is_open_giveaway
    assert [s.swap_id for s in c.swap_service.list_open_giveaways(organization_id=ORG)] == [giveaway.swap_id]

    with pytest.raises(ValidationError):
        c.swap_service.respond_to_swap(organization_id=ORG, swap_id=giveaway.swap_id, accept=True, responder_id=1)

    claimed = c.swap_service.respond_to_swap(organization_id=ORG, swap_id=giveaway.swap_id, accept=True, responder_id=3)
    assert claimed.target_employee_id == 3
    assert claimed.target_employee_name == "Carol Staff"
    assert c.swap_service.list_open_giveaways(organization_id=ORG) == []

    c.swap_service.manager_decide_swap(organization_id=ORG, swap_id=giveaway.swap_id, manager_id=9, approve=True)
    c.swap_service.execute_swap(organization_id=ORG, swap_id=giveaway.swap_id, executor_id=9)
    assert c.shifts_repo.shifts[101].employee_id == 3
    assert c.shifts_repo.shifts[103].employee_id == 3


def test_pickup_hands_shift_to_target(c):
    pickup = _swap(c, swap_type="pickup", target_employee_id=2, target_shift_id=None)
    _approved(c, pickup)
    c.swap_service.execute_swap(organization_id=ORG, swap_id=pickup.swap_id, executor_id=9)
    assert c.shifts_repo.shifts[101].employee_id == 2
    assert c.shifts_repo.shifts[102].employee_id == 2


def test_queries_and_stats(c):
    done = _approved(c, _swap(c))
    c.swap_service.execute_swap(organization_id=ORG, swap_id=done.swap_id, executor_id=9)

    # Shift 102 now belongs to employee 1.
    rejected = _swap(c, requester_id=3, requester_shift_id=103, target_employee_id=1, target_shift_id=102)
    c.swap_service.respond_to_swap(organization_id=ORG, swap_id=rejected.swap_id, accept=False, responder_id=1)

    waiting = _swap(c, requester_shift_id=104, swap_type="pickup", target_employee_id=3, target_shift_id=None)
    c.swap_service.respond_to_swap(organization_id=ORG, swap_id=waiting.swap_id, accept=True, responder_id=3)

    pending = c.swap_service.list_pending_manager_approvals(organization_id=ORG)
    assert [s.swap_id for s in pending] == [waiting.swap_id]

    mine = c.swap_service.list_employee_swaps(organization_id=ORG, employee_id=3)
    assert [s.swap_id for s in mine] == [waiting.swap_id]
    everything = c.swap_service.list_employee_swaps(organization_id=ORG, employee_id=3, include_closed=True)
    assert {s.swap_id for s in everything} == {rejected.swap_id, waiting.swap_id}

    by_status = c.swap_service.list_swaps(organization_id=ORG, status="rejected")
    assert [s.swap_id for s in by_status] == [rejected.swap_id]

    stats = c.swap_service.swap_stats(organization_id=ORG)
    assert stats.total == 3
    assert stats.approved == 1
    assert stats.rejected == 1
    assert stats.manager_pending == 1
    assert stats.action_required == 1
    assert stats.by_type == {"swap": 2, "giveaway": 0, "pickup": 1}
    assert stats.approval_rate == 50.0

    first_day_only = c.swap_service.swap_stats(
        organization_id=ORG, start_date=date(2026, 3, 1), end_date=date(2026, 3, 1)
    )
    assert first_day_only.total == 1


def test_cancel_after_manager_review_keeps_manager_notes(c):
    swap = _swap(c)
    c.swap_service.respond_to_swap(organization_id=ORG, swap_id=swap.swap_id, accept=True, responder_id=2)
    c.swaps_repo.swaps[swap.swap_id] = replace(c.swaps_repo.swaps[swap.swap_id], manager_notes="check rota first")

    cancelled = c.swap_service.cancel_swap(organization_id=ORG, swap_id=swap.swap_id, requester_id=1, reason="sorted it")

    assert cancelled.status == SwapStatus.CANCELLED
    assert cancelled.cancel_reason == "sorted it"
    assert cancelled.manager_notes == "check rota first"


def test_only_approvers_execute(c):
    swap = _approved(c, _swap(c))

    for staff_id in (1, 2, 3):
        with pytest.raises(AuthorizationError):
            c.swap_service.execute_swap(organization_id=ORG, swap_id=swap.swap_id, executor_id=staff_id)

    assert c.swap_service.get_swap(organization_id=ORG, swap_id=swap.swap_id).status == SwapStatus.MANAGER_APPROVED
    assert c.shifts_repo.shifts[101].employee_id == 1
    assert c.shifts_repo.shifts[102].employee_id == 2


def _land_first(c, method, **winner):
    """Make the repository apply ``winner`` to the swap just before the service's own write."""

    repo = c.swaps_repo
    original = getattr(repo, method)

    def racing(**kwargs):
        swap_id = kwargs["swap_id"]
        repo.swaps[swap_id] = replace(repo.swaps[swap_id], **winner)
        return original(**kwargs)

    setattr(repo, method, racing)


def test_response_that_loses_to_cancel_reports_cancelled(c):
    swap = _swap(c)
    _land_first(c, "respond", status=SwapStatus.CANCELLED, cancel_reason="changed my mind")

    with pytest.raises(InvalidTransitionError) as exc:
        c.swap_service.respond_to_swap(organization_id=ORG, swap_id=swap.swap_id, accept=True, responder_id=2)

    assert exc.value.current == SwapStatus.CANCELLED.value
    current = c.swap_service.get_swap(organization_id=ORG, swap_id=swap.swap_id)
    assert current.cancel_reason == "changed my mind"
    assert current.responded_at is None


def test_manager_decision_that_loses_to_another_manager_reports_winner(c):
    swap = _swap(c)
    c.swap_service.respond_to_swap(organization_id=ORG, swap_id=swap.swap_id, accept=True, responder_id=2)
    c.employee_directory.add(8, "Omar Manager", Role.MANAGER)
    _land_first(
        c,
        "decide",
        status=SwapStatus.MANAGER_REJECTED,
        manager_id=8,
        manager_name="Omar Manager",
        manager_decided_at=datetime(2026, 3, 1, 9, 0),
    )

    with pytest.raises(InvalidTransitionError) as exc:
        c.swap_service.manager_decide_swap(organization_id=ORG, swap_id=swap.swap_id, manager_id=9, approve=True)

    assert exc.value.current == SwapStatus.MANAGER_REJECTED.value
    current = c.swap_service.get_swap(organization_id=ORG, swap_id=swap.swap_id)
    assert current.manager_id == 8
    assert current.manager_name == "Omar Manager"
