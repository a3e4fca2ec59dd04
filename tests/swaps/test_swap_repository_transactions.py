from __future__ import annotations

from datetime import datetime

import mysql.connector
import pytest

from fakes import FakeConnectionFactory
from timeclock.core.enums import SwapStatus, SwapType
from timeclock.core.exceptions import ConflictError, ShiftSwapConflictError, StoreUnavailableError
from timeclock.swaps.model import NewShiftSwap, ShiftReassignment
from timeclock.swaps.mysql_swap_repository import MySQLShiftSwapRepository

NOW = datetime(2026, 3, 2, 9, 0)

MOVES = [
    ShiftReassignment(shift_id=101, from_employee_id=1, to_employee_id=2, to_employee_name="Bob"),
    ShiftReassignment(shift_id=102, from_employee_id=2, to_employee_id=1, to_employee_name="Alice"),
]

OWNERS = [{"shift_id": 101, "employee_id": 1}, {"shift_id": 102, "employee_id": 2}]


def test_complete_commits_status_and_both_shifts_together():
    factory = FakeConnectionFactory(
        [
            ("UPDATE shift_swaps SET status=%s, completed_at=%s", 1),
            ("FROM shifts WHERE organization_id=%s AND shift_id IN (%s,%s) FOR UPDATE", OWNERS),
            ("UPDATE shifts SET employee_id=%s", 1),
            ("UPDATE shifts SET employee_id=%s", 1),
        ]
    )
    repo = MySQLShiftSwapRepository(factory)

    assert repo.complete(organization_id=1, swap_id=7, reassignments=MOVES, completed_at=NOW) is True

    conn = factory.connections[0]
    assert conn.committed and not conn.rolled_back and conn.closed
    assert conn.executed[0][1] == ("completed", NOW, 1, 7, "manager_approved")
    assert conn.executed[2][1] == (2, "Bob", 1, 101)
    assert conn.executed[3][1] == (1, "Alice", 1, 102)


def test_failure_on_second_shift_rolls_back_everything():
    factory = FakeConnectionFactory(
        [
            ("UPDATE shift_swaps SET status=%s, completed_at=%s", 1),
            ("FOR UPDATE", OWNERS),
            ("UPDATE shifts SET employee_id=%s", 1),
            ("UPDATE shifts SET employee_id=%s", mysql.connector.errors.OperationalError("connection lost")),
        ]
    )
    repo = MySQLShiftSwapRepository(factory)

    with pytest.raises(StoreUnavailableError):
        repo.complete(organization_id=1, swap_id=7, reassignments=MOVES, completed_at=NOW)

    conn = factory.connections[0]
    assert conn.rolled_back
    assert not conn.committed
    assert conn.closed


def test_changed_shift_owner_rolls_back():
    factory = FakeConnectionFactory(
        [
            ("UPDATE shift_swaps SET status=%s, completed_at=%s", 1),
            ("FOR UPDATE", [{"shift_id": 101, "employee_id": 1}, {"shift_id": 102, "employee_id": 3}]),
        ]
    )
    repo = MySQLShiftSwapRepository(factory)

    with pytest.raises(ConflictError):
        repo.complete(organization_id=1, swap_id=7, reassignments=MOVES, completed_at=NOW)

    conn = factory.connections[0]
    assert conn.rolled_back and not conn.committed
    assert not any(sql.startswith("UPDATE shifts") for sql, _ in conn.executed)


def test_complete_reports_lost_race_without_touching_shifts():
    factory = FakeConnectionFactory([("UPDATE shift_swaps SET status=%s, completed_at=%s", 0)])
    repo = MySQLShiftSwapRepository(factory)

    assert repo.complete(organization_id=1, swap_id=7, reassignments=MOVES, completed_at=NOW) is False
    assert len(factory.connections[0].executed) == 1


def test_create_rechecks_conflicts_inside_the_transaction():
    factory = FakeConnectionFactory(
        [
            ("FROM shifts WHERE organization_id=%s AND shift_id IN (%s,%s) FOR UPDATE", OWNERS),
            ("FROM shift_swaps", [{"swap_id": 3}]),
        ]
    )
    repo = MySQLShiftSwapRepository(factory)
    swap = NewShiftSwap(
        organization_id=1,
        requester_id=1,
        requester_name="Alice",
        requester_shift_id=101,
        swap_type=SwapType.SWAP,
        target_employee_id=2,
        target_employee_name="Bob",
        target_shift_id=102,
    )

    with pytest.raises(ShiftSwapConflictError):
        repo.create(swap)

    conn = factory.connections[0]
    assert conn.rolled_back and not conn.committed
    assert not any("INSERT" in sql for sql, _ in conn.executed)


def test_cancel_stores_reason_in_its_own_column():
    factory = FakeConnectionFactory([("UPDATE shift_swaps SET status=%s, cancel_reason=%s", 1)])
    repo = MySQLShiftSwapRepository(factory)

    assert repo.cancel(organization_id=1, swap_id=7, from_status=SwapStatus.MANAGER_PENDING, reason="sorted it") is True

    sql, params = factory.connections[0].executed[0]
    assert "manager_notes" not in sql
    assert params == ("cancelled", "sorted it", 1, 7, "manager_pending")
