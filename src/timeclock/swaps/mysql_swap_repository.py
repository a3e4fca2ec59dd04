from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Optional, Sequence

from ..core.enums import SwapStatus, SwapType
from ..core.exceptions import ConflictError, ShiftSwapConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import ACTIVE_SWAP_STATUSES, NewShiftSwap, ShiftReassignment, ShiftSwap
from .repository import ShiftSwapRepository

logger = logging.getLogger(__name__)

_COLUMNS = """
    swap_id, organization_id, requester_id, requester_name, requester_shift_id,
    target_employee_id, target_employee_name, target_shift_id, swap_type, status, reason,
    responded_at, manager_id, manager_name, manager_decided_at, manager_notes, cancel_reason,
    completed_at, created_at
"""

_ACTIVE = tuple(s.value for s in sorted(ACTIVE_SWAP_STATUSES, key=lambda s: s.value))


def _to_swap(r: dict) -> ShiftSwap:
    return ShiftSwap(
        swap_id=int(r["swap_id"]),
        organization_id=int(r["organization_id"]),
        requester_id=int(r["requester_id"]),
        requester_name=r["requester_name"],
        requester_shift_id=int(r["requester_shift_id"]),
        target_employee_id=int(r["target_employee_id"]) if r.get("target_employee_id") is not None else None,
        target_employee_name=r.get("target_employee_name"),
        target_shift_id=int(r["target_shift_id"]) if r.get("target_shift_id") is not None else None,
        swap_type=SwapType(r["swap_type"]),
        status=SwapStatus(r["status"]),
        reason=r.get("reason"),
        responded_at=r.get("responded_at"),
        manager_id=r.get("manager_id"),
        manager_name=r.get("manager_name"),
        manager_decided_at=r.get("manager_decided_at"),
        manager_notes=r.get("manager_notes"),
        cancel_reason=r.get("cancel_reason"),
        completed_at=r.get("completed_at"),
        created_at=r.get("created_at"),
    )


def _active_for_shifts_sql(shift_ids: Sequence[int]) -> str:
    marks = in_clause(shift_ids)
    return f"""
        SELECT {_COLUMNS}
        FROM shift_swaps
        WHERE organization_id=%s
          AND status IN ({in_clause(_ACTIVE)})
          AND (requester_shift_id IN ({marks}) OR target_shift_id IN ({marks}))
    """


class MySQLShiftSwapRepository(ShiftSwapRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, swap: NewShiftSwap) -> int:
        shift_ids = [int(swap.requester_shift_id)]
        if swap.target_shift_id is not None:
            shift_ids.append(int(swap.target_shift_id))

        with db_cursor(self._conn_factory) as (_, cur):
            # Row locks on the shifts serialize concurrent creates for the same shift.
            cur.execute(
                f"SELECT shift_id FROM shifts WHERE organization_id=%s AND shift_id IN ({in_clause(shift_ids)}) FOR UPDATE",
                (int(swap.organization_id), *shift_ids),
            )
            fetchall(cur)

            cur.execute(
                _active_for_shifts_sql(shift_ids),
                (int(swap.organization_id), *_ACTIVE, *shift_ids, *shift_ids),
            )
            existing = fetchall(cur)
            if existing:
                raise ShiftSwapConflictError(
                    f"Shift already has an active swap request (swap {existing[0]['swap_id']})"
                )

            cur.execute(
                """
                INSERT INTO shift_swaps(
                    organization_id, requester_id, requester_name, requester_shift_id,
                    target_employee_id, target_employee_name, target_shift_id,
                    swap_type, status, reason
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(swap.organization_id),
                    int(swap.requester_id),
                    swap.requester_name,
                    int(swap.requester_shift_id),
                    swap.target_employee_id,
                    swap.target_employee_name,
                    swap.target_shift_id,
                    swap.swap_type.value,
                    SwapStatus.PENDING.value,
                    swap.reason,
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, *, organization_id: int, swap_id: int) -> Optional[ShiftSwap]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM shift_swaps WHERE organization_id=%s AND swap_id=%s",
                (int(organization_id), int(swap_id)),
            )
            r = fetchone(cur)
            return _to_swap(r) if r else None

    def find_active_for_shifts(self, *, organization_id: int, shift_ids: Iterable[int]) -> Sequence[ShiftSwap]:
        ids = [int(s) for s in shift_ids]
        if not ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_active_for_shifts_sql(ids), (int(organization_id), *_ACTIVE, *ids, *ids))
            return [_to_swap(r) for r in fetchall(cur)]

    def respond(
        self,
        *,
        organization_id: int,
        swap_id: int,
        status: SwapStatus,
        responded_at: datetime,
        target_employee_id: Optional[int] = None,
        target_employee_name: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE shift_swaps
                SET status=%s,
                    responded_at=%s,
                    target_employee_id=COALESCE(target_employee_id, %s),
                    target_employee_name=COALESCE(target_employee_name, %s)
                WHERE organization_id=%s AND swap_id=%s AND status=%s
                """,
                (
                    status.value,
                    responded_at,
                    target_employee_id,
                    target_employee_name,
                    int(organization_id),
                    int(swap_id),
                    SwapStatus.PENDING.value,
                ),
            )
            return cur.rowcount == 1

    def decide(
        self,
        *,
        organization_id: int,
        swap_id: int,
        status: SwapStatus,
        manager_id: int,
        manager_name: str,
        decided_at: datetime,
        notes: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE shift_swaps
                SET status=%s, manager_id=%s, manager_name=%s, manager_decided_at=%s, manager_notes=%s
                WHERE organization_id=%s AND swap_id=%s AND status=%s
                """,
                (
                    status.value,
                    int(manager_id),
                    manager_name,
                    decided_at,
                    notes,
                    int(organization_id),
                    int(swap_id),
                    SwapStatus.MANAGER_PENDING.value,
                ),
            )
            return cur.rowcount == 1

    def cancel(
        self,
        *,
        organization_id: int,
        swap_id: int,
        from_status: SwapStatus,
        reason: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE shift_swaps
                SET status=%s, cancel_reason=%s
                WHERE organization_id=%s AND swap_id=%s AND status=%s
                """,
                (SwapStatus.CANCELLED.value, reason, int(organization_id), int(swap_id), from_status.value),
            )
            return cur.rowcount == 1

    def complete(
        self,
        *,
        organization_id: int,
        swap_id: int,
        reassignments: Sequence[ShiftReassignment],
        completed_at: datetime,
    ) -> bool:
        org = int(organization_id)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE shift_swaps
                SET status=%s, completed_at=%s
                WHERE organization_id=%s AND swap_id=%s AND status=%s
                """,
                (SwapStatus.COMPLETED.value, completed_at, org, int(swap_id), SwapStatus.MANAGER_APPROVED.value),
            )
            if cur.rowcount != 1:
                return False

            shift_ids = [r.shift_id for r in reassignments]
            cur.execute(
                f"""
                SELECT shift_id, employee_id
                FROM shifts
                WHERE organization_id=%s AND shift_id IN ({in_clause(shift_ids)})
                FOR UPDATE
                """,
                (org, *shift_ids),
            )
            owners = {int(r["shift_id"]): int(r["employee_id"]) for r in fetchall(cur)}
            for move in reassignments:
                if owners.get(move.shift_id) != move.from_employee_id:
                    # Raising here rolls back the status change too.
                    raise ConflictError(f"Shift {move.shift_id} is no longer owned by employee {move.from_employee_id}")

            for move in reassignments:
                cur.execute(
                    """
                    UPDATE shifts
                    SET employee_id=%s, employee_name=%s
                    WHERE organization_id=%s AND shift_id=%s
                    """,
                    (int(move.to_employee_id), move.to_employee_name, org, int(move.shift_id)),
                )
            logger.debug("Swap %s reassigned %d shift(s)", swap_id, len(reassignments))
            return True

    def list(
        self,
        *,
        organization_id: int,
        statuses: Optional[Iterable[SwapStatus]] = None,
        swap_type: Optional[SwapType] = None,
        requester_id: Optional[int] = None,
        target_employee_id: Optional[int] = None,
        involving_employee_id: Optional[int] = None,
        open_only: bool = False,
        created_from: Optional[datetime] = None,
        created_to: Optional[datetime] = None,
        limit: int = 200,
    ) -> Sequence[ShiftSwap]:
        clauses = ["organization_id=%s"]
        params: list[object] = [int(organization_id)]

        if statuses is not None:
            values = [s.value for s in statuses]
            if not values:
                return []
            clauses.append(f"status IN ({in_clause(values)})")
            params.extend(values)
        if swap_type is not None:
            clauses.append("swap_type=%s")
            params.append(swap_type.value)
        if requester_id is not None:
            clauses.append("requester_id=%s")
            params.append(int(requester_id))
        if target_employee_id is not None:
            clauses.append("target_employee_id=%s")
            params.append(int(target_employee_id))
        if involving_employee_id is not None:
            clauses.append("(requester_id=%s OR target_employee_id=%s)")
            params.extend([int(involving_employee_id), int(involving_employee_id)])
        if open_only:
            clauses.append("target_employee_id IS NULL")
        if created_from is not None:
            clauses.append("created_at>=%s")
            params.append(created_from)
        if created_to is not None:
            clauses.append("created_at<=%s")
            params.append(created_to)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM shift_swaps
                WHERE {where}
                ORDER BY created_at DESC, swap_id DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [_to_swap(r) for r in fetchall(cur)]
