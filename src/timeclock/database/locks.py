from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import ContextManager, Dict, Protocol

import mysql.connector

from ..core.constants import DEFAULT_LOCK_TIMEOUT_SECONDS
from ..core.exceptions import StoreUnavailableError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


def employee_lock_name(organization_id: int, employee_id: int) -> str:
    return f"timeclock:{int(organization_id)}:{int(employee_id)}"


class EmployeeLocks(Protocol):
    """Per-employee mutual exclusion around punch read-modify-write sequences.

    Locks are not re-entrant: code running under ``hold`` must not call ``hold`` again
    for the same employee.
    """

    def hold(self, *, organization_id: int, employee_id: int) -> ContextManager[None]:
        raise NotImplementedError


class InProcessEmployeeLocks(EmployeeLocks):
    """One ``threading.Lock`` per employee. Only serializes callers inside this process."""

    def __init__(self, *, timeout_seconds: float = DEFAULT_LOCK_TIMEOUT_SECONDS):
        self._timeout = float(timeout_seconds)
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}

    def _lock_for(self, name: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(name)
            if lock is None:
                lock = threading.Lock()
                self._locks[name] = lock
            return lock

    @contextmanager
    def hold(self, *, organization_id: int, employee_id: int):
        name = employee_lock_name(organization_id, employee_id)
        lock = self._lock_for(name)
        if not lock.acquire(timeout=self._timeout):
            raise StoreUnavailableError(f"Timed out waiting for lock {name}")
        try:
            yield
        finally:
            lock.release()


class MySQLEmployeeLocks(EmployeeLocks):
    """MySQL named locks (GET_LOCK), shared by every service instance on the same server.

    The lock lives as long as the connection that took it, so a dedicated connection is
    held open for the duration of the block.
    """

    def __init__(self, conn_factory: DatabaseConnection, *, timeout_seconds: float = DEFAULT_LOCK_TIMEOUT_SECONDS):
        self._conn_factory = conn_factory
        self._timeout = int(timeout_seconds)

    @contextmanager
    def hold(self, *, organization_id: int, employee_id: int):
        name = employee_lock_name(organization_id, employee_id)
        conn = self._conn_factory.connect()
        try:
            cur = conn.cursor()
            try:
                cur.execute("SELECT GET_LOCK(%s, %s)", (name, self._timeout))
                row = cur.fetchone()
            except mysql.connector.Error as exc:
                raise StoreUnavailableError(f"Cannot acquire lock {name}: {exc}") from exc
            if not row or row[0] != 1:
                raise StoreUnavailableError(f"Timed out waiting for lock {name}")
            try:
                yield
            finally:
                try:
                    cur.execute("SELECT RELEASE_LOCK(%s)", (name,))
                    cur.fetchone()
                except mysql.connector.Error as exc:
                    # The server drops the lock with the connection anyway.
                    logger.warning("Failed to release lock %s: %s", name, exc)
                cur.close()
        finally:
            conn.close()
