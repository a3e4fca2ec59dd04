from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import RequestStatus
from .model import NewTimeOffRequest, TimeOffRequest


class TimeOffRepository(Protocol):
    def create(self, request: NewTimeOffRequest) -> int:
        raise NotImplementedError

    def get_by_id(self, *, organization_id: int, request_id: int) -> Optional[TimeOffRequest]:
        raise NotImplementedError

    def decide(
        self,
        *,
        organization_id: int,
        request_id: int,
        status: RequestStatus,
        manager_id: int,
        manager_name: str,
        responded_at: datetime,
    ) -> bool:
        """pending -> status. False when the request was already decided."""

        raise NotImplementedError

    def list(
        self,
        *,
        organization_id: int,
        employee_id: Optional[int] = None,
        status: Optional[RequestStatus] = None,
        limit: int = 200,
    ) -> Sequence[TimeOffRequest]:
        raise NotImplementedError
