from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import inclusive_days, now_local
from ..common.validators import optional_text, parse_enum
from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import RequestStatus, TimeOffType
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.repository import EmployeeDirectory
from ..employees.service import require_approver, require_employee
from .model import NewTimeOffRequest, TimeOffRequest, check_time_off_transition
from .repository import TimeOffRepository

logger = logging.getLogger(__name__)


class TimeOffService:
    """Time-off requests. Approval records the decision only; shifts are left untouched."""

    def __init__(self, requests: TimeOffRepository, directory: EmployeeDirectory):
        self._requests = requests
        self._directory = directory

    def create_request(
        self,
        *,
        organization_id: int,
        employee_id: int,
        time_off_type: TimeOffType | str,
        start_date: date,
        end_date: date,
        total_days: Optional[float] = None,
        reason: Optional[str] = None,
    ) -> TimeOffRequest:
        time_off_type = parse_enum(TimeOffType, time_off_type, "Time off type")
        if end_date < start_date:
            raise ValidationError("End date must be on or after start date")

        if total_days is None:
            total_days = float(inclusive_days(start_date, end_date))
        try:
            total_days = float(total_days)
        except (TypeError, ValueError):
            raise ValidationError("Total days must be a number")
        if total_days <= 0:
            raise ValidationError("Total days must be greater than 0")

        employee = require_employee(self._directory, organization_id=organization_id, employee_id=employee_id)
        request_id = self._requests.create(
            NewTimeOffRequest(
                organization_id=int(organization_id),
                employee_id=employee.employee_id,
                employee_name=employee.full_name,
                time_off_type=time_off_type,
                start_date=start_date,
                end_date=end_date,
                total_days=total_days,
                reason=optional_text(reason),
            )
        )
        logger.info(
            "Time off request %s created for employee %s: %s %s..%s",
            request_id,
            employee.employee_id,
            time_off_type.value,
            start_date,
            end_date,
        )
        return self.get_request(organization_id=organization_id, request_id=request_id)

    def get_request(self, *, organization_id: int, request_id: int) -> TimeOffRequest:
        req = self._requests.get_by_id(organization_id=int(organization_id), request_id=int(request_id))
        if not req:
            raise NotFoundError(f"Time off request {request_id} not found")
        return req

    def approve_request(
        self, *, organization_id: int, request_id: int, manager_id: int, now: Optional[datetime] = None
    ) -> TimeOffRequest:
        return self._decide(organization_id, request_id, manager_id, RequestStatus.APPROVED, now)

    def reject_request(
        self, *, organization_id: int, request_id: int, manager_id: int, now: Optional[datetime] = None
    ) -> TimeOffRequest:
        return self._decide(organization_id, request_id, manager_id, RequestStatus.REJECTED, now)

    def _decide(
        self,
        organization_id: int,
        request_id: int,
        manager_id: int,
        status: RequestStatus,
        now: Optional[datetime],
    ) -> TimeOffRequest:
        manager = require_approver(self._directory, organization_id=organization_id, employee_id=manager_id)
        req = self.get_request(organization_id=organization_id, request_id=request_id)
        check_time_off_transition(req.status, status)

        decided = self._requests.decide(
            organization_id=int(organization_id),
            request_id=req.request_id,
            status=status,
            manager_id=manager.employee_id,
            manager_name=manager.full_name,
            responded_at=now or now_local(),
        )
        current = self.get_request(organization_id=organization_id, request_id=request_id)
        if not decided:
            check_time_off_transition(current.status, status)

        logger.info("Time off request %s %s by %s", request_id, status.value, manager.employee_id)
        return current

    def list_requests(
        self,
        *,
        organization_id: int,
        employee_id: Optional[int] = None,
        status: Optional[RequestStatus | str] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> Sequence[TimeOffRequest]:
        return self._requests.list(
            organization_id=int(organization_id),
            employee_id=employee_id,
            status=parse_enum(RequestStatus, status, "Status") if status else None,
            limit=int(limit),
        )

    def list_pending(self, *, organization_id: int) -> Sequence[TimeOffRequest]:
        return self.list_requests(organization_id=organization_id, status=RequestStatus.PENDING)
