from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..core.exceptions import ValidationError
from ..employees.repository import EmployeeDirectory
from ..timeentries.repository import TimeEntryRepository


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    summary: list[dict]


class TimesheetReportService:
    def __init__(self, entries: TimeEntryRepository, directory: EmployeeDirectory):
        self._entries = entries
        self._directory = directory

    def _name_of(self, organization_id: int, employee_id: int, cache: dict[int, str]) -> str:
        if employee_id not in cache:
            employee = self._directory.get_by_id(organization_id=organization_id, employee_id=employee_id)
            cache[employee_id] = employee.full_name if employee else "Unknown"
        return cache[employee_id]

    def build_hours_report(
        self,
        *,
        organization_id: int,
        start: date,
        end: date,
        employee_id: Optional[int] = None,
    ) -> ReportData:
        if end < start:
            raise ValidationError("End date must be on or after start date")

        entries = self._entries.list_range(
            organization_id=int(organization_id),
            start_date=start,
            end_date=end,
            employee_id=employee_id,
        )

        names: dict[int, str] = {}
        summary_map: dict[int, dict] = {}
        out_rows: list[dict] = []

        for e in entries:
            full_name = self._name_of(int(organization_id), e.employee_id, names)
            out_rows.append(
                {
                    "entry_id": e.entry_id,
                    "employee_id": e.employee_id,
                    "full_name": full_name,
                    "work_date": e.work_date.strftime("%Y-%m-%d"),
                    "clock_in": e.clock_in.strftime("%H:%M"),
                    "clock_out": e.clock_out.strftime("%H:%M") if e.clock_out else "-",
                    "unpaid_break_minutes": e.unpaid_break_minutes,
                    "paid_break_minutes": e.paid_break_minutes,
                    "total_hours": e.total_hours,
                    "status": e.status.value,
                }
            )

            s = summary_map.get(e.employee_id)
            if not s:
                s = {
                    "employee_id": e.employee_id,
                    "full_name": full_name,
                    "total_hours": 0.0,
                    "unpaid_break_minutes": 0,
                    "paid_break_minutes": 0,
                    "entry_count": 0,
                }
                summary_map[e.employee_id] = s
            s["total_hours"] += e.total_hours
            s["unpaid_break_minutes"] += e.unpaid_break_minutes
            s["paid_break_minutes"] += e.paid_break_minutes
            s["entry_count"] += 1

        summary = []
        for s in summary_map.values():
            summary.append({**s, "total_hours": round(s["total_hours"], 2)})

        summary.sort(key=lambda x: x["total_hours"], reverse=True)
        return ReportData(rows=out_rows, summary=summary)
