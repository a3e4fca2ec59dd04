from __future__ import annotations

from datetime import date, timedelta

from flask import Flask, jsonify, request

from ..common.http import current_employee_id, current_organization_id, date_arg, login_required
from ..container import Container
from ..employees.service import require_approver


def register(app: Flask, container: Container) -> None:
    @app.route("/api/reports/hours", methods=["GET"], endpoint="api_hours_report")
    @login_required
    def hours_report():
        org = current_organization_id()
        require_approver(container.employee_directory, organization_id=org, employee_id=current_employee_id())

        end = date_arg("end", date.today())
        start = date_arg("start", end - timedelta(days=13))
        data = container.report_service.build_hours_report(
            organization_id=org,
            start=start,
            end=end,
            employee_id=request.args.get("employee_id", type=int),
        )
        return jsonify({"success": True, "rows": data.rows, "summary": data.summary})
