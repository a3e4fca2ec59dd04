from __future__ import annotations

from datetime import date

from flask import Flask, jsonify, request

from ..common.http import current_employee_id, current_organization_id, date_arg, json_body, login_required
from ..common.serialization import to_json_dict
from ..container import Container
from ..core.constants import DEFAULT_LIST_LIMIT


def register(app: Flask, container: Container) -> None:
    service = container.break_service

    @app.route("/api/breaks/start", methods=["POST"], endpoint="api_start_break")
    @login_required
    def start_break():
        data = json_body()
        punch = service.start_break(
            organization_id=current_organization_id(),
            employee_id=current_employee_id(),
            break_type=data.get("break_type"),
            scheduled_minutes=data.get("scheduled_minutes"),
            notes=data.get("notes"),
        )
        return jsonify({"success": True, "punch": to_json_dict(punch)})

    @app.route("/api/breaks/end", methods=["POST"], endpoint="api_end_break")
    @login_required
    def end_break():
        data = json_body()
        result = service.end_break(
            organization_id=current_organization_id(),
            employee_id=current_employee_id(),
            notes=data.get("notes"),
            force=bool(data.get("force", False)),
        )
        body = to_json_dict(result)
        body["was_overtime"] = result.was_overtime
        return jsonify({"success": True, "result": body})

    @app.route("/api/breaks/active", methods=["GET"], endpoint="api_active_break")
    @login_required
    def active_break():
        info = service.get_active_break(organization_id=current_organization_id(), employee_id=current_employee_id())
        return jsonify({"success": True, "break": to_json_dict(info) if info else None})

    @app.route("/api/breaks/history", methods=["GET"], endpoint="api_break_history")
    @login_required
    def break_history():
        punches = service.break_history(
            organization_id=current_organization_id(),
            employee_id=current_employee_id(),
            work_date=date_arg("date", date.today()),
        )
        return jsonify({"success": True, "punches": [to_json_dict(p) for p in punches]})

    @app.route("/api/break-violations", methods=["GET"], endpoint="api_list_violations")
    @login_required
    def list_violations():
        employee_id = request.args.get("employee_id", type=int)
        violations = service.list_violations(
            organization_id=current_organization_id(),
            status=request.args.get("status") or None,
            start_date=date_arg("start"),
            end_date=date_arg("end"),
            employee_id=employee_id,
            limit=request.args.get("limit", DEFAULT_LIST_LIMIT, type=int),
        )
        return jsonify({"success": True, "violations": [to_json_dict(v) for v in violations]})

    @app.route("/api/break-violations/<int:violation_id>/review", methods=["POST"], endpoint="api_review_violation")
    @login_required
    def review_violation(violation_id: int):
        data = json_body()
        violation = service.review_violation(
            organization_id=current_organization_id(),
            violation_id=violation_id,
            reviewer_id=current_employee_id(),
            new_status=data.get("status"),
            notes=data.get("notes"),
        )
        return jsonify({"success": True, "violation": to_json_dict(violation)})
