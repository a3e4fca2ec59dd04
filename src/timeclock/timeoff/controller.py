from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import current_employee_id, current_organization_id, json_body, login_required
from ..common.serialization import to_json_dict
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    service = container.time_off_service

    def _parse_date(v, field_name: str):
        try:
            return parse_iso_date(str(v or "").strip())
        except ValueError:
            raise ValidationError(f"{field_name} must be a YYYY-MM-DD date")

    @app.route("/api/time-off", methods=["POST"], endpoint="api_create_time_off")
    @login_required
    def create_request():
        data = json_body()
        req = service.create_request(
            organization_id=current_organization_id(),
            employee_id=current_employee_id(),
            time_off_type=data.get("time_off_type"),
            start_date=_parse_date(data.get("start_date"), "start_date"),
            end_date=_parse_date(data.get("end_date"), "end_date"),
            total_days=data.get("total_days"),
            reason=data.get("reason"),
        )
        return jsonify({"success": True, "request": to_json_dict(req)}), 201

    @app.route("/api/time-off", methods=["GET"], endpoint="api_my_time_off")
    @login_required
    def my_requests():
        reqs = service.list_requests(
            organization_id=current_organization_id(),
            employee_id=current_employee_id(),
            status=request.args.get("status") or None,
        )
        return jsonify({"success": True, "requests": [to_json_dict(r) for r in reqs]})

    @app.route("/api/time-off/pending", methods=["GET"], endpoint="api_pending_time_off")
    @login_required
    def pending_requests():
        reqs = service.list_pending(organization_id=current_organization_id())
        return jsonify({"success": True, "requests": [to_json_dict(r) for r in reqs]})

    @app.route("/api/time-off/<int:request_id>/approve", methods=["POST"], endpoint="api_approve_time_off")
    @login_required
    def approve(request_id: int):
        req = service.approve_request(
            organization_id=current_organization_id(),
            request_id=request_id,
            manager_id=current_employee_id(),
        )
        return jsonify({"success": True, "request": to_json_dict(req)})

    @app.route("/api/time-off/<int:request_id>/reject", methods=["POST"], endpoint="api_reject_time_off")
    @login_required
    def reject(request_id: int):
        req = service.reject_request(
            organization_id=current_organization_id(),
            request_id=request_id,
            manager_id=current_employee_id(),
        )
        return jsonify({"success": True, "request": to_json_dict(req)})
