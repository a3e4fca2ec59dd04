from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_datetime
from ..common.http import current_employee_id, current_organization_id, json_body, login_required
from ..common.serialization import to_json_dict
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    service = container.adjustment_service

    def _parse_datetime(v, field_name: str):
        if v in (None, ""):
            return None
        try:
            return parse_iso_datetime(str(v).strip())
        except ValueError:
            raise ValidationError(f"{field_name} must be a YYYY-MM-DDTHH:MM datetime")

    def _adjustment(adj, status: int = 200):
        return jsonify({"success": True, "adjustment": to_json_dict(adj)}), status

    @app.route("/api/time-adjustments", methods=["POST"], endpoint="api_create_time_adjustment")
    @login_required
    def create_request():
        data = json_body()
        adj = service.create_request(
            organization_id=current_organization_id(),
            employee_id=current_employee_id(),
            entry_id=data.get("entry_id"),
            reason=data.get("reason") or "",
            requested_clock_in=_parse_datetime(data.get("requested_clock_in"), "requested_clock_in"),
            requested_clock_out=_parse_datetime(data.get("requested_clock_out"), "requested_clock_out"),
            employee_notes=data.get("employee_notes"),
        )
        return _adjustment(adj, 201)

    @app.route("/api/time-adjustments", methods=["GET"], endpoint="api_my_time_adjustments")
    @login_required
    def my_requests():
        rows = service.list_requests(
            organization_id=current_organization_id(),
            employee_id=current_employee_id(),
            status=request.args.get("status") or None,
        )
        return jsonify({"success": True, "adjustments": [to_json_dict(a) for a in rows]})

    @app.route("/api/time-adjustments/pending", methods=["GET"], endpoint="api_pending_time_adjustments")
    @login_required
    def pending_requests():
        rows = service.list_pending(organization_id=current_organization_id())
        return jsonify({"success": True, "adjustments": [to_json_dict(a) for a in rows]})

    @app.route("/api/time-adjustments/<int:adjustment_id>/approve", methods=["POST"], endpoint="api_approve_time_adjustment")
    @login_required
    def approve(adjustment_id: int):
        data = json_body()
        adj = service.approve_request(
            organization_id=current_organization_id(),
            adjustment_id=adjustment_id,
            reviewer_id=current_employee_id(),
            admin_response=data.get("admin_response"),
            admin_notes=data.get("admin_notes"),
        )
        return _adjustment(adj)

    @app.route("/api/time-adjustments/<int:adjustment_id>/reject", methods=["POST"], endpoint="api_reject_time_adjustment")
    @login_required
    def reject(adjustment_id: int):
        data = json_body()
        adj = service.reject_request(
            organization_id=current_organization_id(),
            adjustment_id=adjustment_id,
            reviewer_id=current_employee_id(),
            admin_notes=data.get("admin_notes") or "",
            admin_response=data.get("admin_response"),
        )
        return _adjustment(adj)

    @app.route("/api/time-adjustments/<int:adjustment_id>/cancel", methods=["POST"], endpoint="api_cancel_time_adjustment")
    @login_required
    def cancel(adjustment_id: int):
        adj = service.cancel_request(
            organization_id=current_organization_id(),
            adjustment_id=adjustment_id,
            employee_id=current_employee_id(),
        )
        return _adjustment(adj)
