from __future__ import annotations

from datetime import date, timedelta

from flask import Flask, jsonify

from ..common.http import current_employee_id, current_organization_id, date_arg, json_body, login_required
from ..common.serialization import to_json_dict
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.time_entry_service

    @app.route("/api/clock-in", methods=["POST"], endpoint="api_clock_in")
    @login_required
    def clock_in():
        data = json_body()
        entry = service.clock_in(
            organization_id=current_organization_id(),
            employee_id=current_employee_id(),
            notes=data.get("notes"),
            location=data.get("location"),
        )
        return jsonify({"success": True, "entry": to_json_dict(entry)})

    @app.route("/api/clock-out", methods=["POST"], endpoint="api_clock_out")
    @login_required
    def clock_out():
        data = json_body()
        entry = service.clock_out(
            organization_id=current_organization_id(),
            employee_id=current_employee_id(),
            notes=data.get("notes"),
            location=data.get("location"),
        )
        if entry is None:
            return jsonify({"success": False, "message": "Not clocked in"}), 409
        return jsonify({"success": True, "entry": to_json_dict(entry)})

    @app.route("/api/time-entries/active", methods=["GET"], endpoint="api_active_entry")
    @login_required
    def active_entry():
        entry = service.get_active_entry(organization_id=current_organization_id(), employee_id=current_employee_id())
        return jsonify({"success": True, "entry": to_json_dict(entry) if entry else None})

    @app.route("/api/time-entries", methods=["GET"], endpoint="api_list_entries")
    @login_required
    def list_entries():
        end = date_arg("end", date.today())
        start = date_arg("start", end - timedelta(days=13))
        entries = service.list_entries(
            organization_id=current_organization_id(),
            employee_id=current_employee_id(),
            start_date=start,
            end_date=end,
        )
        return jsonify({"success": True, "entries": [to_json_dict(e) for e in entries]})

    @app.route("/api/time-entries/<int:entry_id>/submit", methods=["POST"], endpoint="api_submit_entry")
    @login_required
    def submit_entry(entry_id: int):
        entry = service.submit_entry(
            organization_id=current_organization_id(),
            employee_id=current_employee_id(),
            entry_id=entry_id,
        )
        return jsonify({"success": True, "entry": to_json_dict(entry)})

    @app.route("/api/time-entries/<int:entry_id>/approve", methods=["POST"], endpoint="api_approve_entry")
    @login_required
    def approve_entry(entry_id: int):
        entry = service.approve_entry(
            organization_id=current_organization_id(),
            manager_id=current_employee_id(),
            entry_id=entry_id,
        )
        return jsonify({"success": True, "entry": to_json_dict(entry)})

    @app.route("/api/time-entries/approve", methods=["POST"], endpoint="api_approve_entries")
    @login_required
    def approve_entries():
        data = json_body()
        result = service.approve_entries(
            organization_id=current_organization_id(),
            manager_id=current_employee_id(),
            entry_ids=data.get("entry_ids") or [],
        )
        return jsonify(
            {
                "success": True,
                "approved": [to_json_dict(e) for e in result.approved],
                "skipped": list(result.skipped),
            }
        )
