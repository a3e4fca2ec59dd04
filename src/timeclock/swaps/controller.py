from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import current_employee_id, current_organization_id, date_arg, json_body, login_required
from ..common.serialization import to_json_dict
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.swap_service

    def _swap(swap):
        return jsonify({"success": True, "swap": to_json_dict(swap)})

    @app.route("/api/shift-swaps", methods=["POST"], endpoint="api_create_swap")
    @login_required
    def create_swap():
        data = json_body()
        swap = service.create_swap(
            organization_id=current_organization_id(),
            requester_id=current_employee_id(),
            requester_shift_id=data.get("requester_shift_id"),
            swap_type=data.get("swap_type"),
            target_employee_id=data.get("target_employee_id"),
            target_shift_id=data.get("target_shift_id"),
            reason=data.get("reason"),
        )
        return jsonify({"success": True, "swap": to_json_dict(swap)}), 201

    @app.route("/api/shift-swaps", methods=["GET"], endpoint="api_list_swaps")
    @login_required
    def list_swaps():
        swaps = service.list_swaps(
            organization_id=current_organization_id(),
            status=request.args.get("status") or None,
            swap_type=request.args.get("swap_type") or None,
            requester_id=request.args.get("requester_id", type=int),
            target_employee_id=request.args.get("target_employee_id", type=int),
        )
        return jsonify({"success": True, "swaps": [to_json_dict(s) for s in swaps]})

    @app.route("/api/shift-swaps/mine", methods=["GET"], endpoint="api_my_swaps")
    @login_required
    def my_swaps():
        swaps = service.list_employee_swaps(
            organization_id=current_organization_id(),
            employee_id=current_employee_id(),
            include_closed=request.args.get("include_closed") == "1",
        )
        return jsonify({"success": True, "swaps": [to_json_dict(s) for s in swaps]})

    @app.route("/api/shift-swaps/open", methods=["GET"], endpoint="api_open_giveaways")
    @login_required
    def open_giveaways():
        swaps = service.list_open_giveaways(organization_id=current_organization_id())
        return jsonify({"success": True, "swaps": [to_json_dict(s) for s in swaps]})

    @app.route("/api/shift-swaps/pending-approval", methods=["GET"], endpoint="api_pending_swap_approvals")
    @login_required
    def pending_approvals():
        swaps = service.list_pending_manager_approvals(organization_id=current_organization_id())
        return jsonify({"success": True, "swaps": [to_json_dict(s) for s in swaps]})

    @app.route("/api/shift-swaps/stats", methods=["GET"], endpoint="api_swap_stats")
    @login_required
    def swap_stats():
        stats = service.swap_stats(
            organization_id=current_organization_id(),
            start_date=date_arg("start"),
            end_date=date_arg("end"),
        )
        body = to_json_dict(stats)
        body["action_required"] = stats.action_required
        return jsonify({"success": True, "stats": body})

    @app.route("/api/shift-swaps/<int:swap_id>", methods=["GET"], endpoint="api_get_swap")
    @login_required
    def get_swap(swap_id: int):
        return _swap(service.get_swap(organization_id=current_organization_id(), swap_id=swap_id))

    @app.route("/api/shift-swaps/<int:swap_id>/respond", methods=["POST"], endpoint="api_respond_swap")
    @login_required
    def respond(swap_id: int):
        data = json_body()
        swap = service.respond_to_swap(
            organization_id=current_organization_id(),
            swap_id=swap_id,
            accept=bool(data.get("accept")),
            responder_id=current_employee_id(),
        )
        return _swap(swap)

    @app.route("/api/shift-swaps/<int:swap_id>/decision", methods=["POST"], endpoint="api_decide_swap")
    @login_required
    def decide(swap_id: int):
        data = json_body()
        swap = service.manager_decide_swap(
            organization_id=current_organization_id(),
            swap_id=swap_id,
            manager_id=current_employee_id(),
            approve=bool(data.get("approve")),
            notes=data.get("notes"),
        )
        return _swap(swap)

    @app.route("/api/shift-swaps/<int:swap_id>/execute", methods=["POST"], endpoint="api_execute_swap")
    @login_required
    def execute(swap_id: int):
        swap = service.execute_swap(
            organization_id=current_organization_id(),
            swap_id=swap_id,
            executor_id=current_employee_id(),
        )
        return _swap(swap)

    @app.route("/api/shift-swaps/<int:swap_id>/cancel", methods=["POST"], endpoint="api_cancel_swap")
    @login_required
    def cancel(swap_id: int):
        data = json_body()
        swap = service.cancel_swap(
            organization_id=current_organization_id(),
            swap_id=swap_id,
            requester_id=current_employee_id(),
            reason=data.get("reason"),
        )
        return _swap(swap)
