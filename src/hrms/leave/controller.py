from __future__ import annotations

from flask import Flask, jsonify, request

from ..api.params import json_body, optional_date, optional_int, required_date, required_int
from ..common.serialization import to_jsonable
from ..core.enums import LeaveStatus
from ..core.exceptions import InvalidLeaveRequest
from ..container import Container
from . import rules


def register(app: Flask, container: Container) -> None:
    service = container.leave_service

    def _status(value) -> LeaveStatus | None:
        if value in (None, ""):
            return None
        try:
            return LeaveStatus(value)
        except ValueError:
            valid = ", ".join(s.value for s in LeaveStatus)
            raise InvalidLeaveRequest(f"Invalid status. Must be one of: {valid}", "status") from None

    @app.route("/api/leave-requests", methods=["POST"], endpoint="leave_create")
    def create():
        data = json_body()
        leave = service.create_leave_request(
            employee_id=data.get("employee_id") or "",
            start_date=required_date(data.get("start_date"), "start_date"),
            end_date=required_date(data.get("end_date"), "end_date"),
            leave_type=data.get("leave_type") or "",
            reason=data.get("reason"),
        )
        return jsonify(to_jsonable(leave)), 201

    @app.route("/api/leave-requests", methods=["GET"], endpoint="leave_list")
    def list_requests():
        leave_type = request.args.get("leave_type")
        requests = service.list_leave_requests(
            employee_id=request.args.get("employee_id") or None,
            status=_status(request.args.get("status")),
            start_date_from=optional_date(request.args.get("start_date_from"), "start_date_from"),
            start_date_to=optional_date(request.args.get("start_date_to"), "start_date_to"),
            leave_type=rules.validate_leave_type(leave_type) if leave_type else None,
        )
        return jsonify(to_jsonable(requests))

    @app.route("/api/leave-requests/pending", methods=["GET"], endpoint="leave_pending")
    def pending():
        return jsonify(to_jsonable(service.get_pending_leave_requests()))

    @app.route("/api/leave-requests/<request_id>", methods=["GET"], endpoint="leave_get")
    def get_request(request_id: str):
        return jsonify(to_jsonable(service.get_leave_request(request_id)))

    @app.route("/api/leave-requests/<request_id>/approve", methods=["POST"], endpoint="leave_approve")
    def approve(request_id: str):
        data = json_body()
        return jsonify(to_jsonable(service.approve_leave_request(request_id, data.get("approver_id"))))

    @app.route("/api/leave-requests/<request_id>/reject", methods=["POST"], endpoint="leave_reject")
    def reject(request_id: str):
        data = json_body()
        leave = service.reject_leave_request(
            request_id,
            data.get("approver_id"),
            rejection_reason=data.get("rejection_reason"),
        )
        return jsonify(to_jsonable(leave))

    @app.route("/api/leave-requests/<request_id>/cancel", methods=["POST"], endpoint="leave_cancel")
    def cancel(request_id: str):
        return jsonify(to_jsonable(service.cancel_leave_request(request_id)))

    @app.route("/api/employees/<employee_id>/leave-requests", methods=["GET"], endpoint="leave_employee")
    def employee_requests(employee_id: str):
        return jsonify(to_jsonable(service.get_employee_leave_requests(employee_id)))

    @app.route("/api/employees/<employee_id>/leave-summary", methods=["GET"], endpoint="leave_summary")
    def summary(employee_id: str):
        year = required_int(request.args.get("year"), "year")
        return jsonify(to_jsonable(service.get_leave_summary(employee_id, year)))

    @app.route("/api/employees/<employee_id>/leave-balances", methods=["GET"], endpoint="leave_balances")
    def balances(employee_id: str):
        year = optional_int(request.args.get("year"), "year")
        return jsonify(to_jsonable(service.get_leave_balances(employee_id, year)))
