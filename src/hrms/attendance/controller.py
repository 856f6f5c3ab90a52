from __future__ import annotations

from flask import Flask, jsonify, request

from ..api.params import json_body, optional_date, optional_datetime, required_date
from ..common.serialization import to_jsonable
from ..core.enums import AttendanceStatus
from ..core.exceptions import InvalidAttendanceData
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    def _status(value) -> AttendanceStatus | None:
        if value in (None, ""):
            return None
        try:
            return AttendanceStatus(value)
        except ValueError:
            valid = ", ".join(s.value for s in AttendanceStatus)
            raise InvalidAttendanceData(f"Invalid status. Must be one of: {valid}", "status") from None

    @app.route("/api/attendance/check-in", methods=["POST"], endpoint="attendance_check_in")
    def check_in():
        data = json_body()
        record = service.check_in(
            data.get("employee_id") or "",
            timestamp=optional_datetime(data.get("timestamp"), "timestamp"),
            notes=data.get("notes"),
        )
        return jsonify(to_jsonable(record)), 201

    @app.route("/api/attendance/<attendance_id>/check-out", methods=["POST"], endpoint="attendance_check_out")
    def check_out(attendance_id: str):
        data = json_body()
        record = service.check_out(
            attendance_id,
            timestamp=optional_datetime(data.get("timestamp"), "timestamp"),
            notes=data.get("notes"),
        )
        return jsonify(to_jsonable(record))

    @app.route("/api/attendance/daily", methods=["GET"], endpoint="attendance_daily")
    def daily():
        day = optional_date(request.args.get("date"), "date")
        return jsonify(to_jsonable(service.get_daily_attendance(day)))

    @app.route("/api/attendance/employees/<employee_id>", methods=["GET"], endpoint="attendance_employee")
    def employee_attendance(employee_id: str):
        start = required_date(request.args.get("start"), "start")
        end = required_date(request.args.get("end"), "end")
        return jsonify(to_jsonable(service.get_employee_attendance(employee_id, start, end)))

    @app.route("/api/attendance/employees/<employee_id>/summary", methods=["GET"], endpoint="attendance_summary")
    def summary(employee_id: str):
        start = required_date(request.args.get("start"), "start")
        end = required_date(request.args.get("end"), "end")
        return jsonify(to_jsonable(service.get_attendance_summary(employee_id, start, end)))

    @app.route("/api/attendance/<attendance_id>", methods=["GET"], endpoint="attendance_get")
    def get_record(attendance_id: str):
        return jsonify(to_jsonable(service.get_attendance(attendance_id)))

    @app.route("/api/attendance/<attendance_id>", methods=["PUT"], endpoint="attendance_correct")
    def correct(attendance_id: str):
        data = json_body()
        record = service.correct_attendance(
            attendance_id,
            check_in=optional_datetime(data.get("check_in"), "check_in"),
            check_out=optional_datetime(data.get("check_out"), "check_out"),
            status=_status(data.get("status")),
            notes=data.get("notes"),
        )
        return jsonify(to_jsonable(record))

    @app.route("/api/attendance/<attendance_id>", methods=["DELETE"], endpoint="attendance_delete")
    def delete(attendance_id: str):
        service.delete_attendance(attendance_id)
        return "", 204
