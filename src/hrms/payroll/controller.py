from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

from flask import Flask, jsonify

from ..api.params import json_body, optional_int, required_int
from ..common.serialization import to_jsonable
from ..core.exceptions import InvalidPayrollData
from ..container import Container
from .model import SALARY_COMPONENT_FIELDS, SalaryStructure


def _money(value: Any, field_name: str) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidPayrollData(f"{field_name} must be a number", field_name) from None


def _structure_changes(data: dict) -> dict[str, Any]:
    changes: dict[str, Any] = {}
    for field_name in SALARY_COMPONENT_FIELDS:
        if data.get(field_name) is not None:
            changes[field_name] = _money(data[field_name], field_name)
    for field_name in ("name", "description"):
        if field_name in data:
            changes[field_name] = data[field_name]
    if "is_active" in data:
        changes["is_active"] = bool(data["is_active"])
    return changes


def register(app: Flask, container: Container) -> None:
    service = container.payroll_service

    # Salary structures

    @app.route("/api/salary-structures", methods=["POST"], endpoint="salary_structure_create")
    def create_structure():
        changes = _structure_changes(json_body())
        structure = SalaryStructure(
            structure_id="",
            name=changes.pop("name", "") or "",
            basic=changes.pop("basic", Decimal("0")),
            hra=changes.pop("hra", Decimal("0")),
            **changes,
        )
        return jsonify(to_jsonable(service.create_salary_structure(structure))), 201

    @app.route("/api/salary-structures", methods=["GET"], endpoint="salary_structure_list")
    def list_structures():
        return jsonify(to_jsonable(service.list_salary_structures()))

    @app.route("/api/salary-structures/<structure_id>", methods=["GET"], endpoint="salary_structure_get")
    def get_structure(structure_id: str):
        return jsonify(to_jsonable(service.get_salary_structure(structure_id)))

    @app.route("/api/salary-structures/<structure_id>", methods=["PUT"], endpoint="salary_structure_update")
    def update_structure(structure_id: str):
        changes = _structure_changes(json_body())
        return jsonify(to_jsonable(service.update_salary_structure(structure_id, **changes)))

    @app.route("/api/salary-structures/<structure_id>", methods=["DELETE"], endpoint="salary_structure_delete")
    def delete_structure(structure_id: str):
        service.delete_salary_structure(structure_id)
        return "", 204

    # Runs

    @app.route("/api/payroll-runs", methods=["POST"], endpoint="payroll_run_create")
    def create_run():
        data = json_body()
        run = service.create_payroll_run(required_int(data.get("month"), "month"), required_int(data.get("year"), "year"))
        return jsonify(to_jsonable(run)), 201

    @app.route("/api/payroll-runs", methods=["GET"], endpoint="payroll_run_list")
    def list_runs():
        return jsonify(to_jsonable(service.list_payroll_runs()))

    @app.route("/api/payroll-runs/<run_id>", methods=["GET"], endpoint="payroll_run_get")
    def get_run(run_id: str):
        return jsonify(to_jsonable(service.get_payroll_run(run_id)))

    @app.route("/api/payroll-runs/<run_id>", methods=["DELETE"], endpoint="payroll_run_delete")
    def delete_run(run_id: str):
        service.delete_payroll_run(run_id)
        return "", 204

    @app.route("/api/payroll-runs/<run_id>/calculate", methods=["POST"], endpoint="payroll_run_calculate")
    def calculate(run_id: str):
        count = service.calculate_payroll_entries(run_id)
        return jsonify({"run_id": run_id, "entries": count})

    @app.route("/api/payroll-runs/<run_id>/approve", methods=["POST"], endpoint="payroll_run_approve")
    def approve(run_id: str):
        data = json_body()
        approver_id = data.get("approver_id")
        if not approver_id:
            raise InvalidPayrollData("approver_id is required", "approver_id")
        return jsonify(to_jsonable(service.approve_payroll_run(run_id, approver_id)))

    @app.route("/api/payroll-runs/<run_id>/process", methods=["POST"], endpoint="payroll_run_process")
    def process(run_id: str):
        return jsonify(to_jsonable(service.process_payroll_run(run_id)))

    @app.route("/api/payroll-runs/<run_id>/summary", methods=["GET"], endpoint="payroll_run_summary")
    def summary(run_id: str):
        return jsonify(to_jsonable(service.get_payroll_summary(run_id)))

    # Entries

    @app.route("/api/payroll-runs/<run_id>/entries", methods=["GET"], endpoint="payroll_entry_list")
    def list_entries(run_id: str):
        return jsonify(to_jsonable(service.list_payroll_entries(run_id)))

    @app.route("/api/payroll-entries/<entry_id>", methods=["GET"], endpoint="payroll_entry_get")
    def get_entry(entry_id: str):
        return jsonify(to_jsonable(service.get_payroll_entry(entry_id)))

    @app.route("/api/payroll-entries/<entry_id>", methods=["PUT"], endpoint="payroll_entry_update")
    def update_entry(entry_id: str):
        data = json_body()
        entry = service.update_payroll_entry(
            entry_id,
            lop_days=optional_int(data.get("lop_days"), "lop_days"),
            notes=data.get("notes"),
        )
        return jsonify(to_jsonable(entry))
