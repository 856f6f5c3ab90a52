from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_operation, fetchall, fetchone
from .model import Employee
from .repository import EmployeeRepository

_SELECT = """
    SELECT e.employee_id, e.employee_code, e.full_name, e.department_id,
           d.name AS department_name, e.salary_structure_id, e.is_active
    FROM employees e
    LEFT JOIN departments d ON d.department_id = e.department_id
"""


def _row_to_employee(r: dict) -> Employee:
    return Employee(
        employee_id=str(r["employee_id"]),
        employee_code=str(r["employee_code"]),
        full_name=str(r["full_name"]),
        department_id=r.get("department_id"),
        department_name=r.get("department_name"),
        salary_structure_id=r.get("salary_structure_id"),
        is_active=bool(r.get("is_active", 1)),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        with db_operation(self._conn_factory, "get employee") as (_, cur):
            cur.execute(_SELECT + " WHERE e.employee_id=%s", (employee_id,))
            r = fetchone(cur)
            return _row_to_employee(r) if r else None

    def get_by_code(self, employee_code: str) -> Optional[Employee]:
        with db_operation(self._conn_factory, "get employee by code") as (_, cur):
            cur.execute(_SELECT + " WHERE e.employee_code=%s", (employee_code,))
            r = fetchone(cur)
            return _row_to_employee(r) if r else None

    def list_active(self) -> Sequence[Employee]:
        with db_operation(self._conn_factory, "list active employees") as (_, cur):
            cur.execute(_SELECT + " WHERE e.is_active=1 ORDER BY e.employee_code")
            return [_row_to_employee(r) for r in fetchall(cur)]

    def list_payroll_eligible(self) -> Sequence[Employee]:
        with db_operation(self._conn_factory, "list payroll eligible employees") as (_, cur):
            cur.execute(
                _SELECT + " WHERE e.is_active=1 AND e.salary_structure_id IS NOT NULL ORDER BY e.employee_code"
            )
            return [_row_to_employee(r) for r in fetchall(cur)]

    def count_by_salary_structure(self, structure_id: str) -> int:
        with db_operation(self._conn_factory, "count employees by salary structure") as (_, cur):
            cur.execute(
                "SELECT COUNT(*) AS cnt FROM employees WHERE salary_structure_id=%s",
                (structure_id,),
            )
            r = fetchone(cur)
            return int(r["cnt"]) if r else 0
