from __future__ import annotations

from ..common.validators import require_non_empty
from ..core.exceptions import EmployeeNotFound, InvalidEmployeeData
from .model import Employee
from .repository import EmployeeRepository


class EmployeeDirectory:
    """Lookups that raise domain errors instead of returning ``None``."""

    def __init__(self, employees: EmployeeRepository):
        self._employees = employees

    def require(self, employee_id: str) -> Employee:
        employee_id = require_non_empty(employee_id, "employee_id", error=InvalidEmployeeData)
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise EmployeeNotFound(employee_id)
        return employee

    def require_by_code(self, employee_code: str) -> Employee:
        employee_code = require_non_empty(employee_code, "employee_code", error=InvalidEmployeeData)
        employee = self._employees.get_by_code(employee_code)
        if not employee:
            raise EmployeeNotFound(employee_code)
        return employee

