from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Employee


class EmployeeRepository(Protocol):
    """Repository interface for employees.

    Note (DIP): services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_code(self, employee_code: str) -> Optional[Employee]:
        raise NotImplementedError

    def list_active(self) -> Sequence[Employee]:
        raise NotImplementedError

    def list_payroll_eligible(self) -> Sequence[Employee]:
        """Active employees with a salary structure assigned."""

        raise NotImplementedError

    def count_by_salary_structure(self, structure_id: str) -> int:
        raise NotImplementedError
