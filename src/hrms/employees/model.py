from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Employee:
    """Domain entity: Employee, as seen by the reconciliation engine.

    ``department_name`` is resolved from the current department assignment at
    read time.
    """

    employee_id: str
    employee_code: str
    full_name: str
    department_id: Optional[str]
    department_name: Optional[str]
    salary_structure_id: Optional[str]
    is_active: bool = True

