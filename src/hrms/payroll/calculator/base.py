from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from ..model import PayrollFigures, SalaryStructure


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll)."""

    @abstractmethod
    def calculate(self, structure: SalaryStructure, *, lop_days: int) -> PayrollFigures:
        raise NotImplementedError

    @abstractmethod
    def recalculate(self, gross_salary: Decimal, fixed_deductions: Decimal, *, lop_days: int) -> PayrollFigures:
        """Recompute from a stored gross when only the LOP days change."""

        raise NotImplementedError
