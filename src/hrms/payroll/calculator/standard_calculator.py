from __future__ import annotations

from decimal import Decimal

from ...common.validators import round2
from ...core.constants import PAYROLL_DAYS_PER_MONTH
from ..model import PayrollFigures, SalaryStructure
from .base import PayrollCalculator


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule: LOP deducted at gross / 30 per day, regardless of month length.

    Intermediate values stay unrounded; the figures are rounded half-up to two
    places only in the returned result.
    """

    def __init__(self, days_per_month: int = PAYROLL_DAYS_PER_MONTH):
        self._days_per_month = Decimal(days_per_month)

    def calculate(self, structure: SalaryStructure, *, lop_days: int) -> PayrollFigures:
        return self.recalculate(structure.gross, structure.fixed_deductions, lop_days=lop_days)

    def recalculate(self, gross_salary: Decimal, fixed_deductions: Decimal, *, lop_days: int) -> PayrollFigures:
        per_day = gross_salary / self._days_per_month
        lop_deduction = per_day * lop_days
        total_deductions = lop_deduction + fixed_deductions
        net_salary = gross_salary - total_deductions

        return PayrollFigures(
            gross_salary=round2(gross_salary),
            lop_days=int(lop_days),
            lop_deduction=round2(lop_deduction),
            total_deductions=round2(total_deductions),
            net_salary=round2(net_salary),
        )
