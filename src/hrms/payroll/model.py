from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import PayrollRunStatus


@dataclass(frozen=True)
class SalaryStructure:
    """HR-configured pay template; employees reference it by id."""

    structure_id: str
    name: str
    basic: Decimal
    hra: Decimal
    conveyance: Decimal = Decimal("0")
    medical_allowance: Decimal = Decimal("0")
    special_allowance: Decimal = Decimal("0")
    professional_tax: Decimal = Decimal("0")
    pf: Decimal = Decimal("0")
    esi: Decimal = Decimal("0")
    is_active: bool = True
    description: Optional[str] = None

    @property
    def gross(self) -> Decimal:
        return self.basic + self.hra + self.conveyance + self.medical_allowance + self.special_allowance

    @property
    def fixed_deductions(self) -> Decimal:
        return self.professional_tax + self.pf + self.esi


@dataclass(frozen=True)
class PayrollRun:
    run_id: str
    month: int
    year: int
    status: PayrollRunStatus
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None
    processed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class PayrollFigures:
    """Computed figures for one employee, rounded for persistence."""

    gross_salary: Decimal
    lop_days: int
    lop_deduction: Decimal
    total_deductions: Decimal
    net_salary: Decimal


@dataclass(frozen=True)
class PayrollEntryDraft:
    employee_id: str
    figures: PayrollFigures


@dataclass(frozen=True)
class PayrollEntry:
    entry_id: str
    run_id: str
    employee_id: str
    gross_salary: Decimal
    lop_days: int
    lop_deduction: Decimal
    total_deductions: Decimal
    net_salary: Decimal
    notes: Optional[str] = None


@dataclass(frozen=True)
class DepartmentPayroll:
    department: str
    employee_count: int
    gross_salary: Decimal
    deductions: Decimal
    net_salary: Decimal


@dataclass(frozen=True)
class PayrollSummary:
    run: PayrollRun
    total_employees: int
    total_gross_salary: Decimal
    total_deductions: Decimal
    total_net_salary: Decimal
    by_department: list[DepartmentPayroll]


SALARY_COMPONENT_FIELDS = (
    "basic",
    "hra",
    "conveyance",
    "medical_allowance",
    "special_allowance",
    "professional_tax",
    "pf",
    "esi",
)
