from __future__ import annotations

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Optional, Sequence

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import Clock, utc_now
from ..common.validators import require_non_empty, round2
from ..core.constants import UNASSIGNED_DEPARTMENT
from ..core.enums import AttendanceStatus, LeaveStatus, PayrollRunStatus
from ..core.exceptions import (
    InvalidPayrollData,
    PayrollEntryNotFound,
    PayrollRunAlreadyExists,
    PayrollRunAlreadyProcessed,
    PayrollRunNotFound,
    SalaryStructureAlreadyExists,
    SalaryStructureNotFound,
)
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..leave.repository import LeaveRequestRepository
from . import rules
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import (
    SALARY_COMPONENT_FIELDS,
    DepartmentPayroll,
    PayrollEntry,
    PayrollEntryDraft,
    PayrollRun,
    PayrollSummary,
    SalaryStructure,
)
from .repository import PayrollRepository, SalaryStructureRepository

logger = logging.getLogger(__name__)


def _validate_structure(structure: SalaryStructure) -> SalaryStructure:
    name = require_non_empty(structure.name, "name", error=InvalidPayrollData)
    amounts = {}
    for field_name in SALARY_COMPONENT_FIELDS:
        value = Decimal(str(getattr(structure, field_name)))
        if value < 0:
            raise InvalidPayrollData(f"{field_name} cannot be negative", field_name)
        amounts[field_name] = value
    return replace(structure, name=name, **amounts)


class PayrollService:
    def __init__(
        self,
        payroll: PayrollRepository,
        structures: SalaryStructureRepository,
        employees: EmployeeRepository,
        attendance: AttendanceRepository,
        leaves: LeaveRequestRepository,
        *,
        calculator: Optional[PayrollCalculator] = None,
        clock: Clock = utc_now,
    ):
        self._payroll = payroll
        self._structures = structures
        self._employees = employees
        self._attendance = attendance
        self._leaves = leaves
        self._calculator = calculator or StandardPayrollCalculator()
        self._clock = clock

    # Salary structures

    def create_salary_structure(self, structure: SalaryStructure) -> SalaryStructure:
        structure = _validate_structure(structure)
        if self._structures.get_by_name(structure.name):
            raise SalaryStructureAlreadyExists(structure.name)

        created = self._structures.create(structure)
        logger.info("Salary structure created: %s", created.name)
        return created

    def list_salary_structures(self) -> Sequence[SalaryStructure]:
        return self._structures.list_all()

    def get_salary_structure(self, structure_id: str) -> SalaryStructure:
        structure = self._structures.get_by_id(structure_id)
        if not structure:
            raise SalaryStructureNotFound(structure_id)
        return structure

    def update_salary_structure(self, structure_id: str, **changes) -> SalaryStructure:
        current = self.get_salary_structure(structure_id)
        unknown = set(changes) - set(SALARY_COMPONENT_FIELDS) - {"name", "description", "is_active"}
        if unknown:
            raise InvalidPayrollData(f"Unknown salary structure fields: {', '.join(sorted(unknown))}")

        updated = _validate_structure(replace(current, **changes))
        if updated.name != current.name and self._structures.get_by_name(updated.name):
            raise SalaryStructureAlreadyExists(updated.name)

        saved = self._structures.update(updated)
        logger.info("Salary structure updated: %s", structure_id)
        return saved

    def delete_salary_structure(self, structure_id: str) -> None:
        self.get_salary_structure(structure_id)
        if self._employees.count_by_salary_structure(structure_id) > 0:
            raise InvalidPayrollData(
                "Cannot delete salary structure with assigned employees. Please reassign employees first."
            )

        self._structures.delete(structure_id)
        logger.info("Salary structure deleted: %s", structure_id)

    # Payroll runs

    def create_payroll_run(self, month: int, year: int) -> PayrollRun:
        rules.validate_period(month, year)
        if self._payroll.get_run_for_period(month, year):
            raise PayrollRunAlreadyExists(month, year)

        run = self._payroll.create_run(month=int(month), year=int(year))
        logger.info("Payroll run created: %s/%s", month, year)
        return run

    def list_payroll_runs(self) -> Sequence[PayrollRun]:
        return self._payroll.list_runs()

    def get_payroll_run(self, run_id: str) -> PayrollRun:
        run = self._payroll.get_run(run_id)
        if not run:
            raise PayrollRunNotFound(run_id)
        return run

    def calculate_payroll_entries(self, run_id: str) -> int:
        """(Re)build every entry of a draft run from attendance and approved leave."""

        run = self.get_payroll_run(run_id)
        if run.status != PayrollRunStatus.DRAFT:
            raise PayrollRunAlreadyProcessed(
                run.run_id, run.status.value, "Can only calculate entries for draft payroll runs"
            )

        period_start, period_end = rules.month_bounds(run.month, run.year)
        structures: dict[str, Optional[SalaryStructure]] = {}
        drafts: list[PayrollEntryDraft] = []

        for employee in self._employees.list_payroll_eligible():
            if not employee.is_active or not employee.salary_structure_id:
                continue

            structure_id = employee.salary_structure_id
            if structure_id not in structures:
                structures[structure_id] = self._structures.get_by_id(structure_id)
            structure = structures[structure_id]
            if structure is None:
                logger.warning("Employee %s references missing salary structure %s", employee.employee_id, structure_id)
                continue

            absent_count = self._attendance.count_by_status(
                employee_id=employee.employee_id,
                start_date=period_start,
                end_date=period_end,
                status=AttendanceStatus.ABSENT,
            )
            approved = self._leaves.list_overlapping(
                employee.employee_id, period_start, period_end, status=LeaveStatus.APPROVED
            )
            leave_days = rules.approved_leave_days(approved, period_start, period_end)
            lop_days = rules.loss_of_pay_days(absent_count, leave_days)

            drafts.append(
                PayrollEntryDraft(
                    employee_id=employee.employee_id,
                    figures=self._calculator.calculate(structure, lop_days=lop_days),
                )
            )

        count = self._payroll.replace_entries(run.run_id, drafts)
        logger.info("Payroll entries calculated for run %s: %s entries", run.run_id, count)
        return count

    def approve_payroll_run(self, run_id: str, approver_id: str) -> PayrollRun:
        run = self.get_payroll_run(run_id)
        if run.status != PayrollRunStatus.DRAFT:
            raise PayrollRunAlreadyProcessed(run.run_id, run.status.value, "Can only approve draft payroll runs")
        if self._payroll.count_entries(run.run_id) == 0:
            raise InvalidPayrollData("Cannot approve payroll run with no entries")

        updated = self._payroll.update_run_status(
            run.run_id, PayrollRunStatus.APPROVED, approved_by=approver_id, at=self._clock()
        )
        logger.info("Payroll run approved: %s", run_id)
        return updated

    def process_payroll_run(self, run_id: str) -> PayrollRun:
        run = self.get_payroll_run(run_id)
        if run.status != PayrollRunStatus.APPROVED:
            raise PayrollRunAlreadyProcessed(run.run_id, run.status.value, "Can only process approved payroll runs")

        updated = self._payroll.update_run_status(run.run_id, PayrollRunStatus.PROCESSED, at=self._clock())
        logger.info("Payroll run processed: %s", run_id)
        return updated

    def delete_payroll_run(self, run_id: str) -> None:
        run = self.get_payroll_run(run_id)
        if run.status != PayrollRunStatus.DRAFT:
            raise PayrollRunAlreadyProcessed(run.run_id, run.status.value, "Can only delete draft payroll runs")

        self._payroll.delete_run(run.run_id)
        logger.info("Payroll run deleted: %s", run_id)

    # Entries

    def list_payroll_entries(self, run_id: str) -> Sequence[PayrollEntry]:
        run = self.get_payroll_run(run_id)
        return self._payroll.list_entries(run.run_id)

    def get_payroll_entry(self, entry_id: str) -> PayrollEntry:
        entry = self._payroll.get_entry(entry_id)
        if not entry:
            raise PayrollEntryNotFound(entry_id)
        return entry

    def update_payroll_entry(
        self,
        entry_id: str,
        *,
        lop_days: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> PayrollEntry:
        """Manual correction of an entry's LOP days while its run is still a draft."""

        entry = self.get_payroll_entry(entry_id)
        run = self.get_payroll_run(entry.run_id)
        if run.status != PayrollRunStatus.DRAFT:
            raise PayrollRunAlreadyProcessed(
                run.run_id, run.status.value, "Can only update entries in draft payroll runs"
            )

        if lop_days is not None and int(lop_days) < 0:
            raise InvalidPayrollData("LOP days cannot be negative", "lop_days")
        lop_days = entry.lop_days if lop_days is None else int(lop_days)

        fixed_deductions = Decimal("0")
        employee = self._employees.get_by_id(entry.employee_id)
        if employee and employee.salary_structure_id:
            structure = self._structures.get_by_id(employee.salary_structure_id)
            if structure:
                fixed_deductions = structure.fixed_deductions

        figures = self._calculator.recalculate(entry.gross_salary, fixed_deductions, lop_days=lop_days)
        updated = self._payroll.update_entry(
            replace(
                entry,
                lop_days=figures.lop_days,
                lop_deduction=figures.lop_deduction,
                total_deductions=figures.total_deductions,
                net_salary=figures.net_salary,
                notes=notes if notes is not None else entry.notes,
            )
        )
        logger.info("Payroll entry updated: %s", entry_id)
        return updated

    # Reports

    def get_payroll_summary(self, run_id: str) -> PayrollSummary:
        """Run totals plus a per-department rollup.

        Departments come from each employee's current assignment, not from a
        snapshot taken when the run was calculated.
        """

        run = self.get_payroll_run(run_id)
        entries = self._payroll.list_entries(run.run_id)

        groups: dict[str, list[PayrollEntry]] = {}
        for entry in entries:
            groups.setdefault(self._department_of(self._employees.get_by_id(entry.employee_id)), []).append(entry)

        by_department = [
            DepartmentPayroll(
                department=department,
                employee_count=len(items),
                gross_salary=round2(sum((e.gross_salary for e in items), Decimal("0"))),
                deductions=round2(sum((e.total_deductions for e in items), Decimal("0"))),
                net_salary=round2(sum((e.net_salary for e in items), Decimal("0"))),
            )
            for department, items in groups.items()
        ]

        return PayrollSummary(
            run=run,
            total_employees=len(entries),
            total_gross_salary=round2(sum((e.gross_salary for e in entries), Decimal("0"))),
            total_deductions=round2(sum((e.total_deductions for e in entries), Decimal("0"))),
            total_net_salary=round2(sum((e.net_salary for e in entries), Decimal("0"))),
            by_department=by_department,
        )

    @staticmethod
    def _department_of(employee: Optional[Employee]) -> str:
        if employee and employee.department_name:
            return employee.department_name
        return UNASSIGNED_DEPARTMENT
