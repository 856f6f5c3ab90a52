from __future__ import annotations

import itertools
from dataclasses import replace
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional

import pytest

from hrms.attendance.model import AttendanceRecord
from hrms.common.timezone import to_utc
from hrms.container import wire_services
from hrms.core.constants import DEFAULT_LEAVE_ALLOTMENTS
from hrms.core.enums import AttendanceStatus, LeaveStatus, LeaveType, PayrollRunStatus
from hrms.core.exceptions import AttendanceAlreadyExists, PayrollRunAlreadyExists
from hrms.employees.model import Employee
from hrms.leave.model import LeaveBalance, LeavePolicy, LeaveRequest
from hrms.payroll.model import PayrollEntry, PayrollRun, SalaryStructure


class FixedClock:
    """Callable clock; tests move it with ``set_local``."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set_local(self, *args: int) -> datetime:
        self.now = to_utc(datetime(*args))
        return self.now


class InMemoryEmployeeRepository:
    def __init__(self, employees=()):
        self._items: dict[str, Employee] = {e.employee_id: e for e in employees}

    def add(self, employee: Employee) -> Employee:
        self._items[employee.employee_id] = employee
        return employee

    def get_by_id(self, employee_id):
        return self._items.get(employee_id)

    def get_by_code(self, employee_code):
        return next((e for e in self._items.values() if e.employee_code == employee_code), None)

    def list_active(self):
        return [e for e in self._items.values() if e.is_active]

    def list_payroll_eligible(self):
        return [e for e in self._items.values() if e.is_active and e.salary_structure_id]

    def count_by_salary_structure(self, structure_id):
        return sum(1 for e in self._items.values() if e.salary_structure_id == structure_id)


class InMemoryAttendanceRepository:
    def __init__(self):
        self._items: dict[str, AttendanceRecord] = {}
        self._ids = itertools.count(1)

    def get_by_id(self, attendance_id):
        return self._items.get(attendance_id)

    def get_for_employee_and_date(self, employee_id, attendance_date):
        return next(
            (r for r in self._items.values() if r.employee_id == employee_id and r.attendance_date == attendance_date),
            None,
        )

    def list_for_employee(self, employee_id, start_date, end_date):
        rows = [
            r
            for r in self._items.values()
            if r.employee_id == employee_id and start_date <= r.attendance_date <= end_date
        ]
        return sorted(rows, key=lambda r: r.attendance_date, reverse=True)

    def list_for_date(self, attendance_date):
        return [r for r in self._items.values() if r.attendance_date == attendance_date]

    def count_by_status(self, *, employee_id, start_date, end_date, status):
        return sum(1 for r in self.list_for_employee(employee_id, start_date, end_date) if r.status == status)

    def create(self, *, employee_id, attendance_date, status, check_in=None, notes=None, is_manual_entry=False):
        # Mirrors the UNIQUE (employee_id, attendance_date) key.
        if self.get_for_employee_and_date(employee_id, attendance_date):
            raise AttendanceAlreadyExists(employee_id, attendance_date.isoformat())
        record = AttendanceRecord(
            attendance_id=f"att-{next(self._ids)}",
            employee_id=employee_id,
            attendance_date=attendance_date,
            check_in=check_in,
            check_out=None,
            status=status,
            notes=notes,
            is_manual_entry=is_manual_entry,
        )
        self._items[record.attendance_id] = record
        return record

    def update(self, record):
        self._items[record.attendance_id] = record
        return record

    def delete(self, attendance_id):
        return self._items.pop(attendance_id, None) is not None


class InMemoryLeaveRequestRepository:
    def __init__(self):
        self._items: dict[str, LeaveRequest] = {}
        self._ids = itertools.count(1)

    def add(self, request: LeaveRequest) -> LeaveRequest:
        self._items[request.request_id] = request
        return request

    def create(self, *, employee_id, start_date, end_date, leave_type, reason=None):
        request = LeaveRequest(
            request_id=f"leave-{next(self._ids)}",
            employee_id=employee_id,
            start_date=start_date,
            end_date=end_date,
            leave_type=leave_type,
            status=LeaveStatus.PENDING,
            reason=reason,
        )
        self._items[request.request_id] = request
        return request

    def get_by_id(self, request_id):
        return self._items.get(request_id)

    def list(self, *, employee_id=None, status=None, start_date_from=None, start_date_to=None, leave_type=None):
        rows = list(self._items.values())
        if employee_id:
            rows = [r for r in rows if r.employee_id == employee_id]
        if status is not None:
            rows = [r for r in rows if r.status == status]
        if start_date_from is not None:
            rows = [r for r in rows if r.start_date >= start_date_from]
        if start_date_to is not None:
            rows = [r for r in rows if r.start_date <= start_date_to]
        if leave_type is not None:
            rows = [r for r in rows if r.leave_type == leave_type]
        return rows

    def list_for_year(self, employee_id, year):
        return [r for r in self._items.values() if r.employee_id == employee_id and r.start_date.year == year]

    def list_overlapping(self, employee_id, start_date, end_date, *, status=None):
        return [
            r
            for r in self._items.values()
            if r.employee_id == employee_id
            and r.start_date <= end_date
            and r.end_date >= start_date
            and (status is None or r.status == status)
        ]

    def update_status(self, request_id, status):
        updated = replace(self._items[request_id], status=status)
        self._items[request_id] = updated
        return updated


class InMemoryLeaveBalanceRepository:
    def __init__(self, policies=None):
        self._items: dict[tuple[str, LeaveType, int], LeaveBalance] = {}
        self.policies = list(policies) if policies is not None else default_policies()

    def get(self, employee_id, leave_type, year):
        return self._items.get((employee_id, leave_type, year))

    def list_for_employee(self, employee_id, year):
        return [b for (e, _, y), b in self._items.items() if e == employee_id and y == year]

    def list_with_remaining(self, year):
        return [b for (_, _, y), b in self._items.items() if y == year and b.remaining_days > 0]

    def create(self, balance):
        self._items[(balance.employee_id, balance.leave_type, balance.year)] = balance
        return balance

    def update(self, balance):
        return self.create(balance)

    def list_policies(self, *, active_only=True):
        return [p for p in self.policies if p.is_active or not active_only]


class InMemorySalaryStructureRepository:
    def __init__(self):
        self._items: dict[str, SalaryStructure] = {}
        self._ids = itertools.count(1)

    def create(self, structure):
        created = replace(structure, structure_id=f"ss-{next(self._ids)}")
        self._items[created.structure_id] = created
        return created

    def get_by_id(self, structure_id):
        return self._items.get(structure_id)

    def get_by_name(self, name):
        return next((s for s in self._items.values() if s.name == name), None)

    def list_all(self):
        return sorted(self._items.values(), key=lambda s: s.name)

    def update(self, structure):
        self._items[structure.structure_id] = structure
        return structure

    def delete(self, structure_id):
        return self._items.pop(structure_id, None) is not None


class InMemoryPayrollRepository:
    def __init__(self):
        self.runs: dict[str, PayrollRun] = {}
        self.entries: dict[str, PayrollEntry] = {}
        self._run_ids = itertools.count(1)
        self._entry_ids = itertools.count(1)
        self.replace_calls = 0

    def create_run(self, *, month, year):
        if self.get_run_for_period(month, year):
            raise PayrollRunAlreadyExists(month, year)
        run = PayrollRun(run_id=f"run-{next(self._run_ids)}", month=month, year=year, status=PayrollRunStatus.DRAFT)
        self.runs[run.run_id] = run
        return run

    def get_run(self, run_id):
        return self.runs.get(run_id)

    def get_run_for_period(self, month, year):
        return next((r for r in self.runs.values() if r.month == month and r.year == year), None)

    def list_runs(self):
        return sorted(self.runs.values(), key=lambda r: (r.year, r.month), reverse=True)

    def update_run_status(self, run_id, status, *, approved_by=None, at=None):
        run = self.runs[run_id]
        if status == PayrollRunStatus.APPROVED:
            run = replace(run, status=status, approved_by=approved_by, approved_at=at)
        elif status == PayrollRunStatus.PROCESSED:
            run = replace(run, status=status, processed_at=at)
        else:
            run = replace(run, status=status)
        self.runs[run_id] = run
        return run

    def delete_run(self, run_id):
        self.entries = {k: e for k, e in self.entries.items() if e.run_id != run_id}
        return self.runs.pop(run_id, None) is not None

    def count_entries(self, run_id):
        return len(self.list_entries(run_id))

    def list_entries(self, run_id):
        return sorted((e for e in self.entries.values() if e.run_id == run_id), key=lambda e: e.employee_id)

    def get_entry(self, entry_id):
        return self.entries.get(entry_id)

    def update_entry(self, entry):
        self.entries[entry.entry_id] = entry
        return entry

    def replace_entries(self, run_id, drafts):
        self.replace_calls += 1
        kept = {k: e for k, e in self.entries.items() if e.run_id != run_id}
        for draft in drafts:
            entry = PayrollEntry(
                entry_id=f"entry-{next(self._entry_ids)}",
                run_id=run_id,
                employee_id=draft.employee_id,
                gross_salary=draft.figures.gross_salary,
                lop_days=draft.figures.lop_days,
                lop_deduction=draft.figures.lop_deduction,
                total_deductions=draft.figures.total_deductions,
                net_salary=draft.figures.net_salary,
            )
            kept[entry.entry_id] = entry
        self.entries = kept
        return len(drafts)


def default_policies() -> list[LeavePolicy]:
    return [
        LeavePolicy(
            leave_type=leave_type,
            annual_limit=days,
            carry_forward_allowed=leave_type == LeaveType.ANNUAL,
            max_carry_forward=10 if leave_type == LeaveType.ANNUAL else None,
        )
        for leave_type, days in DEFAULT_LEAVE_ALLOTMENTS.items()
    ]


def make_employee(
    employee_id: str,
    *,
    department: Optional[str] = "Engineering",
    salary_structure_id: Optional[str] = None,
    is_active: bool = True,
) -> Employee:
    return Employee(
        employee_id=employee_id,
        employee_code=employee_id.upper(),
        full_name=f"Employee {employee_id}",
        department_id=f"dept-{department.lower()}" if department else None,
        department_name=department,
        salary_structure_id=salary_structure_id,
        is_active=is_active,
    )


def make_structure(**overrides) -> SalaryStructure:
    values = dict(
        structure_id="",
        name="Standard",
        basic=Decimal("20000"),
        hra=Decimal("8000"),
        pf=Decimal("1800"),
        esi=Decimal("200"),
        professional_tax=Decimal("200"),
    )
    values.update(overrides)
    return SalaryStructure(**values)


def make_leave(request_id, employee_id, start, end, *, status=LeaveStatus.APPROVED, leave_type=LeaveType.ANNUAL):
    return LeaveRequest(
        request_id=request_id,
        employee_id=employee_id,
        start_date=start,
        end_date=end,
        leave_type=leave_type,
        status=status,
    )


# Monday 2026-03-16, 11:30 business-local.
FIXED_NOW = datetime(2026, 3, 16, 6, 0, tzinfo=timezone.utc)
FIXED_TODAY = date(2026, 3, 16)


@pytest.fixture
def clock():
    return FixedClock(FIXED_NOW)


@pytest.fixture
def employees_repo():
    return InMemoryEmployeeRepository([make_employee("emp-1"), make_employee("emp-2", department="Finance")])


@pytest.fixture
def attendance_repo():
    return InMemoryAttendanceRepository()


@pytest.fixture
def leave_requests_repo():
    return InMemoryLeaveRequestRepository()


@pytest.fixture
def leave_balances_repo():
    return InMemoryLeaveBalanceRepository()


@pytest.fixture
def salary_structures_repo():
    return InMemorySalaryStructureRepository()


@pytest.fixture
def payroll_repo():
    return InMemoryPayrollRepository()


@pytest.fixture
def container(
    employees_repo,
    attendance_repo,
    leave_requests_repo,
    leave_balances_repo,
    salary_structures_repo,
    payroll_repo,
    clock,
):
    return wire_services(
        employees_repo=employees_repo,
        attendance_repo=attendance_repo,
        leave_requests_repo=leave_requests_repo,
        leave_balances_repo=leave_balances_repo,
        salary_structures_repo=salary_structures_repo,
        payroll_repo=payroll_repo,
        clock=clock,
    )


@pytest.fixture
def make_employee_factory():
    return make_employee


@pytest.fixture
def make_structure_factory():
    return make_structure


@pytest.fixture
def make_leave_factory():
    return make_leave
