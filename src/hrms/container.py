from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .common.datetime_utils import Clock, utc_now
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .employees.service import EmployeeDirectory
from .jobs.reconciliation import ReconciliationJobs
from .leave.mysql_leave_repository import MySQLLeaveBalanceRepository, MySQLLeaveRequestRepository
from .leave.repository import LeaveBalanceRepository, LeaveRequestRepository
from .leave.service import LeaveService
from .payroll.calculator.standard_calculator import StandardPayrollCalculator
from .payroll.mysql_payroll_repository import MySQLPayrollRepository, MySQLSalaryStructureRepository
from .payroll.repository import PayrollRepository, SalaryStructureRepository
from .payroll.service import PayrollService


@dataclass(frozen=True)
class Container:
    employees_repo: EmployeeRepository
    attendance_repo: AttendanceRepository
    leave_requests_repo: LeaveRequestRepository
    leave_balances_repo: LeaveBalanceRepository
    salary_structures_repo: SalaryStructureRepository
    payroll_repo: PayrollRepository

    attendance_service: AttendanceService
    leave_service: LeaveService
    payroll_service: PayrollService
    reconciliation_jobs: ReconciliationJobs

    conn: Optional[DatabaseConnection] = None


def wire_services(
    *,
    employees_repo: EmployeeRepository,
    attendance_repo: AttendanceRepository,
    leave_requests_repo: LeaveRequestRepository,
    leave_balances_repo: LeaveBalanceRepository,
    salary_structures_repo: SalaryStructureRepository,
    payroll_repo: PayrollRepository,
    clock: Clock = utc_now,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Build the services on top of any repository implementations."""

    attendance_service = AttendanceService(attendance_repo, EmployeeDirectory(employees_repo), clock=clock)
    leave_service = LeaveService(leave_requests_repo, leave_balances_repo, clock=clock)
    payroll_service = PayrollService(
        payroll_repo,
        salary_structures_repo,
        employees_repo,
        attendance_repo,
        leave_requests_repo,
        calculator=StandardPayrollCalculator(),
        clock=clock,
    )
    reconciliation_jobs = ReconciliationJobs(
        employees_repo,
        attendance_repo,
        leave_requests_repo,
        leave_balances_repo,
        clock=clock,
    )

    return Container(
        employees_repo=employees_repo,
        attendance_repo=attendance_repo,
        leave_requests_repo=leave_requests_repo,
        leave_balances_repo=leave_balances_repo,
        salary_structures_repo=salary_structures_repo,
        payroll_repo=payroll_repo,
        attendance_service=attendance_service,
        leave_service=leave_service,
        payroll_service=payroll_service,
        reconciliation_jobs=reconciliation_jobs,
        conn=conn,
    )


def build_container(*, db_config: dict, clock: Clock = utc_now) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return wire_services(
        employees_repo=MySQLEmployeeRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        leave_requests_repo=MySQLLeaveRequestRepository(conn),
        leave_balances_repo=MySQLLeaveBalanceRepository(conn),
        salary_structures_repo=MySQLSalaryStructureRepository(conn),
        payroll_repo=MySQLPayrollRepository(conn),
        clock=clock,
        conn=conn,
    )
