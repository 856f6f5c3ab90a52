from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for business rule violations.

    Carries a stable machine-readable ``code`` and optional ``details`` so the
    HTTP layer can render errors without parsing messages.
    """

    code = "DOMAIN_ERROR"

    def __init__(self, message: str, *, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


# Validation: input fails a rule (blank field, bad range, bad enum, future timestamp).
class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, details={"field": field} if field else None)
        self.field = field


class InvalidAttendanceData(ValidationError):
    code = "INVALID_ATTENDANCE_DATA"


class InvalidLeaveRequest(ValidationError):
    code = "INVALID_LEAVE_REQUEST"


class InvalidEmployeeData(ValidationError):
    code = "INVALID_EMPLOYEE_DATA"


class InvalidPayrollData(ValidationError):
    code = "INVALID_PAYROLL_DATA"


# Not found: a referenced id does not resolve.
class NotFoundError(DomainError):
    code = "NOT_FOUND"
    entity = "Record"
    id_field = "id"

    def __init__(self, entity_id: str):
        super().__init__(
            f"{self.entity} with ID {entity_id} not found",
            details={self.id_field: entity_id},
        )
        self.entity_id = entity_id


class EmployeeNotFound(NotFoundError):
    code = "EMPLOYEE_NOT_FOUND"
    entity = "Employee"
    id_field = "employee_id"


class DepartmentNotFound(NotFoundError):
    code = "DEPARTMENT_NOT_FOUND"
    entity = "Department"
    id_field = "department_id"


class DesignationNotFound(NotFoundError):
    code = "DESIGNATION_NOT_FOUND"
    entity = "Designation"
    id_field = "designation_id"


class AttendanceNotFound(NotFoundError):
    code = "ATTENDANCE_NOT_FOUND"
    entity = "Attendance record"
    id_field = "attendance_id"


class LeaveRequestNotFound(NotFoundError):
    code = "LEAVE_REQUEST_NOT_FOUND"
    entity = "Leave request"
    id_field = "leave_request_id"


class PayrollRunNotFound(NotFoundError):
    code = "PAYROLL_RUN_NOT_FOUND"
    entity = "Payroll run"
    id_field = "payroll_run_id"


class PayrollEntryNotFound(NotFoundError):
    code = "PAYROLL_ENTRY_NOT_FOUND"
    entity = "Payroll entry"
    id_field = "payroll_entry_id"


class SalaryStructureNotFound(NotFoundError):
    code = "SALARY_STRUCTURE_NOT_FOUND"
    entity = "Salary structure"
    id_field = "salary_structure_id"


# Already exists: a uniqueness rule is violated.
class AlreadyExistsError(DomainError):
    code = "ALREADY_EXISTS"


class EmployeeCodeAlreadyExists(AlreadyExistsError):
    code = "EMPLOYEE_CODE_EXISTS"

    def __init__(self, employee_code: str):
        super().__init__(
            f"Employee code {employee_code} already exists",
            details={"employee_code": employee_code},
        )


class AttendanceAlreadyExists(AlreadyExistsError):
    code = "ATTENDANCE_ALREADY_EXISTS"

    def __init__(self, employee_id: str, date_key: str):
        super().__init__(
            f"Attendance already recorded for employee {employee_id} on {date_key}",
            details={"employee_id": employee_id, "date": date_key},
        )


class SalaryStructureAlreadyExists(AlreadyExistsError):
    code = "SALARY_STRUCTURE_EXISTS"

    def __init__(self, name: str):
        super().__init__(f'Salary structure "{name}" already exists', details={"name": name})


class PayrollRunAlreadyExists(AlreadyExistsError):
    code = "PAYROLL_RUN_EXISTS"

    def __init__(self, month: int, year: int):
        super().__init__(
            f"Payroll run already exists for {month}/{year}",
            details={"month": month, "year": year},
        )


# Already processed: a state-machine operation on a record in the wrong state.
class AlreadyProcessedError(DomainError):
    code = "ALREADY_PROCESSED"


class LeaveRequestAlreadyProcessed(AlreadyProcessedError):
    code = "LEAVE_REQUEST_ALREADY_PROCESSED"

    def __init__(self, request_id: str, current_status: str):
        super().__init__(
            f"Leave request {request_id} has already been {current_status}",
            details={"leave_request_id": request_id, "current_status": current_status},
        )


class PayrollRunAlreadyProcessed(AlreadyProcessedError):
    code = "PAYROLL_RUN_STATE_CONFLICT"

    def __init__(self, run_id: str, current_status: str, message: str):
        super().__init__(message, details={"payroll_run_id": run_id, "current_status": current_status})


class NoCheckInRecord(DomainError):
    code = "NO_CHECK_IN_RECORD"

    def __init__(self, employee_id: str):
        super().__init__(
            f"No check-in record found for employee {employee_id}",
            details={"employee_id": employee_id},
        )


# Infrastructure: storage failures, always wrapping the underlying cause.
class DatabaseError(DomainError):
    code = "DATABASE_ERROR"

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        super().__init__(
            f"Database operation failed: {operation}",
            details={"cause": str(cause)} if cause else None,
        )
        self.operation = operation
        self.cause = cause
