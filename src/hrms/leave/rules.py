"""Leave rules: validation, day counting, overlap, summaries and balances."""

from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional, Sequence, Union

from ..common.timezone import local_date
from ..common.validators import require_max_length, require_non_empty
from ..core.constants import DEFAULT_LEAVE_ALLOTMENTS, MAX_LEAVE_REASON_LENGTH, MAX_LEAVE_SPAN_DAYS
from ..core.enums import LeaveStatus, LeaveType
from ..core.exceptions import InvalidLeaveRequest, LeaveRequestAlreadyProcessed
from .model import LeaveBalance, LeavePolicy, LeaveRequest, LeaveSummary

DateLike = Union[date, datetime]

_INACTIVE_STATUSES = {LeaveStatus.REJECTED, LeaveStatus.CANCELLED}


def _as_local_date(value: DateLike) -> date:
    # Instants are truncated to the business-local calendar day.
    if isinstance(value, datetime):
        return local_date(value)
    return value


def calculate_leave_days(start: DateLike, end: DateLike) -> int:
    """Inclusive day count: floor((end - start) / 1 day) + 1 after truncation."""
    return (_as_local_date(end) - _as_local_date(start)).days + 1


def validate_employee_id(employee_id: str) -> str:
    return require_non_empty(employee_id, "employee_id", error=InvalidLeaveRequest, message="Employee ID is required")


def validate_date_range(start: DateLike, end: DateLike, *, today: date) -> None:
    start, end = _as_local_date(start), _as_local_date(end)

    if start < today:
        raise InvalidLeaveRequest("Start date cannot be in the past", "startDate")
    if end < start:
        raise InvalidLeaveRequest("End date cannot be before start date", "endDate")
    if (end - start).days > MAX_LEAVE_SPAN_DAYS:
        raise InvalidLeaveRequest(f"Leave request cannot exceed {MAX_LEAVE_SPAN_DAYS} days", "dateRange")


def validate_leave_type(value: Union[str, LeaveType]) -> LeaveType:
    try:
        return LeaveType(value)
    except ValueError:
        valid = ", ".join(t.value for t in LeaveType)
        raise InvalidLeaveRequest(f"Invalid leave type. Must be one of: {valid}", "leaveType") from None


def validate_leave_request(
    *,
    employee_id: str,
    start_date: DateLike,
    end_date: DateLike,
    leave_type: Union[str, LeaveType],
    reason: Optional[str] = None,
    today: date,
) -> LeaveType:
    validate_employee_id(employee_id)
    validate_date_range(start_date, end_date, today=today)
    parsed_type = validate_leave_type(leave_type)
    require_max_length(reason, "Reason", MAX_LEAVE_REASON_LENGTH, error=InvalidLeaveRequest)
    return parsed_type


def overlaps(a_start: DateLike, a_end: DateLike, b_start: DateLike, b_end: DateLike) -> bool:
    """Closed-interval overlap; touching boundaries count."""
    return _as_local_date(a_start) <= _as_local_date(b_end) and _as_local_date(a_end) >= _as_local_date(b_start)


def find_conflicts(
    start: DateLike,
    end: DateLike,
    existing: Iterable[LeaveRequest],
    *,
    exclude_id: Optional[str] = None,
) -> list[LeaveRequest]:
    """Requests that block ``[start, end]``: any non-rejected, non-cancelled overlap."""
    return [
        r
        for r in existing
        if r.request_id != exclude_id
        and r.status not in _INACTIVE_STATUSES
        and overlaps(r.start_date, r.end_date, start, end)
    ]


def covers(request: LeaveRequest, day: date) -> bool:
    return request.status == LeaveStatus.APPROVED and overlaps(request.start_date, request.end_date, day, day)


def ensure_can_process(request: LeaveRequest) -> None:
    """Approve/reject are only allowed from pending."""
    if request.status != LeaveStatus.PENDING:
        raise LeaveRequestAlreadyProcessed(request.request_id, request.status.value)


def can_cancel(status: LeaveStatus) -> tuple[bool, Optional[str]]:
    if status == LeaveStatus.APPROVED:
        return False, "Cannot cancel an already approved leave request"
    if status == LeaveStatus.REJECTED:
        return False, "Cannot cancel an already rejected leave request"
    # pending, or already cancelled (idempotent no-op)
    return True, None


def calculate_summary(employee_id: str, requests: Sequence[LeaveRequest], year: int) -> LeaveSummary:
    approved = [r for r in requests if r.status == LeaveStatus.APPROVED]

    by_type = {leave_type: 0 for leave_type in LeaveType}
    for request in approved:
        by_type[request.leave_type] += calculate_leave_days(request.start_date, request.end_date)

    return LeaveSummary(
        employee_id=employee_id,
        year=year,
        total_requests=len(requests),
        approved_requests=len(approved),
        rejected_requests=sum(1 for r in requests if r.status == LeaveStatus.REJECTED),
        pending_requests=sum(1 for r in requests if r.status == LeaveStatus.PENDING),
        total_days_taken=sum(by_type.values()),
        by_type=by_type,
    )


def default_leave_balance(employee_id: str, year: int) -> list[LeaveBalance]:
    return [
        LeaveBalance(
            employee_id=employee_id,
            leave_type=leave_type,
            year=year,
            total_days=days,
            used_days=0,
            remaining_days=days,
        )
        for leave_type, days in DEFAULT_LEAVE_ALLOTMENTS.items()
    ]


def monthly_accrual(annual_limit: int) -> int:
    return annual_limit // 12


def carry_forward_days(remaining_days: int, policy: LeavePolicy) -> int:
    if not policy.carry_forward_allowed or remaining_days <= 0:
        return 0
    if policy.max_carry_forward:
        return min(remaining_days, policy.max_carry_forward)
    return remaining_days
