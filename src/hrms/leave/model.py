from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import LeaveStatus, LeaveType


@dataclass(frozen=True)
class LeaveRequest:
    """Domain entity: leave request over an inclusive local date range."""

    request_id: str
    employee_id: str
    start_date: date
    end_date: date
    leave_type: LeaveType
    status: LeaveStatus
    reason: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class LeaveSummary:
    employee_id: str
    year: int
    total_requests: int
    approved_requests: int
    rejected_requests: int
    pending_requests: int
    total_days_taken: int
    by_type: dict[LeaveType, int]


@dataclass(frozen=True)
class LeaveBalance:
    """Per-employee, per-type, per-year allotment."""

    employee_id: str
    leave_type: LeaveType
    year: int
    total_days: int
    used_days: int
    remaining_days: int
    pending_days: int = 0
    carried_forward: int = 0


@dataclass(frozen=True)
class LeavePolicy:
    """HR configuration for one leave type (accrual and carry-forward)."""

    leave_type: LeaveType
    annual_limit: int
    carry_forward_allowed: bool = False
    max_carry_forward: Optional[int] = None
    is_active: bool = True
