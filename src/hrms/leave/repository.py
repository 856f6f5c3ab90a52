from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveStatus, LeaveType
from .model import LeaveBalance, LeavePolicy, LeaveRequest


class LeaveRequestRepository(Protocol):
    def create(
        self,
        *,
        employee_id: str,
        start_date: date,
        end_date: date,
        leave_type: LeaveType,
        reason: Optional[str] = None,
    ) -> LeaveRequest:
        raise NotImplementedError

    def get_by_id(self, request_id: str) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def list(
        self,
        *,
        employee_id: Optional[str] = None,
        status: Optional[LeaveStatus] = None,
        start_date_from: Optional[date] = None,
        start_date_to: Optional[date] = None,
        leave_type: Optional[LeaveType] = None,
    ) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def list_for_year(self, employee_id: str, year: int) -> Sequence[LeaveRequest]:
        """Requests whose start date falls in ``year``."""

        raise NotImplementedError

    def list_overlapping(
        self,
        employee_id: str,
        start_date: date,
        end_date: date,
        *,
        status: Optional[LeaveStatus] = None,
    ) -> Sequence[LeaveRequest]:
        """Requests for the employee whose [start, end] intersects the range."""

        raise NotImplementedError

    def update_status(self, request_id: str, status: LeaveStatus) -> LeaveRequest:
        raise NotImplementedError


class LeaveBalanceRepository(Protocol):
    def get(self, employee_id: str, leave_type: LeaveType, year: int) -> Optional[LeaveBalance]:
        raise NotImplementedError

    def list_for_employee(self, employee_id: str, year: int) -> Sequence[LeaveBalance]:
        raise NotImplementedError

    def list_with_remaining(self, year: int) -> Sequence[LeaveBalance]:
        """Balances of ``year`` with remaining days left."""

        raise NotImplementedError

    def create(self, balance: LeaveBalance) -> LeaveBalance:
        raise NotImplementedError

    def update(self, balance: LeaveBalance) -> LeaveBalance:
        raise NotImplementedError

    def list_policies(self, *, active_only: bool = True) -> Sequence[LeavePolicy]:
        raise NotImplementedError
