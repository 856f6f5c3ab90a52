from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..common.datetime_utils import Clock, utc_now
from ..common.timezone import local_date
from ..core.enums import LeaveStatus, LeaveType
from ..core.exceptions import InvalidLeaveRequest, LeaveRequestNotFound
from . import rules
from .model import LeaveBalance, LeaveRequest, LeaveSummary
from .repository import LeaveBalanceRepository, LeaveRequestRepository

logger = logging.getLogger(__name__)


class LeaveService:
    def __init__(
        self,
        requests: LeaveRequestRepository,
        balances: LeaveBalanceRepository,
        *,
        clock: Clock = utc_now,
    ):
        self._requests = requests
        self._balances = balances
        self._clock = clock

    def _today(self) -> date:
        return local_date(self._clock())

    def create_leave_request(
        self,
        *,
        employee_id: str,
        start_date: date,
        end_date: date,
        leave_type: str,
        reason: Optional[str] = None,
    ) -> LeaveRequest:
        employee_id = rules.validate_employee_id(employee_id)
        parsed_type = rules.validate_leave_request(
            employee_id=employee_id,
            start_date=start_date,
            end_date=end_date,
            leave_type=leave_type,
            reason=reason,
            today=self._today(),
        )

        existing = self._requests.list_overlapping(employee_id, start_date, end_date)
        if rules.find_conflicts(start_date, end_date, existing):
            raise InvalidLeaveRequest("Employee already has a leave request for this period", "dateRange")

        request = self._requests.create(
            employee_id=employee_id,
            start_date=start_date,
            end_date=end_date,
            leave_type=parsed_type,
            reason=reason,
        )
        logger.info(
            "Leave request %s created for %s (%s, %s..%s)",
            request.request_id, employee_id, parsed_type.value, start_date, end_date,
        )
        return request

    def list_leave_requests(
        self,
        *,
        employee_id: Optional[str] = None,
        status: Optional[LeaveStatus] = None,
        start_date_from: Optional[date] = None,
        start_date_to: Optional[date] = None,
        leave_type: Optional[LeaveType] = None,
    ) -> Sequence[LeaveRequest]:
        return self._requests.list(
            employee_id=employee_id,
            status=status,
            start_date_from=start_date_from,
            start_date_to=start_date_to,
            leave_type=leave_type,
        )

    def get_pending_leave_requests(self) -> Sequence[LeaveRequest]:
        return self._requests.list(status=LeaveStatus.PENDING)

    def get_employee_leave_requests(self, employee_id: str) -> Sequence[LeaveRequest]:
        return self._requests.list_for_year(employee_id, self._today().year)

    def get_leave_summary(self, employee_id: str, year: int) -> LeaveSummary:
        requests = self._requests.list_for_year(employee_id, year)
        return rules.calculate_summary(employee_id, requests, year)

    def get_leave_request(self, request_id: str) -> LeaveRequest:
        request = self._requests.get_by_id(request_id)
        if not request:
            raise LeaveRequestNotFound(request_id)
        return request

    def approve_leave_request(self, request_id: str, approver_id: Optional[str] = None) -> LeaveRequest:
        request = self.get_leave_request(request_id)
        rules.ensure_can_process(request)

        updated = self._requests.update_status(request.request_id, LeaveStatus.APPROVED)
        logger.info("Leave request %s approved by %s", request_id, approver_id or "-")
        return updated

    def reject_leave_request(
        self,
        request_id: str,
        approver_id: Optional[str] = None,
        rejection_reason: Optional[str] = None,
    ) -> LeaveRequest:
        request = self.get_leave_request(request_id)
        rules.ensure_can_process(request)

        updated = self._requests.update_status(request.request_id, LeaveStatus.REJECTED)
        logger.info("Leave request %s rejected by %s: %s", request_id, approver_id or "-", rejection_reason or "")
        return updated

    def cancel_leave_request(self, request_id: str) -> LeaveRequest:
        request = self.get_leave_request(request_id)

        allowed, reason = rules.can_cancel(request.status)
        if not allowed:
            raise InvalidLeaveRequest(reason or "Cannot cancel leave request", "status")
        if request.status == LeaveStatus.CANCELLED:
            return request

        updated = self._requests.update_status(request.request_id, LeaveStatus.CANCELLED)
        logger.info("Leave request %s cancelled", request_id)
        return updated

    def get_leave_balances(self, employee_id: str, year: Optional[int] = None) -> Sequence[LeaveBalance]:
        employee_id = rules.validate_employee_id(employee_id)
        year = year or self._today().year
        stored = self._balances.list_for_employee(employee_id, year)
        return stored or rules.default_leave_balance(employee_id, year)
