"""
Scheduled reconciliation jobs.

- mark_absentees: close the day for employees without an attendance record
- accrue_leave_balances: monthly accrual of floor(annual_limit / 12)
- carry_forward_leave_balances: move capped unused days into the new year

Per-employee failures are logged and skipped so the batch continues. Failures
that stop the whole job (e.g. the employee list cannot be read) propagate to
the scheduler, which logs them; the next tick retries.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date
from typing import Any, Dict, Optional

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import Clock, utc_now
from ..common.timezone import local_date
from ..core.constants import AUTO_ABSENT_NOTE, AUTO_ON_LEAVE_NOTE
from ..core.enums import AttendanceStatus, LeaveStatus
from ..employees.repository import EmployeeRepository
from ..leave import rules as leave_rules
from ..leave.model import LeaveBalance
from ..leave.repository import LeaveBalanceRepository, LeaveRequestRepository

logger = logging.getLogger(__name__)


class ReconciliationJobs:
    def __init__(
        self,
        employees: EmployeeRepository,
        attendance: AttendanceRepository,
        leaves: LeaveRequestRepository,
        balances: LeaveBalanceRepository,
        *,
        clock: Clock = utc_now,
    ):
        self._employees = employees
        self._attendance = attendance
        self._leaves = leaves
        self._balances = balances
        self._clock = clock

    def _today(self, today: Optional[date]) -> date:
        return today or local_date(self._clock())

    def mark_absentees(self, today: Optional[date] = None) -> Dict[str, Any]:
        """Create an absent (or on-leave) record for every active employee without one today."""

        today = self._today(today)
        logger.info("Running daily absentee marking job for %s", today)

        results: Dict[str, Any] = {"date": today.isoformat(), "absent": 0, "on_leave": 0, "skipped": 0, "errors": []}

        for employee in self._employees.list_active():
            try:
                if self._attendance.get_for_employee_and_date(employee.employee_id, today):
                    results["skipped"] += 1
                    continue

                approved = self._leaves.list_overlapping(
                    employee.employee_id, today, today, status=LeaveStatus.APPROVED
                )
                if any(leave_rules.covers(r, today) for r in approved):
                    status, note, counter = AttendanceStatus.ON_LEAVE, AUTO_ON_LEAVE_NOTE, "on_leave"
                else:
                    status, note, counter = AttendanceStatus.ABSENT, AUTO_ABSENT_NOTE, "absent"

                self._attendance.create(
                    employee_id=employee.employee_id,
                    attendance_date=today,
                    status=status,
                    notes=note,
                )
                results[counter] += 1
                logger.debug("Marked employee %s as %s", employee.employee_id, status.value)
            except Exception as e:
                logger.exception("Failed to mark attendance for employee %s: %s", employee.employee_id, e)
                results["errors"].append({"employee_id": employee.employee_id, "error": str(e)})

        logger.info(
            "Absentee marking done: %s absent, %s on leave, %s errors",
            results["absent"], results["on_leave"], len(results["errors"]),
        )
        return results

    def accrue_leave_balances(self, today: Optional[date] = None) -> Dict[str, Any]:
        """Monthly accrual; creates the year's balance row first when missing."""

        year = self._today(today).year
        logger.info("Running monthly leave accrual job for %s", year)

        policies = self._balances.list_policies(active_only=True)
        results: Dict[str, Any] = {"year": year, "employees": 0, "created": 0, "accrued": 0, "errors": []}

        for employee in self._employees.list_active():
            try:
                for policy in policies:
                    balance = self._balances.get(employee.employee_id, policy.leave_type, year)
                    if balance is None:
                        balance = self._balances.create(
                            LeaveBalance(
                                employee_id=employee.employee_id,
                                leave_type=policy.leave_type,
                                year=year,
                                total_days=policy.annual_limit,
                                used_days=0,
                                remaining_days=policy.annual_limit,
                            )
                        )
                        results["created"] += 1

                    accrual = leave_rules.monthly_accrual(policy.annual_limit)
                    if accrual > 0:
                        self._balances.update(
                            replace(
                                balance,
                                total_days=balance.total_days + accrual,
                                remaining_days=balance.remaining_days + accrual,
                            )
                        )
                        results["accrued"] += 1
                results["employees"] += 1
            except Exception as e:
                logger.exception("Failed to accrue leave for employee %s: %s", employee.employee_id, e)
                results["errors"].append({"employee_id": employee.employee_id, "error": str(e)})

        logger.info("Leave accrual completed for %s employees", results["employees"])
        return results

    def carry_forward_leave_balances(self, today: Optional[date] = None) -> Dict[str, Any]:
        """Carry last year's unused days (capped per leave type) into this year."""

        current_year = self._today(today).year
        previous_year = current_year - 1
        logger.info("Running annual leave carry forward job %s -> %s", previous_year, current_year)

        policies = {
            p.leave_type: p
            for p in self._balances.list_policies(active_only=True)
            if p.carry_forward_allowed
        }
        results: Dict[str, Any] = {"year": current_year, "carried": 0, "created": 0, "errors": []}

        for previous in self._balances.list_with_remaining(previous_year):
            policy = policies.get(previous.leave_type)
            if policy is None:
                continue

            days = leave_rules.carry_forward_days(previous.remaining_days, policy)
            if days <= 0:
                continue

            try:
                current = self._balances.get(previous.employee_id, previous.leave_type, current_year)
                if current:
                    self._balances.update(
                        replace(
                            current,
                            total_days=current.total_days + days,
                            remaining_days=current.remaining_days + days,
                            carried_forward=days,
                        )
                    )
                else:
                    self._balances.create(
                        LeaveBalance(
                            employee_id=previous.employee_id,
                            leave_type=previous.leave_type,
                            year=current_year,
                            total_days=policy.annual_limit + days,
                            used_days=0,
                            remaining_days=policy.annual_limit + days,
                            carried_forward=days,
                        )
                    )
                    results["created"] += 1
                results["carried"] += 1
            except Exception as e:
                logger.exception("Failed to carry forward leave for employee %s: %s", previous.employee_id, e)
                results["errors"].append({"employee_id": previous.employee_id, "error": str(e)})

        logger.info("Leave carry forward completed: %s balances", results["carried"])
        return results
