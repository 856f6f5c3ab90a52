from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import Clock, utc_now
from ..common.timezone import local_date
from ..common.validators import require_non_empty
from ..core.enums import AttendanceStatus
from ..core.exceptions import AttendanceAlreadyExists, AttendanceNotFound, InvalidAttendanceData, NoCheckInRecord
from ..employees.service import EmployeeDirectory
from . import rules
from .model import AttendanceRecord, AttendanceSummary
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeDirectory,
        *,
        clock: Clock = utc_now,
    ):
        self._attendance = attendance
        self._employees = employees
        self._clock = clock

    def check_in(
        self,
        employee_id: str,
        *,
        timestamp: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        logger.debug("Checking in employee %s", employee_id)

        check_in = rules.validate_check_in(employee_id, timestamp, now=self._clock())
        employee = self._employees.require(employee_id)

        attendance_date = local_date(check_in)
        if self._attendance.get_for_employee_and_date(employee.employee_id, attendance_date):
            raise AttendanceAlreadyExists(employee.employee_id, attendance_date.isoformat())

        record = self._attendance.create(
            employee_id=employee.employee_id,
            attendance_date=attendance_date,
            check_in=check_in,
            status=rules.determine_status(check_in),
            notes=notes,
        )
        logger.info("Employee %s checked in on %s (%s)", employee.employee_id, attendance_date, record.status.value)
        return record

    def check_out(
        self,
        attendance_id: str,
        *,
        timestamp: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        logger.debug("Checking out attendance %s", attendance_id)
        require_non_empty(attendance_id, "attendance_id", error=InvalidAttendanceData, message="Attendance ID is required")

        record = self._require(attendance_id)
        if record.check_in is None:
            raise NoCheckInRecord(record.employee_id)

        check_out = rules.validate_check_out(attendance_id, record.check_in, timestamp, now=self._clock())
        work_hours = rules.calculate_work_hours(record.check_in, check_out)

        updated = self._attendance.update(
            replace(
                record,
                check_out=check_out,
                status=rules.determine_status(record.check_in, check_out),
                work_hours=work_hours,
                overtime_hours=rules.calculate_overtime(work_hours),
                notes=notes or record.notes,
            )
        )
        logger.info("Attendance %s checked out (%.2fh, %s)", attendance_id, work_hours, updated.status.value)
        return updated

    def correct_attendance(
        self,
        attendance_id: str,
        *,
        check_in: Optional[datetime] = None,
        check_out: Optional[datetime] = None,
        status: Optional[AttendanceStatus] = None,
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        """Manual correction by HR.

        The record is flagged as a manual entry. When both instants are known,
        hours are recomputed; the status defaults to present unless overridden.
        """

        record = self._require(attendance_id)

        new_check_in = check_in or record.check_in
        new_check_out = check_out or record.check_out
        work_hours = record.work_hours
        overtime_hours = record.overtime_hours

        if new_check_in and new_check_out:
            if new_check_out <= new_check_in:
                raise InvalidAttendanceData("Check-out time must be after check-in time", "check_out")
            work_hours = rules.calculate_work_hours(new_check_in, new_check_out)
            overtime_hours = rules.calculate_overtime(work_hours)
        elif new_check_out and not new_check_in:
            raise NoCheckInRecord(record.employee_id)

        if status is None:
            status = rules.determine_status(new_check_in, new_check_out, is_manual_entry=True) if new_check_in else record.status

        updated = self._attendance.update(
            replace(
                record,
                check_in=new_check_in,
                check_out=new_check_out,
                status=status,
                work_hours=work_hours,
                overtime_hours=overtime_hours,
                notes=notes or record.notes,
                is_manual_entry=True,
            )
        )
        logger.info("Attendance %s corrected manually (%s)", attendance_id, status.value)
        return updated

    def delete_attendance(self, attendance_id: str) -> None:
        self._require(attendance_id)
        if not self._attendance.delete(attendance_id):
            raise AttendanceNotFound(attendance_id)
        logger.info("Attendance %s deleted", attendance_id)

    def get_attendance(self, attendance_id: str) -> AttendanceRecord:
        return self._require(attendance_id)

    def get_employee_attendance(self, employee_id: str, start: date, end: date) -> Sequence[AttendanceRecord]:
        logger.debug("Listing attendance for employee %s (%s..%s)", employee_id, start, end)
        rules.validate_date_range(start, end)
        return self._attendance.list_for_employee(employee_id, start, end)

    def get_daily_attendance(self, day: Optional[date] = None) -> Sequence[AttendanceRecord]:
        day = day or local_date(self._clock())
        return self._attendance.list_for_date(day)

    def get_today_record(self, employee_id: str) -> Optional[AttendanceRecord]:
        return self._attendance.get_for_employee_and_date(employee_id, local_date(self._clock()))

    def get_attendance_summary(self, employee_id: str, start: date, end: date) -> AttendanceSummary:
        logger.debug("Calculating attendance summary for %s", employee_id)
        rules.validate_date_range(start, end)
        return rules.calculate_summary(self._attendance.list_for_employee(employee_id, start, end))

    def _require(self, attendance_id: str) -> AttendanceRecord:
        record = self._attendance.get_by_id(attendance_id)
        if not record:
            raise AttendanceNotFound(attendance_id)
        return record
