from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Storage interface for attendance records.

    Note: the (employee_id, attendance_date) pair is unique at the storage
    boundary; concurrent duplicate check-ins are rejected there.
    """

    def get_by_id(self, attendance_id: str) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_employee_and_date(self, employee_id: str, attendance_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_employee(self, employee_id: str, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_date(self, attendance_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def count_by_status(
        self,
        *,
        employee_id: str,
        start_date: date,
        end_date: date,
        status: AttendanceStatus,
    ) -> int:
        raise NotImplementedError

    def create(
        self,
        *,
        employee_id: str,
        attendance_date: date,
        status: AttendanceStatus,
        check_in: Optional[datetime] = None,
        notes: Optional[str] = None,
        is_manual_entry: bool = False,
    ) -> AttendanceRecord:
        raise NotImplementedError

    def update(self, record: AttendanceRecord) -> AttendanceRecord:
        """Persist the mutable fields of ``record`` (check-out, status, hours, notes, manual flag)."""

        raise NotImplementedError

    def delete(self, attendance_id: str) -> bool:
        raise NotImplementedError
