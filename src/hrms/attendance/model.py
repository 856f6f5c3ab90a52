from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance record per employee per local calendar day.

    ``check_in`` / ``check_out`` are UTC instants; ``attendance_date`` is the
    business-local calendar date.
    """

    attendance_id: str
    employee_id: str
    attendance_date: date
    check_in: Optional[datetime]
    check_out: Optional[datetime]
    status: AttendanceStatus
    work_hours: Optional[float] = None
    overtime_hours: Optional[float] = None
    notes: Optional[str] = None
    is_manual_entry: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class AttendanceSummary:
    employee_id: str
    total_days: int
    present: int
    late: int
    absent: int
    half_day: int
    on_leave: int
    total_work_hours: float
    total_overtime_hours: float
