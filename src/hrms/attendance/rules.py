"""Attendance rules: pure functions over check-in/check-out instants.

Every function that needs "now" takes it as an argument; services pass the
value of their injected clock.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence, Union

from ..common.timezone import to_local
from ..common.validators import require_non_empty, round2
from ..core.constants import (
    CHECKOUT_CLOCK_SKEW,
    HALF_DAY_MAX_HOURS,
    LATE_THRESHOLD,
    MAX_QUERY_RANGE_DAYS,
    STANDARD_WORK_HOURS,
)
from ..core.enums import AttendanceStatus
from ..core.exceptions import InvalidAttendanceData
from .model import AttendanceRecord, AttendanceSummary

_SECONDS_PER_HOUR = Decimal(3600)


def is_late(check_in: datetime) -> bool:
    """True iff the local time-of-day is strictly after 09:15:00."""
    return to_local(check_in).time() > LATE_THRESHOLD


def calculate_work_hours(check_in: datetime, check_out: datetime) -> float:
    seconds = Decimal(str((check_out - check_in).total_seconds()))
    return float(round2(seconds / _SECONDS_PER_HOUR))


def calculate_overtime(work_hours: float) -> float:
    if work_hours <= STANDARD_WORK_HOURS:
        return 0.0
    return float(round2(Decimal(str(work_hours)) - STANDARD_WORK_HOURS))


def determine_status(
    check_in: datetime,
    check_out: Optional[datetime] = None,
    is_manual_entry: bool = False,
) -> AttendanceStatus:
    # Manual entries default to present; the caller may override afterwards.
    if is_manual_entry:
        return AttendanceStatus.PRESENT

    # Lateness wins over a short day.
    if is_late(check_in):
        return AttendanceStatus.LATE

    if check_out is not None and calculate_work_hours(check_in, check_out) < HALF_DAY_MAX_HOURS:
        return AttendanceStatus.HALF_DAY

    return AttendanceStatus.PRESENT


def validate_check_in(employee_id: str, timestamp: Optional[datetime] = None, *, now: datetime) -> datetime:
    require_non_empty(employee_id, "employee_id", error=InvalidAttendanceData, message="Employee ID is required")

    check_in = timestamp if timestamp is not None else now
    if check_in > now:
        raise InvalidAttendanceData("Check-in time cannot be in the future", "timestamp")
    return check_in


def validate_check_out(
    attendance_id: str,
    check_in: datetime,
    timestamp: Optional[datetime] = None,
    *,
    now: datetime,
) -> datetime:
    require_non_empty(attendance_id, "attendance_id", error=InvalidAttendanceData, message="Attendance ID is required")

    check_out = timestamp if timestamp is not None else now
    if check_out <= check_in:
        raise InvalidAttendanceData("Check-out time must be after check-in time", "timestamp")
    if check_out > now + CHECKOUT_CLOCK_SKEW:
        raise InvalidAttendanceData("Check-out time cannot be in the future", "timestamp")
    return check_out


def validate_date_range(start: Union[date, datetime], end: Union[date, datetime]) -> None:
    if start > end:
        raise InvalidAttendanceData("Start date must be before or equal to end date", "dateRange")

    span_days = (end - start).total_seconds() / 86400
    if span_days > MAX_QUERY_RANGE_DAYS:
        raise InvalidAttendanceData(f"Date range cannot exceed {MAX_QUERY_RANGE_DAYS} days", "dateRange")


def calculate_summary(records: Sequence[AttendanceRecord]) -> AttendanceSummary:
    """Aggregate a single employee's records.

    The employee id is taken from the first record, so callers must not mix
    employees in one call.
    """

    counts = {status: 0 for status in AttendanceStatus}
    work_hours = Decimal(0)
    overtime_hours = Decimal(0)

    for record in records:
        counts[record.status] += 1
        if record.work_hours:
            work_hours += Decimal(str(record.work_hours))
        if record.overtime_hours:
            overtime_hours += Decimal(str(record.overtime_hours))

    return AttendanceSummary(
        employee_id=records[0].employee_id if records else "",
        total_days=len(records),
        present=counts[AttendanceStatus.PRESENT],
        late=counts[AttendanceStatus.LATE],
        absent=counts[AttendanceStatus.ABSENT],
        half_day=counts[AttendanceStatus.HALF_DAY],
        on_leave=counts[AttendanceStatus.ON_LEAVE],
        total_work_hours=float(round2(work_hours)),
        total_overtime_hours=float(round2(overtime_hours)),
    )
