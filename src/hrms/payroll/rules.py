"""Period and loss-of-pay rules for a monthly payroll run."""

from __future__ import annotations

import calendar
import math
from datetime import date, datetime, time
from typing import Iterable, Union

from ..common.timezone import to_local
from ..core.enums import LeaveStatus
from ..core.exceptions import InvalidPayrollData
from ..leave.model import LeaveRequest

DateLike = Union[date, datetime]

_SECONDS_PER_DAY = 86400


def validate_period(month: int, year: int) -> None:
    if not 1 <= int(month) <= 12:
        raise InvalidPayrollData("Month must be between 1 and 12", "month")
    if int(year) < 1:
        raise InvalidPayrollData("Year is invalid", "year")


def month_bounds(month: int, year: int) -> tuple[date, date]:
    """First and last calendar day of the month."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def _as_datetime(value: DateLike) -> datetime:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = to_local(value)
        return value.replace(tzinfo=None)
    return datetime.combine(value, time.min)


def covered_days(leave_start: DateLike, leave_end: DateLike, period_start: DateLike, period_end: DateLike) -> int:
    """Days of a leave that fall inside the period.

    Counted as ceil((effective_end - effective_start) / 1 day) + 1. This differs
    from ``leave.rules.calculate_leave_days`` (floor + 1) when the bounds carry a
    time of day; both behaviours are kept as they are.
    """

    effective_start = max(_as_datetime(leave_start), _as_datetime(period_start))
    effective_end = min(_as_datetime(leave_end), _as_datetime(period_end))
    elapsed = (effective_end - effective_start).total_seconds() / _SECONDS_PER_DAY
    return math.ceil(elapsed) + 1


def approved_leave_days(requests: Iterable[LeaveRequest], period_start: date, period_end: date) -> int:
    """Sum of covered days across approved requests overlapping the period."""
    total = 0
    for request in requests:
        if request.status != LeaveStatus.APPROVED:
            continue
        if _as_datetime(request.start_date) > _as_datetime(period_end) or _as_datetime(request.end_date) < _as_datetime(period_start):
            continue
        total += covered_days(request.start_date, request.end_date, period_start, period_end)
    return total


def loss_of_pay_days(absent_count: int, leave_days: int) -> int:
    """Absences not covered by approved leave; never negative."""
    return max(0, absent_count - leave_days)
