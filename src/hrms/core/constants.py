"""Business constants.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time, timedelta

from .enums import LeaveType

BUSINESS_UTC_OFFSET = timedelta(hours=5, minutes=30)
SCHEDULER_TIMEZONE = "Asia/Kolkata"

LATE_THRESHOLD = time(9, 15, 0)
STANDARD_WORK_HOURS = 8
HALF_DAY_MAX_HOURS = 4
CHECKOUT_CLOCK_SKEW = timedelta(minutes=5)
MAX_QUERY_RANGE_DAYS = 365

MAX_LEAVE_SPAN_DAYS = 365
MAX_LEAVE_REASON_LENGTH = 500

PAYROLL_DAYS_PER_MONTH = 30
UNASSIGNED_DEPARTMENT = "Unassigned"

DEFAULT_LEAVE_ALLOTMENTS = {
    LeaveType.ANNUAL: 20,
    LeaveType.SICK: 10,
    LeaveType.CASUAL: 5,
    LeaveType.MATERNITY: 180,
    LeaveType.PATERNITY: 15,
    LeaveType.BEREAVEMENT: 5,
    LeaveType.UNPAID: 365,
    LeaveType.OTHER: 0,
}

AUTO_ABSENT_NOTE = "Auto-marked as absent - no check-in recorded"
AUTO_ON_LEAVE_NOTE = "Auto-marked as on leave - approved leave request"
