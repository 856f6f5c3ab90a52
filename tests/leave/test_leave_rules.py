from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from hrms.core.enums import LeaveStatus, LeaveType
from hrms.core.exceptions import InvalidLeaveRequest, LeaveRequestAlreadyProcessed
from hrms.leave import rules
from hrms.leave.model import LeavePolicy, LeaveRequest

TODAY = date(2026, 3, 16)


def _request(request_id, start, end, status=LeaveStatus.PENDING, leave_type=LeaveType.ANNUAL):
    return LeaveRequest(
        request_id=request_id,
        employee_id="emp-1",
        start_date=start,
        end_date=end,
        leave_type=leave_type,
        status=status,
    )


def test_calculate_leave_days_is_inclusive():
    d = date(2026, 4, 1)
    assert rules.calculate_leave_days(d, d) == 1
    assert rules.calculate_leave_days(d, d + timedelta(days=6)) == 7


def test_calculate_leave_days_truncates_times_of_day():
    # Floor + 1 on local calendar days: a 2.5-day span counts 3 days.
    assert rules.calculate_leave_days(datetime(2026, 3, 10, 0, 0), datetime(2026, 3, 12, 12, 0)) == 3


def test_overlap_is_boundary_inclusive():
    assert rules.overlaps(date(2026, 4, 1), date(2026, 4, 5), date(2026, 4, 5), date(2026, 4, 10))
    assert not rules.overlaps(date(2026, 4, 1), date(2026, 4, 5), date(2026, 4, 6), date(2026, 4, 10))


def test_find_conflicts_ignores_rejected_cancelled_and_excluded():
    existing = [
        _request("a", date(2026, 4, 1), date(2026, 4, 5), LeaveStatus.REJECTED),
        _request("b", date(2026, 4, 1), date(2026, 4, 5), LeaveStatus.CANCELLED),
        _request("c", date(2026, 4, 5), date(2026, 4, 10), LeaveStatus.APPROVED),
        _request("d", date(2026, 4, 3), date(2026, 4, 4), LeaveStatus.PENDING),
    ]

    conflicts = rules.find_conflicts(date(2026, 4, 1), date(2026, 4, 5), existing, exclude_id="d")
    assert [r.request_id for r in conflicts] == ["c"]


@pytest.mark.parametrize(
    "start, end, field",
    [
        (date(2026, 3, 15), date(2026, 3, 20), "startDate"),
        (date(2026, 3, 20), date(2026, 3, 19), "endDate"),
        (date(2026, 3, 20), date(2027, 3, 21), "dateRange"),
    ],
)
def test_validate_date_range_errors(start, end, field):
    with pytest.raises(InvalidLeaveRequest) as exc:
        rules.validate_date_range(start, end, today=TODAY)
    assert exc.value.field == field


def test_validate_date_range_allows_today_and_full_year():
    rules.validate_date_range(TODAY, TODAY + timedelta(days=365), today=TODAY)


def test_validate_leave_type():
    assert rules.validate_leave_type("sick") == LeaveType.SICK
    with pytest.raises(InvalidLeaveRequest):
        rules.validate_leave_type("vacation")


def test_validate_leave_request_reason_length():
    kwargs = dict(employee_id="emp-1", start_date=TODAY, end_date=TODAY, leave_type="annual", today=TODAY)
    assert rules.validate_leave_request(reason="x" * 500, **kwargs) == LeaveType.ANNUAL
    with pytest.raises(InvalidLeaveRequest):
        rules.validate_leave_request(reason="x" * 501, **kwargs)


def test_validate_leave_request_requires_employee():
    with pytest.raises(InvalidLeaveRequest):
        rules.validate_leave_request(
            employee_id=" ", start_date=TODAY, end_date=TODAY, leave_type="annual", today=TODAY
        )


@pytest.mark.parametrize(
    "status, allowed",
    [
        (LeaveStatus.PENDING, True),
        (LeaveStatus.CANCELLED, True),
        (LeaveStatus.APPROVED, False),
        (LeaveStatus.REJECTED, False),
    ],
)
def test_can_cancel(status, allowed):
    assert rules.can_cancel(status)[0] is allowed


def test_ensure_can_process_only_from_pending():
    rules.ensure_can_process(_request("a", TODAY, TODAY))
    with pytest.raises(LeaveRequestAlreadyProcessed):
        rules.ensure_can_process(_request("a", TODAY, TODAY, LeaveStatus.APPROVED))


def test_calculate_summary_counts_only_approved_days():
    requests = [
        _request("a", date(2026, 4, 1), date(2026, 4, 3), LeaveStatus.APPROVED),
        _request("b", date(2026, 5, 4), date(2026, 5, 4), LeaveStatus.APPROVED, LeaveType.SICK),
        _request("c", date(2026, 6, 1), date(2026, 6, 10), LeaveStatus.REJECTED),
        _request("d", date(2026, 7, 1), date(2026, 7, 2), LeaveStatus.PENDING),
    ]

    summary = rules.calculate_summary("emp-1", requests, 2026)

    assert summary.total_requests == 4
    assert summary.approved_requests == 2
    assert summary.rejected_requests == 1
    assert summary.pending_requests == 1
    assert summary.total_days_taken == 4
    assert summary.by_type[LeaveType.ANNUAL] == 3
    assert summary.by_type[LeaveType.SICK] == 1
    assert summary.by_type[LeaveType.UNPAID] == 0


def test_default_leave_balance_covers_every_type():
    balances = rules.default_leave_balance("emp-1", 2026)
    by_type = {b.leave_type: b for b in balances}
    assert set(by_type) == set(LeaveType)
    assert by_type[LeaveType.ANNUAL].remaining_days == 20
    assert by_type[LeaveType.OTHER].total_days == 0


def test_monthly_accrual_and_carry_forward():
    assert rules.monthly_accrual(20) == 1
    assert rules.monthly_accrual(5) == 0

    capped = LeavePolicy(LeaveType.ANNUAL, 20, carry_forward_allowed=True, max_carry_forward=10)
    uncapped = LeavePolicy(LeaveType.ANNUAL, 20, carry_forward_allowed=True)
    disallowed = LeavePolicy(LeaveType.SICK, 10)

    assert rules.carry_forward_days(14, capped) == 10
    assert rules.carry_forward_days(4, capped) == 4
    assert rules.carry_forward_days(14, uncapped) == 14
    assert rules.carry_forward_days(14, disallowed) == 0
    assert rules.carry_forward_days(0, capped) == 0
