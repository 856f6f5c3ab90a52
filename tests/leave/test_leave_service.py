from __future__ import annotations

from datetime import date

import pytest

from hrms.core.enums import LeaveStatus, LeaveType
from hrms.core.exceptions import InvalidLeaveRequest, LeaveRequestAlreadyProcessed, LeaveRequestNotFound
from hrms.leave.model import LeaveBalance


def _create(service, start, end, leave_type="annual", employee_id="emp-1"):
    return service.create_leave_request(
        employee_id=employee_id, start_date=start, end_date=end, leave_type=leave_type, reason="Family trip"
    )


def test_create_leave_request_is_pending(container):
    leave = _create(container.leave_service, date(2026, 4, 1), date(2026, 4, 5))
    assert leave.status == LeaveStatus.PENDING
    assert leave.leave_type == LeaveType.ANNUAL


def test_overlapping_request_is_rejected_at_boundary(container):
    service = container.leave_service
    _create(service, date(2026, 4, 1), date(2026, 4, 5))

    with pytest.raises(InvalidLeaveRequest):
        _create(service, date(2026, 4, 5), date(2026, 4, 10))

    # Adjacent ranges do not overlap.
    assert _create(service, date(2026, 4, 6), date(2026, 4, 10)).status == LeaveStatus.PENDING


def test_rejected_or_cancelled_requests_do_not_block(container):
    service = container.leave_service
    first = _create(service, date(2026, 4, 1), date(2026, 4, 5))
    service.reject_leave_request(first.request_id, "mgr-1", "Busy week")

    second = _create(service, date(2026, 4, 1), date(2026, 4, 5))
    service.cancel_leave_request(second.request_id)

    assert _create(service, date(2026, 4, 2), date(2026, 4, 3)).status == LeaveStatus.PENDING


def test_padded_employee_id_still_conflicts(container, leave_requests_repo):
    service = container.leave_service
    _create(service, date(2026, 4, 1), date(2026, 4, 5))

    with pytest.raises(InvalidLeaveRequest):
        _create(service, date(2026, 4, 3), date(2026, 4, 4), employee_id=" emp-1 ")

    assert len(leave_requests_repo.list(employee_id="emp-1")) == 1


def test_employee_id_is_stored_stripped(container):
    leave = _create(container.leave_service, date(2026, 4, 1), date(2026, 4, 2), employee_id="  emp-2\t")
    assert leave.employee_id == "emp-2"


def test_other_employees_do_not_conflict(container):
    service = container.leave_service
    _create(service, date(2026, 4, 1), date(2026, 4, 5))
    assert _create(service, date(2026, 4, 1), date(2026, 4, 5), employee_id="emp-2")


def test_past_start_is_rejected(container):
    with pytest.raises(InvalidLeaveRequest):
        _create(container.leave_service, date(2026, 3, 15), date(2026, 3, 18))


def test_approve_then_process_again_fails(container):
    service = container.leave_service
    leave = _create(service, date(2026, 4, 1), date(2026, 4, 5))

    approved = service.approve_leave_request(leave.request_id, "mgr-1")
    assert approved.status == LeaveStatus.APPROVED

    with pytest.raises(LeaveRequestAlreadyProcessed):
        service.approve_leave_request(leave.request_id, "mgr-1")
    with pytest.raises(LeaveRequestAlreadyProcessed):
        service.reject_leave_request(leave.request_id, "mgr-1")


def test_cancel_state_machine(container):
    service = container.leave_service
    pending = _create(service, date(2026, 4, 1), date(2026, 4, 1))
    approved = _create(service, date(2026, 4, 2), date(2026, 4, 2))
    rejected = _create(service, date(2026, 4, 3), date(2026, 4, 3))
    service.approve_leave_request(approved.request_id)
    service.reject_leave_request(rejected.request_id)

    cancelled = service.cancel_leave_request(pending.request_id)
    assert cancelled.status == LeaveStatus.CANCELLED
    # Idempotent.
    assert service.cancel_leave_request(pending.request_id).status == LeaveStatus.CANCELLED

    with pytest.raises(InvalidLeaveRequest):
        service.cancel_leave_request(approved.request_id)
    with pytest.raises(InvalidLeaveRequest):
        service.cancel_leave_request(rejected.request_id)


def test_unknown_request(container):
    with pytest.raises(LeaveRequestNotFound):
        container.leave_service.get_leave_request("leave-404")


def test_listing_and_summary(container):
    service = container.leave_service
    a = _create(service, date(2026, 4, 1), date(2026, 4, 3))
    _create(service, date(2026, 5, 1), date(2026, 5, 1), leave_type="sick")
    service.approve_leave_request(a.request_id)

    assert [r.request_id for r in service.get_pending_leave_requests()] == ["leave-2"]
    assert len(service.list_leave_requests(employee_id="emp-1", leave_type=LeaveType.SICK)) == 1
    assert len(service.list_leave_requests(start_date_from=date(2026, 4, 15))) == 1
    assert len(service.get_employee_leave_requests("emp-1")) == 2

    summary = service.get_leave_summary("emp-1", 2026)
    assert summary.approved_requests == 1
    assert summary.pending_requests == 1
    assert summary.total_days_taken == 3


def test_leave_balances_fall_back_to_defaults(container, leave_balances_repo):
    service = container.leave_service

    defaults = service.get_leave_balances("emp-1")
    assert len(defaults) == len(LeaveType)
    assert {b.year for b in defaults} == {2026}

    stored = LeaveBalance("emp-1", LeaveType.ANNUAL, 2026, total_days=22, used_days=4, remaining_days=18)
    leave_balances_repo.create(stored)
    assert service.get_leave_balances("emp-1", 2026) == [stored]

    with pytest.raises(InvalidLeaveRequest):
        service.get_leave_balances(" ")
