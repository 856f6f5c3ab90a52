from __future__ import annotations

from datetime import date, timedelta

import pytest

from hrms.core.enums import AttendanceStatus
from hrms.core.exceptions import (
    AttendanceAlreadyExists,
    AttendanceNotFound,
    EmployeeNotFound,
    InvalidAttendanceData,
    NoCheckInRecord,
)


def test_late_check_in_stays_late_after_short_day(container, clock):
    service = container.attendance_service
    check_in = clock.set_local(2026, 3, 16, 9, 20)

    record = service.check_in("emp-1")
    assert record.status == AttendanceStatus.LATE
    assert record.attendance_date == date(2026, 3, 16)

    clock.set_local(2026, 3, 16, 18, 0)
    record = service.check_out(record.attendance_id, timestamp=check_in + timedelta(hours=4, minutes=30))

    assert record.work_hours == 4.5
    assert record.overtime_hours == 0
    assert record.status == AttendanceStatus.LATE


def test_on_time_full_day_is_present(container, clock):
    service = container.attendance_service
    check_in = clock.set_local(2026, 3, 16, 8, 50)

    record = service.check_in("emp-1")
    clock.set_local(2026, 3, 16, 17, 0)
    record = service.check_out(record.attendance_id, timestamp=check_in + timedelta(hours=8))

    assert record.work_hours == 8.0
    assert record.overtime_hours == 0
    assert record.status == AttendanceStatus.PRESENT


def test_short_day_becomes_half_day(container, clock):
    service = container.attendance_service
    clock.set_local(2026, 3, 16, 9, 0)
    record = service.check_in("emp-1")

    clock.set_local(2026, 3, 16, 12, 0)
    record = service.check_out(record.attendance_id)

    assert record.status == AttendanceStatus.HALF_DAY
    assert record.work_hours == 3.0


def test_attendance_date_is_the_business_local_day(container, clock):
    # 00:30 local on the 17th is still the 16th in UTC.
    clock.set_local(2026, 3, 17, 0, 30)
    record = container.attendance_service.check_in("emp-1")
    assert record.attendance_date == date(2026, 3, 17)


def test_second_check_in_same_day_is_rejected(container, clock):
    service = container.attendance_service
    clock.set_local(2026, 3, 16, 9, 0)
    service.check_in("emp-1")

    clock.set_local(2026, 3, 16, 10, 0)
    with pytest.raises(AttendanceAlreadyExists):
        service.check_in("emp-1")


def test_check_in_unknown_employee(container):
    with pytest.raises(EmployeeNotFound):
        container.attendance_service.check_in("nobody")


def test_check_in_blank_employee(container):
    with pytest.raises(InvalidAttendanceData):
        container.attendance_service.check_in("")


def test_check_out_unknown_record(container):
    with pytest.raises(AttendanceNotFound):
        container.attendance_service.check_out("att-404")


def test_check_out_blank_id(container):
    with pytest.raises(InvalidAttendanceData):
        container.attendance_service.check_out(" ")


def test_check_out_without_check_in(container, attendance_repo):
    record = attendance_repo.create(
        employee_id="emp-1", attendance_date=date(2026, 3, 16), status=AttendanceStatus.ABSENT
    )
    with pytest.raises(NoCheckInRecord):
        container.attendance_service.check_out(record.attendance_id)


def test_correct_attendance_marks_manual_and_recomputes(container, clock):
    service = container.attendance_service
    clock.set_local(2026, 3, 16, 11, 0)
    record = service.check_in("emp-1")
    assert record.status == AttendanceStatus.LATE

    corrected = service.correct_attendance(
        record.attendance_id,
        check_in=clock.set_local(2026, 3, 16, 9, 0),
        check_out=clock.set_local(2026, 3, 16, 19, 0),
        notes="Badge reader offline",
    )

    assert corrected.is_manual_entry is True
    assert corrected.status == AttendanceStatus.PRESENT
    assert corrected.work_hours == 10.0
    assert corrected.overtime_hours == 2.0
    assert corrected.notes == "Badge reader offline"


def test_correct_attendance_status_override(container, clock):
    service = container.attendance_service
    clock.set_local(2026, 3, 16, 9, 0)
    record = service.check_in("emp-1")

    corrected = service.correct_attendance(record.attendance_id, status=AttendanceStatus.ON_LEAVE)
    assert corrected.status == AttendanceStatus.ON_LEAVE


def test_correct_attendance_rejects_inverted_times(container, clock):
    service = container.attendance_service
    clock.set_local(2026, 3, 16, 9, 0)
    record = service.check_in("emp-1")

    with pytest.raises(InvalidAttendanceData):
        service.correct_attendance(record.attendance_id, check_out=clock.set_local(2026, 3, 16, 8, 0))


def test_delete_attendance(container, clock):
    service = container.attendance_service
    clock.set_local(2026, 3, 16, 9, 0)
    record = service.check_in("emp-1")

    service.delete_attendance(record.attendance_id)
    with pytest.raises(AttendanceNotFound):
        service.get_attendance(record.attendance_id)


def test_queries_and_summary(container, clock):
    service = container.attendance_service
    for day, hour in ((16, 9), (17, 10), (18, 8)):
        clock.set_local(2026, 3, day, hour, 0)
        record = service.check_in("emp-1")
        clock.set_local(2026, 3, day, hour + 9, 0)
        service.check_out(record.attendance_id)

    records = service.get_employee_attendance("emp-1", date(2026, 3, 1), date(2026, 3, 31))
    assert [r.attendance_date.day for r in records] == [18, 17, 16]

    assert len(service.get_daily_attendance(date(2026, 3, 17))) == 1
    assert service.get_daily_attendance() == [records[0]]
    assert service.get_today_record("emp-1") == records[0]

    summary = service.get_attendance_summary("emp-1", date(2026, 3, 1), date(2026, 3, 31))
    assert summary.total_days == 3
    assert summary.present == 2
    assert summary.late == 1
    assert summary.total_work_hours == 27.0
    assert summary.total_overtime_hours == 3.0


def test_query_range_is_validated(container):
    with pytest.raises(InvalidAttendanceData):
        container.attendance_service.get_employee_attendance("emp-1", date(2026, 3, 2), date(2026, 3, 1))
