from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..core.exceptions import AttendanceAlreadyExists
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    as_optional_float,
    db_operation,
    fetchall,
    fetchone,
    from_db_datetime,
    new_id,
    to_db_datetime,
)
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, employee_id, attendance_date, check_in, check_out, status,
    work_hours, overtime_hours, notes, is_manual_entry, created_at, updated_at
"""


def _row_to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=str(r["attendance_id"]),
        employee_id=str(r["employee_id"]),
        attendance_date=r["attendance_date"],
        check_in=from_db_datetime(r.get("check_in")),
        check_out=from_db_datetime(r.get("check_out")),
        status=AttendanceStatus(r["status"]),
        work_hours=as_optional_float(r.get("work_hours")),
        overtime_hours=as_optional_float(r.get("overtime_hours")),
        notes=r.get("notes"),
        is_manual_entry=bool(r.get("is_manual_entry", 0)),
        created_at=from_db_datetime(r.get("created_at")),
        updated_at=from_db_datetime(r.get("updated_at")),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: str) -> Optional[AttendanceRecord]:
        with db_operation(self._conn_factory, "get attendance") as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_id=%s", (attendance_id,))
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def get_for_employee_and_date(self, employee_id: str, attendance_date: date) -> Optional[AttendanceRecord]:
        with db_operation(self._conn_factory, "get attendance for employee and date") as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE employee_id=%s AND attendance_date=%s",
                (employee_id, attendance_date),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def list_for_employee(self, employee_id: str, start_date: date, end_date: date) -> Sequence[AttendanceRecord]:
        with db_operation(self._conn_factory, "list employee attendance") as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE employee_id=%s AND attendance_date BETWEEN %s AND %s
                ORDER BY attendance_date DESC
                """,
                (employee_id, start_date, end_date),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def list_for_date(self, attendance_date: date) -> Sequence[AttendanceRecord]:
        with db_operation(self._conn_factory, "list daily attendance") as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE attendance_date=%s ORDER BY check_in",
                (attendance_date,),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def count_by_status(
        self,
        *,
        employee_id: str,
        start_date: date,
        end_date: date,
        status: AttendanceStatus,
    ) -> int:
        with db_operation(self._conn_factory, "count attendance by status") as (_, cur):
            cur.execute(
                """
                SELECT COUNT(*) AS cnt
                FROM attendance_records
                WHERE employee_id=%s AND status=%s AND attendance_date BETWEEN %s AND %s
                """,
                (employee_id, status.value, start_date, end_date),
            )
            r = fetchone(cur)
            return int(r["cnt"]) if r else 0

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
        attendance_id = new_id()
        with db_operation(
            self._conn_factory,
            "create attendance",
            on_duplicate=lambda: AttendanceAlreadyExists(employee_id, attendance_date.isoformat()),
        ) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(
                    attendance_id, employee_id, attendance_date, check_in, status, notes, is_manual_entry
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    attendance_id,
                    employee_id,
                    attendance_date,
                    to_db_datetime(check_in),
                    status.value,
                    notes,
                    int(is_manual_entry),
                ),
            )

        created = self.get_by_id(attendance_id)
        assert created is not None
        return created

    def update(self, record: AttendanceRecord) -> AttendanceRecord:
        with db_operation(self._conn_factory, "update attendance") as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_in=%s, check_out=%s, status=%s, work_hours=%s, overtime_hours=%s,
                    notes=%s, is_manual_entry=%s
                WHERE attendance_id=%s
                """,
                (
                    to_db_datetime(record.check_in),
                    to_db_datetime(record.check_out),
                    record.status.value,
                    record.work_hours,
                    record.overtime_hours,
                    record.notes,
                    int(record.is_manual_entry),
                    record.attendance_id,
                ),
            )

        updated = self.get_by_id(record.attendance_id)
        assert updated is not None
        return updated

    def delete(self, attendance_id: str) -> bool:
        with db_operation(self._conn_factory, "delete attendance") as (_, cur):
            cur.execute("DELETE FROM attendance_records WHERE attendance_id=%s", (attendance_id,))
            return cur.rowcount > 0
