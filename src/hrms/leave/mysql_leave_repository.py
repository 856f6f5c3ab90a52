from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import LeaveStatus, LeaveType
from ..core.exceptions import InvalidLeaveRequest, LeaveRequestNotFound
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_operation, fetchall, fetchone, from_db_datetime, new_id
from .model import LeaveBalance, LeavePolicy, LeaveRequest
from .repository import LeaveBalanceRepository, LeaveRequestRepository

_REQUEST_COLUMNS = "request_id, employee_id, start_date, end_date, leave_type, status, reason, created_at, updated_at"
_BALANCE_COLUMNS = (
    "employee_id, leave_type, year, total_days, used_days, remaining_days, pending_days, carried_forward"
)


def _row_to_request(r: dict) -> LeaveRequest:
    return LeaveRequest(
        request_id=str(r["request_id"]),
        employee_id=str(r["employee_id"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        leave_type=LeaveType(r["leave_type"]),
        status=LeaveStatus(r["status"]),
        reason=r.get("reason"),
        created_at=from_db_datetime(r.get("created_at")),
        updated_at=from_db_datetime(r.get("updated_at")),
    )


def _row_to_balance(r: dict) -> LeaveBalance:
    return LeaveBalance(
        employee_id=str(r["employee_id"]),
        leave_type=LeaveType(r["leave_type"]),
        year=int(r["year"]),
        total_days=int(r["total_days"]),
        used_days=int(r["used_days"]),
        remaining_days=int(r["remaining_days"]),
        pending_days=int(r.get("pending_days") or 0),
        carried_forward=int(r.get("carried_forward") or 0),
    )


class MySQLLeaveRequestRepository(LeaveRequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        employee_id: str,
        start_date: date,
        end_date: date,
        leave_type: LeaveType,
        reason: Optional[str] = None,
    ) -> LeaveRequest:
        request_id = new_id()
        with db_operation(self._conn_factory, "create leave request") as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(request_id, employee_id, start_date, end_date, leave_type, status, reason)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (request_id, employee_id, start_date, end_date, leave_type.value, LeaveStatus.PENDING.value, reason),
            )

        created = self.get_by_id(request_id)
        if created is None:
            raise InvalidLeaveRequest("Leave request could not be created")
        return created

    def get_by_id(self, request_id: str) -> Optional[LeaveRequest]:
        with db_operation(self._conn_factory, "get leave request") as (_, cur):
            cur.execute(f"SELECT {_REQUEST_COLUMNS} FROM leave_requests WHERE request_id=%s", (request_id,))
            r = fetchone(cur)
            return _row_to_request(r) if r else None

    def list(
        self,
        *,
        employee_id: Optional[str] = None,
        status: Optional[LeaveStatus] = None,
        start_date_from: Optional[date] = None,
        start_date_to: Optional[date] = None,
        leave_type: Optional[LeaveType] = None,
    ) -> Sequence[LeaveRequest]:
        clauses: list[str] = []
        params: list[object] = []

        if employee_id:
            clauses.append("employee_id=%s")
            params.append(employee_id)
        if status is not None:
            clauses.append("status=%s")
            params.append(LeaveStatus(status).value)
        if start_date_from is not None:
            clauses.append("start_date>=%s")
            params.append(start_date_from)
        if start_date_to is not None:
            clauses.append("start_date<=%s")
            params.append(start_date_to)
        if leave_type is not None:
            clauses.append("leave_type=%s")
            params.append(LeaveType(leave_type).value)

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_operation(self._conn_factory, "list leave requests") as (_, cur):
            cur.execute(
                f"SELECT {_REQUEST_COLUMNS} FROM leave_requests {where} ORDER BY created_at DESC",
                tuple(params),
            )
            return [_row_to_request(r) for r in fetchall(cur)]

    def list_for_year(self, employee_id: str, year: int) -> Sequence[LeaveRequest]:
        return self.list(
            employee_id=employee_id,
            start_date_from=date(year, 1, 1),
            start_date_to=date(year, 12, 31),
        )

    def list_overlapping(
        self,
        employee_id: str,
        start_date: date,
        end_date: date,
        *,
        status: Optional[LeaveStatus] = None,
    ) -> Sequence[LeaveRequest]:
        clauses = ["employee_id=%s", "start_date<=%s", "end_date>=%s"]
        params: list[object] = [employee_id, end_date, start_date]
        if status is not None:
            clauses.append("status=%s")
            params.append(LeaveStatus(status).value)

        with db_operation(self._conn_factory, "list overlapping leave requests") as (_, cur):
            cur.execute(
                f"SELECT {_REQUEST_COLUMNS} FROM leave_requests WHERE {' AND '.join(clauses)} ORDER BY start_date",
                tuple(params),
            )
            return [_row_to_request(r) for r in fetchall(cur)]

    def update_status(self, request_id: str, status: LeaveStatus) -> LeaveRequest:
        with db_operation(self._conn_factory, "update leave request status") as (_, cur):
            cur.execute(
                "UPDATE leave_requests SET status=%s WHERE request_id=%s",
                (LeaveStatus(status).value, request_id),
            )

        updated = self.get_by_id(request_id)
        if updated is None:
            raise LeaveRequestNotFound(request_id)
        return updated


class MySQLLeaveBalanceRepository(LeaveBalanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, employee_id: str, leave_type: LeaveType, year: int) -> Optional[LeaveBalance]:
        with db_operation(self._conn_factory, "get leave balance") as (_, cur):
            cur.execute(
                f"""
                SELECT {_BALANCE_COLUMNS}
                FROM leave_balances
                WHERE employee_id=%s AND leave_type=%s AND year=%s
                """,
                (employee_id, LeaveType(leave_type).value, int(year)),
            )
            r = fetchone(cur)
            return _row_to_balance(r) if r else None

    def list_for_employee(self, employee_id: str, year: int) -> Sequence[LeaveBalance]:
        with db_operation(self._conn_factory, "list leave balances") as (_, cur):
            cur.execute(
                f"SELECT {_BALANCE_COLUMNS} FROM leave_balances WHERE employee_id=%s AND year=%s ORDER BY leave_type",
                (employee_id, int(year)),
            )
            return [_row_to_balance(r) for r in fetchall(cur)]

    def list_with_remaining(self, year: int) -> Sequence[LeaveBalance]:
        with db_operation(self._conn_factory, "list leave balances with remaining days") as (_, cur):
            cur.execute(
                f"SELECT {_BALANCE_COLUMNS} FROM leave_balances WHERE year=%s AND remaining_days>0",
                (int(year),),
            )
            return [_row_to_balance(r) for r in fetchall(cur)]

    def create(self, balance: LeaveBalance) -> LeaveBalance:
        with db_operation(self._conn_factory, "create leave balance") as (_, cur):
            cur.execute(
                f"""
                INSERT INTO leave_balances({_BALANCE_COLUMNS})
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    balance.employee_id,
                    balance.leave_type.value,
                    balance.year,
                    balance.total_days,
                    balance.used_days,
                    balance.remaining_days,
                    balance.pending_days,
                    balance.carried_forward,
                ),
            )
        return balance

    def update(self, balance: LeaveBalance) -> LeaveBalance:
        with db_operation(self._conn_factory, "update leave balance") as (_, cur):
            cur.execute(
                """
                UPDATE leave_balances
                SET total_days=%s, used_days=%s, remaining_days=%s, pending_days=%s, carried_forward=%s
                WHERE employee_id=%s AND leave_type=%s AND year=%s
                """,
                (
                    balance.total_days,
                    balance.used_days,
                    balance.remaining_days,
                    balance.pending_days,
                    balance.carried_forward,
                    balance.employee_id,
                    balance.leave_type.value,
                    balance.year,
                ),
            )
        return balance

    def list_policies(self, *, active_only: bool = True) -> Sequence[LeavePolicy]:
        where = "WHERE is_active=1" if active_only else ""
        with db_operation(self._conn_factory, "list leave policies") as (_, cur):
            cur.execute(
                f"""
                SELECT leave_type, annual_limit, carry_forward_allowed, max_carry_forward, is_active
                FROM leave_policies {where}
                ORDER BY leave_type
                """
            )
            return [
                LeavePolicy(
                    leave_type=LeaveType(r["leave_type"]),
                    annual_limit=int(r["annual_limit"]),
                    carry_forward_allowed=bool(r["carry_forward_allowed"]),
                    max_carry_forward=int(r["max_carry_forward"]) if r.get("max_carry_forward") is not None else None,
                    is_active=bool(r["is_active"]),
                )
                for r in fetchall(cur)
            ]
