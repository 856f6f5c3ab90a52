from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import PayrollRunStatus
from ..core.exceptions import (
    PayrollEntryNotFound,
    PayrollRunAlreadyExists,
    PayrollRunNotFound,
    SalaryStructureAlreadyExists,
    SalaryStructureNotFound,
)
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    as_decimal,
    db_operation,
    fetchall,
    fetchone,
    from_db_datetime,
    new_id,
    to_db_datetime,
)
from .model import PayrollEntry, PayrollEntryDraft, PayrollRun, SalaryStructure
from .repository import PayrollRepository, SalaryStructureRepository

_STRUCTURE_COLUMNS = """
    structure_id, name, description, basic, hra, conveyance, medical_allowance,
    special_allowance, professional_tax, pf, esi, is_active
"""
_RUN_COLUMNS = "run_id, month, year, status, approved_by, approved_at, processed_at, created_at"
_ENTRY_COLUMNS = """
    entry_id, run_id, employee_id, gross_salary, lop_days, lop_deduction,
    total_deductions, net_salary, notes
"""


def _row_to_structure(r: dict) -> SalaryStructure:
    return SalaryStructure(
        structure_id=str(r["structure_id"]),
        name=str(r["name"]),
        description=r.get("description"),
        basic=as_decimal(r["basic"]),
        hra=as_decimal(r["hra"]),
        conveyance=as_decimal(r.get("conveyance")),
        medical_allowance=as_decimal(r.get("medical_allowance")),
        special_allowance=as_decimal(r.get("special_allowance")),
        professional_tax=as_decimal(r.get("professional_tax")),
        pf=as_decimal(r.get("pf")),
        esi=as_decimal(r.get("esi")),
        is_active=bool(r.get("is_active", 1)),
    )


def _row_to_run(r: dict) -> PayrollRun:
    return PayrollRun(
        run_id=str(r["run_id"]),
        month=int(r["month"]),
        year=int(r["year"]),
        status=PayrollRunStatus(r["status"]),
        approved_by=r.get("approved_by"),
        approved_at=from_db_datetime(r.get("approved_at")),
        processed_at=from_db_datetime(r.get("processed_at")),
        created_at=from_db_datetime(r.get("created_at")),
    )


def _row_to_entry(r: dict) -> PayrollEntry:
    return PayrollEntry(
        entry_id=str(r["entry_id"]),
        run_id=str(r["run_id"]),
        employee_id=str(r["employee_id"]),
        gross_salary=as_decimal(r["gross_salary"]),
        lop_days=int(r["lop_days"]),
        lop_deduction=as_decimal(r["lop_deduction"]),
        total_deductions=as_decimal(r["total_deductions"]),
        net_salary=as_decimal(r["net_salary"]),
        notes=r.get("notes"),
    )


class MySQLSalaryStructureRepository(SalaryStructureRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, structure: SalaryStructure) -> SalaryStructure:
        created = replace(structure, structure_id=new_id())
        with db_operation(
            self._conn_factory,
            "create salary structure",
            on_duplicate=lambda: SalaryStructureAlreadyExists(created.name),
        ) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO salary_structures({_STRUCTURE_COLUMNS})
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    created.structure_id,
                    created.name,
                    created.description,
                    created.basic,
                    created.hra,
                    created.conveyance,
                    created.medical_allowance,
                    created.special_allowance,
                    created.professional_tax,
                    created.pf,
                    created.esi,
                    int(created.is_active),
                ),
            )
        return created

    def get_by_id(self, structure_id: str) -> Optional[SalaryStructure]:
        with db_operation(self._conn_factory, "get salary structure") as (_, cur):
            cur.execute(f"SELECT {_STRUCTURE_COLUMNS} FROM salary_structures WHERE structure_id=%s", (structure_id,))
            r = fetchone(cur)
            return _row_to_structure(r) if r else None

    def get_by_name(self, name: str) -> Optional[SalaryStructure]:
        with db_operation(self._conn_factory, "get salary structure by name") as (_, cur):
            cur.execute(f"SELECT {_STRUCTURE_COLUMNS} FROM salary_structures WHERE name=%s", (name,))
            r = fetchone(cur)
            return _row_to_structure(r) if r else None

    def list_all(self) -> Sequence[SalaryStructure]:
        with db_operation(self._conn_factory, "list salary structures") as (_, cur):
            cur.execute(f"SELECT {_STRUCTURE_COLUMNS} FROM salary_structures ORDER BY name")
            return [_row_to_structure(r) for r in fetchall(cur)]

    def update(self, structure: SalaryStructure) -> SalaryStructure:
        with db_operation(
            self._conn_factory,
            "update salary structure",
            on_duplicate=lambda: SalaryStructureAlreadyExists(structure.name),
        ) as (_, cur):
            cur.execute(
                """
                UPDATE salary_structures
                SET name=%s, description=%s, basic=%s, hra=%s, conveyance=%s, medical_allowance=%s,
                    special_allowance=%s, professional_tax=%s, pf=%s, esi=%s, is_active=%s
                WHERE structure_id=%s
                """,
                (
                    structure.name,
                    structure.description,
                    structure.basic,
                    structure.hra,
                    structure.conveyance,
                    structure.medical_allowance,
                    structure.special_allowance,
                    structure.professional_tax,
                    structure.pf,
                    structure.esi,
                    int(structure.is_active),
                    structure.structure_id,
                ),
            )

        updated = self.get_by_id(structure.structure_id)
        if updated is None:
            raise SalaryStructureNotFound(structure.structure_id)
        return updated

    def delete(self, structure_id: str) -> bool:
        with db_operation(self._conn_factory, "delete salary structure") as (_, cur):
            cur.execute("DELETE FROM salary_structures WHERE structure_id=%s", (structure_id,))
            return cur.rowcount > 0


class MySQLPayrollRepository(PayrollRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # Runs

    def create_run(self, *, month: int, year: int) -> PayrollRun:
        run_id = new_id()
        with db_operation(
            self._conn_factory,
            "create payroll run",
            on_duplicate=lambda: PayrollRunAlreadyExists(month, year),
        ) as (_, cur):
            cur.execute(
                "INSERT INTO payroll_runs(run_id, month, year, status) VALUES(%s,%s,%s,%s)",
                (run_id, int(month), int(year), PayrollRunStatus.DRAFT.value),
            )

        run = self.get_run(run_id)
        if run is None:
            raise PayrollRunNotFound(run_id)
        return run

    def get_run(self, run_id: str) -> Optional[PayrollRun]:
        with db_operation(self._conn_factory, "get payroll run") as (_, cur):
            cur.execute(f"SELECT {_RUN_COLUMNS} FROM payroll_runs WHERE run_id=%s", (run_id,))
            r = fetchone(cur)
            return _row_to_run(r) if r else None

    def get_run_for_period(self, month: int, year: int) -> Optional[PayrollRun]:
        with db_operation(self._conn_factory, "get payroll run for period") as (_, cur):
            cur.execute(
                f"SELECT {_RUN_COLUMNS} FROM payroll_runs WHERE month=%s AND year=%s",
                (int(month), int(year)),
            )
            r = fetchone(cur)
            return _row_to_run(r) if r else None

    def list_runs(self) -> Sequence[PayrollRun]:
        with db_operation(self._conn_factory, "list payroll runs") as (_, cur):
            cur.execute(f"SELECT {_RUN_COLUMNS} FROM payroll_runs ORDER BY year DESC, month DESC")
            return [_row_to_run(r) for r in fetchall(cur)]

    def update_run_status(
        self,
        run_id: str,
        status: PayrollRunStatus,
        *,
        approved_by: Optional[str] = None,
        at: Optional[datetime] = None,
    ) -> PayrollRun:
        if status == PayrollRunStatus.APPROVED:
            sql = "UPDATE payroll_runs SET status=%s, approved_by=%s, approved_at=%s WHERE run_id=%s"
            params: tuple = (status.value, approved_by, to_db_datetime(at), run_id)
        elif status == PayrollRunStatus.PROCESSED:
            sql = "UPDATE payroll_runs SET status=%s, processed_at=%s WHERE run_id=%s"
            params = (status.value, to_db_datetime(at), run_id)
        else:
            sql = "UPDATE payroll_runs SET status=%s WHERE run_id=%s"
            params = (status.value, run_id)

        with db_operation(self._conn_factory, "update payroll run status") as (_, cur):
            cur.execute(sql, params)

        run = self.get_run(run_id)
        if run is None:
            raise PayrollRunNotFound(run_id)
        return run

    def delete_run(self, run_id: str) -> bool:
        with db_operation(self._conn_factory, "delete payroll run") as (_, cur):
            cur.execute("DELETE FROM payroll_entries WHERE run_id=%s", (run_id,))
            cur.execute("DELETE FROM payroll_runs WHERE run_id=%s", (run_id,))
            return cur.rowcount > 0

    # Entries

    def count_entries(self, run_id: str) -> int:
        with db_operation(self._conn_factory, "count payroll entries") as (_, cur):
            cur.execute("SELECT COUNT(*) AS cnt FROM payroll_entries WHERE run_id=%s", (run_id,))
            r = fetchone(cur)
            return int(r["cnt"]) if r else 0

    def list_entries(self, run_id: str) -> Sequence[PayrollEntry]:
        with db_operation(self._conn_factory, "list payroll entries") as (_, cur):
            cur.execute(
                f"SELECT {_ENTRY_COLUMNS} FROM payroll_entries WHERE run_id=%s ORDER BY employee_id",
                (run_id,),
            )
            return [_row_to_entry(r) for r in fetchall(cur)]

    def get_entry(self, entry_id: str) -> Optional[PayrollEntry]:
        with db_operation(self._conn_factory, "get payroll entry") as (_, cur):
            cur.execute(f"SELECT {_ENTRY_COLUMNS} FROM payroll_entries WHERE entry_id=%s", (entry_id,))
            r = fetchone(cur)
            return _row_to_entry(r) if r else None

    def update_entry(self, entry: PayrollEntry) -> PayrollEntry:
        with db_operation(self._conn_factory, "update payroll entry") as (_, cur):
            cur.execute(
                """
                UPDATE payroll_entries
                SET lop_days=%s, lop_deduction=%s, total_deductions=%s, net_salary=%s, notes=%s
                WHERE entry_id=%s
                """,
                (
                    entry.lop_days,
                    entry.lop_deduction,
                    entry.total_deductions,
                    entry.net_salary,
                    entry.notes,
                    entry.entry_id,
                ),
            )

        updated = self.get_entry(entry.entry_id)
        if updated is None:
            raise PayrollEntryNotFound(entry.entry_id)
        return updated

    def replace_entries(self, run_id: str, drafts: Sequence[PayrollEntryDraft]) -> int:
        rows = [
            (
                new_id(),
                run_id,
                d.employee_id,
                d.figures.gross_salary,
                d.figures.lop_days,
                d.figures.lop_deduction,
                d.figures.total_deductions,
                d.figures.net_salary,
            )
            for d in drafts
        ]

        # Delete and insert share one transaction; a failure rolls back to the old entries.
        with db_operation(self._conn_factory, "replace payroll entries") as (_, cur):
            cur.execute("DELETE FROM payroll_entries WHERE run_id=%s", (run_id,))
            if rows:
                cur.executemany(
                    """
                    INSERT INTO payroll_entries(
                        entry_id, run_id, employee_id, gross_salary, lop_days,
                        lop_deduction, total_deductions, net_salary
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    rows,
                )
        return len(rows)
