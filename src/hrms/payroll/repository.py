from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import PayrollRunStatus
from .model import PayrollEntry, PayrollEntryDraft, PayrollRun, SalaryStructure


class SalaryStructureRepository(Protocol):
    def create(self, structure: SalaryStructure) -> SalaryStructure:
        """Insert ``structure``; its ``structure_id`` is assigned by the repository."""

        raise NotImplementedError

    def get_by_id(self, structure_id: str) -> Optional[SalaryStructure]:
        raise NotImplementedError

    def get_by_name(self, name: str) -> Optional[SalaryStructure]:
        raise NotImplementedError

    def list_all(self) -> Sequence[SalaryStructure]:
        raise NotImplementedError

    def update(self, structure: SalaryStructure) -> SalaryStructure:
        raise NotImplementedError

    def delete(self, structure_id: str) -> bool:
        raise NotImplementedError


class PayrollRepository(Protocol):
    # Runs
    def create_run(self, *, month: int, year: int) -> PayrollRun:
        raise NotImplementedError

    def get_run(self, run_id: str) -> Optional[PayrollRun]:
        raise NotImplementedError

    def get_run_for_period(self, month: int, year: int) -> Optional[PayrollRun]:
        raise NotImplementedError

    def list_runs(self) -> Sequence[PayrollRun]:
        """Newest period first."""

        raise NotImplementedError

    def update_run_status(
        self,
        run_id: str,
        status: PayrollRunStatus,
        *,
        approved_by: Optional[str] = None,
        at: Optional[datetime] = None,
    ) -> PayrollRun:
        raise NotImplementedError

    def delete_run(self, run_id: str) -> bool:
        """Delete the run together with its entries."""

        raise NotImplementedError

    # Entries
    def count_entries(self, run_id: str) -> int:
        raise NotImplementedError

    def list_entries(self, run_id: str) -> Sequence[PayrollEntry]:
        raise NotImplementedError

    def get_entry(self, entry_id: str) -> Optional[PayrollEntry]:
        raise NotImplementedError

    def update_entry(self, entry: PayrollEntry) -> PayrollEntry:
        raise NotImplementedError

    def replace_entries(self, run_id: str, drafts: Sequence[PayrollEntryDraft]) -> int:
        """Delete every entry of the run and insert ``drafts`` in one transaction.

        Readers never observe the run without entries mid-replacement.
        """

        raise NotImplementedError
