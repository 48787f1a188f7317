"""
Master-data join (``payroll_modules.payroll.master_data``).

Responsibility
--------------
Resolve, for each timesheet line, the master data the calculator needs:

    line -> assignment -> position
    batch -> contract, project

Lookups go through the ``MasterDataSource`` protocol so the calculator
and its tests never need a database.  ``InMemoryMasterData`` is the
lookup-table implementation used by tests and by callers that load
snapshots up front.

Failure modes
-------------
``MasterDataResolver`` raises ``MissingMasterDataError`` naming the first
missing entity; the aggregator turns that into a skipped line with a
``MISSING_MASTER_DATA`` warning.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from payroll_engines.aggregation import LineContext
from payroll_kernel.exceptions import MissingMasterDataError
from payroll_kernel.logging_config import get_logger
from payroll_modules.payroll.models import (
    Assignment,
    Contract,
    Position,
    Project,
    TimesheetBatch,
    TimesheetLine,
)

logger = get_logger("modules.payroll.master_data")


class MasterDataSource(Protocol):
    """Read-only lookups for payroll master data."""

    def get_position(self, position_id: str) -> Position | None: ...

    def get_contract(self, contract_id: str) -> Contract | None: ...

    def get_project(self, project_id: str) -> Project | None: ...

    def get_assignment(self, assignment_id: str) -> Assignment | None: ...

    def find_assignment(
        self, employee_id: str, project_id: str | None = None,
    ) -> Assignment | None: ...

    def known_employee_ids(self) -> frozenset[str]: ...


class InMemoryMasterData:
    """Dictionary-backed ``MasterDataSource``."""

    def __init__(
        self,
        positions: Iterable[Position] = (),
        contracts: Iterable[Contract] = (),
        projects: Iterable[Project] = (),
        assignments: Iterable[Assignment] = (),
        employee_ids: Iterable[str] | None = None,
    ):
        self._positions = {p.id: p for p in positions}
        self._contracts = {c.id: c for c in contracts}
        self._projects = {p.id: p for p in projects}
        self._assignments = {a.id: a for a in assignments}
        if employee_ids is None:
            employee_ids = (a.employee_id for a in self._assignments.values())
        self._employee_ids = frozenset(employee_ids)

    def get_position(self, position_id: str) -> Position | None:
        return self._positions.get(position_id)

    def get_contract(self, contract_id: str) -> Contract | None:
        return self._contracts.get(contract_id)

    def get_project(self, project_id: str) -> Project | None:
        return self._projects.get(project_id)

    def get_assignment(self, assignment_id: str) -> Assignment | None:
        return self._assignments.get(assignment_id)

    def find_assignment(
        self, employee_id: str, project_id: str | None = None,
    ) -> Assignment | None:
        for assignment in self._assignments.values():
            if assignment.employee_id != employee_id:
                continue
            if project_id is None or assignment.project_id in (None, project_id):
                return assignment
        return None

    def known_employee_ids(self) -> frozenset[str]:
        return self._employee_ids


class MasterDataResolver:
    """Per-batch join from timesheet lines to calculator inputs.

    Contract and project come from the batch and are looked up once.
    Instances are callable and can be passed straight to
    ``payroll_engines.aggregation.aggregate``.
    """

    def __init__(self, source: MasterDataSource, batch: TimesheetBatch):
        self._source = source
        self._batch = batch
        self.contract = source.get_contract(batch.contract_id)
        self.project = source.get_project(batch.project_id)

        if self.contract is None or self.project is None:
            logger.warning(
                "batch_master_data_missing",
                extra={
                    "batch_id": batch.id,
                    "contract_found": self.contract is not None,
                    "project_found": self.project is not None,
                },
            )

    def _assignment_for(self, line: TimesheetLine) -> Assignment | None:
        if line.assignment_id is not None:
            assignment = self._source.get_assignment(line.assignment_id)
            if assignment is None:
                raise MissingMasterDataError("assignment", line.assignment_id)
            return assignment
        return self._source.find_assignment(line.employee_id, self._batch.project_id)

    def __call__(self, line: TimesheetLine) -> LineContext:
        if self.contract is None:
            raise MissingMasterDataError("contract", self._batch.contract_id)
        if self.project is None:
            raise MissingMasterDataError("project", self._batch.project_id)

        assignment = self._assignment_for(line)
        position_id = line.position_id
        if position_id is None and assignment is not None:
            position_id = assignment.position_id
        if position_id is None:
            raise MissingMasterDataError("position", None)

        position = self._source.get_position(position_id)
        if position is None:
            raise MissingMasterDataError("position", position_id)

        # Snapshot rates belong to the assignment's position only.
        if assignment is not None and assignment.position_id != position_id:
            logger.warning(
                "assignment_position_mismatch",
                extra={
                    "employee_id": line.employee_id,
                    "line_id": line.line_id,
                    "assignment_id": assignment.id,
                    "line_position_id": position_id,
                    "assignment_position_id": assignment.position_id,
                },
            )
            assignment = None

        return LineContext(
            position=position,
            contract=self.contract,
            project=self.project,
            assignment=assignment,
        )
