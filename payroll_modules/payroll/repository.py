"""
Payroll run repositories (``payroll_modules.payroll.repository``).

Responsibility:
    Store and load ``PayrollRun`` DTOs.  ``PayrollRunRepository`` is the
    protocol the run service depends on; two implementations are provided:

    * ``InMemoryPayrollRunRepository`` -- dictionary-backed, for tests and
      embedding.
    * ``SqlAlchemyPayrollRunRepository`` -- persists through the ORM models
      in ``payroll_modules.payroll.orm`` on a caller-owned ``Session``.

Architecture position:
    **Modules layer** -- persistence adapter.  The SQLAlchemy repository
    flushes but never commits; the caller's ``session_scope()`` owns the
    transaction boundary.

Failure modes:
    - ``save`` raises ``PayrollRunAlreadyExistsError`` when a run is already
      stored for the batch.
    - ``update_status`` raises ``PayrollRunNotFoundError`` for unknown runs.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Protocol

from sqlalchemy.orm import Session

from payroll_kernel.exceptions import (
    PayrollRunAlreadyExistsError,
    PayrollRunNotFoundError,
)
from payroll_kernel.logging_config import get_logger
from payroll_modules.payroll.models import PayrollRun, PayrollRunStatus
from payroll_modules.payroll.orm import PayrollRunModel

logger = get_logger("modules.payroll.repository")


class PayrollRunRepository(Protocol):
    """Storage for payroll runs, keyed by batch id."""

    def get(self, batch_id: str) -> PayrollRun | None: ...

    def save(self, run: PayrollRun) -> PayrollRun: ...

    def update_status(
        self,
        batch_id: str,
        status: PayrollRunStatus,
        processed_at: datetime | None = None,
        paid_at: datetime | None = None,
    ) -> PayrollRun: ...


class InMemoryPayrollRunRepository:
    """Dictionary-backed ``PayrollRunRepository``."""

    def __init__(self) -> None:
        self._runs: dict[str, PayrollRun] = {}

    def get(self, batch_id: str) -> PayrollRun | None:
        return self._runs.get(batch_id)

    def save(self, run: PayrollRun) -> PayrollRun:
        if run.id in self._runs:
            raise PayrollRunAlreadyExistsError(run.id)
        self._runs[run.id] = run
        return run

    def update_status(
        self,
        batch_id: str,
        status: PayrollRunStatus,
        processed_at: datetime | None = None,
        paid_at: datetime | None = None,
    ) -> PayrollRun:
        run = self._runs.get(batch_id)
        if run is None:
            raise PayrollRunNotFoundError(batch_id)
        updated = replace(
            run,
            status=status,
            processed_at=processed_at or run.processed_at,
            paid_at=paid_at or run.paid_at,
        )
        self._runs[batch_id] = updated
        return updated


class SqlAlchemyPayrollRunRepository:
    """``PayrollRunRepository`` backed by a SQLAlchemy session."""

    def __init__(self, session: Session, actor: str | None = None):
        self._session = session
        self._actor = actor

    def get(self, batch_id: str) -> PayrollRun | None:
        model = self._session.get(PayrollRunModel, batch_id)
        return model.to_dto() if model is not None else None

    def save(self, run: PayrollRun) -> PayrollRun:
        if self._session.get(PayrollRunModel, run.id) is not None:
            raise PayrollRunAlreadyExistsError(run.id)

        self._session.add(PayrollRunModel.from_dto(run, created_by=self._actor))
        self._session.flush()
        logger.info(
            "payroll_run_persisted",
            extra={
                "run_id": run.id,
                "cost_items": len(run.line_items),
                "sale_items": len(run.sale_line_items),
            },
        )
        return run

    def update_status(
        self,
        batch_id: str,
        status: PayrollRunStatus,
        processed_at: datetime | None = None,
        paid_at: datetime | None = None,
    ) -> PayrollRun:
        model = self._session.get(PayrollRunModel, batch_id)
        if model is None:
            raise PayrollRunNotFoundError(batch_id)

        model.status = status.value
        if processed_at is not None:
            model.processed_at = processed_at
        if paid_at is not None:
            model.paid_at = paid_at
        self._session.flush()
        return model.to_dto()
