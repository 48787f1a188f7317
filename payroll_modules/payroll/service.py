"""
Payroll Run Service (``payroll_modules.payroll.service``).

Responsibility
--------------
Turns an HR-approved timesheet batch into a stored payroll run and moves
that run through its lifecycle, by delegating pure computation to
``payroll_engines`` and persistence to a ``PayrollRunRepository``:

* ``create_payroll_run`` -- guard checks, master-data join, aggregation,
  rounding to currency precision, store as ``PENDING``.
* ``advance_run``        -- ``process`` / ``pay`` status actions.
* ``validate_batch``     -- anomaly report for a batch's lines.
* ``build_invoice``      -- invoice draft from a run's sale-side items.
* ``reconcile_payments`` -- paid amounts vs. a run's cost-side items.

Architecture position
---------------------
**Modules layer** -- thin glue.  The only component that touches a clock
or a repository.  It never commits: with the SQLAlchemy repository the
caller's ``session_scope()`` owns the transaction.

Invariants enforced
-------------------
* One run per batch.
* Stored line items are rounded to two places and the run summary is
  recomputed from the rounded items, so stored totals always add up.
* Status changes only along ``PAYROLL_RUN_WORKFLOW``.

Failure modes
-------------
* ``PayrollRunAlreadyExistsError``, ``BatchNotApprovedError``,
  ``EmptyTimesheetBatchError`` from ``create_payroll_run``.
* ``PayrollRunNotFoundError`` for unknown batch ids.
* ``InvalidRunTransitionError`` for actions the workflow does not allow.

Usage::

    with session_scope() as session:
        service = PayrollRunService(
            master_data, SqlAlchemyPayrollRunRepository(session),
            config=get_active_config(),
        )
        result = service.create_payroll_run(batch, lines)
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from payroll_engines.aggregation import PayrollAggregate, aggregate
from payroll_engines.invoicing import (
    InvoiceCounter,
    InvoiceTotals,
    compute_invoice_totals,
    invoice_due_date,
    next_invoice_number,
)
from payroll_engines.reconciliation import (
    PaymentReconciliation,
    quantize_money,
    reconcile_run_payments,
)
from payroll_engines.timesheet_validation import (
    TimesheetValidationReport,
    validate_timesheet,
)
from payroll_kernel.domain.clock import Clock, SystemClock
from payroll_kernel.exceptions import (
    BatchNotApprovedError,
    EmptyTimesheetBatchError,
    InvalidRunTransitionError,
    MissingMasterDataError,
    PayrollRunAlreadyExistsError,
    PayrollRunNotFoundError,
)
from payroll_kernel.logging_config import LogContext, get_logger
from payroll_modules.payroll.config import PayrollConfig
from payroll_modules.payroll.master_data import MasterDataResolver, MasterDataSource
from payroll_modules.payroll.models import (
    PayrollLineItem,
    PayrollRun,
    PayrollRunStatus,
    RunSummary,
    TimesheetBatch,
    TimesheetLine,
)
from payroll_modules.payroll.repository import PayrollRunRepository
from payroll_modules.payroll.workflows import (
    BATCH_HR_APPROVED,
    PAY,
    PAYROLL_RUN_WORKFLOW,
    PROCESS,
    RUN_ELIGIBLE_BATCH_STATUSES,
)

logger = get_logger("modules.payroll.service")


@dataclass(frozen=True)
class PayrollRunResult:
    """A stored run and the aggregate it was built from."""
    run: PayrollRun
    aggregate: PayrollAggregate


@dataclass(frozen=True)
class InvoiceDraft:
    """Invoice figures for one payroll run, ready to be issued."""
    batch_id: str
    invoice_number: str
    issue_date: date
    due_date: date
    totals: InvoiceTotals
    counter: InvoiceCounter


def _round_item(item: PayrollLineItem) -> PayrollLineItem:
    return PayrollLineItem.of(
        item.employee_id,
        quantize_money(item.normal_pay),
        quantize_money(item.ot_pay),
    )


class PayrollRunService:
    """Create and advance payroll runs for timesheet batches."""

    def __init__(
        self,
        master_data: MasterDataSource,
        repository: PayrollRunRepository,
        config: PayrollConfig | None = None,
        clock: Clock | None = None,
    ):
        self._master_data = master_data
        self._repository = repository
        self._config = config or PayrollConfig.with_defaults()
        self._clock = clock or SystemClock()

    # ------------------------------------------------------------------
    # Run creation
    # ------------------------------------------------------------------

    def create_payroll_run(
        self,
        batch: TimesheetBatch,
        lines: Sequence[TimesheetLine],
    ) -> PayrollRunResult:
        """Aggregate ``lines`` of ``batch`` and store a PENDING run."""
        with LogContext.bind(batch_id=batch.id, run_id=batch.id):
            logger.info(
                "payroll_run_create_started",
                extra={"line_count": len(lines), "batch_status": batch.status.value},
            )

            if self._repository.get(batch.id) is not None:
                raise PayrollRunAlreadyExistsError(batch.id)
            if batch.status not in RUN_ELIGIBLE_BATCH_STATUSES:
                logger.warning(
                    "payroll_run_guard_failed",
                    extra={"guard": BATCH_HR_APPROVED.name, "batch_status": batch.status.value},
                )
                raise BatchNotApprovedError(batch.id, batch.status.value)
            if not lines:
                raise EmptyTimesheetBatchError(batch.id)

            resolver = MasterDataResolver(self._master_data, batch)
            result = aggregate(
                lines,
                resolver,
                settings=self._config.overtime,
                max_workers=self._config.max_workers,
            )

            cost_items = tuple(_round_item(i) for i in result.cost_line_items)
            sale_items = tuple(_round_item(i) for i in result.sale_line_items)
            summary = RunSummary(
                total_cost=sum((i.total_pay for i in cost_items), Decimal("0")),
                total_sale=sum((i.total_pay for i in sale_items), Decimal("0")),
                employee_count=len(cost_items),
            )

            run = PayrollRun(
                id=batch.id,
                cycle_start=batch.period_start,
                cycle_end=batch.period_end,
                status=PayrollRunStatus(PAYROLL_RUN_WORKFLOW.initial_state),
                line_items=cost_items,
                sale_line_items=sale_items,
                summary=summary,
                created_at=self._clock.now(),
            )
            self._repository.save(run)

            logger.info(
                "payroll_run_created",
                extra={
                    "employee_count": summary.employee_count,
                    "total_cost": str(summary.total_cost),
                    "total_sale": str(summary.total_sale),
                    "skipped_count": result.skipped_count,
                    "warning_count": len(result.warnings),
                },
            )
            return PayrollRunResult(run=run, aggregate=result)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def get_run(self, batch_id: str) -> PayrollRun:
        run = self._repository.get(batch_id)
        if run is None:
            raise PayrollRunNotFoundError(batch_id)
        return run

    def advance_run(self, batch_id: str, action: str) -> PayrollRun:
        """Apply a workflow action (``process`` or ``pay``) to a stored run."""
        run = self.get_run(batch_id)
        target = PAYROLL_RUN_WORKFLOW.apply(run.status.value, action)
        if target is None:
            allowed = PAYROLL_RUN_WORKFLOW.allowed_actions(run.status.value)
            logger.warning(
                "payroll_run_transition_rejected",
                extra={
                    "run_id": batch_id,
                    "action": action,
                    "from_status": run.status.value,
                    "allowed_actions": list(allowed),
                },
            )
            raise InvalidRunTransitionError(
                batch_id, run.status.value, action, allowed_actions=allowed,
            )

        now = self._clock.now()
        updated = self._repository.update_status(
            batch_id,
            PayrollRunStatus(target),
            processed_at=now if action == PROCESS else None,
            paid_at=now if action == PAY else None,
        )
        logger.info(
            "payroll_run_status_changed",
            extra={
                "run_id": batch_id,
                "action": action,
                "from_status": run.status.value,
                "to_status": target,
            },
        )
        return updated

    def process_run(self, batch_id: str) -> PayrollRun:
        return self.advance_run(batch_id, PROCESS)

    def mark_paid(self, batch_id: str) -> PayrollRun:
        return self.advance_run(batch_id, PAY)

    # ------------------------------------------------------------------
    # Validation, invoicing, reconciliation
    # ------------------------------------------------------------------

    def validate_batch(
        self,
        batch: TimesheetBatch,
        lines: Sequence[TimesheetLine],
    ) -> TimesheetValidationReport:
        """Flag anomalies on the batch's lines using the project work mode."""
        project = self._master_data.get_project(batch.project_id)
        if project is None:
            raise MissingMasterDataError("project", batch.project_id)

        report = validate_timesheet(
            lines,
            project.work_mode,
            settings=self._config.overtime,
            known_employee_ids=self._master_data.known_employee_ids(),
        )
        logger.info(
            "timesheet_batch_validated",
            extra={
                "batch_id": batch.id,
                "total": report.total,
                "with_anomalies": report.with_anomalies,
                "by_type": report.by_type,
            },
        )
        return report

    def build_invoice(
        self,
        batch_id: str,
        issue_date: date,
        counter: InvoiceCounter | None = None,
    ) -> InvoiceDraft:
        """Invoice draft from the stored run's sale-side line items."""
        run = self.get_run(batch_id)
        totals = compute_invoice_totals(
            run.sale_line_items,
            vat_rate=self._config.vat_rate,
            wht_rate=self._config.wht_rate,
        )
        number, counter = next_invoice_number(issue_date, counter)
        draft = InvoiceDraft(
            batch_id=batch_id,
            invoice_number=number,
            issue_date=issue_date,
            due_date=invoice_due_date(issue_date, self._config.invoice_due_days),
            totals=totals,
            counter=counter,
        )
        logger.info(
            "invoice_draft_built",
            extra={
                "batch_id": batch_id,
                "invoice_number": number,
                "total_amount": str(totals.total_amount),
                "net_receivable": str(totals.net_receivable),
            },
        )
        return draft

    def reconcile_payments(
        self,
        batch_id: str,
        payments: Mapping[str, Decimal],
    ) -> tuple[PaymentReconciliation, ...]:
        """Compare amounts paid per employee with the run's cost totals."""
        run = self.get_run(batch_id)
        return reconcile_run_payments(
            run.line_items, payments, self._config.payment_tolerance,
        )
