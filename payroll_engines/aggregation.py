"""
Batch Aggregator (``payroll_engines.aggregation``).

Responsibility
--------------
Run the line calculator over a batch of timesheet lines and accumulate
per-employee cost and sale totals plus a run-level summary.

Architecture position
---------------------
**Engines layer** -- pure.  Master data arrives through the
``resolve_context`` callable supplied by the caller (see
``payroll_modules.payroll.master_data.MasterDataResolver``); the
aggregator never performs lookups itself.

Invariants enforced
-------------------
* Lines whose position, contract or project cannot be resolved are
  skipped with a ``MISSING_MASTER_DATA`` warning and excluded from totals.
  The rest of the batch is still calculated.
* Per-employee totals sum ``normal_pay``, ``ot_pay`` and ``total_pay``
  separately for each side; employees keep first-appearance order.
* Summary totals equal the sums of per-employee totals.
* Reduction is sequential in input order, so a thread-pool run and a
  serial run give identical results, and repeated runs are identical.

Failure modes
-------------
* ``InvalidDateError`` from the day classifier propagates; dates must be
  validated before aggregation.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from decimal import Decimal

from payroll_engines.line_calculator import LinePayResult, calculate_line
from payroll_engines.tracer import traced_engine
from payroll_kernel.exceptions import MissingMasterDataError
from payroll_kernel.logging_config import get_logger
from payroll_modules.payroll.config import DEFAULT_OVERTIME_SETTINGS, OvertimeSettings
from payroll_modules.payroll.models import (
    Assignment,
    Contract,
    EmployeePay,
    PayrollLineItem,
    Position,
    Project,
    RunSummary,
    TimesheetLine,
)

logger = get_logger("engines.aggregation")

MISSING_MASTER_DATA = "MISSING_MASTER_DATA"
MISSING_SALE_RATE = "MISSING_SALE_RATE"


@dataclass(frozen=True)
class LineContext:
    """Master data resolved for one timesheet line; ``None`` means missing."""
    position: Position | None
    contract: Contract | None
    project: Project | None
    assignment: Assignment | None = None

    def missing(self) -> tuple[str, ...]:
        return tuple(
            name for name in ("position", "contract", "project")
            if getattr(self, name) is None
        )


@dataclass(frozen=True)
class CalculationWarning:
    """Non-fatal data-quality problem found while aggregating."""
    code: str
    message: str
    employee_id: str
    line_id: str | None = None


@dataclass(frozen=True)
class PayrollAggregate:
    """Result of aggregating one batch of lines."""
    line_items: tuple[EmployeePay, ...]
    summary: RunSummary
    warnings: tuple[CalculationWarning, ...] = ()
    processed_count: int = 0
    skipped_count: int = 0

    @property
    def cost_line_items(self) -> tuple[PayrollLineItem, ...]:
        return tuple(pay.cost for pay in self.line_items)

    @property
    def sale_line_items(self) -> tuple[PayrollLineItem, ...]:
        return tuple(pay.sale for pay in self.line_items)


ContextResolver = Callable[[TimesheetLine], LineContext | None]


def _calculate(
    line: TimesheetLine,
    resolve_context: ContextResolver,
    settings: OvertimeSettings,
) -> LinePayResult | CalculationWarning:
    try:
        context = resolve_context(line)
    except MissingMasterDataError as exc:
        return CalculationWarning(
            code=MISSING_MASTER_DATA,
            message=str(exc),
            employee_id=line.employee_id,
            line_id=line.line_id,
        )

    missing = ("context",) if context is None else context.missing()
    if missing:
        return CalculationWarning(
            code=MISSING_MASTER_DATA,
            message=f"Unresolved master data: {', '.join(missing)}",
            employee_id=line.employee_id,
            line_id=line.line_id,
        )

    return calculate_line(
        line,
        context.position,
        context.contract,
        context.project.work_mode,
        settings=settings,
        assignment=context.assignment,
    )


@traced_engine("payroll_aggregation", "1.0", fingerprint_fields=("lines",))
def aggregate(
    lines: Iterable[TimesheetLine],
    resolve_context: ContextResolver,
    settings: OvertimeSettings | None = None,
    max_workers: int | None = None,
) -> PayrollAggregate:
    """Aggregate a batch of timesheet lines into per-employee pay.

    Args:
        lines: Timesheet lines of one batch.
        resolve_context: Returns the master data for a line, or ``None``
            (or raises ``MissingMasterDataError``) when it cannot.
        settings: Overtime conventions; company defaults when omitted.
        max_workers: When greater than 1, lines are calculated on a
            thread pool of that size.

    Returns:
        PayrollAggregate with employee line items, summary and warnings.
    """
    settings = settings or DEFAULT_OVERTIME_SETTINGS
    lines = tuple(lines)

    def _one(line: TimesheetLine) -> LinePayResult | CalculationWarning:
        return _calculate(line, resolve_context, settings)

    if max_workers is not None and max_workers > 1 and len(lines) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            outcomes = list(pool.map(_one, lines))
    else:
        outcomes = [_one(line) for line in lines]

    totals: dict[str, EmployeePay] = {}
    warnings: list[CalculationWarning] = []
    processed = 0

    for line, outcome in zip(lines, outcomes):
        if isinstance(outcome, CalculationWarning):
            logger.warning(
                "payroll_line_skipped",
                extra={
                    "warning_code": outcome.code,
                    "employee_id": line.employee_id,
                    "line_id": line.line_id,
                    "reason": outcome.message,
                },
            )
            warnings.append(outcome)
            continue

        processed += 1
        if not outcome.sale_rate_found:
            warnings.append(CalculationWarning(
                code=MISSING_SALE_RATE,
                message="No sale rate for position; sale pay set to 0",
                employee_id=line.employee_id,
                line_id=line.line_id,
            ))

        pay = EmployeePay(cost=outcome.cost, sale=outcome.sale)
        current = totals.get(line.employee_id)
        totals[line.employee_id] = pay if current is None else current + pay

    line_items = tuple(totals.values())
    summary = RunSummary(
        total_cost=sum((p.cost.total_pay for p in line_items), Decimal("0")),
        total_sale=sum((p.sale.total_pay for p in line_items), Decimal("0")),
        employee_count=len(line_items),
    )

    logger.info(
        "payroll_aggregated",
        extra={
            "line_count": len(lines),
            "processed_count": processed,
            "skipped_count": len(lines) - processed,
            "employee_count": summary.employee_count,
            "total_cost": str(summary.total_cost),
            "total_sale": str(summary.total_sale),
            "warning_count": len(warnings),
        },
    )

    return PayrollAggregate(
        line_items=line_items,
        summary=summary,
        warnings=tuple(warnings),
        processed_count=processed,
        skipped_count=len(lines) - processed,
    )
