"""
Module: payroll_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    payroll calculation engines.  This is the canonical import surface for
    the run service and for callers embedding the calculator directly.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May import payroll_kernel and the value types in
    payroll_modules.payroll.models / .config.
    MUST NOT import payroll_modules.payroll.service or the persistence
    adapter.

Invariants enforced:
    - Purity: engines NEVER read the clock or a database.  Dates are passed
      in; master data arrives as plain snapshots.
    - Decimal-only arithmetic: all money and hours use ``Decimal``.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Batch-level engines are traced via ``@traced_engine``
    (see ``payroll_engines.tracer``), emitting PAYROLL_ENGINE_TRACE records.

Usage:
    from payroll_engines import aggregate, calculate_line, classify_day
"""

from payroll_engines.aggregation import (
    MISSING_MASTER_DATA,
    MISSING_SALE_RATE,
    CalculationWarning,
    LineContext,
    PayrollAggregate,
    aggregate,
)
from payroll_engines.day_classifier import classify_day, is_weekend, to_date_keys
from payroll_engines.invoicing import (
    InvoiceCounter,
    InvoiceTotals,
    compute_invoice_totals,
    invoice_due_date,
    next_invoice_number,
)
from payroll_engines.line_calculator import (
    LinePayResult,
    calculate_line,
    resolve_day_category,
)
from payroll_engines.overtime import (
    base_pay_multiplier,
    day_pay_multiplier,
    ot_divisor,
    select_multiplier,
)
from payroll_engines.pay_rates import ResolvedRates, resolve_rates
from payroll_engines.reconciliation import (
    PaymentReconciliation,
    ReconciliationStatus,
    quantize_money,
    reconcile_payment,
    reconcile_run_payments,
)
from payroll_engines.timesheet_validation import (
    LineValidationResult,
    TimesheetValidationReport,
    detect_line_anomalies,
    validate_timesheet,
)
from payroll_engines.tracer import traced_engine

__all__ = [
    # Aggregation
    "MISSING_MASTER_DATA",
    "MISSING_SALE_RATE",
    "CalculationWarning",
    "LineContext",
    "PayrollAggregate",
    "aggregate",
    # Day classification
    "classify_day",
    "is_weekend",
    "to_date_keys",
    # Invoicing
    "InvoiceCounter",
    "InvoiceTotals",
    "compute_invoice_totals",
    "invoice_due_date",
    "next_invoice_number",
    # Line calculation
    "LinePayResult",
    "calculate_line",
    "resolve_day_category",
    # Overtime
    "base_pay_multiplier",
    "day_pay_multiplier",
    "ot_divisor",
    "select_multiplier",
    # Pay rates
    "ResolvedRates",
    "resolve_rates",
    # Reconciliation
    "PaymentReconciliation",
    "ReconciliationStatus",
    "quantize_money",
    "reconcile_payment",
    "reconcile_run_payments",
    # Timesheet validation
    "LineValidationResult",
    "TimesheetValidationReport",
    "detect_line_anomalies",
    "validate_timesheet",
    # Tracing
    "traced_engine",
]
