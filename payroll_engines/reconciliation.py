"""
Payment Reconciliation Engine.

Pure functions. No I/O.

Compares what was paid against what a payroll run says is owed.  Both
amounts are rounded to the currency precision first (ROUND_HALF_UP); the
variance ``paid - expected`` is then judged against an absolute tolerance:

    |variance| <= tolerance  -> MATCHED
    variance < 0             -> UNDERPAID
    variance > 0             -> OVERPAID
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Iterable, Mapping

from payroll_kernel.logging_config import get_logger
from payroll_modules.payroll.models import PayrollLineItem

logger = get_logger("engines.reconciliation")

DEFAULT_TOLERANCE = Decimal("0.01")


class ReconciliationStatus(str, Enum):
    """Outcome of comparing a payment to the expected amount."""

    MATCHED = "MATCHED"
    UNDERPAID = "UNDERPAID"
    OVERPAID = "OVERPAID"


@dataclass(frozen=True)
class PaymentReconciliation:
    """Result of reconciling one payment."""

    expected: Decimal
    paid: Decimal
    variance: Decimal
    status: ReconciliationStatus
    employee_id: str | None = None

    @property
    def is_matched(self) -> bool:
        return self.status == ReconciliationStatus.MATCHED


def quantize_money(amount: Decimal, places: int = 2) -> Decimal:
    """Round ``amount`` to ``places`` decimals, half up."""
    if places < 0:
        raise ValueError("places must be non-negative")
    return amount.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def reconcile_payment(
    expected: Decimal,
    paid: Decimal,
    tolerance: Decimal = DEFAULT_TOLERANCE,
    employee_id: str | None = None,
) -> PaymentReconciliation:
    if tolerance < 0:
        raise ValueError("tolerance must be non-negative")

    expected = quantize_money(expected)
    paid = quantize_money(paid)
    variance = paid - expected

    if abs(variance) <= tolerance:
        status = ReconciliationStatus.MATCHED
    elif variance < 0:
        status = ReconciliationStatus.UNDERPAID
    else:
        status = ReconciliationStatus.OVERPAID

    return PaymentReconciliation(
        expected=expected,
        paid=paid,
        variance=variance,
        status=status,
        employee_id=employee_id,
    )


def reconcile_run_payments(
    run_items: Iterable[PayrollLineItem],
    payments: Mapping[str, Decimal],
    tolerance: Decimal = DEFAULT_TOLERANCE,
) -> tuple[PaymentReconciliation, ...]:
    """Reconcile each employee's cost total against the amount paid.

    Employees with no entry in ``payments`` are treated as paid 0.
    """
    results = tuple(
        reconcile_payment(
            item.total_pay,
            payments.get(item.employee_id, Decimal("0")),
            tolerance,
            employee_id=item.employee_id,
        )
        for item in run_items
    )

    mismatched = [r for r in results if not r.is_matched]
    if mismatched:
        logger.warning(
            "payroll_payment_mismatch",
            extra={
                "mismatch_count": len(mismatched),
                "employee_ids": [r.employee_id for r in mismatched],
            },
        )
    return results
