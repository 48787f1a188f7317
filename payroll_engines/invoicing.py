"""
Invoice Totals Engine.

Pure functions with deterministic behavior. No I/O.

Turns the sale-side line items of a payroll run into invoice totals:

    subtotal       = sum(sale total_pay)
    vat_amount     = subtotal * vat_rate
    total_amount   = subtotal + vat_amount
    wht_amount     = subtotal * wht_rate     (withheld by the client)
    net_receivable = total_amount - wht_amount

Every amount is rounded to two places (ROUND_HALF_UP) before it is used
in the next step, so the printed figures always add up.

Invoice numbers have the form ``INV-YYYYMM-NNN``; the sequence restarts at
1 each month.  The counter is an explicit value passed in and returned,
so the caller decides where it is stored.

Usage:
    from payroll_engines.invoicing import compute_invoice_totals, next_invoice_number

    totals = compute_invoice_totals(run.sale_line_items)
    number, counter = next_invoice_number(date(2024, 3, 5), counter)
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from payroll_engines.tracer import traced_engine
from payroll_kernel.logging_config import get_logger
from payroll_modules.payroll.models import PayrollLineItem

logger = get_logger("engines.invoicing")

_TWO_PLACES = Decimal("0.01")

DEFAULT_VAT_RATE = Decimal("0.07")
DEFAULT_WHT_RATE = Decimal("0.03")
DEFAULT_DUE_DAYS = 30


def _round(amount: Decimal) -> Decimal:
    return amount.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class InvoiceTotals:
    """Invoice money figures, all rounded to two places."""
    subtotal: Decimal
    vat_amount: Decimal
    total_amount: Decimal
    wht_amount: Decimal
    net_receivable: Decimal


@dataclass(frozen=True)
class InvoiceCounter:
    """Last issued sequence for a ``YYYYMM`` month."""
    current_month: str
    seq: int


@traced_engine("invoice_totals", "1.0", fingerprint_fields=("vat_rate", "wht_rate"))
def compute_invoice_totals(
    sale_items: Iterable[PayrollLineItem],
    vat_rate: Decimal = DEFAULT_VAT_RATE,
    wht_rate: Decimal = DEFAULT_WHT_RATE,
) -> InvoiceTotals:
    """Compute invoice totals from sale-side line items."""
    if vat_rate < 0 or wht_rate < 0:
        raise ValueError("vat_rate and wht_rate must be non-negative")

    subtotal = _round(sum((item.total_pay for item in sale_items), Decimal("0")))
    vat_amount = _round(subtotal * vat_rate)
    total_amount = subtotal + vat_amount
    wht_amount = _round(subtotal * wht_rate)

    return InvoiceTotals(
        subtotal=subtotal,
        vat_amount=vat_amount,
        total_amount=total_amount,
        wht_amount=wht_amount,
        net_receivable=total_amount - wht_amount,
    )


def next_invoice_number(
    issue_date: date,
    counter: InvoiceCounter | None = None,
) -> tuple[str, InvoiceCounter]:
    """Return the next invoice number and the updated counter.

    The sequence continues when ``counter`` belongs to the issue month and
    restarts at 1 otherwise.
    """
    month_key = f"{issue_date.year:04d}{issue_date.month:02d}"
    seq = 1
    if counter is not None and counter.current_month == month_key:
        seq = counter.seq + 1

    number = f"INV-{month_key}-{seq:03d}"
    logger.debug("invoice_number_issued", extra={"invoice_number": number})
    return number, InvoiceCounter(current_month=month_key, seq=seq)


def invoice_due_date(issue_date: date, days: int = DEFAULT_DUE_DAYS) -> date:
    """End of the month containing ``issue_date + days``."""
    target = issue_date + timedelta(days=days)
    last_day = calendar.monthrange(target.year, target.month)[1]
    return target.replace(day=last_day)
