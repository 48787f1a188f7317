"""
Pay Rate Resolver.

Pure lookup of cost-side and sale-side daily rates for a position under a
contract in a given work mode.  No I/O.

Cost side:
    position onshore/offshore cost column, unless the assignment carries a
    non-zero ``cost_rate_at_snapshot``.

Sale side:
    the contract sale-rate entry for the position (work-mode specific rate,
    else the legacy ``daily_rate_ex_vat``), unless the assignment carries a
    non-zero ``sell_rate_at_snapshot``.  A missing sale rate resolves to
    zero and is reported through ``sale_rate_found``; payroll is never
    blocked by billing master data.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from payroll_kernel.logging_config import get_logger
from payroll_modules.payroll.models import (
    Assignment,
    Contract,
    Position,
    WorkMode,
)

logger = get_logger("engines.pay_rates")

_ZERO = Decimal("0")


@dataclass(frozen=True)
class ResolvedRates:
    """Daily rates for both sides of one line."""
    cost_daily_rate: Decimal
    sale_daily_rate: Decimal
    sale_rate_found: bool = True


def _snapshot(value: Decimal | None) -> Decimal | None:
    if value is None or value == 0:
        return None
    return value


def resolve_cost_rate(
    position: Position,
    work_mode: WorkMode,
    assignment: Assignment | None = None,
) -> Decimal:
    if assignment is not None:
        snapshot = _snapshot(assignment.cost_rate_at_snapshot)
        if snapshot is not None:
            return snapshot
    return position.cost_per_day(work_mode)


def resolve_sale_rate(
    position: Position,
    contract: Contract,
    work_mode: WorkMode,
    assignment: Assignment | None = None,
) -> Decimal | None:
    """Return the sale daily rate, or None when neither source has one."""
    if assignment is not None:
        snapshot = _snapshot(assignment.sell_rate_at_snapshot)
        if snapshot is not None:
            return snapshot
    entry = contract.sale_rate_for(position.id)
    if entry is None:
        return None
    return entry.rate_for(work_mode)


def resolve_rates(
    position: Position,
    contract: Contract,
    work_mode: WorkMode,
    assignment: Assignment | None = None,
) -> ResolvedRates:
    """Resolve cost and sale daily rates.

    Args:
        position: Cost master data.
        contract: Sale master data (rates per position).
        work_mode: Selects the onshore or offshore column.
        assignment: Optional join record with snapshot rates.

    Returns:
        ResolvedRates.  ``sale_daily_rate`` is 0 and ``sale_rate_found`` is
        False when the contract has no usable rate for the position.
    """
    cost = resolve_cost_rate(position, work_mode, assignment)
    sale = resolve_sale_rate(position, contract, work_mode, assignment)

    if sale is None:
        logger.warning(
            "MISSING_SALE_RATE",
            extra={
                "position_id": position.id,
                "contract_id": contract.id,
                "work_mode": work_mode.value,
            },
        )
        return ResolvedRates(cost_daily_rate=cost, sale_daily_rate=_ZERO, sale_rate_found=False)

    return ResolvedRates(cost_daily_rate=cost, sale_daily_rate=sale)
