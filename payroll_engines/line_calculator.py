"""
Line Calculator (``payroll_engines.line_calculator``).

Responsibility
--------------
Compute cost-side and sale-side pay for a single timesheet line:

    base_pay = daily_rate * base_multiplier(work_type) * day_pay_multiplier
    ot_pay   = ot_hours * (daily_rate / divisor(work_mode)) * ot_multiplier
    total    = base_pay + ot_pay

Architecture position
---------------------
**Engines layer** -- pure functional core.  Receives fully resolved master
data; never touches a repository or database handle.

Invariants enforced
-------------------
* Cost and sale use the same ``ot_hours``, ``work_type`` and day category;
  only the rates (and their rule tables) differ.
* OT is paid only for ``NORMAL`` lines with ``ot_hours > 0`` and a
  positive divisor.  OT hours on ``STANDBY``/``LEAVE`` lines are ignored.
* Amounts are exact ``Decimal``; rounding is left to the consumer.

Failure modes
-------------
* ``InvalidDateError`` if the day category must be derived and the work
  date is unparseable.
* A missing sale rate is not an error: sale pay is 0 and
  ``sale_rate_found`` is False.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from payroll_engines.day_classifier import classify_day
from payroll_engines.overtime import (
    base_pay_multiplier,
    day_pay_multiplier,
    ot_divisor,
    select_multiplier,
)
from payroll_engines.pay_rates import resolve_rates
from payroll_modules.payroll.config import DEFAULT_OVERTIME_SETTINGS, OvertimeSettings
from payroll_modules.payroll.models import (
    Assignment,
    Contract,
    DayCategory,
    DayPayRules,
    OvertimeRules,
    PayrollLineItem,
    Position,
    TimesheetLine,
    WorkMode,
    WorkType,
)

_ZERO = Decimal("0")
_ONE = Decimal("1")


@dataclass(frozen=True)
class LinePayResult:
    """Cost and sale pay for one line."""
    cost: PayrollLineItem
    sale: PayrollLineItem
    day_category: DayCategory
    sale_rate_found: bool = True


def resolve_day_category(
    line: TimesheetLine,
    contract: Contract,
    settings: OvertimeSettings = DEFAULT_OVERTIME_SETTINGS,
) -> DayCategory:
    """Use the line's own category when given, else classify its date."""
    if line.day_category is not None:
        return line.day_category
    return classify_day(line.work_date, settings.weekend, contract.holiday_dates)


def _base_multiplier(
    line: TimesheetLine,
    work_mode: WorkMode,
    settings: OvertimeSettings,
) -> Decimal:
    multiplier = base_pay_multiplier(line.work_type, settings)
    if line.work_type != WorkType.NORMAL or not settings.prorate_normal_hours:
        return multiplier
    standard = settings.for_mode(work_mode).standard_hours
    if standard <= 0:
        return multiplier
    return min(_ONE, line.normal_hours / standard) * multiplier


def _side_pay(
    employee_id: str,
    daily_rate: Decimal,
    base_multiplier: Decimal,
    day_rules: DayPayRules | None,
    ot_rules: OvertimeRules | None,
    ot_hours: Decimal,
    divisor: Decimal,
    day_category: DayCategory,
    pays_ot: bool,
) -> PayrollLineItem:
    normal_pay = daily_rate * base_multiplier * day_pay_multiplier(day_category, day_rules)
    ot_pay = _ZERO
    if pays_ot:
        ot_pay = ot_hours * (daily_rate / divisor) * select_multiplier(day_category, ot_rules)
    return PayrollLineItem.of(employee_id, normal_pay, ot_pay)


def calculate_line(
    line: TimesheetLine,
    position: Position,
    contract: Contract,
    work_mode: WorkMode,
    settings: OvertimeSettings | None = None,
    assignment: Assignment | None = None,
) -> LinePayResult:
    """Calculate cost-side and sale-side pay for one timesheet line.

    Args:
        line: The timesheet line.
        position: Cost rates for the line's position.
        contract: Sale rates, OT rules, holiday calendar.
        work_mode: Project work mode.
        settings: Overtime conventions; company defaults when omitted.
        assignment: Optional join record carrying snapshot rates.

    Returns:
        LinePayResult with one PayrollLineItem per side.
    """
    settings = settings or DEFAULT_OVERTIME_SETTINGS

    day_category = resolve_day_category(line, contract, settings)
    rates = resolve_rates(position, contract, work_mode, assignment)
    base_multiplier = _base_multiplier(line, work_mode, settings)
    divisor = ot_divisor(work_mode, settings)
    pays_ot = line.work_type == WorkType.NORMAL and line.ot_hours > 0 and divisor > 0

    cost_rules = contract.cost_ot_rules or settings.default_ot_rules
    sale_rules = contract.ot_rules or settings.default_ot_rules

    cost = _side_pay(
        line.employee_id, rates.cost_daily_rate, base_multiplier,
        contract.payroll_day_rules, cost_rules,
        line.ot_hours, divisor, day_category, pays_ot,
    )
    sale = _side_pay(
        line.employee_id, rates.sale_daily_rate, base_multiplier,
        contract.bill_day_rules, sale_rules,
        line.ot_hours, divisor, day_category, pays_ot,
    )
    return LinePayResult(
        cost=cost,
        sale=sale,
        day_category=day_category,
        sale_rate_found=rates.sale_rate_found,
    )
