"""
Overtime Multiplier Selector.

Pure functions that pick the multipliers used by the line calculator:

* ``select_multiplier``   -- OT multiplier by day category
* ``ot_divisor``          -- daily rate -> OT hourly base, by work mode
* ``base_pay_multiplier`` -- fraction of the day rate paid by work type
* ``day_pay_multiplier``  -- base-pay scaling on non-working days

Absent rule tables mean the company defaults.
"""

from __future__ import annotations

from decimal import Decimal

from payroll_modules.payroll.config import DEFAULT_OVERTIME_SETTINGS, OvertimeSettings
from payroll_modules.payroll.models import (
    DEFAULT_OT_RULES,
    DayCategory,
    DayPayRules,
    OvertimeRules,
    WorkMode,
    WorkType,
)

_ONE = Decimal("1")
_ZERO = Decimal("0")


def select_multiplier(
    day_category: DayCategory,
    ot_rules: OvertimeRules | None = None,
) -> Decimal:
    """OT multiplier for the category; defaults are 1.5 / 2.0 / 3.0."""
    rules = ot_rules if ot_rules is not None else DEFAULT_OT_RULES
    return rules.for_category(day_category)


def ot_divisor(
    work_mode: WorkMode,
    settings: OvertimeSettings = DEFAULT_OVERTIME_SETTINGS,
) -> Decimal:
    return settings.for_mode(work_mode).ot_divisor


def base_pay_multiplier(
    work_type: WorkType,
    settings: OvertimeSettings = DEFAULT_OVERTIME_SETTINGS,
) -> Decimal:
    if work_type == WorkType.NORMAL:
        return _ONE
    if work_type == WorkType.STANDBY:
        return settings.standby_pay_multiplier
    return _ZERO


def day_pay_multiplier(
    day_category: DayCategory,
    day_rules: DayPayRules | None = None,
) -> Decimal:
    if day_rules is None or day_category == DayCategory.WORKDAY:
        return _ONE
    if day_category == DayCategory.CONTRACT_HOLIDAY:
        return day_rules.contract_holiday_day_multiplier
    return day_rules.weekly_holiday_day_multiplier
