"""Tests for the Overtime Multiplier Selector."""

from decimal import Decimal

import pytest

from payroll_engines.overtime import (
    base_pay_multiplier,
    day_pay_multiplier,
    ot_divisor,
    select_multiplier,
)
from payroll_modules.payroll.config import OvertimeSettings, WorkModeSettings
from payroll_modules.payroll.models import (
    DayCategory,
    DayPayRules,
    OvertimeRules,
    WorkMode,
    WorkType,
)


class TestSelectMultiplier:

    @pytest.mark.parametrize("category, expected", [
        (DayCategory.WORKDAY, Decimal("1.5")),
        (DayCategory.WEEKLY_HOLIDAY, Decimal("2.0")),
        (DayCategory.CONTRACT_HOLIDAY, Decimal("3.0")),
    ])
    def test_defaults(self, category, expected):
        assert select_multiplier(category) == expected

    def test_contract_rules(self):
        rules = OvertimeRules(
            workday_multiplier=Decimal("1.25"),
            weekly_holiday_multiplier=Decimal("1.75"),
            contract_holiday_multiplier=Decimal("2.5"),
        )
        assert select_multiplier(DayCategory.WORKDAY, rules) == Decimal("1.25")
        assert select_multiplier(DayCategory.WEEKLY_HOLIDAY, rules) == Decimal("1.75")
        assert select_multiplier(DayCategory.CONTRACT_HOLIDAY, rules) == Decimal("2.5")

    def test_negative_multiplier_rejected(self):
        with pytest.raises(ValueError, match="non-negative"):
            OvertimeRules(workday_multiplier=Decimal("-1"))


class TestDivisor:

    def test_default_divisors(self):
        assert ot_divisor(WorkMode.ONSHORE) == Decimal("8")
        assert ot_divisor(WorkMode.OFFSHORE) == Decimal("14")

    def test_configured_divisor(self):
        settings = OvertimeSettings(
            offshore=WorkModeSettings(standard_hours=Decimal("12"), ot_divisor=Decimal("12")),
        )
        assert ot_divisor(WorkMode.OFFSHORE, settings) == Decimal("12")


class TestBasePayMultiplier:

    @pytest.mark.parametrize("work_type, expected", [
        (WorkType.NORMAL, Decimal("1")),
        (WorkType.STANDBY, Decimal("0.5")),
        (WorkType.LEAVE, Decimal("0")),
    ])
    def test_defaults(self, work_type, expected):
        assert base_pay_multiplier(work_type) == expected

    def test_configured_standby(self):
        settings = OvertimeSettings(standby_pay_multiplier=Decimal("0.75"))
        assert base_pay_multiplier(WorkType.STANDBY, settings) == Decimal("0.75")


class TestDayPayMultiplier:

    def test_no_rules_is_one(self):
        assert day_pay_multiplier(DayCategory.CONTRACT_HOLIDAY) == Decimal("1")

    def test_workday_always_one(self):
        rules = DayPayRules(
            weekly_holiday_day_multiplier=Decimal("2"),
            contract_holiday_day_multiplier=Decimal("3"),
        )
        assert day_pay_multiplier(DayCategory.WORKDAY, rules) == Decimal("1")

    def test_holiday_rules(self):
        rules = DayPayRules(
            weekly_holiday_day_multiplier=Decimal("1.5"),
            contract_holiday_day_multiplier=Decimal("2"),
        )
        assert day_pay_multiplier(DayCategory.WEEKLY_HOLIDAY, rules) == Decimal("1.5")
        assert day_pay_multiplier(DayCategory.CONTRACT_HOLIDAY, rules) == Decimal("2")
