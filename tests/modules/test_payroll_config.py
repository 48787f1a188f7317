"""Tests for the PayrollConfig schema."""

from decimal import Decimal

import pytest

from payroll_kernel.exceptions import ConfigurationError
from payroll_modules.payroll.config import (
    OvertimeSettings,
    PayrollConfig,
    WorkModeSettings,
)
from payroll_modules.payroll.models import DEFAULT_OT_RULES, WorkMode


class TestDefaults:

    def test_company_defaults(self):
        config = PayrollConfig.with_defaults()

        assert config.overtime.onshore == WorkModeSettings(Decimal("8"), Decimal("8"))
        assert config.overtime.offshore == WorkModeSettings(Decimal("12"), Decimal("14"))
        assert config.overtime.standby_pay_multiplier == Decimal("0.5")
        assert config.overtime.weekend.saturday and config.overtime.weekend.sunday
        assert config.overtime.prorate_normal_hours is False
        assert config.overtime.default_ot_rules == DEFAULT_OT_RULES
        assert config.vat_rate == Decimal("0.07")
        assert config.wht_rate == Decimal("0.03")
        assert config.invoice_due_days == 30
        assert config.payment_tolerance == Decimal("0.01")
        assert config.max_workers is None

    def test_for_mode(self):
        settings = OvertimeSettings()
        assert settings.for_mode(WorkMode.OFFSHORE).ot_divisor == Decimal("14")


class TestFromDict:

    def test_overrides(self):
        config = PayrollConfig.from_dict({
            "overtime": {
                "weekend": {"saturday": False},
                "offshore": {"standard_hours": 12, "ot_divisor": 12},
                "standby_pay_multiplier": "0.6",
                "default_ot_rules": {
                    "workday": "1.25", "weekly_holiday": "2", "contract_holiday": "2.5",
                },
            },
            "vat_rate": "0.10",
            "max_workers": 4,
        })

        assert config.overtime.weekend.saturday is False
        assert config.overtime.weekend.sunday is True
        assert config.overtime.offshore.ot_divisor == Decimal("12")
        assert config.overtime.onshore.ot_divisor == Decimal("8")
        assert config.overtime.standby_pay_multiplier == Decimal("0.6")
        assert config.overtime.default_ot_rules.workday_multiplier == Decimal("1.25")
        assert config.vat_rate == Decimal("0.10")
        assert config.wht_rate == Decimal("0.03")
        assert config.max_workers == 4

    def test_empty_dict_gives_defaults(self):
        assert PayrollConfig.from_dict({}) == PayrollConfig()

    def test_unknown_key_rejected(self):
        with pytest.raises(ConfigurationError, match="vat_rte"):
            PayrollConfig.from_dict({"vat_rte": "0.07"})


class TestValidation:

    def test_rate_above_one_rejected(self):
        with pytest.raises(ConfigurationError):
            PayrollConfig(vat_rate=Decimal("7"))

    def test_negative_divisor_rejected(self):
        with pytest.raises(ConfigurationError):
            WorkModeSettings(standard_hours=Decimal("8"), ot_divisor=Decimal("-8"))

    def test_negative_standby_multiplier_rejected(self):
        with pytest.raises(ConfigurationError):
            OvertimeSettings(standby_pay_multiplier=Decimal("-0.5"))

    def test_zero_workers_rejected(self):
        with pytest.raises(ConfigurationError):
            PayrollConfig(max_workers=0)

    def test_error_code(self):
        with pytest.raises(ConfigurationError) as exc_info:
            PayrollConfig(invoice_due_days=-1)
        assert exc_info.value.code == "INVALID_CONFIGURATION"
