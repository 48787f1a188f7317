"""
Tests for the Pay Rate Resolver.

Covers:
- Cost column by work mode
- Sale rate lookup (work-mode specific rate, legacy fallback)
- Missing sale rate degrades to zero
- Assignment snapshot rates
"""

from decimal import Decimal

from payroll_engines.pay_rates import resolve_rates
from payroll_modules.payroll.models import (
    Assignment,
    Contract,
    ContractSaleRate,
    WorkMode,
)


def _assignment(cost=None, sell=None) -> Assignment:
    return Assignment(
        id="ASG-1",
        employee_id="E1",
        position_id="POS-WELDER",
        cost_rate_at_snapshot=cost,
        sell_rate_at_snapshot=sell,
    )


class TestCostRate:

    def test_onshore_column(self, welder, contract):
        rates = resolve_rates(welder, contract, WorkMode.ONSHORE)
        assert rates.cost_daily_rate == Decimal("1000")

    def test_offshore_column(self, welder, contract):
        rates = resolve_rates(welder, contract, WorkMode.OFFSHORE)
        assert rates.cost_daily_rate == Decimal("1400")

    def test_snapshot_overrides_position(self, welder, contract):
        rates = resolve_rates(
            welder, contract, WorkMode.ONSHORE, _assignment(cost=Decimal("1200")),
        )
        assert rates.cost_daily_rate == Decimal("1200")

    def test_zero_snapshot_ignored(self, welder, contract):
        rates = resolve_rates(
            welder, contract, WorkMode.ONSHORE, _assignment(cost=Decimal("0")),
        )
        assert rates.cost_daily_rate == Decimal("1000")


class TestSaleRate:

    def test_legacy_rate(self, welder, contract):
        rates = resolve_rates(welder, contract, WorkMode.ONSHORE)
        assert rates.sale_daily_rate == Decimal("1500")
        assert rates.sale_rate_found

    def test_mode_specific_rate_wins(self, welder):
        contract = Contract(sale_rates=(
            ContractSaleRate(
                position_id="POS-WELDER",
                daily_rate_ex_vat=Decimal("1500"),
                offshore_sell_daily_rate_ex_vat=Decimal("2100"),
            ),
        ))
        assert resolve_rates(welder, contract, WorkMode.OFFSHORE).sale_daily_rate == Decimal("2100")
        assert resolve_rates(welder, contract, WorkMode.ONSHORE).sale_daily_rate == Decimal("1500")

    def test_snapshot_overrides_contract(self, welder, contract):
        rates = resolve_rates(
            welder, contract, WorkMode.ONSHORE, _assignment(sell=Decimal("1800")),
        )
        assert rates.sale_daily_rate == Decimal("1800")


class TestMissingSaleRate:
    """Billing gaps never block payroll."""

    def test_no_entry_for_position(self, welder):
        contract = Contract(id="CON-EMPTY")
        rates = resolve_rates(welder, contract, WorkMode.ONSHORE)
        assert rates.sale_daily_rate == Decimal("0")
        assert not rates.sale_rate_found
        assert rates.cost_daily_rate == Decimal("1000")

    def test_entry_without_any_rate(self, welder):
        contract = Contract(sale_rates=(ContractSaleRate(position_id="POS-WELDER"),))
        rates = resolve_rates(welder, contract, WorkMode.OFFSHORE)
        assert rates.sale_daily_rate == Decimal("0")
        assert not rates.sale_rate_found

    def test_snapshot_covers_missing_contract_rate(self, welder):
        contract = Contract(id="CON-EMPTY")
        rates = resolve_rates(
            welder, contract, WorkMode.ONSHORE, _assignment(sell=Decimal("1600")),
        )
        assert rates.sale_daily_rate == Decimal("1600")
        assert rates.sale_rate_found

    def test_warning_logged(self, welder, captured_logs):
        resolve_rates(welder, Contract(id="CON-EMPTY"), WorkMode.ONSHORE)
        records = [r for r in captured_logs() if r["message"] == "MISSING_SALE_RATE"]
        assert len(records) == 1
        assert records[0]["level"] == "WARNING"
        assert records[0]["position_id"] == "POS-WELDER"
        assert records[0]["contract_id"] == "CON-EMPTY"
