"""
Tests for payroll domain models.

Covers:
- Parsing of the external camelCase snapshot shapes
- Value-object invariants (non-negative hours and rates, total = normal + ot)
- Line item accumulation and output shape
- Rule fallbacks on Contract
"""

from dataclasses import FrozenInstanceError
from datetime import date
from decimal import Decimal

import pytest

from payroll_kernel.exceptions import InvalidDateError
from payroll_modules.payroll.models import (
    Assignment,
    Contract,
    ContractSaleRate,
    DayCategory,
    EmployeePay,
    OvertimeRules,
    PayrollLineItem,
    Position,
    Project,
    TimesheetBatch,
    TimesheetBatchStatus,
    TimesheetLine,
    WorkMode,
    WorkType,
    to_decimal,
)


class TestTimesheetLine:

    def test_from_dict(self):
        line = TimesheetLine.from_dict({
            "id": "L1",
            "employeeId": "E1",
            "workDate": "2024-01-08",
            "workType": "NORMAL",
            "normalHours": 8,
            "otHours": 1.5,
            "dayCategory": "WEEKLY_HOLIDAY",
            "assignmentId": "ASG-1",
        })
        assert line.line_id == "L1"
        assert line.work_date == date(2024, 1, 8)
        assert line.work_type == WorkType.NORMAL
        assert line.normal_hours == Decimal("8")
        assert line.ot_hours == Decimal("1.5")
        assert line.day_category == DayCategory.WEEKLY_HOLIDAY
        assert line.assignment_id == "ASG-1"

    def test_optional_fields_default(self):
        line = TimesheetLine.from_dict({
            "employeeId": "E1", "workDate": "2024-01-08", "workType": "LEAVE",
        })
        assert line.normal_hours == Decimal("0")
        assert line.ot_hours == Decimal("0")
        assert line.day_category is None

    @pytest.mark.parametrize("work_date", ["08/01/2024", "20240108", "2024-W02-1"])
    def test_bad_work_date(self, work_date):
        with pytest.raises(InvalidDateError):
            TimesheetLine.from_dict({
                "employeeId": "E1", "workDate": work_date, "workType": "NORMAL",
            })

    @pytest.mark.parametrize("ot_hours", ["NaN", "Infinity", "-Infinity", "sNaN"])
    def test_non_finite_hours_rejected(self, ot_hours):
        with pytest.raises(ValueError, match="otHours"):
            TimesheetLine.from_dict({
                "employeeId": "E1", "workDate": "2024-01-08",
                "workType": "NORMAL", "otHours": ot_hours,
            })

    def test_non_finite_decimal_constructed_directly(self):
        with pytest.raises(ValueError, match="normal_hours"):
            TimesheetLine(
                employee_id="E1",
                work_date=date(2024, 1, 8),
                work_type=WorkType.NORMAL,
                normal_hours=Decimal("NaN"),
            )

    def test_negative_hours_rejected(self):
        with pytest.raises(ValueError, match="ot_hours"):
            TimesheetLine(
                employee_id="E1",
                work_date=date(2024, 1, 8),
                work_type=WorkType.NORMAL,
                ot_hours=Decimal("-1"),
            )

    def test_frozen(self):
        line = TimesheetLine("E1", date(2024, 1, 8), WorkType.NORMAL)
        with pytest.raises(FrozenInstanceError):
            line.ot_hours = Decimal("2")


class TestMasterDataShapes:

    def test_position_from_dict(self):
        position = Position.from_dict(
            {"id": "P1", "onshoreCostPerDay": 1000, "offshoreCostPerDay": "1400.50"},
        )
        assert position.cost_per_day(WorkMode.ONSHORE) == Decimal("1000")
        assert position.cost_per_day(WorkMode.OFFSHORE) == Decimal("1400.50")

    def test_negative_cost_rejected(self):
        with pytest.raises(ValueError):
            Position("P1", Decimal("-1"), Decimal("0"))

    def test_project_from_dict(self):
        assert Project.from_dict({"workMode": "Offshore"}).work_mode == WorkMode.OFFSHORE

    def test_contract_from_dict(self):
        contract = Contract.from_dict({
            "id": "C1",
            "saleRates": [{"positionId": "P1", "dailyRateExVat": 1500}],
            "otRules": {
                "workdayMultiplier": 1.5,
                "weeklyHolidayMultiplier": 2,
                "contractHolidayMultiplier": 3,
            },
            "holidayCalendar": {"dates": ["2024-01-01", "2024-04-13"]},
        })
        assert contract.sale_rate_for("P1").rate_for(WorkMode.ONSHORE) == Decimal("1500")
        assert contract.sale_rate_for("P2") is None
        assert contract.ot_rules == OvertimeRules()
        assert contract.holiday_dates == frozenset({date(2024, 1, 1), date(2024, 4, 13)})
        assert contract.payroll_ot_rules is None

    def test_contract_without_optional_sections(self):
        contract = Contract.from_dict({"saleRates": []})
        assert contract.ot_rules is None
        assert contract.holiday_dates == frozenset()
        assert contract.cost_ot_rules is None

    def test_cost_rules_fall_back_to_sale_rules(self):
        sale = OvertimeRules(workday_multiplier=Decimal("1.25"))
        assert Contract(ot_rules=sale).cost_ot_rules == sale
        cost = OvertimeRules(workday_multiplier=Decimal("2"))
        assert Contract(ot_rules=sale, payroll_ot_rules=cost).cost_ot_rules == cost

    def test_sale_rate_mode_fallback(self):
        rate = ContractSaleRate(
            position_id="P1",
            daily_rate_ex_vat=Decimal("1500"),
            onshore_sell_daily_rate_ex_vat=Decimal("1600"),
        )
        assert rate.rate_for(WorkMode.ONSHORE) == Decimal("1600")
        assert rate.rate_for(WorkMode.OFFSHORE) == Decimal("1500")

    def test_assignment_from_dict(self):
        assignment = Assignment.from_dict({
            "id": "ASG-1", "employeeId": "E1", "positionId": "P1",
            "costRateAtSnapshot": 1200,
        })
        assert assignment.cost_rate_at_snapshot == Decimal("1200")
        assert assignment.sell_rate_at_snapshot is None

    def test_batch_period_order(self):
        with pytest.raises(ValueError, match="precedes"):
            TimesheetBatch(
                id="B1", contract_id="C1", project_id="PR1",
                period_start=date(2024, 2, 1), period_end=date(2024, 1, 1),
                status=TimesheetBatchStatus.HR_APPROVED,
            )


class TestPayrollLineItem:

    def test_total_must_match_parts(self):
        with pytest.raises(ValueError, match="total_pay"):
            PayrollLineItem("E1", Decimal("100"), Decimal("50"), Decimal("160"))

    def test_addition(self):
        total = (
            PayrollLineItem.of("E1", Decimal("1000"), Decimal("375"))
            + PayrollLineItem.of("E1", Decimal("1000"), Decimal("0"))
        )
        assert total == PayrollLineItem.of("E1", Decimal("2000"), Decimal("375"))

    def test_addition_across_employees_rejected(self):
        with pytest.raises(ValueError, match="different employees"):
            PayrollLineItem.zero("E1") + PayrollLineItem.zero("E2")

    def test_to_dict(self):
        item = PayrollLineItem.of("E1", Decimal("1500"), Decimal("562.5"))
        assert item.to_dict() == {
            "employeeId": "E1",
            "normalPay": Decimal("1500"),
            "otPay": Decimal("562.5"),
            "totalPay": Decimal("2062.5"),
        }

    def test_employee_pay_addition(self):
        a = EmployeePay(
            cost=PayrollLineItem.of("E1", Decimal("1000"), Decimal("0")),
            sale=PayrollLineItem.of("E1", Decimal("1500"), Decimal("0")),
        )
        b = a + a
        assert b.employee_id == "E1"
        assert b.cost.total_pay == Decimal("2000")
        assert b.sale.total_pay == Decimal("3000")


class TestToDecimal:

    @pytest.mark.parametrize("value, expected", [
        (8, Decimal("8")),
        (1.5, Decimal("1.5")),
        ("0.07", Decimal("0.07")),
        (Decimal("3"), Decimal("3")),
    ])
    def test_coercion(self, value, expected):
        assert to_decimal(value) == expected

    @pytest.mark.parametrize("value", [None, True, "abc"])
    def test_rejects_non_numbers(self, value):
        with pytest.raises(ValueError):
            to_decimal(value, "rate")

    @pytest.mark.parametrize("value", [
        "NaN", "Infinity", float("inf"), Decimal("NaN"), Decimal("-Infinity"),
    ])
    def test_rejects_non_finite(self, value):
        with pytest.raises(ValueError, match="finite"):
            to_decimal(value, "rate")

    def test_infinite_sale_rate_rejected(self):
        with pytest.raises(ValueError, match="dailyRateExVat"):
            ContractSaleRate.from_dict({"positionId": "P1", "dailyRateExVat": "Infinity"})
