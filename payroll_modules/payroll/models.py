"""
Payroll Domain Models (``payroll_modules.payroll.models``).

Responsibility
--------------
Frozen dataclass value objects representing the nouns of manpower
payroll: timesheet lines, positions, contracts, projects, assignments,
the cost/sale payroll line items produced for them, and the payroll run
that stores those items for a timesheet batch.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Read-only
snapshots consumed by ``payroll_engines``; outputs handed to the run
service and the persistence adapter.

Invariants enforced
-------------------
* All models are ``frozen=True`` (immutable after construction).
* All monetary and hour fields use ``Decimal`` -- NEVER ``float``.
  ``from_dict`` coerces external numbers through ``str`` first.
* Hours, rates and multipliers are non-negative.
* ``PayrollLineItem.total_pay == normal_pay + ot_pay``.

Failure modes
-------------
* Negative or non-finite (NaN, Infinity) hours/rates/multipliers raise
  ``ValueError``.
* A ``workDate`` that is not a strict ``YYYY-MM-DD`` calendar date raises
  ``InvalidDateError``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Iterable, Mapping

from payroll_kernel.exceptions import InvalidDateError

_ZERO = Decimal("0")
_DATE_KEY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def to_decimal(value: Any, field_name: str = "value") -> Decimal:
    """Coerce an external number (int, str, float, Decimal) to a finite Decimal."""
    if isinstance(value, bool) or value is None:
        raise ValueError(f"{field_name} must be numeric, got {value!r}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except InvalidOperation as exc:
            raise ValueError(f"{field_name} must be numeric, got {value!r}") from exc
    if not result.is_finite():
        raise ValueError(f"{field_name} must be a finite number, got {value!r}")
    return result


def _optional_decimal(value: Any, field_name: str) -> Decimal | None:
    return None if value is None else to_decimal(value, field_name)


def parse_date_key(value: Any) -> date:
    """Turn a date, datetime or ``YYYY-MM-DD`` string into a date key.

    Aware datetimes are normalized to UTC before truncation so the same
    instant always maps to the same calendar day.

    Raises:
        InvalidDateError: for anything that is not a valid calendar date.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        # fromisoformat also takes basic and week forms such as 20240108.
        if not _DATE_KEY.match(text):
            raise InvalidDateError(value, "expected YYYY-MM-DD")
        try:
            return date.fromisoformat(text)
        except ValueError as exc:
            raise InvalidDateError(value, str(exc)) from exc
    raise InvalidDateError(value, "expected date, datetime or YYYY-MM-DD string")


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class WorkType(str, Enum):
    """What the worker did on the day."""
    NORMAL = "NORMAL"
    STANDBY = "STANDBY"
    LEAVE = "LEAVE"


class DayCategory(str, Enum):
    """Classification of a calendar date, highest priority first."""
    CONTRACT_HOLIDAY = "CONTRACT_HOLIDAY"
    WEEKLY_HOLIDAY = "WEEKLY_HOLIDAY"
    WORKDAY = "WORKDAY"


class WorkMode(str, Enum):
    """Project work mode; selects rate column and OT divisor."""
    ONSHORE = "Onshore"
    OFFSHORE = "Offshore"


class PayrollRunStatus(str, Enum):
    """Payroll run lifecycle states (advanced by external workflow)."""
    PENDING = "PENDING"
    PROCESSED = "PROCESSED"
    PAID = "PAID"


class TimesheetBatchStatus(str, Enum):
    """Timesheet batch lifecycle states."""
    CLIENT_APPROVED_RECEIVED = "CLIENT_APPROVED_RECEIVED"
    VALIDATED = "VALIDATED"
    HR_APPROVED = "HR_APPROVED"
    REVOKED = "REVOKED"
    FINANCE_PAID = "FINANCE_PAID"


# ---------------------------------------------------------------------------
# Rule tables
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OvertimeRules:
    """OT multipliers keyed by day category."""
    workday_multiplier: Decimal = Decimal("1.5")
    weekly_holiday_multiplier: Decimal = Decimal("2.0")
    contract_holiday_multiplier: Decimal = Decimal("3.0")

    def __post_init__(self) -> None:
        for attr in (
            "workday_multiplier",
            "weekly_holiday_multiplier",
            "contract_holiday_multiplier",
        ):
            if getattr(self, attr) < 0:
                raise ValueError(f"{attr} must be non-negative")

    def for_category(self, day_category: DayCategory) -> Decimal:
        if day_category == DayCategory.CONTRACT_HOLIDAY:
            return self.contract_holiday_multiplier
        if day_category == DayCategory.WEEKLY_HOLIDAY:
            return self.weekly_holiday_multiplier
        return self.workday_multiplier

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> OvertimeRules:
        return cls(
            workday_multiplier=to_decimal(
                data["workdayMultiplier"], "workdayMultiplier"),
            weekly_holiday_multiplier=to_decimal(
                data["weeklyHolidayMultiplier"], "weeklyHolidayMultiplier"),
            contract_holiday_multiplier=to_decimal(
                data["contractHolidayMultiplier"], "contractHolidayMultiplier"),
        )


DEFAULT_OT_RULES = OvertimeRules()


@dataclass(frozen=True)
class DayPayRules:
    """Base-pay multipliers applied on non-working days."""
    weekly_holiday_day_multiplier: Decimal = Decimal("1")
    contract_holiday_day_multiplier: Decimal = Decimal("1")

    def __post_init__(self) -> None:
        if self.weekly_holiday_day_multiplier < 0:
            raise ValueError("weekly_holiday_day_multiplier must be non-negative")
        if self.contract_holiday_day_multiplier < 0:
            raise ValueError("contract_holiday_day_multiplier must be non-negative")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> DayPayRules:
        return cls(
            weekly_holiday_day_multiplier=to_decimal(
                data.get("weeklyHolidayDayMultiplier", 1), "weeklyHolidayDayMultiplier"),
            contract_holiday_day_multiplier=to_decimal(
                data.get("contractHolidayDayMultiplier", 1), "contractHolidayDayMultiplier"),
        )


# ---------------------------------------------------------------------------
# Master-data snapshots
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TimesheetLine:
    """One worker, one calendar date."""
    employee_id: str
    work_date: date
    work_type: WorkType
    normal_hours: Decimal = _ZERO
    ot_hours: Decimal = _ZERO
    day_category: DayCategory | None = None
    line_id: str | None = None
    assignment_id: str | None = None
    position_id: str | None = None

    def __post_init__(self) -> None:
        for attr in ("normal_hours", "ot_hours"):
            if not getattr(self, attr).is_finite():
                raise ValueError(f"TimesheetLine {attr} must be finite")
        if self.normal_hours < 0:
            raise ValueError(
                f"TimesheetLine normal_hours cannot be negative: {self.normal_hours}"
            )
        if self.ot_hours < 0:
            raise ValueError(
                f"TimesheetLine ot_hours cannot be negative: {self.ot_hours}"
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TimesheetLine:
        """Build from the external camelCase snapshot shape."""
        day_category = data.get("dayCategory")
        return cls(
            employee_id=str(data["employeeId"]),
            work_date=parse_date_key(data["workDate"]),
            work_type=WorkType(data["workType"]),
            normal_hours=to_decimal(data.get("normalHours", 0), "normalHours"),
            ot_hours=to_decimal(data.get("otHours", 0), "otHours"),
            day_category=DayCategory(day_category) if day_category else None,
            line_id=data.get("id"),
            assignment_id=data.get("assignmentId"),
            position_id=data.get("positionId"),
        )


@dataclass(frozen=True)
class Position:
    """Cost-side master data for a manpower position."""
    id: str
    onshore_cost_per_day: Decimal
    offshore_cost_per_day: Decimal

    def __post_init__(self) -> None:
        if self.onshore_cost_per_day < 0:
            raise ValueError("onshore_cost_per_day must be non-negative")
        if self.offshore_cost_per_day < 0:
            raise ValueError("offshore_cost_per_day must be non-negative")

    def cost_per_day(self, work_mode: WorkMode) -> Decimal:
        if work_mode == WorkMode.ONSHORE:
            return self.onshore_cost_per_day
        return self.offshore_cost_per_day

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Position:
        return cls(
            id=str(data["id"]),
            onshore_cost_per_day=to_decimal(
                data.get("onshoreCostPerDay", 0), "onshoreCostPerDay"),
            offshore_cost_per_day=to_decimal(
                data.get("offshoreCostPerDay", 0), "offshoreCostPerDay"),
        )


@dataclass(frozen=True)
class ContractSaleRate:
    """Sale (billing) rate for one position under a contract.

    ``daily_rate_ex_vat`` is the single legacy rate; the work-mode specific
    rates take precedence when present.
    """
    position_id: str
    daily_rate_ex_vat: Decimal | None = None
    onshore_sell_daily_rate_ex_vat: Decimal | None = None
    offshore_sell_daily_rate_ex_vat: Decimal | None = None

    def __post_init__(self) -> None:
        for attr in (
            "daily_rate_ex_vat",
            "onshore_sell_daily_rate_ex_vat",
            "offshore_sell_daily_rate_ex_vat",
        ):
            val = getattr(self, attr)
            if val is not None and val < 0:
                raise ValueError(f"{attr} must be non-negative")

    def rate_for(self, work_mode: WorkMode) -> Decimal | None:
        specific = (
            self.onshore_sell_daily_rate_ex_vat
            if work_mode == WorkMode.ONSHORE
            else self.offshore_sell_daily_rate_ex_vat
        )
        return specific if specific is not None else self.daily_rate_ex_vat

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ContractSaleRate:
        return cls(
            position_id=str(data["positionId"]),
            daily_rate_ex_vat=_optional_decimal(
                data.get("dailyRateExVat"), "dailyRateExVat"),
            onshore_sell_daily_rate_ex_vat=_optional_decimal(
                data.get("onshoreSellDailyRateExVat"), "onshoreSellDailyRateExVat"),
            offshore_sell_daily_rate_ex_vat=_optional_decimal(
                data.get("offshoreSellDailyRateExVat"), "offshoreSellDailyRateExVat"),
        )


@dataclass(frozen=True)
class HolidayCalendar:
    """A set of holiday date keys."""
    dates: frozenset[date] = field(default_factory=frozenset)

    @classmethod
    def of(cls, dates: Iterable[Any]) -> HolidayCalendar:
        return cls(dates=frozenset(parse_date_key(d) for d in dates))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> HolidayCalendar:
        return cls.of(data.get("dates") or ())

    def __contains__(self, item: object) -> bool:
        return item in self.dates


@dataclass(frozen=True)
class Contract:
    """Sale-side master data plus OT policy.

    ``ot_rules`` govern billing, and payroll too unless
    ``payroll_ot_rules`` overrides them.  Absent rules mean defaults.
    """
    id: str | None = None
    sale_rates: tuple[ContractSaleRate, ...] = ()
    ot_rules: OvertimeRules | None = None
    payroll_ot_rules: OvertimeRules | None = None
    holiday_calendar: HolidayCalendar | None = None
    payroll_day_rules: DayPayRules | None = None
    bill_day_rules: DayPayRules | None = None

    def sale_rate_for(self, position_id: str) -> ContractSaleRate | None:
        for rate in self.sale_rates:
            if rate.position_id == position_id:
                return rate
        return None

    @property
    def holiday_dates(self) -> frozenset[date]:
        if self.holiday_calendar is None:
            return frozenset()
        return self.holiday_calendar.dates

    @property
    def cost_ot_rules(self) -> OvertimeRules | None:
        return self.payroll_ot_rules or self.ot_rules

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Contract:
        def _rules(key: str) -> OvertimeRules | None:
            raw = data.get(key)
            return OvertimeRules.from_dict(raw) if raw else None

        def _day_rules(key: str) -> DayPayRules | None:
            raw = data.get(key)
            return DayPayRules.from_dict(raw) if raw else None

        calendar = data.get("holidayCalendar")
        return cls(
            id=data.get("id"),
            sale_rates=tuple(
                ContractSaleRate.from_dict(r) for r in data.get("saleRates") or ()
            ),
            ot_rules=_rules("otRules"),
            payroll_ot_rules=_rules("payrollOtRules"),
            holiday_calendar=HolidayCalendar.from_dict(calendar) if calendar else None,
            payroll_day_rules=_day_rules("payrollDayRules"),
            bill_day_rules=_day_rules("billDayRules"),
        )


@dataclass(frozen=True)
class Project:
    """Project context; only the work mode matters to payroll."""
    work_mode: WorkMode
    id: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Project:
        return cls(work_mode=WorkMode(data["workMode"]), id=data.get("id"))


@dataclass(frozen=True)
class Assignment:
    """An employee placed on a position, optionally with snapshot rates.

    A non-zero snapshot rate overrides the master-data rate for its side.
    """
    id: str
    employee_id: str
    position_id: str
    project_id: str | None = None
    cost_rate_at_snapshot: Decimal | None = None
    sell_rate_at_snapshot: Decimal | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Assignment:
        return cls(
            id=str(data["id"]),
            employee_id=str(data["employeeId"]),
            position_id=str(data["positionId"]),
            project_id=data.get("projectId"),
            cost_rate_at_snapshot=_optional_decimal(
                data.get("costRateAtSnapshot"), "costRateAtSnapshot"),
            sell_rate_at_snapshot=_optional_decimal(
                data.get("sellRateAtSnapshot"), "sellRateAtSnapshot"),
        )


@dataclass(frozen=True)
class TimesheetBatch:
    """A client-approved batch of timesheet lines for one contract/project."""
    id: str
    contract_id: str
    project_id: str
    period_start: date
    period_end: date
    status: TimesheetBatchStatus
    client_id: str | None = None

    def __post_init__(self) -> None:
        if self.period_end < self.period_start:
            raise ValueError(
                f"period_end ({self.period_end}) precedes period_start ({self.period_start})"
            )


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PayrollLineItem:
    """Pay amounts for one employee on one side (cost or sale)."""
    employee_id: str
    normal_pay: Decimal = _ZERO
    ot_pay: Decimal = _ZERO
    total_pay: Decimal = _ZERO

    def __post_init__(self) -> None:
        if self.total_pay != self.normal_pay + self.ot_pay:
            raise ValueError(
                f"total_pay {self.total_pay} != normal_pay {self.normal_pay} "
                f"+ ot_pay {self.ot_pay}"
            )

    @classmethod
    def of(cls, employee_id: str, normal_pay: Decimal, ot_pay: Decimal) -> PayrollLineItem:
        return cls(
            employee_id=employee_id,
            normal_pay=normal_pay,
            ot_pay=ot_pay,
            total_pay=normal_pay + ot_pay,
        )

    @classmethod
    def zero(cls, employee_id: str) -> PayrollLineItem:
        return cls(employee_id=employee_id)

    def __add__(self, other: PayrollLineItem) -> PayrollLineItem:
        if not isinstance(other, PayrollLineItem):
            return NotImplemented
        if other.employee_id != self.employee_id:
            raise ValueError(
                f"Cannot add line items of different employees: "
                f"{self.employee_id} and {other.employee_id}"
            )
        return PayrollLineItem.of(
            self.employee_id,
            self.normal_pay + other.normal_pay,
            self.ot_pay + other.ot_pay,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "employeeId": self.employee_id,
            "normalPay": self.normal_pay,
            "otPay": self.ot_pay,
            "totalPay": self.total_pay,
        }


@dataclass(frozen=True)
class EmployeePay:
    """Cost and sale line items for one employee."""
    cost: PayrollLineItem
    sale: PayrollLineItem

    @property
    def employee_id(self) -> str:
        return self.cost.employee_id

    def __add__(self, other: EmployeePay) -> EmployeePay:
        if not isinstance(other, EmployeePay):
            return NotImplemented
        return EmployeePay(cost=self.cost + other.cost, sale=self.sale + other.sale)


@dataclass(frozen=True)
class RunSummary:
    """Run-level totals."""
    total_cost: Decimal = _ZERO
    total_sale: Decimal = _ZERO
    employee_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalCost": self.total_cost,
            "totalSale": self.total_sale,
            "employeeCount": self.employee_count,
        }


@dataclass(frozen=True)
class PayrollRun:
    """Aggregated payroll for one timesheet batch.

    ``id`` is the batch id: one run per batch.
    """
    id: str
    cycle_start: date
    cycle_end: date
    status: PayrollRunStatus
    line_items: tuple[PayrollLineItem, ...]
    sale_line_items: tuple[PayrollLineItem, ...]
    summary: RunSummary
    created_at: datetime
    processed_at: datetime | None = None
    paid_at: datetime | None = None
