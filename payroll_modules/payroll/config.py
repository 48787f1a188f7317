"""
Payroll Configuration Schema.

Defines the structure and sensible defaults for payroll settings.
Actual values are loaded from YAML at runtime through
``payroll_config.get_active_config()``.

The day divisors (8 onshore, 14 offshore), standard hours (8 / 12) and
the STANDBY base-pay multiplier (0.5) are company conventions, not
universal constants; they live here so a deployment can change them.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Self

from payroll_kernel.exceptions import ConfigurationError
from payroll_kernel.logging_config import get_logger
from payroll_modules.payroll.models import (
    DEFAULT_OT_RULES,
    OvertimeRules,
    WorkMode,
    to_decimal,
)

logger = get_logger("modules.payroll.config")


@dataclass(frozen=True)
class WeekendConfig:
    """Which weekdays count as weekly holidays."""
    saturday: bool = True
    sunday: bool = True

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(
            saturday=bool(data.get("saturday", True)),
            sunday=bool(data.get("sunday", True)),
        )


@dataclass(frozen=True)
class WorkModeSettings:
    """Shift conventions for one work mode.

    ``standard_hours`` is the length of a normal day (anomaly threshold and
    proration base); ``ot_divisor`` turns a daily rate into the OT hourly
    base.  A zero divisor disables OT pay for the mode.
    """
    standard_hours: Decimal
    ot_divisor: Decimal

    def __post_init__(self):
        if self.standard_hours < 0:
            raise ConfigurationError("standard_hours cannot be negative")
        if self.ot_divisor < 0:
            raise ConfigurationError("ot_divisor cannot be negative")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(
            standard_hours=to_decimal(data["standard_hours"], "standard_hours"),
            ot_divisor=to_decimal(data["ot_divisor"], "ot_divisor"),
        )


@dataclass(frozen=True)
class OvertimeSettings:
    """Company-wide overtime conventions."""
    weekend: WeekendConfig = field(default_factory=WeekendConfig)
    onshore: WorkModeSettings = field(
        default_factory=lambda: WorkModeSettings(Decimal("8"), Decimal("8"))
    )
    offshore: WorkModeSettings = field(
        default_factory=lambda: WorkModeSettings(Decimal("12"), Decimal("14"))
    )
    standby_pay_multiplier: Decimal = Decimal("0.5")
    prorate_normal_hours: bool = False
    default_ot_rules: OvertimeRules = DEFAULT_OT_RULES

    def __post_init__(self):
        if self.standby_pay_multiplier < 0:
            raise ConfigurationError("standby_pay_multiplier cannot be negative")

    def for_mode(self, work_mode: WorkMode) -> WorkModeSettings:
        return self.onshore if work_mode == WorkMode.ONSHORE else self.offshore

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        defaults = cls()
        rules = data.get("default_ot_rules")
        return cls(
            weekend=WeekendConfig.from_dict(data.get("weekend", {})),
            onshore=(
                WorkModeSettings.from_dict(data["onshore"])
                if "onshore" in data else defaults.onshore
            ),
            offshore=(
                WorkModeSettings.from_dict(data["offshore"])
                if "offshore" in data else defaults.offshore
            ),
            standby_pay_multiplier=to_decimal(
                data.get("standby_pay_multiplier", defaults.standby_pay_multiplier),
                "standby_pay_multiplier",
            ),
            prorate_normal_hours=bool(data.get("prorate_normal_hours", False)),
            default_ot_rules=(
                OvertimeRules(
                    workday_multiplier=to_decimal(rules["workday"], "workday"),
                    weekly_holiday_multiplier=to_decimal(
                        rules["weekly_holiday"], "weekly_holiday"),
                    contract_holiday_multiplier=to_decimal(
                        rules["contract_holiday"], "contract_holiday"),
                )
                if rules else DEFAULT_OT_RULES
            ),
        )


DEFAULT_OVERTIME_SETTINGS = OvertimeSettings()


@dataclass
class PayrollConfig:
    """
    Configuration schema for the payroll module.

    Field defaults represent the company's standard practice.
    Override at instantiation or load from YAML:

        config = PayrollConfig(vat_rate=Decimal("0.07"))
        config = PayrollConfig.from_dict(yaml.safe_load(fh))
    """

    overtime: OvertimeSettings = field(default_factory=OvertimeSettings)

    # Invoicing
    vat_rate: Decimal = Decimal("0.07")
    wht_rate: Decimal = Decimal("0.03")
    invoice_due_days: int = 30

    # Payment reconciliation
    payment_tolerance: Decimal = Decimal("0.01")

    # Aggregation
    max_workers: int | None = None

    def __post_init__(self):
        for name in ("vat_rate", "wht_rate"):
            rate = getattr(self, name)
            if rate < 0 or rate > 1:
                raise ConfigurationError(f"{name} must be between 0 and 1, got {rate}")
        if self.invoice_due_days < 0:
            raise ConfigurationError("invoice_due_days cannot be negative")
        if self.payment_tolerance < 0:
            raise ConfigurationError("payment_tolerance cannot be negative")
        if self.max_workers is not None and self.max_workers < 1:
            raise ConfigurationError("max_workers must be at least 1")

        logger.info(
            "payroll_config_initialized",
            extra={
                "onshore_ot_divisor": str(self.overtime.onshore.ot_divisor),
                "offshore_ot_divisor": str(self.overtime.offshore.ot_divisor),
                "standby_pay_multiplier": str(self.overtime.standby_pay_multiplier),
                "prorate_normal_hours": self.overtime.prorate_normal_hours,
                "vat_rate": str(self.vat_rate),
                "wht_rate": str(self.wht_rate),
            },
        )

    @classmethod
    def with_defaults(cls) -> Self:
        """Create config with the company-standard defaults."""
        logger.info("payroll_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create config from a dictionary (e.g. parsed YAML)."""
        logger.info(
            "payroll_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        kwargs: dict[str, Any] = {}
        if "overtime" in data:
            kwargs["overtime"] = OvertimeSettings.from_dict(data["overtime"] or {})
        for key in ("vat_rate", "wht_rate", "payment_tolerance"):
            if key in data:
                kwargs[key] = to_decimal(data[key], key)
        if "invoice_due_days" in data:
            kwargs["invoice_due_days"] = int(data["invoice_due_days"])
        if data.get("max_workers") is not None:
            kwargs["max_workers"] = int(data["max_workers"])
        unknown = set(data) - {
            "overtime", "vat_rate", "wht_rate", "payment_tolerance",
            "invoice_due_days", "max_workers",
        }
        if unknown:
            raise ConfigurationError(f"Unknown payroll config keys: {sorted(unknown)}")
        return cls(**kwargs)
