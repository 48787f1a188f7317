"""
Payroll Module (``payroll_modules.payroll``).

Responsibility
--------------
Glue around the pure payroll engines: value snapshots, configuration,
the master-data join, the payroll-run workflow, the run service and its
SQLAlchemy persistence.

Architecture position
---------------------
**Modules layer** -- the package root exports only models and config so
the engines can import value types without pulling in the service.
Import ``payroll_modules.payroll.service`` and ``.repository`` explicitly.

Failure modes
-------------
* Value objects raise ``ValueError`` on invalid construction.
* The run service raises ``PayrollRunError`` subclasses from
  ``payroll_kernel.exceptions``.
"""

from payroll_modules.payroll.config import (
    DEFAULT_OVERTIME_SETTINGS,
    OvertimeSettings,
    PayrollConfig,
    WeekendConfig,
    WorkModeSettings,
)
from payroll_modules.payroll.models import (
    DEFAULT_OT_RULES,
    Assignment,
    Contract,
    ContractSaleRate,
    DayCategory,
    DayPayRules,
    EmployeePay,
    HolidayCalendar,
    OvertimeRules,
    PayrollLineItem,
    PayrollRun,
    PayrollRunStatus,
    Position,
    Project,
    RunSummary,
    TimesheetBatch,
    TimesheetBatchStatus,
    TimesheetLine,
    WorkMode,
    WorkType,
    parse_date_key,
)

__all__ = [
    "DEFAULT_OT_RULES",
    "DEFAULT_OVERTIME_SETTINGS",
    "Assignment",
    "Contract",
    "ContractSaleRate",
    "DayCategory",
    "DayPayRules",
    "EmployeePay",
    "HolidayCalendar",
    "OvertimeRules",
    "OvertimeSettings",
    "PayrollConfig",
    "PayrollLineItem",
    "PayrollRun",
    "PayrollRunStatus",
    "Position",
    "Project",
    "RunSummary",
    "TimesheetBatch",
    "TimesheetBatchStatus",
    "TimesheetLine",
    "WeekendConfig",
    "WorkMode",
    "WorkModeSettings",
    "parse_date_key",
]
