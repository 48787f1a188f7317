"""
Timesheet Validator (``payroll_engines.timesheet_validation``).

Responsibility
--------------
Flag data-quality anomalies on timesheet lines before HR approval:

* ``LEAVE_HAS_HOURS``          -- LEAVE line with normal or OT hours
* ``STANDBY_HAS_OT``           -- STANDBY line with OT hours
* ``ONSHORE_OVER_8H``          -- NORMAL onshore line over the standard day
* ``OFFSHORE_OVER_12H``        -- NORMAL offshore line over the standard day
* ``OT_WITHOUT_NORMAL_HOURS``  -- NORMAL line with OT but no normal hours
* ``EMPLOYEE_NOT_FOUND``       -- employee missing from the supplied roster

The hour limit in the over-hours code follows the configured standard
hours, so a 10-hour onshore day yields ``ONSHORE_OVER_10H``.

Architecture position
---------------------
**Engines layer** -- pure functional core.  Returns results, never raises
for business-rule violations.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable
from dataclasses import dataclass, field
from decimal import Decimal

from payroll_modules.payroll.config import DEFAULT_OVERTIME_SETTINGS, OvertimeSettings
from payroll_modules.payroll.models import TimesheetLine, WorkMode, WorkType

LEAVE_HAS_HOURS = "LEAVE_HAS_HOURS"
STANDBY_HAS_OT = "STANDBY_HAS_OT"
OT_WITHOUT_NORMAL_HOURS = "OT_WITHOUT_NORMAL_HOURS"
EMPLOYEE_NOT_FOUND = "EMPLOYEE_NOT_FOUND"


@dataclass(frozen=True)
class LineValidationResult:
    """Anomaly codes for one line."""
    employee_id: str
    line_id: str | None
    anomalies: tuple[str, ...] = ()

    @property
    def has_anomalies(self) -> bool:
        return bool(self.anomalies)


@dataclass(frozen=True)
class TimesheetValidationReport:
    """Anomaly summary for a batch of lines."""
    results: tuple[LineValidationResult, ...]
    total: int
    with_anomalies: int
    by_type: dict[str, int] = field(default_factory=dict)

    @property
    def is_clean(self) -> bool:
        return self.with_anomalies == 0


def _hours_label(hours: Decimal) -> str:
    if hours == hours.to_integral_value():
        return str(int(hours))
    return format(hours.normalize(), "f")


def over_hours_code(work_mode: WorkMode, standard_hours: Decimal) -> str:
    return f"{work_mode.value.upper()}_OVER_{_hours_label(standard_hours)}H"


def detect_line_anomalies(
    line: TimesheetLine,
    work_mode: WorkMode,
    settings: OvertimeSettings | None = None,
    known_employee_ids: Collection[str] | None = None,
) -> tuple[str, ...]:
    """Return the anomaly codes for a single line (empty when clean).

    ``known_employee_ids`` is optional; when omitted the roster check is
    skipped.
    """
    settings = settings or DEFAULT_OVERTIME_SETTINGS
    anomalies: list[str] = []

    if line.work_type == WorkType.LEAVE:
        if line.normal_hours > 0 or line.ot_hours > 0:
            anomalies.append(LEAVE_HAS_HOURS)
    elif line.work_type == WorkType.STANDBY:
        if line.ot_hours > 0:
            anomalies.append(STANDBY_HAS_OT)
    else:
        standard = settings.for_mode(work_mode).standard_hours
        if line.normal_hours > standard:
            anomalies.append(over_hours_code(work_mode, standard))
        if line.ot_hours > 0 and line.normal_hours == 0:
            anomalies.append(OT_WITHOUT_NORMAL_HOURS)

    if known_employee_ids is not None and line.employee_id not in known_employee_ids:
        anomalies.append(EMPLOYEE_NOT_FOUND)

    return tuple(anomalies)


def summarize_anomalies(
    results: Iterable[LineValidationResult],
) -> TimesheetValidationReport:
    """Count lines with anomalies and group codes by their prefix.

    Parameterised codes such as ``CERT_EXPIRED:BOSIET`` are counted under
    the part before the colon.
    """
    results = tuple(results)
    by_type: dict[str, int] = {}
    with_anomalies = 0
    for result in results:
        if not result.anomalies:
            continue
        with_anomalies += 1
        for code in result.anomalies:
            key = code.split(":")[0]
            by_type[key] = by_type.get(key, 0) + 1

    return TimesheetValidationReport(
        results=results,
        total=len(results),
        with_anomalies=with_anomalies,
        by_type=by_type,
    )


def validate_timesheet(
    lines: Iterable[TimesheetLine],
    work_mode: WorkMode,
    settings: OvertimeSettings | None = None,
    known_employee_ids: Collection[str] | None = None,
) -> TimesheetValidationReport:
    """Validate every line of a batch and summarize the anomalies."""
    return summarize_anomalies(
        LineValidationResult(
            employee_id=line.employee_id,
            line_id=line.line_id,
            anomalies=detect_line_anomalies(
                line, work_mode, settings, known_employee_ids,
            ),
        )
        for line in lines
    )
