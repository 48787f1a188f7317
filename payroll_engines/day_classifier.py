"""
Day Classifier (``payroll_engines.day_classifier``).

Responsibility
--------------
Map a calendar date to a ``DayCategory``:

    CONTRACT_HOLIDAY  (date is in the holiday list)
      > WEEKLY_HOLIDAY (weekday is a configured weekend day)
      > WORKDAY        (everything else)

The order is fixed: a Saturday that is also a listed holiday is always a
contract holiday.

Architecture position
---------------------
**Engines layer** -- pure functional core.  ZERO I/O, ZERO clock reads.

Failure modes
-------------
* Raises ``InvalidDateError`` for anything that is not a calendar date.
  Holiday lists are compared as date keys, never timestamps.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from typing import Any

from payroll_modules.payroll.config import WeekendConfig
from payroll_modules.payroll.models import DayCategory, parse_date_key

_SATURDAY = 5
_SUNDAY = 6


def to_date_keys(values: Iterable[Any]) -> frozenset[date]:
    """Normalize holiday entries (dates, datetimes, ISO strings) to date keys."""
    return frozenset(parse_date_key(v) for v in values)


def is_weekend(work_date: date, weekend: WeekendConfig) -> bool:
    weekday = work_date.weekday()
    return (weekday == _SATURDAY and weekend.saturday) or (
        weekday == _SUNDAY and weekend.sunday
    )


def classify_day(
    work_date: Any,
    weekend: WeekendConfig,
    holiday_dates: Iterable[Any] = (),
) -> DayCategory:
    """Classify ``work_date`` as contract holiday, weekly holiday or workday.

    Args:
        work_date: ``date``, ``datetime`` or ``YYYY-MM-DD`` string.
        weekend: Which weekdays count as weekly holidays.
        holiday_dates: Holiday entries of any accepted date form.  Every
            entry is normalized to a date key, whatever the container.

    Raises:
        InvalidDateError: If ``work_date`` or a holiday entry is unparseable.
    """
    day = parse_date_key(work_date)
    holidays = to_date_keys(holiday_dates)

    if day in holidays:
        return DayCategory.CONTRACT_HOLIDAY
    if is_weekend(day, weekend):
        return DayCategory.WEEKLY_HOLIDAY
    return DayCategory.WORKDAY
