"""
Tests for the Day Classifier.

Covers:
- Priority: contract holiday > weekly holiday > workday
- Configurable weekend days
- Date-key parsing of dates, aware datetimes and ISO strings
- InvalidDateError for unparseable input
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from payroll_engines.day_classifier import classify_day, is_weekend, to_date_keys
from payroll_kernel.exceptions import InvalidDateError
from payroll_modules.payroll.config import WeekendConfig
from payroll_modules.payroll.models import DayCategory, parse_date_key

# 2024-01-06 is a Saturday.
SATURDAY = date(2024, 1, 6)
SUNDAY = date(2024, 1, 7)
MONDAY = date(2024, 1, 8)
WEDNESDAY = date(2024, 1, 10)

STANDARD_WEEKEND = WeekendConfig()


class TestPriority:
    """Contract holidays beat weekends; everything else is a workday."""

    def test_plain_weekday_is_workday(self):
        assert classify_day(MONDAY, STANDARD_WEEKEND) == DayCategory.WORKDAY

    def test_saturday_is_weekly_holiday(self):
        assert classify_day(SATURDAY, STANDARD_WEEKEND) == DayCategory.WEEKLY_HOLIDAY

    def test_sunday_is_weekly_holiday(self):
        assert classify_day(SUNDAY, STANDARD_WEEKEND) == DayCategory.WEEKLY_HOLIDAY

    def test_listed_weekday_is_contract_holiday(self):
        holidays = frozenset({WEDNESDAY})
        assert classify_day(WEDNESDAY, STANDARD_WEEKEND, holidays) == DayCategory.CONTRACT_HOLIDAY

    def test_listed_saturday_is_contract_holiday(self):
        holidays = frozenset({SATURDAY})
        assert classify_day(SATURDAY, STANDARD_WEEKEND, holidays) == DayCategory.CONTRACT_HOLIDAY

    def test_unlisted_day_unaffected_by_other_holidays(self):
        holidays = frozenset({WEDNESDAY})
        assert classify_day(MONDAY, STANDARD_WEEKEND, holidays) == DayCategory.WORKDAY


class TestWeekendConfig:
    """Weekend days are configurable."""

    def test_saturday_disabled(self):
        weekend = WeekendConfig(saturday=False, sunday=True)
        assert classify_day(SATURDAY, weekend) == DayCategory.WORKDAY
        assert classify_day(SUNDAY, weekend) == DayCategory.WEEKLY_HOLIDAY

    def test_no_weekend(self):
        weekend = WeekendConfig(saturday=False, sunday=False)
        assert classify_day(SUNDAY, weekend) == DayCategory.WORKDAY

    def test_is_weekend_helper(self):
        assert is_weekend(SATURDAY, STANDARD_WEEKEND)
        assert not is_weekend(MONDAY, STANDARD_WEEKEND)


class TestDateKeys:
    """Inputs are normalized to calendar dates before comparison."""

    def test_iso_string_work_date(self):
        assert classify_day("2024-01-06", STANDARD_WEEKEND) == DayCategory.WEEKLY_HOLIDAY

    def test_string_holidays_are_normalized(self):
        holidays = ["2024-01-10", "2024-12-25"]
        assert classify_day(WEDNESDAY, STANDARD_WEEKEND, holidays) == DayCategory.CONTRACT_HOLIDAY

    @pytest.mark.parametrize("container", [frozenset, set, tuple, list])
    def test_string_holidays_match_in_any_container(self, container):
        holidays = container(["2024-01-10"])
        assert classify_day(WEDNESDAY, STANDARD_WEEKEND, holidays) == DayCategory.CONTRACT_HOLIDAY

    def test_frozenset_of_datetimes_normalized(self):
        holidays = frozenset({datetime(2024, 1, 6, 9, 30)})
        assert classify_day(SATURDAY, STANDARD_WEEKEND, holidays) == DayCategory.CONTRACT_HOLIDAY

    def test_naive_datetime_truncated(self):
        assert classify_day(datetime(2024, 1, 8, 23, 59), STANDARD_WEEKEND) == DayCategory.WORKDAY

    def test_aware_datetime_converted_to_utc_first(self):
        # Saturday 23:30 at UTC-5 is Sunday 04:30 UTC.
        value = datetime(2024, 1, 6, 23, 30, tzinfo=timezone(timedelta(hours=-5)))
        assert parse_date_key(value) == SUNDAY

    def test_aware_datetime_matches_holiday_key(self):
        # Thursday 01:00 at UTC+7 is Wednesday 18:00 UTC.
        value = datetime(2024, 1, 11, 1, 0, tzinfo=timezone(timedelta(hours=7)))
        holidays = frozenset({WEDNESDAY})
        assert classify_day(value, STANDARD_WEEKEND, holidays) == DayCategory.CONTRACT_HOLIDAY

    def test_to_date_keys(self):
        keys = to_date_keys(["2024-01-10", date(2024, 1, 11)])
        assert keys == frozenset({date(2024, 1, 10), date(2024, 1, 11)})


class TestInvalidDates:
    """Unparseable dates raise InvalidDateError."""

    @pytest.mark.parametrize("value", [
        "2024-13-01", "not-a-date", "", "20240108", "2024-W02-1", 20240101, None,
    ])
    def test_invalid_work_date(self, value):
        with pytest.raises(InvalidDateError) as exc_info:
            classify_day(value, STANDARD_WEEKEND)
        assert exc_info.value.code == "INVALID_DATE"

    def test_invalid_holiday_entry(self):
        with pytest.raises(InvalidDateError):
            to_date_keys(["2024-01-10", "2024-02-30"])
