"""Tests for the business-day calculator."""

from datetime import date, datetime, timedelta

import pytest

from business_days import (
    InvalidRange,
    business_days_between,
    count_business_days,
    is_business_day,
    is_weekend,
    parse_calendar_date,
)


def naive_count(start: date, end: date, holidays=frozenset()) -> int:
    count, cur = 0, start
    while cur <= end:
        if cur.weekday() < 5 and cur not in holidays:
            count += 1
        cur += timedelta(days=1)
    return count


class TestScenarios:
    def test_full_work_week(self):
        assert count_business_days("2025-01-06", "2025-01-10") == 5

    def test_weekend_only(self):
        assert count_business_days("2025-01-04", "2025-01-05") == 0

    def test_single_day_holiday(self):
        assert count_business_days("2025-01-01", "2025-01-01", {"2025-01-01"}) == 0

    def test_inverted_range(self):
        assert count_business_days("2025-01-10", "2025-01-06") == 0

    def test_unparseable_start(self):
        assert count_business_days("not-a-date", "2025-01-10") == 0


class TestSingleDay:
    def test_weekday_counts_once(self):
        assert count_business_days("2025-01-08", "2025-01-08") == 1

    @pytest.mark.parametrize("day", ["2025-01-11", "2025-01-12"])
    def test_weekend_day_is_zero(self, day):
        assert count_business_days(day, day) == 0

    def test_weekday_holiday_is_zero(self):
        assert count_business_days("2025-12-05", "2025-12-05", [date(2025, 12, 5)]) == 0


class TestInvalidInput:
    @pytest.mark.parametrize(
        "bad",
        ["", "2025-02-30", "2025/01/06", "06-01-2025", "2025-1-6", "20250106", "2025-01-06T09:00", None, 20250106],
    )
    def test_bad_bound_is_zero(self, bad):
        assert count_business_days(bad, "2025-01-10") == 0
        assert count_business_days("2025-01-06", bad) == 0

    def test_strict_variant_reports_reason(self):
        with pytest.raises(InvalidRange) as exc:
            business_days_between("2025-01-10", "2025-01-06")
        assert exc.value.reason == "end is before start"
        assert exc.value.start == "2025-01-10"

        with pytest.raises(InvalidRange, match="start is not a valid date"):
            business_days_between("nope", "2025-01-06")

        with pytest.raises(InvalidRange, match="end is not a valid date"):
            business_days_between("2025-01-06", "2025-13-01")

    def test_invalid_range_is_a_value_error(self):
        assert issubclass(InvalidRange, ValueError)


class TestBoundsAndHolidays:
    def test_endpoints_inclusive(self):
        # Fri..Mon
        assert count_business_days("2025-01-10", "2025-01-13") == 2

    def test_accepts_dates_and_datetimes(self):
        assert count_business_days(date(2025, 1, 6), date(2025, 1, 10)) == 5
        assert count_business_days(datetime(2025, 1, 6, 23, 59), "2025-01-10") == 5

    def test_surrounding_whitespace_is_ignored(self):
        assert count_business_days(" 2025-01-06 ", "2025-01-10\n") == 5

    def test_weekday_holiday_removes_one_day(self):
        base = count_business_days("2025-12-01", "2025-12-12")
        assert count_business_days("2025-12-01", "2025-12-12", {"2025-12-10"}) == base - 1

    def test_weekend_holiday_changes_nothing(self):
        base = count_business_days("2025-12-01", "2025-12-12")
        assert count_business_days("2025-12-01", "2025-12-12", {"2025-12-06"}) == base

    def test_holiday_outside_range_changes_nothing(self):
        assert count_business_days("2025-01-06", "2025-01-10", {"2025-01-13", "2024-12-31"}) == 5

    def test_duplicate_and_invalid_holidays(self):
        holidays = ["2025-01-08", date(2025, 1, 8), "garbage"]
        assert count_business_days("2025-01-06", "2025-01-10", holidays) == 4

    def test_holiday_input_is_not_mutated(self):
        holidays = ["2025-01-08", "2025-01-09"]
        count_business_days("2025-01-06", "2025-01-10", holidays)
        assert holidays == ["2025-01-08", "2025-01-09"]

    def test_repeat_calls_agree(self):
        args = ("2025-03-01", "2025-04-30", frozenset({date(2025, 4, 14)}))
        assert count_business_days(*args) == count_business_days(*args)


class TestAgainstDayByDayScan:
    @pytest.mark.parametrize("offset", range(7))
    @pytest.mark.parametrize("length", [0, 1, 4, 6, 7, 8, 13, 14, 30, 366])
    def test_matches_scan(self, offset, length):
        start = date(2025, 1, 6) + timedelta(days=offset)
        end = start + timedelta(days=length)
        holidays = frozenset({date(2025, 1, 8), date(2025, 1, 11), date(2025, 4, 14), date(2025, 12, 31)})
        assert count_business_days(start, end) == naive_count(start, end)
        assert count_business_days(start, end, holidays) == naive_count(start, end, holidays)

    def test_no_holidays_formula(self):
        start, end = date(2024, 2, 1), date(2024, 3, 31)
        weekend_days = sum(1 for i in range((end - start).days + 1) if (start + timedelta(days=i)).weekday() >= 5)
        assert count_business_days(start, end) == (end - start).days + 1 - weekend_days


class TestHelpers:
    def test_parse_calendar_date(self):
        assert parse_calendar_date("2024-02-29") == date(2024, 2, 29)
        assert parse_calendar_date("2025-02-29") is None
        assert parse_calendar_date(object()) is None

    def test_is_weekend(self):
        assert is_weekend(date(2025, 1, 4))
        assert is_weekend(date(2025, 1, 5))
        assert not is_weekend(date(2025, 1, 6))

    def test_is_business_day(self):
        assert is_business_day(date(2025, 1, 6))
        assert not is_business_day(date(2025, 1, 6), {"2025-01-06"})
        assert not is_business_day(date(2025, 1, 5))
