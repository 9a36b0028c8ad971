"""Unit tests for recurring due-date arithmetic."""

from datetime import date, datetime

import pytest

from storydeps.errors import InvalidRecurrenceError
from storydeps.models import RecurrencePattern
from storydeps.recurrence import next_due_date


class TestNextDueDate:
    """Test cases for next_due_date."""

    def test_daily(self):
        pattern = RecurrencePattern("daily", interval=3)

        assert next_due_date(date(2024, 1, 30), pattern) == date(2024, 2, 2)

    def test_custom_uses_days(self):
        pattern = RecurrencePattern("custom", interval=10)

        assert next_due_date(date(2024, 1, 1), pattern) == date(2024, 1, 11)

    def test_weekly_without_days(self):
        pattern = RecurrencePattern("weekly", interval=2)

        assert next_due_date(date(2024, 3, 1), pattern) == date(2024, 3, 15)

    def test_weekly_next_listed_day(self):
        """Test moving to the next listed weekday in the same week."""
        # 2024-03-04 is a Monday (1); Wednesday is 3 and Friday is 5
        pattern = RecurrencePattern("weekly", days_of_week=(5, 3))

        assert next_due_date(date(2024, 3, 4), pattern) == date(2024, 3, 6)

    def test_weekly_wraps_to_next_week(self):
        """Test wrapping past Saturday to the first listed day."""
        # 2024-03-08 is a Friday (5); Monday is 1
        pattern = RecurrencePattern("weekly", days_of_week=(1, 5))

        assert next_due_date(date(2024, 3, 8), pattern) == date(2024, 3, 11)

    def test_weekly_sunday(self):
        # 2024-03-09 is a Saturday (6); Sunday is 0
        pattern = RecurrencePattern("weekly", days_of_week=(0,))

        assert next_due_date(date(2024, 3, 9), pattern) == date(2024, 3, 10)

    def test_monthly_keeps_day(self):
        pattern = RecurrencePattern("monthly")

        assert next_due_date(date(2024, 1, 15), pattern) == date(2024, 2, 15)

    def test_monthly_clamps_to_month_end(self):
        pattern = RecurrencePattern("monthly")

        assert next_due_date(date(2024, 1, 31), pattern) == date(2024, 2, 29)

    def test_monthly_day_of_month(self):
        pattern = RecurrencePattern("monthly", interval=2, day_of_month=31)

        assert next_due_date(date(2024, 2, 10), pattern) == date(2024, 4, 30)

    def test_monthly_crosses_year(self):
        pattern = RecurrencePattern("monthly", interval=3)

        assert next_due_date(date(2024, 11, 5), pattern) == date(2025, 2, 5)

    def test_yearly_leap_day(self):
        pattern = RecurrencePattern("yearly")

        assert next_due_date(date(2024, 2, 29), pattern) == date(2025, 2, 28)

    def test_end_date_caps_result(self):
        pattern = RecurrencePattern("daily", interval=10, end_date=date(2024, 1, 5))

        assert next_due_date(date(2024, 1, 1), pattern) == date(2024, 1, 5)

    def test_datetime_is_reduced_to_date(self):
        pattern = RecurrencePattern("daily")

        assert next_due_date(datetime(2024, 1, 1, 18, 30), pattern) == date(2024, 1, 2)

    @pytest.mark.parametrize("pattern", [
        RecurrencePattern("hourly"),
        RecurrencePattern("daily", interval=0),
        RecurrencePattern("weekly", days_of_week=(7,)),
        RecurrencePattern("monthly", day_of_month=32),
    ])
    def test_invalid_patterns(self, pattern):
        with pytest.raises(InvalidRecurrenceError):
            next_due_date(date(2024, 1, 1), pattern)


class TestRecurrencePatternFromDict:
    """Test cases for RecurrencePattern.from_dict."""

    def test_camel_case_keys(self):
        pattern = RecurrencePattern.from_dict({
            "frequency": "weekly",
            "interval": "2",
            "daysOfWeek": [1, 3],
            "endDate": "2024-06-30T00:00:00.000Z",
        })

        assert pattern.interval == 2
        assert pattern.days_of_week == (1, 3)
        assert pattern.end_date == date(2024, 6, 30)
