"""
Tests for date arithmetic, parsing and preset ranges.
"""

from datetime import date, datetime

import pandas as pd
import pytest

from settlelab.core.dates import (
    DateRange,
    add_business_days,
    add_calendar_days,
    add_calendar_months,
    parse_date,
    preset_range,
)
from settlelab.core.errors import ConfigError


class TestBusinessDays:
    def test_friday_plus_one_is_monday(self):
        assert add_business_days(date(2026, 1, 2), 1) == date(2026, 1, 5)

    def test_saturday_plus_one_is_monday(self):
        assert add_business_days(date(2026, 1, 3), 1) == date(2026, 1, 5)

    def test_sunday_plus_one_is_monday(self):
        assert add_business_days(date(2026, 1, 4), 1) == date(2026, 1, 5)

    def test_midweek(self):
        # Thursday + 1 = Friday, Thursday + 2 = Monday
        assert add_business_days(date(2026, 1, 1), 1) == date(2026, 1, 2)
        assert add_business_days(date(2026, 1, 1), 2) == date(2026, 1, 5)

    def test_five_business_days_is_one_week(self):
        assert add_business_days(date(2026, 1, 5), 5) == date(2026, 1, 12)

    def test_zero_or_negative_returns_same_day(self):
        assert add_business_days(date(2026, 1, 3), 0) == date(2026, 1, 3)
        assert add_business_days(date(2026, 1, 3), -2) == date(2026, 1, 3)


class TestCalendarArithmetic:
    def test_add_calendar_days(self):
        assert add_calendar_days(date(2026, 1, 1), 30) == date(2026, 1, 31)
        assert add_calendar_days(date(2026, 1, 1), 60) == date(2026, 3, 2)

    def test_add_calendar_months(self):
        assert add_calendar_months(date(2026, 1, 15), 1) == date(2026, 2, 15)
        assert add_calendar_months(date(2026, 11, 15), 3) == date(2027, 2, 15)

    def test_add_calendar_months_clamps_day(self):
        assert add_calendar_months(date(2026, 1, 31), 1) == date(2026, 2, 28)
        assert add_calendar_months(date(2028, 1, 31), 1) == date(2028, 2, 29)
        assert add_calendar_months(date(2026, 3, 31), 1) == date(2026, 4, 30)

    def test_add_zero_months(self):
        assert add_calendar_months(date(2026, 1, 31), 0) == date(2026, 1, 31)


class TestParseDate:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("2026-01-31", date(2026, 1, 31)),
            ("2026-01-31T10:30:00", date(2026, 1, 31)),
            (" 2026-02-01 ", date(2026, 2, 1)),
            (date(2026, 3, 1), date(2026, 3, 1)),
            (datetime(2026, 3, 1, 23, 59), date(2026, 3, 1)),
            (pd.Timestamp("2026-04-01"), date(2026, 4, 1)),
        ],
    )
    def test_valid_values(self, value, expected):
        assert parse_date(value) == expected

    @pytest.mark.parametrize("value", [None, "", "   ", "not a date", 20260101, [], pd.NaT])
    def test_invalid_values_return_none(self, value):
        assert parse_date(value) is None


class TestRanges:
    def test_contains_is_inclusive(self):
        window = DateRange(date(2026, 1, 1), date(2026, 1, 31))
        assert window.contains(date(2026, 1, 1))
        assert window.contains(date(2026, 1, 31))
        assert not window.contains(date(2026, 2, 1))

    def test_days_index(self):
        window = DateRange(date(2026, 1, 1), date(2026, 1, 3))
        assert len(window.days()) == 3

    def test_inverted_range_rejected(self):
        with pytest.raises(ConfigError):
            DateRange(date(2026, 2, 1), date(2026, 1, 1))

    def test_presets(self):
        today = date(2026, 2, 10)
        assert preset_range("today", today) == DateRange(today, today)
        assert preset_range("week", today) == DateRange(today, date(2026, 2, 16))
        assert preset_range("month", today) == DateRange(date(2026, 2, 1), date(2026, 2, 28))
        assert preset_range("year", today) == DateRange(date(2026, 1, 1), date(2026, 12, 31))

    def test_month_preset_at_month_end(self):
        today = date(2026, 1, 31)
        assert preset_range("month", today) == DateRange(date(2026, 1, 1), date(2026, 1, 31))

    def test_unknown_preset(self):
        with pytest.raises(ConfigError, match="Unknown date range preset"):
            preset_range("fortnight", date(2026, 1, 1))
