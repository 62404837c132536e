"""
Date arithmetic for SettleLab.

Settlement dates are plain ``datetime.date`` values (midnight-normalised by
construction). Business days are Monday through Friday; no holiday calendar is
applied.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta

import numpy as np
import pandas as pd

from .errors import ConfigError


def add_calendar_days(d: date, n: int) -> date:
    """Plain calendar-day increment."""
    return d + timedelta(days=n)


def add_business_days(d: date, n: int) -> date:
    """
    Advance ``d`` by ``n`` business days (Monday–Friday).

    Days are counted strictly after ``d``: a Friday plus one business day is the
    following Monday, and a Saturday plus one business day is also Monday.

    **Args:**
        d: Starting date (may itself fall on a weekend)
        n: Number of business days to count; ``n <= 0`` returns ``d`` unchanged

    **Returns:**
        The date on which the ``n``-th business day is reached

    **Example:**
        ```python
        from datetime import date
        from settlelab.core.dates import add_business_days

        add_business_days(date(2026, 1, 2), 1)  # Friday -> date(2026, 1, 5)
        ```
    """
    if n <= 0:
        return d
    # Rolling backward first makes a weekend start count from the previous Friday,
    # which matches counting weekdays one by one after ``d``.
    shifted = np.busday_offset(np.datetime64(d, "D"), n, roll="backward")
    return shifted.astype("datetime64[D]").item()


def add_calendar_months(d: date, n: int) -> date:
    """
    Add ``n`` calendar months, clamping the day to the end of the target month.

    ``2026-01-31`` plus one month is ``2026-02-28``.
    """
    if n == 0:
        return d
    return (pd.Timestamp(d) + pd.DateOffset(months=n)).date()


def parse_date(value) -> date | None:
    """
    Parse a storage value into a ``date``, returning ``None`` when impossible.

    Accepts ``date``, ``datetime``/``pandas.Timestamp`` and ISO-like strings
    (``"2026-01-31"``, ``"2026-01-31T10:00:00Z"``). Any other type, empty
    strings and unparseable text yield ``None``.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        if pd.isna(value):
            return None
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    try:
        parsed = pd.to_datetime(text, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return None
    if parsed is None or pd.isna(parsed):
        return None
    return parsed.date()


@dataclass(frozen=True)
class DateRange:
    """
    Inclusive query window for forecasts.

    Attributes:
        start: First day included
        end: Last day included
    """

    start: date
    end: date

    def __post_init__(self):
        if self.start > self.end:
            raise ConfigError(
                f"Date range start {self.start} is after its end {self.end}"
            )

    def contains(self, d: date) -> bool:
        return self.start <= d <= self.end

    def days(self) -> pd.DatetimeIndex:
        """Every day in the window, as a daily DatetimeIndex."""
        return pd.date_range(self.start, self.end, freq="D")


PRESETS = ("today", "week", "month", "year")


def preset_range(name: str, today: date) -> DateRange:
    """
    Build one of the dashboard's preset windows around ``today``.

    - ``today``: just today
    - ``week``: today and the next six days
    - ``month``: first to last day of today's month
    - ``year``: January 1st to December 31st of today's year
    """
    if name == "today":
        return DateRange(today, today)
    if name == "week":
        return DateRange(today, today + timedelta(days=6))
    if name == "month":
        first = today.replace(day=1)
        last = (pd.Timestamp(first) + pd.offsets.MonthEnd(0)).date()
        return DateRange(first, last)
    if name == "year":
        return DateRange(date(today.year, 1, 1), date(today.year, 12, 31))
    raise ConfigError(f"Unknown date range preset '{name}'. Expected one of {PRESETS}")
