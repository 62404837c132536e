"""
Daily and monthly aggregation of cash parcels.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from itertools import accumulate
from typing import TypeVar

import pandas as pd

from .currency import ZERO
from .dates import DateRange
from .entries import EntryKind
from .parcels import CashParcel


@dataclass(frozen=True, slots=True)
class DailyBucket:
    """
    Cash movement of one calendar day.

    Attributes:
        date: Settlement day
        total_in: Sum of revenue parcels
        total_out: Sum of expense parcels
        cumulative_balance: Running sum of ``net`` up to and including this day
        reconciled_balance: ``cumulative_balance`` shifted onto the real bank
            balance (``None`` until reconciled)
    """

    date: date
    total_in: Decimal = ZERO
    total_out: Decimal = ZERO
    cumulative_balance: Decimal = ZERO
    reconciled_balance: Decimal | None = None

    @property
    def net(self) -> Decimal:
        return self.total_in - self.total_out

    @property
    def opening_balance(self) -> Decimal:
        """Balance before the day's movement (reconciled when available)."""
        closing = (
            self.reconciled_balance
            if self.reconciled_balance is not None
            else self.cumulative_balance
        )
        return closing - self.net


@dataclass(frozen=True, slots=True)
class MonthlyBucket:
    """
    Cash movement of one calendar month.

    ``bank_balance`` is the real balance plus ``cumulative_balance``; it is
    only filled by ``with_bank_balance``.
    """

    year: int
    month: int
    total_in: Decimal = ZERO
    total_out: Decimal = ZERO
    cumulative_balance: Decimal = ZERO
    bank_balance: Decimal | None = None

    @property
    def net(self) -> Decimal:
        return self.total_in - self.total_out

    @property
    def key(self) -> tuple[int, int]:
        return (self.year, self.month)


Bucket = TypeVar("Bucket", DailyBucket, MonthlyBucket)


def _in_range(parcel: CashParcel, date_range: DateRange | None) -> bool:
    return date_range is None or date_range.contains(parcel.scheduled_date)


def _add(totals: dict, key, parcel: CashParcel) -> None:
    total_in, total_out = totals.get(key, (ZERO, ZERO))
    if parcel.kind is EntryKind.REVENUE:
        total_in += parcel.amount
    else:
        total_out += parcel.amount
    totals[key] = (total_in, total_out)


def apply_cumulative_balance(
    buckets: Sequence[Bucket], seed: Decimal = ZERO
) -> list[Bucket]:
    """Fill ``cumulative_balance`` with the prefix sum of ``net`` starting at ``seed``."""
    running = accumulate((b.net for b in buckets), initial=Decimal(seed))
    next(running)
    return [
        replace(bucket, cumulative_balance=balance)
        for bucket, balance in zip(buckets, running)
    ]


def aggregate_daily(
    parcels: Iterable[CashParcel],
    *,
    date_range: DateRange | None = None,
    today: date | None = None,
    seed: Decimal = ZERO,
) -> list[DailyBucket]:
    """
    Group parcels into daily buckets with a running balance.

    **Args:**
        parcels: Forecast parcels
        date_range: Optional inclusive window; parcels outside it are ignored
        today: When given and inside the window (or with no window), an
            explicit, possibly empty bucket is always emitted for this day
        seed: Starting value of the running balance

    **Returns:**
        Buckets sorted by date, only for days with parcels plus the ``today``
        anchor

    **Example:**
        ```python
        daily = aggregate_daily(parcels, date_range=preset_range("month", today), today=today)
        daily[-1].cumulative_balance  # seed + sum of every net in the window
        ```
    """
    totals: dict[date, tuple[Decimal, Decimal]] = {}
    for parcel in parcels:
        if _in_range(parcel, date_range):
            _add(totals, parcel.scheduled_date, parcel)

    if today is not None and (date_range is None or date_range.contains(today)):
        totals.setdefault(today, (ZERO, ZERO))

    buckets = [
        DailyBucket(date=day, total_in=total_in, total_out=total_out)
        for day, (total_in, total_out) in sorted(totals.items())
    ]
    return apply_cumulative_balance(buckets, seed)


def aggregate_monthly(
    parcels: Iterable[CashParcel],
    *,
    date_range: DateRange | None = None,
    seed: Decimal = ZERO,
) -> list[MonthlyBucket]:
    """Group parcels by (year, month) with a running balance starting at ``seed``."""
    totals: dict[tuple[int, int], tuple[Decimal, Decimal]] = {}
    for parcel in parcels:
        if _in_range(parcel, date_range):
            day = parcel.scheduled_date
            _add(totals, (day.year, day.month), parcel)

    buckets = [
        MonthlyBucket(year=year, month=month, total_in=total_in, total_out=total_out)
        for (year, month), (total_in, total_out) in sorted(totals.items())
    ]
    return apply_cumulative_balance(buckets, seed)


def with_bank_balance(
    monthly: Sequence[MonthlyBucket], balance: Decimal
) -> list[MonthlyBucket]:
    """Project the real bank balance forward month by month."""
    return [replace(m, bank_balance=balance + m.cumulative_balance) for m in monthly]


def _money(value: Decimal | None) -> float:
    return float("nan") if value is None else float(value)


def daily_frame(buckets: Sequence[DailyBucket]) -> pd.DataFrame:
    """
    Tabular view of daily buckets (floats, DatetimeIndex named ``date``).

    Columns: total_in, total_out, net, cumulative_balance, reconciled_balance,
    opening_balance.
    """
    index = pd.DatetimeIndex([pd.Timestamp(b.date) for b in buckets], name="date")
    return pd.DataFrame(
        {
            "total_in": [_money(b.total_in) for b in buckets],
            "total_out": [_money(b.total_out) for b in buckets],
            "net": [_money(b.net) for b in buckets],
            "cumulative_balance": [_money(b.cumulative_balance) for b in buckets],
            "reconciled_balance": [_money(b.reconciled_balance) for b in buckets],
            "opening_balance": [_money(b.opening_balance) for b in buckets],
        },
        index=index,
    )


def monthly_frame(buckets: Sequence[MonthlyBucket]) -> pd.DataFrame:
    """Tabular view of monthly buckets (floats, monthly PeriodIndex)."""
    index = pd.PeriodIndex(
        [pd.Period(year=b.year, month=b.month, freq="M") for b in buckets],
        freq="M",
        name="month",
    )
    return pd.DataFrame(
        {
            "total_in": [_money(b.total_in) for b in buckets],
            "total_out": [_money(b.total_out) for b in buckets],
            "net": [_money(b.net) for b in buckets],
            "cumulative_balance": [_money(b.cumulative_balance) for b in buckets],
            "bank_balance": [_money(b.bank_balance) for b in buckets],
        },
        index=index,
    )
