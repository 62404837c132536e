"""
Accrual (competência) view of the ledger.

The accrual view books the billed value of each entry on its issue date,
regardless of payment method or installments. It is the income-statement
counterpart of the cash forecast.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from .currency import ZERO
from .dates import DateRange
from .entries import EntryKind, LedgerEntry


@dataclass(frozen=True, slots=True)
class AccrualBucket:
    """Revenue and expense booked in one (year, month)."""

    year: int
    month: int
    revenue: Decimal = ZERO
    expense: Decimal = ZERO

    @property
    def result(self) -> Decimal:
        return self.revenue - self.expense


def _booked(entries: Iterable[LedgerEntry], date_range: DateRange | None):
    for entry in entries:
        if entry.issue_date is None:
            continue
        if date_range is not None and not date_range.contains(entry.issue_date):
            continue
        yield entry


def accrual_monthly(
    entries: Iterable[LedgerEntry], *, date_range: DateRange | None = None
) -> list[AccrualBucket]:
    """Monthly revenue/expense by issue date, sorted by month."""
    totals: dict[tuple[int, int], tuple[Decimal, Decimal]] = {}
    for entry in _booked(entries, date_range):
        key = (entry.issue_date.year, entry.issue_date.month)
        revenue, expense = totals.get(key, (ZERO, ZERO))
        if entry.kind is EntryKind.REVENUE:
            revenue += entry.accrual_amount
        else:
            expense += entry.accrual_amount
        totals[key] = (revenue, expense)
    return [
        AccrualBucket(year=year, month=month, revenue=revenue, expense=expense)
        for (year, month), (revenue, expense) in sorted(totals.items())
    ]


def accrual_totals(
    entries: Iterable[LedgerEntry], date_range: DateRange | None = None
) -> tuple[Decimal, Decimal]:
    """Total (revenue, expense) booked in the window."""
    revenue = expense = ZERO
    for entry in _booked(entries, date_range):
        if entry.kind is EntryKind.REVENUE:
            revenue += entry.accrual_amount
        else:
            expense += entry.accrual_amount
    return revenue, expense
