"""
Tests for the accrual (issue-date) view.
"""

from datetime import date
from decimal import Decimal

from settlelab.core.accrual import accrual_monthly, accrual_totals
from settlelab.core.dates import DateRange
from settlelab.core.entries import EntryKind, LedgerEntry


def entry(id, kind, issue, amount, installments=1):
    return LedgerEntry(
        id=id,
        kind=kind,
        issue_date=issue,
        gross_amount=Decimal(amount),
        payment_method_label="Cartão de Crédito",
        installment_count=installments,
    )


ENTRIES = [
    entry("r1", EntryKind.REVENUE, date(2026, 1, 1), "100.00", installments=3),
    entry("r2", EntryKind.REVENUE, date(2026, 1, 20), "50.00"),
    entry("e1", EntryKind.EXPENSE, date(2026, 1, 15), "30.00"),
    entry("e2", EntryKind.EXPENSE, date(2026, 3, 2), "10.00"),
    entry("undated", EntryKind.REVENUE, None, "999.00"),
]


def test_monthly_books_full_amount_on_issue_month() -> None:
    buckets = accrual_monthly(ENTRIES)
    assert [(b.year, b.month) for b in buckets] == [(2026, 1), (2026, 3)]
    january = buckets[0]
    assert january.revenue == Decimal("150.00")
    assert january.expense == Decimal("30.00")
    assert january.result == Decimal("120.00")
    assert buckets[1].result == Decimal("-10.00")


def test_window_filters_by_issue_date() -> None:
    window = DateRange(date(2026, 1, 10), date(2026, 3, 1))
    buckets = accrual_monthly(ENTRIES, date_range=window)
    assert [(b.year, b.month) for b in buckets] == [(2026, 1)]
    assert buckets[0].revenue == Decimal("50.00")


def test_totals() -> None:
    assert accrual_totals(ENTRIES) == (Decimal("150.00"), Decimal("40.00"))
    assert accrual_totals([]) == (Decimal("0"), Decimal("0"))


def test_billed_value_is_booked_instead_of_net() -> None:
    billed = LedgerEntry(
        id="r9",
        kind=EntryKind.REVENUE,
        issue_date=date(2026, 2, 3),
        gross_amount=Decimal("95.00"),
        billed_amount=Decimal("100.00"),
        payment_method_label="Cartão de Crédito",
    )
    (february,) = accrual_monthly([billed])
    assert february.revenue == Decimal("100.00")
    assert accrual_totals([billed, ENTRIES[3]]) == (Decimal("100.00"), Decimal("10.00"))
