"""
Forecast pipeline for orchestrating the settlement engine.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from typing import Any

import pandas as pd

from .accrual import AccrualBucket, accrual_monthly, accrual_totals
from .aggregation import (
    DailyBucket,
    MonthlyBucket,
    aggregate_daily,
    aggregate_monthly,
    daily_frame,
    monthly_frame,
    with_bank_balance,
)
from .context import SettlementContext
from .currency import ZERO
from .dates import DateRange
from .entries import (
    BankAccountSnapshot,
    EntryKind,
    LedgerEntry,
    account_from_row,
    expense_from_row,
    revenue_from_row,
)
from .interfaces import BalanceStore
from .parcels import CashParcel, generate_parcels, total_by_kind
from .reconcile import (
    AccountBalanceCorrection,
    apply_corrections,
    persist_balance_corrections,
    recalculate_account_balances,
    reconcile_series,
    total_balance,
)


@dataclass
class ForecastResult:
    """
    Output of one forecast run.

    Attributes:
        today: Anchor day of the run
        date_range: Query window (``None`` = unbounded)
        parcels: Parcels inside the window
        daily: Daily buckets, zero-seeded and reconciled on ``real_balance``
        monthly: Monthly buckets with ``bank_balance`` projected from ``real_balance``
        accrual: Accrual (issue-date) monthly view of the same window
        real_balance: Sum of the accounts' current balances
        currency: Currency code of every amount
    """

    today: date
    date_range: DateRange | None
    parcels: list[CashParcel]
    daily: list[DailyBucket]
    monthly: list[MonthlyBucket]
    accrual: list[AccrualBucket]
    real_balance: Decimal
    accrued_revenue: Decimal = ZERO
    accrued_expense: Decimal = ZERO
    currency: str = "BRL"

    @property
    def projected_receipts(self) -> Decimal:
        return total_by_kind(self.parcels, EntryKind.REVENUE)

    @property
    def projected_payments(self) -> Decimal:
        return total_by_kind(self.parcels, EntryKind.EXPENSE)

    def daily_frame(self) -> pd.DataFrame:
        return daily_frame(self.daily)

    def monthly_frame(self) -> pd.DataFrame:
        return monthly_frame(self.monthly)

    def summary(self) -> dict[str, Any]:
        """Lightweight summary for API/CLI usage."""
        closing = self.daily[-1].reconciled_balance if self.daily else self.real_balance
        return {
            "today": self.today.isoformat(),
            "start": self.date_range.start.isoformat() if self.date_range else None,
            "end": self.date_range.end.isoformat() if self.date_range else None,
            "currency": self.currency,
            "parcels": len(self.parcels),
            "real_balance": str(self.real_balance),
            "projected_receipts": str(self.projected_receipts),
            "projected_payments": str(self.projected_payments),
            "projected_closing_balance": str(closing),
            "accrued_revenue": str(self.accrued_revenue),
            "accrued_expense": str(self.accrued_expense),
        }


@dataclass
class CashFlowForecast:
    """
    Settlement engine pipeline over one snapshot of the ledger.

    The pipeline is:
    1. Expand revenues and expenses into dated parcels
    2. Keep the parcels inside the query window
    3. Aggregate them per day (with a ``today`` anchor) and per month
    4. Reconcile the daily series on the real bank balance

    Each ``run`` recomputes everything from the snapshot; no state is kept.

    Attributes:
        revenues: Revenue entries
        expenses: Expense entries
        accounts: Bank account snapshots (their balances form the real balance)
        context: Clock and tolerance configuration

    Example:
        ```python
        forecast = CashFlowForecast.from_rows(
            revenues=revenue_rows, expenses=expense_rows, accounts=account_rows,
            context=SettlementContext.fixed(date(2026, 2, 1)),
        )
        result = forecast.run(preset_range("month", date(2026, 2, 1)))
        result.daily_frame()
        ```
    """

    revenues: list[LedgerEntry] = field(default_factory=list)
    expenses: list[LedgerEntry] = field(default_factory=list)
    accounts: list[BankAccountSnapshot] = field(default_factory=list)
    context: SettlementContext = field(default_factory=SettlementContext)

    @classmethod
    def from_rows(
        cls,
        revenues: Iterable[Mapping[str, Any]] = (),
        expenses: Iterable[Mapping[str, Any]] = (),
        accounts: Iterable[Mapping[str, Any]] = (),
        context: SettlementContext | None = None,
    ) -> CashFlowForecast:
        """Build a forecast from raw storage rows."""
        context = context or SettlementContext()
        money = context.money
        return cls(
            revenues=[
                revenue_from_row(r, context.revenue_columns, money) for r in revenues
            ],
            expenses=[
                expense_from_row(e, context.expense_columns, money) for e in expenses
            ],
            accounts=[account_from_row(a, money) for a in accounts],
            context=context,
        )

    @property
    def entries(self) -> list[LedgerEntry]:
        return [*self.revenues, *self.expenses]

    def run(self, date_range: DateRange | None = None) -> ForecastResult:
        """Run the forecast over ``date_range`` (unbounded when ``None``)."""
        today = self.context.today()
        real_balance = total_balance(self.accounts)

        parcels = [
            p
            for p in generate_parcels(self.entries, self.context.money)
            if date_range is None or date_range.contains(p.scheduled_date)
        ]
        daily = aggregate_daily(parcels, date_range=date_range, today=today)
        today_in_window = date_range is None or date_range.contains(today)
        daily = reconcile_series(
            daily, real_balance, today, today_in_window=today_in_window
        )
        monthly = with_bank_balance(aggregate_monthly(parcels), real_balance)
        accrued_revenue, accrued_expense = accrual_totals(self.entries, date_range)

        return ForecastResult(
            today=today,
            date_range=date_range,
            parcels=parcels,
            daily=daily,
            monthly=monthly,
            accrual=accrual_monthly(self.entries, date_range=date_range),
            real_balance=real_balance,
            accrued_revenue=accrued_revenue,
            accrued_expense=accrued_expense,
            currency=self.context.currency,
        )

    def recalculate_balances(
        self, store: BalanceStore | None = None
    ) -> list[AccountBalanceCorrection]:
        """
        Recompute account balances from realized cash.

        When a ``store`` is given, drifted balances are written through it and
        any store failure propagates as ``BalancePersistenceError``.
        """
        corrections = recalculate_account_balances(
            self.accounts,
            self.revenues,
            self.expenses,
            self.context.today(),
            tolerance=self.context.balance_tolerance,
            currency=self.context.money,
        )
        if store is not None:
            persist_balance_corrections(corrections, store)
        return corrections

    def with_recalculated_balances(
        self, store: BalanceStore | None = None
    ) -> CashFlowForecast:
        """Copy of this forecast whose accounts carry the recalculated balances."""
        corrections = self.recalculate_balances(store)
        return replace(self, accounts=apply_corrections(self.accounts, corrections))
