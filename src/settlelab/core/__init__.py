"""
Core module for SettleLab.

This module contains the settlement engine: payment-method rules, date
arithmetic, installment splitting, parcel generation, aggregation and
balance reconciliation.
"""

from .accrual import AccrualBucket, accrual_monthly, accrual_totals
from .aggregation import (
    DailyBucket,
    MonthlyBucket,
    aggregate_daily,
    aggregate_monthly,
    apply_cumulative_balance,
    daily_frame,
    monthly_frame,
    with_bank_balance,
)
from .context import SettlementContext
from .currency import BRL, Currency, coerce_amount
from .dates import (
    DateRange,
    add_business_days,
    add_calendar_days,
    add_calendar_months,
    parse_date,
    preset_range,
)
from .entries import (
    BankAccountSnapshot,
    EntryKind,
    LedgerEntry,
    ManualDates,
    MissingDates,
    RowMapping,
    ValidDates,
    account_from_row,
    expense_from_row,
    parse_manual_dates,
    revenue_from_row,
)
from .errors import BalancePersistenceError, ConfigError, LedgerFileError
from .forecast import CashFlowForecast, ForecastResult
from .installments import split_amount
from .interfaces import BalanceStore
from .loader import LedgerBook, load_ledger
from .methods import PaymentMethod, SettlementPolicy, policy_for, resolve_method
from .parcels import (
    CashParcel,
    compute_realized_amount,
    generate_parcels,
    partition_parcels,
    schedule_dates,
)
from .reconcile import (
    AccountBalanceCorrection,
    persist_balance_corrections,
    rebase_initial_balance,
    recalculate_account_balances,
    reconcile_series,
    total_balance,
)

__all__ = [
    # Errors
    "ConfigError",
    "LedgerFileError",
    "BalancePersistenceError",
    # Currency
    "BRL",
    "Currency",
    "coerce_amount",
    # Dates
    "DateRange",
    "add_calendar_days",
    "add_business_days",
    "add_calendar_months",
    "parse_date",
    "preset_range",
    # Methods
    "PaymentMethod",
    "SettlementPolicy",
    "resolve_method",
    "policy_for",
    # Entries
    "EntryKind",
    "LedgerEntry",
    "BankAccountSnapshot",
    "ManualDates",
    "ValidDates",
    "MissingDates",
    "RowMapping",
    "parse_manual_dates",
    "revenue_from_row",
    "expense_from_row",
    "account_from_row",
    # Installments and parcels
    "split_amount",
    "CashParcel",
    "schedule_dates",
    "generate_parcels",
    "compute_realized_amount",
    "partition_parcels",
    # Aggregation
    "DailyBucket",
    "MonthlyBucket",
    "aggregate_daily",
    "aggregate_monthly",
    "apply_cumulative_balance",
    "with_bank_balance",
    "daily_frame",
    "monthly_frame",
    # Accrual
    "AccrualBucket",
    "accrual_monthly",
    "accrual_totals",
    # Reconciliation
    "AccountBalanceCorrection",
    "reconcile_series",
    "recalculate_account_balances",
    "persist_balance_corrections",
    "rebase_initial_balance",
    "total_balance",
    "BalanceStore",
    # Pipeline
    "SettlementContext",
    "CashFlowForecast",
    "ForecastResult",
    "LedgerBook",
    "load_ledger",
]
