"""
SettleLab - Cash-Flow Settlement Engine for Clinic Back-Offices

SettleLab projects when accrual-basis ledger entries (revenues and expenses
booked on an issue date) actually clear into a bank account. It is a pure,
synchronous transform over in-memory rows: it knows nothing about how rows are
fetched or how results are displayed.

Key Features:
- **Payment-method rules**: Free-text labels resolve to canonical methods with
  their own settlement offsets (card +30 days, debit +1 business day, ...)
- **Exact installments**: Amounts split into installments that always sum to the total
- **Forecast and realized views**: The same scheduler drives the cash forecast
  and the "already cleared" balance calculation
- **Reconciliation**: Forecast series are anchored on the real bank balance
- **Explicit time**: "today" is always a parameter, never a hidden clock read

Quick Start:
    ```python
    from datetime import date
    from settlelab import CashFlowForecast, SettlementContext, preset_range

    forecast = CashFlowForecast.from_rows(
        revenues=[{
            "id": "r1",
            "data_competencia": "2026-01-01",
            "forma_pagamento": "Cartão de Crédito",
            "parcelas": 2,
            "valor_liquido": 100.0,
        }],
        accounts=[{"id": "acc", "initial_balance": 0, "current_balance": 50}],
        context=SettlementContext.fixed(date(2026, 2, 1)),
    )
    result = forecast.run(preset_range("year", date(2026, 2, 1)))
    print(result.daily_frame())
    ```

License:
    Internal tooling for clinic financial operations.
"""

# Version information
__version__ = "0.1.0"
__author__ = "SettleLab Team"
__description__ = "Cash-flow settlement engine for clinic back-offices"

from .core import (
    AccountBalanceCorrection,
    BalancePersistenceError,
    BalanceStore,
    BankAccountSnapshot,
    CashFlowForecast,
    CashParcel,
    ConfigError,
    DailyBucket,
    DateRange,
    EntryKind,
    ForecastResult,
    LedgerEntry,
    LedgerFileError,
    MonthlyBucket,
    PaymentMethod,
    SettlementContext,
    aggregate_daily,
    aggregate_monthly,
    compute_realized_amount,
    generate_parcels,
    load_ledger,
    preset_range,
    recalculate_account_balances,
    reconcile_series,
    resolve_method,
    split_amount,
)

# Import KPI utilities
from .kpi import (
    first_negative_date,
    lowest_balance,
    projected_payments,
    projected_receipts,
)

# Import chart functions (optional - requires plotly)
try:
    from .charts import cash_balance_vs_time, monthly_cashflow_bars

    CHARTS_AVAILABLE = True
except ImportError:
    CHARTS_AVAILABLE = False

__all__ = [
    # Data model
    "EntryKind",
    "LedgerEntry",
    "BankAccountSnapshot",
    "CashParcel",
    "DailyBucket",
    "MonthlyBucket",
    "AccountBalanceCorrection",
    "PaymentMethod",
    # Engine
    "resolve_method",
    "split_amount",
    "generate_parcels",
    "compute_realized_amount",
    "aggregate_daily",
    "aggregate_monthly",
    "reconcile_series",
    "recalculate_account_balances",
    # Pipeline
    "SettlementContext",
    "CashFlowForecast",
    "ForecastResult",
    "DateRange",
    "preset_range",
    "load_ledger",
    "BalanceStore",
    # Errors
    "ConfigError",
    "LedgerFileError",
    "BalancePersistenceError",
    # KPI utilities
    "projected_receipts",
    "projected_payments",
    "lowest_balance",
    "first_negative_date",
    # Version info
    "__version__",
    "__author__",
    "__description__",
]

if CHARTS_AVAILABLE:
    __all__.extend(["cash_balance_vs_time", "monthly_cashflow_bars"])
