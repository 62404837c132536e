"""
KPI calculation utilities for cash-flow forecasts.

Parcel totals work on ``CashParcel`` lists and stay in ``Decimal``. Balance
KPIs operate on the frames returned by ``daily_frame`` / ``monthly_frame``.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

import numpy as np
import pandas as pd

from settlelab.core.entries import EntryKind
from settlelab.core.parcels import CashParcel, total_by_kind


def projected_receipts(parcels: Iterable[CashParcel]) -> Decimal:
    """Total revenue expected to clear in the given parcels."""
    return total_by_kind(parcels, EntryKind.REVENUE)


def projected_payments(parcels: Iterable[CashParcel]) -> Decimal:
    """Total expense expected to clear in the given parcels."""
    return total_by_kind(parcels, EntryKind.EXPENSE)


def lowest_balance(
    df: pd.DataFrame, balance_col: str = "reconciled_balance"
) -> pd.Series:
    """
    Lowest point of a balance column.

    Args:
        df: Frame from ``daily_frame`` or ``monthly_frame``
        balance_col: Column to inspect

    Returns:
        Series with ``when`` (index label) and ``balance``; both NaN/None
        when the column is empty or all-NaN
    """
    values = df[balance_col].to_numpy(dtype=float)
    if values.size == 0 or np.all(np.isnan(values)):
        return pd.Series(
            {"when": None, "balance": np.nan}, name="lowest_balance", dtype=object
        )
    pos = int(np.nanargmin(values))
    return pd.Series(
        {"when": df.index[pos], "balance": float(values[pos])}, name="lowest_balance"
    )


def first_negative_date(df: pd.DataFrame, balance_col: str = "reconciled_balance"):
    """
    First index label where the balance drops below zero.

    Returns:
        The index label (e.g. a ``Timestamp``) or ``None`` if it never does
    """
    values = df[balance_col].to_numpy(dtype=float)
    negative = np.flatnonzero(values < 0)
    if negative.size == 0:
        return None
    return df.index[negative[0]]
