"""
Persistence seam for SettleLab.
Defines the contract the caller's storage layer must satisfy.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Protocol, runtime_checkable


@runtime_checkable
class BalanceStore(Protocol):
    """
    Contract for writing corrected bank account balances.

    Implementations wrap the caller's storage API (e.g. an ``update`` on the
    ``bank_accounts`` table). Writes must be idempotent: the same balance may be
    written again by a concurrent recomputation.
    """

    def update_current_balance(self, account_id: str, balance: Decimal) -> None:
        """Persist ``balance`` as the current balance of ``account_id``; raise on failure."""
        ...


__all__ = ["BalanceStore"]
