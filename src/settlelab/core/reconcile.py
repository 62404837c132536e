"""
Balance reconciliation.

Two related operations live here:

- shifting a forecast running-balance series so that it passes through the real
  bank balance on "today" (``reconcile_series``);
- recomputing each bank account's current balance from the cash that has
  actually cleared, and persisting corrections through a ``BalanceStore``
  (``recalculate_account_balances`` / ``persist_balance_corrections``).
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal

from .aggregation import DailyBucket
from .currency import BRL, ZERO, Currency
from .entries import BankAccountSnapshot, LedgerEntry
from .errors import BalancePersistenceError
from .interfaces import BalanceStore
from .parcels import compute_realized_amount

logger = logging.getLogger(__name__)

DEFAULT_TOLERANCE = Decimal("0.009")


def accumulated_through(buckets: Iterable[DailyBucket], today: date) -> Decimal:
    """Sum of ``net`` over every bucket dated on or before ``today``."""
    return sum((b.net for b in buckets if b.date <= today), ZERO)


def reconciliation_offset(
    buckets: Sequence[DailyBucket],
    real_balance: Decimal,
    today: date,
    *,
    today_in_window: bool = True,
) -> Decimal:
    """
    Shift that makes the series agree with ``real_balance`` on ``today``.

    When ``today`` lies outside the queried window the series is simply
    started from ``real_balance``.
    """
    seed = buckets[0].cumulative_balance - buckets[0].net if buckets else ZERO
    if not today_in_window:
        return Decimal(real_balance) - seed
    return Decimal(real_balance) - seed - accumulated_through(buckets, today)


def reconcile_series(
    buckets: Sequence[DailyBucket],
    real_balance: Decimal,
    today: date,
    *,
    today_in_window: bool = True,
) -> list[DailyBucket]:
    """
    Anchor a daily running-balance series on the real bank balance.

    Every bucket gets ``reconciled_balance = cumulative_balance + offset`` where
    ``offset = real_balance - sum(net for date <= today)`` (minus the series
    seed, if it was not zero-seeded). The shape of the forecast before and
    after today is preserved.

    For a window that does not contain ``today`` (a past month, a future
    quarter) the offset is ``real_balance`` alone: the window's movement is
    stacked on top of the current balance.

    **Args:**
        buckets: Daily buckets sorted by date
        real_balance: Externally reported balance as of ``today``
        today: Anchor day
        today_in_window: Whether the queried window contains ``today``

    **Returns:**
        New buckets with ``reconciled_balance`` filled in; when
        ``today_in_window``, the bucket dated ``today`` carries
        ``real_balance`` exactly
    """
    offset = reconciliation_offset(
        buckets, real_balance, today, today_in_window=today_in_window
    )
    return [replace(b, reconciled_balance=b.cumulative_balance + offset) for b in buckets]


@dataclass(frozen=True, slots=True)
class AccountBalanceCorrection:
    """
    Outcome of recomputing one bank account's balance.

    Attributes:
        account_id: Bank account identifier
        previous_balance: Balance currently stored for the account
        corrected_balance: ``initial + realized_revenue - realized_expense``
        realized_revenue: Revenue cash cleared on or before today
        realized_expense: Amount of paid expenses
        needs_update: Whether the stored balance drifted beyond tolerance
    """

    account_id: str
    previous_balance: Decimal
    corrected_balance: Decimal
    realized_revenue: Decimal
    realized_expense: Decimal
    needs_update: bool

    @property
    def delta(self) -> Decimal:
        return self.corrected_balance - self.previous_balance


def realized_by_account(
    revenues: Iterable[LedgerEntry],
    expenses: Iterable[LedgerEntry],
    today: date,
    currency: Currency = BRL,
) -> tuple[dict[str, Decimal], dict[str, Decimal]]:
    """
    Realized revenue and expense totals per bank account.

    Revenues count the installments cleared on or before ``today``; expenses
    count their full amount once their status is ``paid``. Entries without a
    bank account are ignored.
    """
    revenue_by_account: dict[str, Decimal] = {}
    for entry in revenues:
        if not entry.bank_account_id:
            continue
        value = compute_realized_amount(entry, today, currency)
        if value == ZERO:
            continue
        revenue_by_account[entry.bank_account_id] = (
            revenue_by_account.get(entry.bank_account_id, ZERO) + value
        )

    expense_by_account: dict[str, Decimal] = {}
    for entry in expenses:
        if not entry.bank_account_id or not entry.is_paid:
            continue
        expense_by_account[entry.bank_account_id] = (
            expense_by_account.get(entry.bank_account_id, ZERO) + entry.gross_amount
        )
    return revenue_by_account, expense_by_account


def recalculate_account_balances(
    accounts: Iterable[BankAccountSnapshot],
    revenues: Iterable[LedgerEntry],
    expenses: Iterable[LedgerEntry],
    today: date,
    *,
    tolerance: Decimal = DEFAULT_TOLERANCE,
    currency: Currency = BRL,
) -> list[AccountBalanceCorrection]:
    """
    Recompute every account's current balance from realized cash.

    ``corrected = initial_balance + realized_revenue - realized_expense``; the
    correction is flagged ``needs_update`` when it differs from the stored
    current balance by more than ``tolerance``. Nothing is written here.
    """
    revenue_by_account, expense_by_account = realized_by_account(
        revenues, expenses, today, currency
    )
    corrections = []
    for account in accounts:
        revenue = revenue_by_account.get(account.id, ZERO)
        expense = expense_by_account.get(account.id, ZERO)
        corrected = account.initial_balance + revenue - expense
        previous = account.current_balance
        corrections.append(
            AccountBalanceCorrection(
                account_id=account.id,
                previous_balance=previous,
                corrected_balance=corrected,
                realized_revenue=revenue,
                realized_expense=expense,
                needs_update=abs(previous - corrected) > tolerance,
            )
        )
    return corrections


def persist_balance_corrections(
    corrections: Iterable[AccountBalanceCorrection], store: BalanceStore
) -> list[AccountBalanceCorrection]:
    """
    Write the corrections that drifted beyond tolerance.

    Returns:
        The corrections that were written

    Raises:
        BalancePersistenceError: If the store fails; the failure is never swallowed
    """
    written = []
    for correction in corrections:
        if not correction.needs_update:
            continue
        try:
            store.update_current_balance(
                correction.account_id, correction.corrected_balance
            )
        except Exception as e:
            logger.error(
                "Failed to persist balance %s for account %s: %s",
                correction.corrected_balance,
                correction.account_id,
                e,
            )
            raise BalancePersistenceError(
                correction.account_id, correction.corrected_balance, e
            ) from e
        logger.info(
            "Account %s balance corrected from %s to %s",
            correction.account_id,
            correction.previous_balance,
            correction.corrected_balance,
        )
        written.append(correction)
    return written


def apply_corrections(
    accounts: Iterable[BankAccountSnapshot],
    corrections: Iterable[AccountBalanceCorrection],
) -> list[BankAccountSnapshot]:
    """Snapshots with ``reported_current_balance`` set to the corrected values."""
    by_id = {c.account_id: c.corrected_balance for c in corrections}
    return [
        replace(a, reported_current_balance=by_id[a.id]) if a.id in by_id else a
        for a in accounts
    ]


def rebase_initial_balance(
    account: BankAccountSnapshot, desired_current: Decimal
) -> BankAccountSnapshot:
    """
    Edit an account's current balance by shifting its initial balance.

    The current balance is derived from the initial balance plus realized cash,
    so a manual edit of the current balance moves the initial balance by the
    same delta; the next recalculation then lands on ``desired_current``.
    """
    delta = Decimal(desired_current) - account.current_balance
    return replace(
        account,
        initial_balance=account.initial_balance + delta,
        reported_current_balance=Decimal(desired_current),
    )


def total_balance(accounts: Iterable[BankAccountSnapshot]) -> Decimal:
    """Sum of the current (or, failing that, initial) balance of every account."""
    return sum((a.current_balance for a in accounts), ZERO)
