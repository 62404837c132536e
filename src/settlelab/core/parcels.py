"""
Parcel generation: from accrual entries to dated cash movements.

Two modes share a single scheduler:

- forecast mode (``generate_parcels``) expands each entry into one
  ``CashParcel`` per installment;
- realized mode (``compute_realized_amount``) sums the installments of one
  entry that have already cleared as of a given day.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from .currency import BRL, ZERO, Currency
from .dates import add_business_days, add_calendar_days, add_calendar_months
from .entries import EntryKind, LedgerEntry
from .installments import split_amount
from .methods import BaseOffset, SettlementPolicy, Spacing, policy_for, resolve_method

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CashParcel:
    """
    One installment of an entry, scheduled on the day it clears.

    ``amount`` is unsigned; ``kind`` tells whether it flows in or out.
    """

    source_entry_id: str
    index: int
    kind: EntryKind
    amount: Decimal
    scheduled_date: date
    bank_account_id: str | None = None

    @property
    def signed_amount(self) -> Decimal:
        return self.amount if self.kind is EntryKind.REVENUE else -self.amount


def base_settlement_date(entry: LedgerEntry, policy: SettlementPolicy) -> date | None:
    """
    Date the first installment settles when no manual override exists.

    The explicit settlement date wins; otherwise the policy offset is applied
    to the issue date. ``None`` when neither date is known.
    """
    if entry.explicit_settlement_date is not None:
        return entry.explicit_settlement_date
    if entry.issue_date is None:
        return None
    if policy.base_offset is BaseOffset.CALENDAR_DAYS:
        return add_calendar_days(entry.issue_date, policy.offset_days)
    if policy.base_offset is BaseOffset.BUSINESS_DAYS:
        return add_business_days(entry.issue_date, policy.offset_days)
    return entry.issue_date


def schedule_dates(entry: LedgerEntry) -> list[date] | None:
    """
    Scheduled settlement date of every installment of ``entry``.

    A manual date always wins for its index. Other indices start from the base
    settlement date and are spaced by the method's policy:

    - ``Spacing.DAYS``: ``interval_days * index`` calendar days
    - ``Spacing.MONTHLY``: ``index`` calendar months (only with more than one installment)
    - ``Spacing.NONE``: every installment on the base date

    Returns:
        A list with one date per installment, or ``None`` when no base date can
        be determined for an installment lacking a manual date.
    """
    policy = policy_for(resolve_method(entry.payment_method_label))
    base = base_settlement_date(entry, policy)
    count = entry.effective_installment_count

    dates: list[date] = []
    for index in range(count):
        manual = entry.manual_date(index)
        if manual is not None:
            dates.append(manual)
            continue
        if base is None:
            return None
        if index == 0 or policy.spacing is Spacing.NONE:
            dates.append(base)
        elif policy.spacing is Spacing.DAYS:
            dates.append(add_calendar_days(base, policy.interval_days * index))
        else:
            dates.append(add_calendar_months(base, index))
    return dates


def entry_parcels(entry: LedgerEntry, currency: Currency = BRL) -> list[CashParcel]:
    """Expand one entry into its parcels (empty when it cannot be scheduled)."""
    dates = schedule_dates(entry)
    if dates is None:
        logger.debug("Entry %s has no resolvable settlement date; skipped", entry.id)
        return []
    amounts = split_amount(entry.gross_amount, len(dates), currency)
    return [
        CashParcel(
            source_entry_id=entry.id,
            index=index,
            kind=entry.kind,
            amount=amount,
            scheduled_date=scheduled,
            bank_account_id=entry.bank_account_id,
        )
        for index, (amount, scheduled) in enumerate(zip(amounts, dates))
    ]


def generate_parcels(
    entries: Iterable[LedgerEntry], currency: Currency = BRL
) -> list[CashParcel]:
    """
    Forecast mode: expand every entry into dated cash parcels.

    Entries without an issue date, or without any resolvable settlement date,
    contribute no parcels. They are skipped silently (logged at DEBUG level).

    **Args:**
        entries: Revenue and expense entries, in any order
        currency: Currency whose precision the installments are split to

    **Returns:**
        Parcels in entry order, then installment order
    """
    parcels: list[CashParcel] = []
    for entry in entries:
        if entry.issue_date is None:
            logger.debug("Entry %s has no issue date; excluded from forecast", entry.id)
            continue
        parcels.extend(entry_parcels(entry, currency))
    return parcels


def compute_realized_amount(
    entry: LedgerEntry, today: date, currency: Currency = BRL
) -> Decimal:
    """
    Realized mode: cash of ``entry`` already cleared on or before ``today``.

    Installments are scheduled exactly as in forecast mode; only those whose
    date is ``<= today`` are summed. An entry that cannot be scheduled has
    realized nothing.
    """
    dates = schedule_dates(entry)
    if dates is None or entry.gross_amount == ZERO:
        return ZERO
    amounts = split_amount(entry.gross_amount, len(dates), currency)
    return sum(
        (amount for amount, scheduled in zip(amounts, dates) if scheduled <= today),
        ZERO,
    )


def partition_parcels(
    parcels: Iterable[CashParcel], today: date
) -> tuple[list[CashParcel], list[CashParcel]]:
    """Split parcels into (realized, projected) relative to ``today``."""
    realized: list[CashParcel] = []
    projected: list[CashParcel] = []
    for parcel in parcels:
        (realized if parcel.scheduled_date <= today else projected).append(parcel)
    return realized, projected


def total_by_kind(parcels: Iterable[CashParcel], kind: EntryKind) -> Decimal:
    """Sum of the parcels flowing in one direction."""
    return sum((p.amount for p in parcels if p.kind is kind), ZERO)
