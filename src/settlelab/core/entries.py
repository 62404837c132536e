"""
Ledger data model and storage-row adapters.

Rows come from the clinic's ``revenues``, ``expenses`` and ``bank_accounts``
tables as loosely-typed mappings. The adapters in this module turn them into
typed, immutable ``LedgerEntry`` and ``BankAccountSnapshot`` records without
ever raising on bad data: unparseable dates become ``None``, bad amounts become
zero and broken manual-installment payloads become ``MissingDates``.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Union

from .currency import BRL, ZERO, Currency, coerce_amount
from .dates import parse_date

__all__ = [
    "EntryKind",
    "ValidDates",
    "MissingDates",
    "ManualDates",
    "LedgerEntry",
    "BankAccountSnapshot",
    "RowMapping",
    "REVENUE_COLUMNS",
    "EXPENSE_COLUMNS",
    "parse_manual_dates",
    "parse_installment_count",
    "revenue_from_row",
    "expense_from_row",
    "account_from_row",
]


class EntryKind(Enum):
    """Direction of a ledger entry."""

    REVENUE = "REVENUE"
    EXPENSE = "EXPENSE"


@dataclass(frozen=True, slots=True)
class ValidDates:
    """Successfully parsed manual installment dates, in installment order."""

    dates: tuple[date, ...]

    def __post_init__(self):
        if not self.dates:
            raise ValueError("ValidDates requires at least one date")

    def __len__(self) -> int:
        return len(self.dates)


@dataclass(frozen=True, slots=True)
class MissingDates:
    """No usable manual installment dates."""

    def __len__(self) -> int:
        return 0


ManualDates = Union[ValidDates, MissingDates]

_MANUAL_DATE_KEYS = ("vencimento", "due_date", "data", "date")


def _manual_item_date(item: Any) -> date | None:
    if isinstance(item, (str, date)):
        return parse_date(item)
    if isinstance(item, Mapping):
        for key in _MANUAL_DATE_KEYS:
            if item.get(key):
                return parse_date(item[key])
        return None
    return None


def parse_manual_dates(raw: Any) -> ManualDates:
    """
    Parse the raw manual installment field of a row.

    The field may hold a list or a JSON-encoded list whose items are date
    strings or objects carrying the date under ``vencimento``, ``due_date``,
    ``data`` or ``date`` (first non-empty key wins). Items that do not yield a
    date are dropped.

    Never raises: anything that is not a list (after JSON decoding), or a list
    with no usable dates, returns ``MissingDates()``.
    """
    if not raw:
        return MissingDates()
    items = raw
    if isinstance(raw, (str, bytes)):
        try:
            items = json.loads(raw)
        except (ValueError, TypeError):
            return MissingDates()
    if not isinstance(items, (list, tuple)):
        return MissingDates()

    dates = tuple(d for d in (_manual_item_date(item) for item in items) if d is not None)
    if not dates:
        return MissingDates()
    return ValidDates(dates)


_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_installment_count(value: Any) -> int:
    """Read an installment count leniently; anything below 1 or unreadable is 1."""
    count = 1
    if isinstance(value, bool) or value is None:
        count = 1
    elif isinstance(value, int):
        count = value
    elif isinstance(value, (float, Decimal)):
        try:
            count = int(value)
        except (ValueError, OverflowError):
            count = 1
    elif isinstance(value, str):
        match = _LEADING_INT.match(value)
        count = int(match.group(1)) if match else 1
    return max(1, count)


@dataclass(frozen=True, slots=True)
class LedgerEntry:
    """
    One booked revenue or expense.

    Attributes:
        id: Row identifier
        kind: ``EntryKind.REVENUE`` or ``EntryKind.EXPENSE``
        issue_date: Accrual (competência) date; ``None`` excludes the entry
            from every forecast
        explicit_settlement_date: Recorded receipt/payment date, preferred over
            method offsets when present
        payment_method_label: Free-text payment method
        gross_amount: Amount at cent precision
        installment_count: Declared number of installments (>= 1)
        manual_installment_dates: Per-installment date overrides
        realized_date: Settlement mark from the source system
        status: Source status (``"paid"`` marks a settled expense)
        bank_account_id: Account the cash moves through
        description: Human-readable description
        billed_amount: Billed (faturado) value booked by the accrual view;
            ``None`` falls back to ``gross_amount``
    """

    id: str
    kind: EntryKind
    issue_date: date | None
    gross_amount: Decimal = ZERO
    payment_method_label: str = ""
    explicit_settlement_date: date | None = None
    installment_count: int = 1
    manual_installment_dates: ManualDates = field(default_factory=MissingDates)
    realized_date: date | None = None
    status: str = ""
    bank_account_id: str | None = None
    description: str = ""
    billed_amount: Decimal | None = None

    @property
    def accrual_amount(self) -> Decimal:
        """Amount booked on the issue date (billed value, else ``gross_amount``)."""
        return self.gross_amount if self.billed_amount is None else self.billed_amount

    @property
    def effective_installment_count(self) -> int:
        if isinstance(self.manual_installment_dates, ValidDates):
            return len(self.manual_installment_dates)
        return max(1, self.installment_count)

    @property
    def is_paid(self) -> bool:
        return (self.status or "").strip().lower() == "paid"

    def manual_date(self, index: int) -> date | None:
        """Manual override for installment ``index``, if any."""
        if isinstance(self.manual_installment_dates, ValidDates):
            dates = self.manual_installment_dates.dates
            if index < len(dates):
                return dates[index]
        return None


@dataclass(frozen=True, slots=True)
class BankAccountSnapshot:
    """
    Bank account state as read from storage.

    ``reported_current_balance`` is the ground truth for "today"; the initial
    balance only seeds the balance recalculation.
    """

    id: str
    initial_balance: Decimal = ZERO
    reported_current_balance: Decimal | None = None
    name: str = ""

    @property
    def current_balance(self) -> Decimal:
        if self.reported_current_balance is None:
            return self.initial_balance
        return self.reported_current_balance


@dataclass(frozen=True)
class RowMapping:
    """
    Column names used to read ledger rows.

    Tuple-valued fields list fallback columns: the first column holding a
    non-empty value is used.
    """

    id: str = "id"
    issue_date: str = "data_competencia"
    explicit_date: tuple[str, ...] = ("data_recebimento",)
    realized_date: tuple[str, ...] = ("data_recebimento",)
    payment_method: str = "forma_pagamento"
    installments: str = "parcelas"
    manual_dates: str | None = "recebimento_parcelas"
    amount: tuple[str, ...] = ("valor_liquido", "valor_bruto", "valor")
    billed_amount: tuple[str, ...] = ("valor_bruto", "valor", "valor_liquido")
    status: str = "status"
    bank_account_id: str = "bank_account_id"
    description: str = "description"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], base: RowMapping | None = None) -> RowMapping:
        """Override columns of ``base`` (or the defaults) from a mapping."""
        base = base or cls()
        values = {}
        for name in cls.__dataclass_fields__:
            if name not in data:
                values[name] = getattr(base, name)
                continue
            current = getattr(base, name)
            value = data[name]
            if isinstance(current, tuple) and isinstance(value, str):
                value = (value,)
            elif isinstance(current, tuple):
                value = tuple(value)
            values[name] = value
        return cls(**values)


REVENUE_COLUMNS = RowMapping()
EXPENSE_COLUMNS = RowMapping(
    explicit_date=("data_vencimento", "data_competencia"),
    realized_date=("data_pagamento",),
    manual_dates=None,
    amount=("valor",),
    billed_amount=("valor",),
)


def _first_present(row: Mapping[str, Any], columns: tuple[str, ...]) -> Any:
    for column in columns:
        value = row.get(column)
        if value is not None and value != "":
            return value
    return None


def _first_date(row: Mapping[str, Any], columns: tuple[str, ...]) -> date | None:
    for column in columns:
        parsed = parse_date(row.get(column))
        if parsed is not None:
            return parsed
    return None


def _entry_from_row(
    row: Mapping[str, Any],
    kind: EntryKind,
    columns: RowMapping,
    currency: Currency = BRL,
) -> LedgerEntry:
    manual = (
        parse_manual_dates(row.get(columns.manual_dates))
        if columns.manual_dates
        else MissingDates()
    )
    account_id = row.get(columns.bank_account_id)
    billed = _first_present(row, columns.billed_amount)
    return LedgerEntry(
        id=str(row.get(columns.id, "")),
        kind=kind,
        issue_date=parse_date(row.get(columns.issue_date)),
        gross_amount=coerce_amount(_first_present(row, columns.amount), currency),
        payment_method_label=str(row.get(columns.payment_method) or ""),
        explicit_settlement_date=_first_date(row, columns.explicit_date),
        installment_count=parse_installment_count(row.get(columns.installments)),
        manual_installment_dates=manual,
        realized_date=_first_date(row, columns.realized_date),
        status=str(row.get(columns.status) or ""),
        bank_account_id=str(account_id) if account_id else None,
        description=str(row.get(columns.description) or ""),
        billed_amount=None if billed is None else coerce_amount(billed, currency),
    )


def revenue_from_row(
    row: Mapping[str, Any],
    columns: RowMapping = REVENUE_COLUMNS,
    currency: Currency = BRL,
) -> LedgerEntry:
    """Build a revenue entry from a ``revenues`` row."""
    return _entry_from_row(row, EntryKind.REVENUE, columns, currency)


def expense_from_row(
    row: Mapping[str, Any],
    columns: RowMapping = EXPENSE_COLUMNS,
    currency: Currency = BRL,
) -> LedgerEntry:
    """Build an expense entry from an ``expenses`` row."""
    return _entry_from_row(row, EntryKind.EXPENSE, columns, currency)


def account_from_row(
    row: Mapping[str, Any], currency: Currency = BRL
) -> BankAccountSnapshot:
    """Build a bank account snapshot from a ``bank_accounts`` row."""
    current = row.get("current_balance")
    return BankAccountSnapshot(
        id=str(row.get("id", "")),
        initial_balance=coerce_amount(row.get("initial_balance"), currency),
        reported_current_balance=(
            None if current is None else coerce_amount(current, currency)
        ),
        name=str(row.get("name") or ""),
    )
