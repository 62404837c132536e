"""
Context classes for SettleLab.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation

from .currency import Currency, get_currency
from .entries import EXPENSE_COLUMNS, REVENUE_COLUMNS, RowMapping
from .errors import ConfigError


@dataclass
class SettlementContext:
    """
    Configuration shared by a forecast run.

    The engine functions take ``today`` as an explicit argument; the context is
    the one place that reads the clock, so tests can pin "today" by passing a
    fixed ``clock``.

    Attributes:
        clock: Callable returning today's date (default: ``date.today``)
        currency: Currency code; sets the precision amounts are coerced and
            split to
        balance_tolerance: Drift above which a stored balance is corrected
        revenue_columns: Column names of revenue rows
        expense_columns: Column names of expense rows
    """

    clock: Callable[[], date] = date.today
    currency: str = "BRL"
    balance_tolerance: Decimal = Decimal("0.009")
    revenue_columns: RowMapping = field(default_factory=lambda: REVENUE_COLUMNS)
    expense_columns: RowMapping = field(default_factory=lambda: EXPENSE_COLUMNS)

    def __post_init__(self):
        try:
            self.balance_tolerance = Decimal(str(self.balance_tolerance))
        except InvalidOperation as e:
            raise ConfigError(
                f"balance_tolerance must be numeric, got {self.balance_tolerance!r}"
            ) from e
        if not self.balance_tolerance.is_finite() or self.balance_tolerance < 0:
            raise ConfigError("balance_tolerance must be a finite value >= 0")

    @classmethod
    def fixed(cls, today: date, **kwargs) -> SettlementContext:
        """Context whose clock always returns ``today``."""
        return cls(clock=lambda: today, **kwargs)

    def today(self) -> date:
        return self.clock()

    @property
    def money(self) -> Currency:
        """``Currency`` definition of ``currency``."""
        return get_currency(self.currency)
