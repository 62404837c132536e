"""
Currency and precision handling for SettleLab.

All engine amounts are ``Decimal`` values quantized to the currency precision
(two places for BRL). Legacy rows carry amounts as numbers, numeric strings,
comma-decimal strings or garbage; ``coerce_amount`` is the single forgiving
conversion used everywhere a row value becomes money.
"""

from __future__ import annotations

import math
from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum

ZERO = Decimal("0")


class RoundingPolicy(Enum):
    """Rounding policies for currency calculations."""

    HALF_UP = ROUND_HALF_UP
    FLOOR = ROUND_FLOOR


class Currency:
    """
    Currency definition with precision and rounding rules.

    Attributes:
        code: ISO currency code (e.g., 'BRL')
        decimals: Number of decimal places for this currency
        rounding: Rounding policy for calculations
    """

    def __init__(
        self,
        code: str,
        decimals: int = 2,
        rounding: RoundingPolicy = RoundingPolicy.HALF_UP,
    ):
        self.code = code.upper()
        self.decimals = decimals
        self.rounding = rounding

    @property
    def quantum(self) -> Decimal:
        return Decimal("1").scaleb(-self.decimals)

    def quantize(self, amount: Decimal, rounding: RoundingPolicy | None = None) -> Decimal:
        """Quantize amount to currency precision."""
        policy = rounding or self.rounding
        return amount.quantize(self.quantum, rounding=policy.value)

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"Currency('{self.code}', decimals={self.decimals})"


BRL = Currency("BRL", decimals=2)

CURRENCIES: dict[str, Currency] = {
    "BRL": BRL,
}


def get_currency(code: str) -> Currency:
    """Get currency by code."""
    if code.upper() not in CURRENCIES:
        # Default to 2 decimal places for unknown currencies
        return Currency(code, decimals=2)
    return CURRENCIES[code.upper()]


def coerce_amount(value, currency: Currency = BRL) -> Decimal:
    """
    Convert a raw row value into a quantized amount, falling back to zero.

    Legacy rows are unreliable, so this conversion never raises:

    - ``None``, ``""``, booleans and non-numeric strings become ``0``
    - NaN and infinities become ``0``
    - strings with a decimal comma (``"1234,56"``) are accepted
    - negative values are kept as-is

    Args:
        value: Raw value from a storage row
        currency: Currency whose precision is applied

    Returns:
        Decimal quantized to the currency precision
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return ZERO
        number = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return ZERO
        if "," in text and "." not in text:
            text = text.replace(",", ".", 1)
        try:
            number = Decimal(text)
        except InvalidOperation:
            return ZERO
    else:
        return ZERO

    if not number.is_finite():
        return ZERO
    try:
        return currency.quantize(number)
    except InvalidOperation:
        # Beyond decimal context precision
        return ZERO
