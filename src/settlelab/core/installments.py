"""
Installment splitting with an exact-sum guarantee.
"""

from __future__ import annotations

from decimal import Decimal

from .currency import BRL, Currency, RoundingPolicy


def split_amount(total: Decimal, n: int, currency: Currency = BRL) -> list[Decimal]:
    """
    Divide ``total`` into ``n`` installments that sum to exactly ``total``.

    Every installment receives ``total / n`` truncated (floored) to cents; the
    cents lost to truncation are added to the last installment.

    **Args:**
        total: Amount to split (already at currency precision)
        n: Number of installments, at least 1
        currency: Currency whose precision is used

    **Returns:**
        List of ``n`` Decimal amounts

    **Raises:**
        ValueError: If ``n < 1``

    **Example:**
        ```python
        split_amount(Decimal("100.00"), 3)
        # [Decimal('33.33'), Decimal('33.33'), Decimal('33.34')]
        ```
    """
    if n < 1:
        raise ValueError("installment count must be >= 1")

    total = currency.quantize(Decimal(total))
    base = currency.quantize(total / n, RoundingPolicy.FLOOR)
    amounts = [base] * n
    remainder = currency.quantize(total - base * n, RoundingPolicy.HALF_UP)
    amounts[-1] = base + remainder
    return amounts
