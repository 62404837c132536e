"""
Settlement rules per payment method.

Payment methods arrive as free-text labels typed by clinic staff
("Cartão de Crédito", "pix", "Boleto Bancário", ...). ``resolve_method``
classifies a label into a canonical ``PaymentMethod`` and ``policy_for``
returns how that method settles relative to the issue date.
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from enum import Enum


class PaymentMethod(Enum):
    """Canonical payment methods."""

    CREDITO = "CREDITO"
    DEBITO = "DEBITO"
    PIX = "PIX"
    BOLETO = "BOLETO"
    CHEQUE = "CHEQUE"
    TRANSFERENCIA = "TRANSFERENCIA"
    CONVENIO = "CONVENIO"
    DINHEIRO = "DINHEIRO"
    OUTRO = "OUTRO"


# Ordered: first match wins ("CREDITO CONVENIO" is a credit-card label).
_KEYWORDS: tuple[tuple[tuple[str, ...], PaymentMethod], ...] = (
    (("CREDITO",), PaymentMethod.CREDITO),
    (("DEBITO",), PaymentMethod.DEBITO),
    (("PIX",), PaymentMethod.PIX),
    (("BOLETO",), PaymentMethod.BOLETO),
    (("CHEQUE",), PaymentMethod.CHEQUE),
    (("TRANSFER", "TED", "DOC"), PaymentMethod.TRANSFERENCIA),
    (("CONVENIO",), PaymentMethod.CONVENIO),
    (("DINHEIRO", "CASH"), PaymentMethod.DINHEIRO),
)


def normalize_label(label: str | None) -> str:
    """Strip diacritics and uppercase a payment label."""
    decomposed = unicodedata.normalize("NFD", label or "")
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.upper()


def resolve_method(label: str | None) -> PaymentMethod:
    """
    Classify a free-text payment label into a canonical method.

    **Args:**
        label: Raw label from the ledger row (``None`` allowed)

    **Returns:**
        The first ``PaymentMethod`` whose keyword is contained in the
        normalized label, or ``PaymentMethod.OUTRO``

    **Example:**
        ```python
        resolve_method("Cartão de Crédito")  # PaymentMethod.CREDITO
        resolve_method("Débito")             # PaymentMethod.DEBITO
        resolve_method("Permuta")            # PaymentMethod.OUTRO
        ```
    """
    raw = normalize_label(label)
    for keywords, method in _KEYWORDS:
        if any(keyword in raw for keyword in keywords):
            return method
    return PaymentMethod.OUTRO


class BaseOffset(Enum):
    """How the base settlement date is derived from the issue date."""

    SAME_DAY = "same_day"
    CALENDAR_DAYS = "calendar_days"
    BUSINESS_DAYS = "business_days"


class Spacing(Enum):
    """How installments after the first are spaced from the base date."""

    NONE = "none"
    DAYS = "days"
    MONTHLY = "monthly"


@dataclass(frozen=True)
class SettlementPolicy:
    """
    Settlement-offset policy of a payment method.

    Attributes:
        base_offset: Offset type applied to the issue date when no explicit date exists
        offset_days: Size of the base offset (calendar or business days)
        spacing: Spacing rule for installment index > 0
        interval_days: Day interval when ``spacing`` is ``Spacing.DAYS``
    """

    base_offset: BaseOffset = BaseOffset.SAME_DAY
    offset_days: int = 0
    spacing: Spacing = Spacing.MONTHLY
    interval_days: int = 0


_CARD_POLICY = SettlementPolicy(
    base_offset=BaseOffset.CALENDAR_DAYS,
    offset_days=30,
    spacing=Spacing.DAYS,
    interval_days=30,
)
_SAME_DAY_MONTHLY = SettlementPolicy()

POLICIES: dict[PaymentMethod, SettlementPolicy] = {
    PaymentMethod.BOLETO: SettlementPolicy(spacing=Spacing.NONE),
    PaymentMethod.CHEQUE: SettlementPolicy(spacing=Spacing.NONE),
    PaymentMethod.CREDITO: _CARD_POLICY,
    PaymentMethod.CONVENIO: _CARD_POLICY,
    PaymentMethod.DEBITO: SettlementPolicy(
        base_offset=BaseOffset.BUSINESS_DAYS, offset_days=1, spacing=Spacing.MONTHLY
    ),
    PaymentMethod.PIX: _SAME_DAY_MONTHLY,
    PaymentMethod.TRANSFERENCIA: _SAME_DAY_MONTHLY,
    PaymentMethod.DINHEIRO: _SAME_DAY_MONTHLY,
    PaymentMethod.OUTRO: _SAME_DAY_MONTHLY,
}


def policy_for(method: PaymentMethod) -> SettlementPolicy:
    """Get the settlement policy of a canonical method."""
    return POLICIES[method]
