"""
Tests for payment-method resolution and settlement policies.
"""

import pytest

from settlelab.core.methods import (
    BaseOffset,
    PaymentMethod,
    Spacing,
    normalize_label,
    policy_for,
    resolve_method,
)


class TestResolveMethod:
    """Label classification with ordered keyword precedence."""

    @pytest.mark.parametrize(
        "label,expected",
        [
            ("Cartão de Crédito", PaymentMethod.CREDITO),
            ("credito 3x", PaymentMethod.CREDITO),
            ("Cartão de Débito", PaymentMethod.DEBITO),
            ("Pix", PaymentMethod.PIX),
            ("Boleto Bancário", PaymentMethod.BOLETO),
            ("cheque pré-datado", PaymentMethod.CHEQUE),
            ("Transferência", PaymentMethod.TRANSFERENCIA),
            ("TED", PaymentMethod.TRANSFERENCIA),
            ("doc", PaymentMethod.TRANSFERENCIA),
            ("Convênio", PaymentMethod.CONVENIO),
            ("Dinheiro", PaymentMethod.DINHEIRO),
            ("cash", PaymentMethod.DINHEIRO),
            ("Permuta", PaymentMethod.OUTRO),
        ],
    )
    def test_labels(self, label, expected):
        assert resolve_method(label) is expected

    def test_empty_and_none_fall_through_to_outro(self):
        assert resolve_method(None) is PaymentMethod.OUTRO
        assert resolve_method("") is PaymentMethod.OUTRO

    def test_credit_wins_over_convenio(self):
        """A label with both keywords resolves to the earlier rule."""
        assert resolve_method("Convênio - Cartão de Crédito") is PaymentMethod.CREDITO

    def test_debit_wins_over_pix(self):
        assert resolve_method("PIX ou débito") is PaymentMethod.DEBITO

    def test_transfer_wins_over_cash(self):
        assert resolve_method("Transferência em dinheiro") is PaymentMethod.TRANSFERENCIA

    def test_normalize_strips_diacritics(self):
        assert normalize_label("Crédito à vista") == "CREDITO A VISTA"


class TestPolicies:
    """Offset policy table."""

    def test_card_methods_offset_thirty_days(self):
        for method in (PaymentMethod.CREDITO, PaymentMethod.CONVENIO):
            policy = policy_for(method)
            assert policy.base_offset is BaseOffset.CALENDAR_DAYS
            assert policy.offset_days == 30
            assert policy.spacing is Spacing.DAYS
            assert policy.interval_days == 30

    def test_debit_offsets_one_business_day(self):
        policy = policy_for(PaymentMethod.DEBITO)
        assert policy.base_offset is BaseOffset.BUSINESS_DAYS
        assert policy.offset_days == 1
        assert policy.spacing is Spacing.MONTHLY

    def test_boleto_and_cheque_have_no_spacing(self):
        for method in (PaymentMethod.BOLETO, PaymentMethod.CHEQUE):
            policy = policy_for(method)
            assert policy.base_offset is BaseOffset.SAME_DAY
            assert policy.spacing is Spacing.NONE

    def test_instant_methods_space_monthly(self):
        for method in (
            PaymentMethod.PIX,
            PaymentMethod.TRANSFERENCIA,
            PaymentMethod.DINHEIRO,
            PaymentMethod.OUTRO,
        ):
            policy = policy_for(method)
            assert policy.base_offset is BaseOffset.SAME_DAY
            assert policy.spacing is Spacing.MONTHLY

    def test_every_method_has_a_policy(self):
        for method in PaymentMethod:
            assert policy_for(method) is not None
