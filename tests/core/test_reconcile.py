"""
Tests for series reconciliation and account balance recalculation.
"""

import logging
from datetime import date
from decimal import Decimal

import pytest

from settlelab.core.aggregation import aggregate_daily
from settlelab.core.entries import BankAccountSnapshot, EntryKind, LedgerEntry
from settlelab.core.errors import BalancePersistenceError
from settlelab.core.interfaces import BalanceStore
from settlelab.core.parcels import CashParcel
from settlelab.core.reconcile import (
    apply_corrections,
    persist_balance_corrections,
    rebase_initial_balance,
    recalculate_account_balances,
    reconcile_series,
    reconciliation_offset,
    total_balance,
)


class RecordingStore:
    """In-memory balance store."""

    def __init__(self):
        self.writes = []

    def update_current_balance(self, account_id, balance):
        self.writes.append((account_id, balance))


class FailingStore:
    def update_current_balance(self, account_id, balance):
        raise RuntimeError("connection lost")


def parcel(day, amount, kind=EntryKind.REVENUE):
    return CashParcel("x", 0, kind, Decimal(amount), day)


def revenue(id, issue, amount, method="PIX", installments=1, account="acc"):
    return LedgerEntry(
        id=id,
        kind=EntryKind.REVENUE,
        issue_date=issue,
        gross_amount=Decimal(amount),
        payment_method_label=method,
        installment_count=installments,
        bank_account_id=account,
    )


def expense(id, amount, status="paid", account="acc"):
    return LedgerEntry(
        id=id,
        kind=EntryKind.EXPENSE,
        issue_date=date(2026, 1, 5),
        gross_amount=Decimal(amount),
        explicit_settlement_date=date(2026, 1, 5),
        status=status,
        bank_account_id=account,
    )


@pytest.fixture
def daily():
    parcels = [
        parcel(date(2026, 1, 5), "100.00"),
        parcel(date(2026, 1, 10), "40.00", EntryKind.EXPENSE),
        parcel(date(2026, 1, 25), "300.00"),
    ]
    return aggregate_daily(parcels, today=date(2026, 1, 15))


class TestReconcileSeries:
    def test_today_bucket_equals_real_balance(self, daily):
        reconciled = reconcile_series(daily, Decimal("1000.00"), date(2026, 1, 15))
        today = next(b for b in reconciled if b.date == date(2026, 1, 15))
        assert today.reconciled_balance == Decimal("1000.00")

    def test_shape_is_preserved(self, daily):
        reconciled = reconcile_series(daily, Decimal("1000.00"), date(2026, 1, 15))
        assert [b.reconciled_balance for b in reconciled] == [
            Decimal("1040.00"),
            Decimal("1000.00"),
            Decimal("1000.00"),
            Decimal("1300.00"),
        ]
        offsets = {b.reconciled_balance - b.cumulative_balance for b in reconciled}
        assert offsets == {Decimal("940.00")}

    def test_input_is_not_mutated(self, daily):
        reconcile_series(daily, Decimal("1000.00"), date(2026, 1, 15))
        assert all(b.reconciled_balance is None for b in daily)

    def test_seeded_series(self):
        parcels = [parcel(date(2026, 1, 5), "100.00")]
        seeded = aggregate_daily(parcels, today=date(2026, 1, 6), seed=Decimal("500"))
        reconciled = reconcile_series(seeded, Decimal("80.00"), date(2026, 1, 6))
        assert reconciled[-1].reconciled_balance == Decimal("80.00")

    def test_today_before_series(self, daily):
        offset = reconciliation_offset(daily, Decimal("10.00"), date(2025, 12, 31))
        assert offset == Decimal("10.00")

    def test_window_outside_today_starts_from_real_balance(self, daily):
        reconciled = reconcile_series(
            daily, Decimal("1000.00"), date(2026, 3, 1), today_in_window=False
        )
        assert [b.reconciled_balance for b in reconciled] == [
            Decimal("1100.00"),
            Decimal("1060.00"),
            Decimal("1060.00"),
            Decimal("1360.00"),
        ]

    def test_empty_series(self):
        assert reconcile_series([], Decimal("10"), date(2026, 1, 1)) == []


class TestRecalculateBalances:
    def test_corrected_balance_from_realized_cash(self):
        accounts = [BankAccountSnapshot("acc", Decimal("1000.00"), Decimal("1000.00"))]
        revenues = [
            revenue("r1", date(2026, 1, 1), "100.00", method="Cartão de Crédito", installments=2),
            revenue("r2", date(2026, 1, 20), "80.00"),
        ]
        expenses = [expense("e1", "30.00"), expense("e2", "999.00", status="pending")]

        (correction,) = recalculate_account_balances(
            accounts, revenues, expenses, date(2026, 2, 1)
        )
        assert correction.realized_revenue == Decimal("130.00")
        assert correction.realized_expense == Decimal("30.00")
        assert correction.corrected_balance == Decimal("1100.00")
        assert correction.delta == Decimal("100.00")
        assert correction.needs_update

    def test_within_tolerance_is_left_alone(self):
        accounts = [BankAccountSnapshot("acc", Decimal("0"), Decimal("100.00"))]
        revenues = [revenue("r1", date(2026, 1, 1), "100.00")]
        (correction,) = recalculate_account_balances(accounts, revenues, [], date(2026, 1, 2))
        assert not correction.needs_update

    def test_custom_tolerance(self):
        accounts = [BankAccountSnapshot("acc", Decimal("0"), Decimal("100.50"))]
        revenues = [revenue("r1", date(2026, 1, 1), "100.00")]
        (correction,) = recalculate_account_balances(
            accounts, revenues, [], date(2026, 1, 2), tolerance=Decimal("1")
        )
        assert not correction.needs_update

    def test_entries_are_routed_to_their_account(self):
        accounts = [
            BankAccountSnapshot("a", Decimal("0"), Decimal("0")),
            BankAccountSnapshot("b", Decimal("0"), Decimal("0")),
        ]
        revenues = [
            revenue("r1", date(2026, 1, 1), "10.00", account="a"),
            revenue("r2", date(2026, 1, 1), "20.00", account="b"),
            revenue("r3", date(2026, 1, 1), "40.00", account=None),
        ]
        corrections = recalculate_account_balances(accounts, revenues, [], date(2026, 1, 2))
        assert {c.account_id: c.corrected_balance for c in corrections} == {
            "a": Decimal("10.00"),
            "b": Decimal("20.00"),
        }

    def test_future_installments_do_not_count(self):
        accounts = [BankAccountSnapshot("acc", Decimal("0"))]
        revenues = [revenue("r1", date(2026, 1, 1), "100.00", method="Crédito", installments=2)]
        (correction,) = recalculate_account_balances(accounts, revenues, [], date(2026, 1, 30))
        assert correction.realized_revenue == Decimal("0")


class TestPersistence:
    def _corrections(self):
        accounts = [
            BankAccountSnapshot("drifted", Decimal("0"), Decimal("5.00")),
            BankAccountSnapshot("ok", Decimal("0"), Decimal("0")),
        ]
        revenues = [revenue("r1", date(2026, 1, 1), "50.00", account="drifted")]
        return recalculate_account_balances(accounts, revenues, [], date(2026, 1, 2))

    def test_store_satisfies_protocol(self):
        assert isinstance(RecordingStore(), BalanceStore)

    def test_only_drifted_balances_are_written(self, caplog):
        store = RecordingStore()
        with caplog.at_level(logging.INFO, logger="settlelab.core.reconcile"):
            written = persist_balance_corrections(self._corrections(), store)
        assert store.writes == [("drifted", Decimal("50.00"))]
        assert [c.account_id for c in written] == ["drifted"]
        assert "drifted" in caplog.text

    def test_store_failure_propagates(self, caplog):
        with caplog.at_level(logging.ERROR, logger="settlelab.core.reconcile"):
            with pytest.raises(BalancePersistenceError, match="drifted") as exc_info:
                persist_balance_corrections(self._corrections(), FailingStore())
        assert exc_info.value.account_id == "drifted"
        assert exc_info.value.balance == Decimal("50.00")
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert "connection lost" in caplog.text


class TestAccountHelpers:
    def test_apply_corrections(self):
        accounts = [BankAccountSnapshot("acc", Decimal("0"), Decimal("5.00"))]
        corrections = recalculate_account_balances(
            accounts, [revenue("r1", date(2026, 1, 1), "50.00")], [], date(2026, 1, 2)
        )
        (updated,) = apply_corrections(accounts, corrections)
        assert updated.current_balance == Decimal("50.00")
        assert updated.initial_balance == Decimal("0")

    def test_rebase_initial_balance_survives_recalculation(self):
        account = BankAccountSnapshot("acc", Decimal("100.00"), Decimal("150.00"))
        revenues = [revenue("r1", date(2026, 1, 1), "50.00")]
        rebased = rebase_initial_balance(account, Decimal("200.00"))
        assert rebased.initial_balance == Decimal("150.00")
        assert rebased.current_balance == Decimal("200.00")
        (correction,) = recalculate_account_balances(
            [rebased], revenues, [], date(2026, 1, 2)
        )
        assert correction.corrected_balance == Decimal("200.00")
        assert not correction.needs_update

    def test_total_balance(self):
        accounts = [
            BankAccountSnapshot("a", Decimal("10.00"), Decimal("15.00")),
            BankAccountSnapshot("b", Decimal("7.00")),
        ]
        assert total_balance(accounts) == Decimal("22.00")
        assert total_balance([]) == Decimal("0")
