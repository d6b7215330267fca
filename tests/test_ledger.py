"""Ledger core tests: balances, updates, transfers and categories."""

from __future__ import annotations

from datetime import datetime

import pytest

from monifly.domain.errors import (
    INVALID_AMOUNT,
    INVALID_STATE,
    TRANSACTION_NOT_FOUND,
    WALLET_NOT_FOUND,
)
from tests.conftest import assert_float_equal


def _balance(app, wallet_id: int) -> float:
    return app.get_wallet(wallet_id).balance


class TestBalanceInvariant:
    def test_create_update_delete_restores_balance(self, app, wallet_factory):
        wallet = wallet_factory(name="Cash", currency="RUB", initial_balance=1000)

        created = app.create_transaction(
            wallet_id=wallet.id, type="expense", amount=200, category="groceries"
        )
        assert created.ok
        assert_float_equal(_balance(app, wallet.id), 800)

        updated = app.update_transaction(created.value.id, amount=300)
        assert updated.ok
        assert_float_equal(_balance(app, wallet.id), 700)

        deleted = app.delete_transaction(created.value.id)
        assert deleted.ok
        assert_float_equal(_balance(app, wallet.id), 1000)
        assert app.verify_balances() == []

    def test_income_and_expense_effects(self, app, wallet_factory, transaction_factory):
        wallet = wallet_factory(initial_balance=50)
        transaction_factory(wallet.id, 100, type="income", category="salary")
        transaction_factory(wallet.id, 30, type="expense")

        assert_float_equal(_balance(app, wallet.id), 120)
        assert app.verify_balances() == []

    def test_expense_may_overdraw_plain_wallet(self, app, wallet_factory, transaction_factory):
        wallet = wallet_factory(initial_balance=10)
        transaction_factory(wallet.id, 25)
        assert_float_equal(_balance(app, wallet.id), -15)

    def test_foreign_currency_entry_is_stored_in_wallet_currency(self, app, wallet_factory):
        wallet = wallet_factory(currency="RUB", initial_balance=0)

        result = app.create_transaction(
            wallet_id=wallet.id, type="income", amount=10, currency="USD", category="salary"
        )

        assert result.ok
        assert result.value.currency == "RUB"
        assert result.value.amount == pytest.approx(1000.0)
        assert_float_equal(_balance(app, wallet.id), 1000)

    def test_move_transaction_between_wallets(self, app, wallet_factory, transaction_factory):
        rub = wallet_factory(name="Rubles", currency="RUB", initial_balance=5000)
        usd = wallet_factory(name="Dollars", currency="USD", initial_balance=100)
        txn = transaction_factory(rub.id, 1000)

        result = app.update_transaction(txn.id, wallet_id=usd.id)

        assert result.ok
        assert_float_equal(_balance(app, rub.id), 5000)
        # 1000 RUB re-converted into the new wallet currency
        assert_float_equal(_balance(app, usd.id), 90)
        assert result.value.currency == "USD"
        assert app.verify_balances() == []

    def test_change_type_flips_effect(self, app, wallet_factory, transaction_factory):
        wallet = wallet_factory(initial_balance=100)
        txn = transaction_factory(wallet.id, 40)

        app.update_transaction(txn.id, type="income")

        assert_float_equal(_balance(app, wallet.id), 140)


class TestRejections:
    def test_non_positive_amount_is_rejected(self, app, wallet_factory):
        wallet = wallet_factory(initial_balance=100)
        for amount in (0, -5):
            result = app.create_transaction(wallet_id=wallet.id, type="expense", amount=amount)
            assert result.rejected
            assert result.code == INVALID_AMOUNT
        assert app.list_transactions() == []
        assert_float_equal(_balance(app, wallet.id), 100)

    def test_missing_wallet_is_rejected(self, app):
        result = app.create_transaction(wallet_id=999, type="income", amount=5)
        assert result.rejected
        assert result.code == WALLET_NOT_FOUND

    def test_rejected_update_leaves_both_wallets_untouched(
        self, app, wallet_factory, transaction_factory
    ):
        wallet = wallet_factory(initial_balance=100)
        txn = transaction_factory(wallet.id, 40)

        result = app.update_transaction(txn.id, wallet_id=12345)

        assert result.code == WALLET_NOT_FOUND
        assert_float_equal(_balance(app, wallet.id), 60)
        assert app.get_transaction(txn.id).wallet_id == wallet.id

    def test_unknown_transaction(self, app):
        assert app.delete_transaction(42).code == TRANSACTION_NOT_FOUND
        assert app.update_transaction(42, amount=5).code == TRANSACTION_NOT_FOUND

    def test_unknown_type_raises(self, app, wallet_factory):
        wallet = wallet_factory()
        with pytest.raises(ValueError):
            app.create_transaction(wallet_id=wallet.id, type="refund", amount=1)


class TestTransfers:
    def test_transfer_moves_money_between_currencies(self, app, wallet_factory):
        usd = wallet_factory(name="USD", currency="USD", initial_balance=100)
        rub = wallet_factory(name="RUB", currency="RUB", initial_balance=0)

        result = app.create_transfer(from_wallet_id=usd.id, to_wallet_id=rub.id, amount=10)

        assert result.ok
        outgoing, incoming = result.value
        assert outgoing.transfer_peer_id == incoming.id
        assert incoming.transfer_peer_id == outgoing.id
        assert_float_equal(_balance(app, usd.id), 90)
        assert_float_equal(_balance(app, rub.id), 1000)
        assert app.verify_balances() == []

    def test_deleting_one_leg_removes_both(self, app, wallet_factory):
        a = wallet_factory(name="A", initial_balance=50)
        b = wallet_factory(name="B", initial_balance=0)
        outgoing, _ = app.create_transfer(from_wallet_id=a.id, to_wallet_id=b.id, amount=20).value

        assert app.delete_transaction(outgoing.id).ok

        assert app.list_transactions() == []
        assert_float_equal(_balance(app, a.id), 50)
        assert_float_equal(_balance(app, b.id), 0)

    def test_transfer_legs_cannot_be_edited(self, app, wallet_factory):
        a = wallet_factory(name="A", initial_balance=50)
        b = wallet_factory(name="B")
        outgoing, _ = app.create_transfer(from_wallet_id=a.id, to_wallet_id=b.id, amount=5).value

        result = app.update_transaction(outgoing.id, amount=10)

        assert result.code == INVALID_STATE

    def test_transfer_to_same_wallet_rejected(self, app, wallet_factory):
        a = wallet_factory()
        assert app.create_transfer(from_wallet_id=a.id, to_wallet_id=a.id, amount=5).rejected

    def test_transfers_do_not_count_as_income_or_expense(self, app, wallet_factory):
        a = wallet_factory(name="A", initial_balance=50)
        b = wallet_factory(name="B")
        app.create_transfer(
            from_wallet_id=a.id, to_wallet_id=b.id, amount=5, occurred_at=datetime(2024, 5, 3)
        )

        overview = app.overview("currentMonth")

        assert overview.income == 0
        assert overview.expenses == 0
        assert overview.transaction_count == 2


class TestWallets:
    def test_first_wallet_becomes_default(self, app, wallet_factory):
        first = wallet_factory(name="First")
        second = wallet_factory(name="Second")
        assert app.get_wallet(first.id).is_default
        assert not app.get_wallet(second.id).is_default

    def test_only_one_default(self, app, wallet_factory):
        first = wallet_factory(name="First")
        second = wallet_factory(name="Second")

        app.set_default_wallet(second.id)

        assert not app.get_wallet(first.id).is_default
        assert app.get_wallet(second.id).is_default

    def test_deleting_default_promotes_next(self, app, wallet_factory, transaction_factory):
        first = wallet_factory(name="First", initial_balance=10)
        second = wallet_factory(name="Second")
        transaction_factory(first.id, 5)

        result = app.delete_wallet(first.id)

        assert result.ok
        assert result.value == 1
        assert app.get_wallet(second.id).is_default
        assert app.list_transactions() == []

    def test_balance_edit_reseeds_initial_balance(self, app, wallet_factory, transaction_factory):
        wallet = wallet_factory(initial_balance=100)
        transaction_factory(wallet.id, 30)

        app.update_wallet(wallet.id, balance=500)

        stored = app.get_wallet(wallet.id)
        assert_float_equal(stored.balance, 500)
        assert_float_equal(stored.initial_balance, 530)
        assert app.verify_balances() == []

    def test_currency_change_blocked_with_history(self, app, wallet_factory, transaction_factory):
        wallet = wallet_factory(currency="USD", initial_balance=10)
        transaction_factory(wallet.id, 1)

        result = app.update_wallet(wallet.id, currency="EUR")

        assert result.code == INVALID_STATE
        assert app.get_wallet(wallet.id).currency == "USD"

    def test_reorder_wallets(self, app, wallet_factory):
        a = wallet_factory(name="A")
        b = wallet_factory(name="B")
        c = wallet_factory(name="C")

        result = app.reorder_wallets([c.id, a.id, b.id])

        assert result.ok
        assert [w.name for w in app.list_wallets()] == ["C", "A", "B"]

    def test_total_balance_in_display_currency(self, app, wallet_factory):
        wallet_factory(name="USD", currency="USD", initial_balance=10)
        wallet_factory(name="RUB", currency="RUB", initial_balance=1000)

        # Display currency defaults to RUB
        assert app.total_balance() == pytest.approx(2000.0)
        assert app.total_balance("USD") == pytest.approx(20.0)


class TestCategoriesAndQueries:
    def test_unknown_category_is_registered_once(self, app, wallet_factory, transaction_factory):
        wallet = wallet_factory(initial_balance=100)
        transaction_factory(wallet.id, 1, category="Pets")
        transaction_factory(wallet.id, 1, category="pets")
        transaction_factory(wallet.id, 1, category="groceries")

        categories = app.list_categories()

        assert categories.count("Pets") == 1
        assert "pets" not in categories
        assert categories.count("groceries") == 1

    def test_blank_category_becomes_other(self, app, wallet_factory, transaction_factory):
        wallet = wallet_factory(initial_balance=100)
        txn = transaction_factory(wallet.id, 1, category="  ")
        assert txn.category == "other"

    def test_newest_first_with_id_tie_break(self, app, wallet_factory, transaction_factory):
        wallet = wallet_factory(initial_balance=100)
        same_time = datetime(2024, 5, 1, 9, 0)
        first = transaction_factory(wallet.id, 1, occurred_at=same_time)
        second = transaction_factory(wallet.id, 2, occurred_at=same_time)
        newest = transaction_factory(wallet.id, 3, occurred_at=datetime(2024, 5, 2))

        ids = [t.id for t in app.list_transactions()]

        assert ids == [newest.id, first.id, second.id]

    def test_transactions_on_date_and_category(self, app, wallet_factory, transaction_factory):
        wallet = wallet_factory(initial_balance=100)
        transaction_factory(wallet.id, 1, category="rent", occurred_at=datetime(2024, 5, 1, 8))
        transaction_factory(wallet.id, 2, category="rent", occurred_at=datetime(2024, 4, 1, 8))
        transaction_factory(wallet.id, 3, category="travel", occurred_at=datetime(2024, 5, 1, 20))

        on_day = app.transactions_on_date(datetime(2024, 5, 1).date())
        rent_this_month = app.transactions_for_category("rent", "currentMonth")

        assert sorted(t.amount for t in on_day) == [1, 3]
        assert [t.amount for t in rent_this_month] == [1]
        assert len(app.transactions_for_category("rent")) == 2

    def test_tags_are_stored(self, app, wallet_factory, transaction_factory):
        wallet = wallet_factory(initial_balance=100)
        txn = transaction_factory(wallet.id, 1, tags=["home", "monthly"])
        assert app.get_transaction(txn.id).tags == ["home", "monthly"]
