"""Debt lifecycle tests."""

from __future__ import annotations

from datetime import date

import pytest

from monifly.domain.errors import (
    DEBT_NOT_FOUND,
    INSUFFICIENT_FUNDS,
    INVALID_AMOUNT,
    INVALID_STATE,
    WALLET_NOT_FOUND,
)
from tests.conftest import assert_float_equal


def _lend(app, wallet_id, amount=1000, **kwargs):
    return app.create_debt(
        type="owedToMe",
        person_name="Alex",
        amount=amount,
        currency="USD",
        wallet_id=wallet_id,
        **kwargs,
    )


def _borrow(app, wallet_id, amount=500, **kwargs):
    return app.create_debt(
        type="iOwe",
        person_name="Bank",
        amount=amount,
        currency="USD",
        wallet_id=wallet_id,
        **kwargs,
    )


def test_lending_debits_wallet_and_overpayment_is_clamped(app, wallet_factory):
    wallet = wallet_factory(initial_balance=1500)

    created = _lend(app, wallet.id)
    assert created.ok
    assert_float_equal(app.get_wallet(wallet.id).balance, 500)

    payment = app.record_debt_payment(debt_id=created.value.id, wallet_id=wallet.id, amount=1200)

    assert payment.ok
    assert payment.value.amount == pytest.approx(1000)
    debt = app.get_debt(created.value.id)
    assert debt.paid_amount == pytest.approx(1000)
    assert debt.remaining == 0
    assert debt.status == "paid"
    assert_float_equal(app.get_wallet(wallet.id).balance, 1500)
    assert app.verify_balances() == []


def test_lending_without_funds_is_rejected(app, wallet_factory):
    wallet = wallet_factory(initial_balance=100)

    result = _lend(app, wallet.id)

    assert result.rejected
    assert result.code == INSUFFICIENT_FUNDS
    assert app.debts_owed_to_me() == []
    assert app.list_transactions() == []


def test_borrowing_credits_wallet(app, wallet_factory):
    wallet = wallet_factory(initial_balance=0)

    result = _borrow(app, wallet.id)

    assert result.ok
    assert_float_equal(app.get_wallet(wallet.id).balance, 500)
    txn = app.transactions_for_wallet(wallet.id)[0]
    assert txn.type == "income"
    assert txn.category == "debt"
    assert txn.debt_id == result.value.id


def test_status_moves_forward_only(app, wallet_factory):
    wallet = wallet_factory(initial_balance=1000)
    debt = _borrow(app, wallet.id, amount=300).value
    paid = []
    statuses = []

    for amount in (100, 100, 100):
        app.record_debt_payment(debt_id=debt.id, wallet_id=wallet.id, amount=amount)
        current = app.get_debt(debt.id)
        paid.append(current.paid_amount)
        statuses.append(current.status)

    assert paid == sorted(paid)
    assert statuses == ["partiallyPaid", "partiallyPaid", "paid"]
    # Repaying a borrowed debt is an expense
    assert_float_equal(app.get_wallet(wallet.id).balance, 1000)


def test_payment_on_paid_or_cancelled_debt_is_rejected(app, wallet_factory):
    wallet = wallet_factory(initial_balance=1000)
    paid = _borrow(app, wallet.id, amount=100).value
    app.record_debt_payment(debt_id=paid.id, wallet_id=wallet.id, amount=100)
    cancelled = _borrow(app, wallet.id, amount=100).value
    assert app.cancel_debt(cancelled.id).ok

    for debt_id in (paid.id, cancelled.id):
        result = app.record_debt_payment(debt_id=debt_id, wallet_id=wallet.id, amount=10)
        assert result.code == INVALID_STATE
    assert app.cancel_debt(paid.id).code == INVALID_STATE


def test_payment_for_deleted_debt_is_an_integrity_fault(app, wallet_factory):
    wallet = wallet_factory(initial_balance=1000)
    debt = _borrow(app, wallet.id).value
    app.delete_debt(debt.id)
    balance = app.get_wallet(wallet.id).balance

    result = app.record_debt_payment(debt_id=debt.id, wallet_id=wallet.id, amount=10)

    assert result.integrity_fault
    assert not result.rejected
    assert result.code == DEBT_NOT_FOUND
    assert app.get_wallet(wallet.id).balance == balance


def test_invalid_payment_inputs(app, wallet_factory):
    wallet = wallet_factory(initial_balance=1000)
    debt = _borrow(app, wallet.id).value

    assert app.record_debt_payment(debt_id=debt.id, wallet_id=wallet.id, amount=0).code == (
        INVALID_AMOUNT
    )
    assert app.record_debt_payment(debt_id=debt.id, wallet_id=99, amount=5).code == (
        WALLET_NOT_FOUND
    )
    assert app.get_debt(debt.id).paid_amount == 0


def test_payment_in_other_currency_is_converted(app, wallet_factory):
    wallet = wallet_factory(name="Rubles", currency="RUB", initial_balance=100000)
    debt = _borrow(app, wallet.id, amount=100).value

    result = app.record_debt_payment(
        debt_id=debt.id, wallet_id=wallet.id, amount=5000, currency="RUB"
    )

    assert result.ok
    assert result.value.amount == pytest.approx(50)
    assert result.value.currency == "USD"
    # 100 USD borrowed (+10000 RUB), 50 USD repaid (-5000 RUB)
    assert_float_equal(app.get_wallet(wallet.id).balance, 105000)
    assert app.get_debt(debt.id).status == "partiallyPaid"


def test_overdue_marking_and_partial_payment(app, wallet_factory):
    wallet = wallet_factory(initial_balance=1000)
    late = _borrow(app, wallet.id, amount=200, due_date=date(2024, 5, 1)).value
    on_time = _borrow(app, wallet.id, amount=200, due_date=date(2024, 5, 15)).value

    result = app.mark_overdue_debts()

    assert result.value == [late.id]
    assert app.get_debt(on_time.id).status == "pending"

    app.record_debt_payment(debt_id=late.id, wallet_id=wallet.id, amount=50)
    assert app.get_debt(late.id).status == "overdue"
    app.record_debt_payment(debt_id=late.id, wallet_id=wallet.id, amount=150)
    assert app.get_debt(late.id).status == "paid"


def test_payment_history_and_outstanding_totals(app, wallet_factory):
    app.set_display_currency("USD")
    wallet = wallet_factory(initial_balance=2000)
    owe = _borrow(app, wallet.id, amount=300).value
    _lend(app, wallet.id, amount=400)
    app.record_debt_payment(debt_id=owe.id, wallet_id=wallet.id, amount=100, note="first")
    app.record_debt_payment(
        debt_id=owe.id, wallet_id=wallet.id, amount=50, paid_on=date(2024, 5, 20)
    )

    payments = app.debt_payments(owe.id).value

    assert [p.amount for p in payments] == [100, 50]
    assert sum(p.amount for p in payments) == pytest.approx(app.get_debt(owe.id).paid_amount)
    totals = app.outstanding_debt_totals()
    assert totals["iOwe"] == pytest.approx(150)
    assert totals["owedToMe"] == pytest.approx(400)


def test_update_debt_edits_descriptive_fields(app, wallet_factory):
    wallet = wallet_factory(initial_balance=10)
    debt = _borrow(app, wallet.id).value

    result = app.update_debt(debt.id, person_name="Credit Union", interest_rate=4.5)

    assert result.ok
    stored = app.get_debt(debt.id)
    assert stored.person_name == "Credit Union"
    assert stored.interest_rate == 4.5
    assert stored.initial_amount == 500


def test_unknown_debt_type_rejected(app, wallet_factory):
    wallet = wallet_factory(initial_balance=10)
    result = app.create_debt(
        type="gift", person_name="X", amount=1, currency="USD", wallet_id=wallet.id
    )
    assert result.rejected
