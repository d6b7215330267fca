"""Crypto cost-basis tracker tests."""

from __future__ import annotations

import pytest

from monifly.domain.errors import (
    HOLDING_NOT_FOUND,
    INSUFFICIENT_FUNDS,
    INSUFFICIENT_QUANTITY,
    INVALID_AMOUNT,
)
from tests.conftest import assert_float_equal


@pytest.fixture
def funded_wallet(wallet_factory):
    return wallet_factory(name="Broker", currency="USD", initial_balance=10000)


def _buy(app, wallet_id, amount, price, symbol="BTC", currency="USD"):
    return app.buy_crypto(
        wallet_id=wallet_id,
        symbol=symbol,
        amount=amount,
        price_per_unit=price,
        currency=currency,
    )


def test_repeated_buys_blend_into_weighted_average(app, funded_wallet):
    first = _buy(app, funded_wallet.id, 0.05, 40000)
    second = _buy(app, funded_wallet.id, 0.05, 50000)

    assert first.ok and second.ok
    holdings = app.list_holdings()
    assert len(holdings) == 1
    btc = holdings[0]
    assert btc.amount == pytest.approx(0.10)
    assert btc.purchase_price == pytest.approx(45000)
    assert_float_equal(app.get_wallet(funded_wallet.id).balance, 10000 - 2000 - 2500)


def test_buy_in_other_currency_converts_into_holding_currency(app, wallet_factory):
    wallet = wallet_factory(name="EUR", currency="EUR", initial_balance=10000)
    _buy(app, wallet.id, 1, 100, symbol="ETH", currency="USD")
    # 80 EUR is 100 USD, so the new lot costs the same as the first one
    _buy(app, wallet.id, 1, 80, symbol="ETH", currency="EUR")

    eth = app.list_holdings()[0]
    assert eth.purchase_currency == "USD"
    assert eth.purchase_price == pytest.approx(100)


def test_buy_posts_crypto_expense(app, funded_wallet):
    _buy(app, funded_wallet.id, 0.01, 50000)

    txns = app.transactions_for_wallet(funded_wallet.id)
    assert len(txns) == 1
    assert txns[0].type == "expense"
    assert txns[0].category == "crypto"
    assert txns[0].amount == pytest.approx(500)


def test_buy_without_funds_is_rejected(app, wallet_factory):
    wallet = wallet_factory(initial_balance=100)

    result = _buy(app, wallet.id, 1, 60000)

    assert result.code == INSUFFICIENT_FUNDS
    assert app.list_holdings() == []
    assert app.list_transactions() == []
    assert_float_equal(app.get_wallet(wallet.id).balance, 100)


def test_buy_rejects_non_positive_values(app, funded_wallet):
    assert _buy(app, funded_wallet.id, 0, 100).code == INVALID_AMOUNT
    assert _buy(app, funded_wallet.id, 1, -1).code == INVALID_AMOUNT


def test_partial_sell_keeps_average_cost(app, funded_wallet):
    holding = _buy(app, funded_wallet.id, 0.1, 40000).value

    result = app.sell_crypto(
        wallet_id=funded_wallet.id,
        holding_id=holding.id,
        amount=0.04,
        price_per_unit=50000,
        currency="USD",
    )

    assert result.ok
    remaining = result.value
    assert remaining.amount == pytest.approx(0.06)
    assert remaining.purchase_price == pytest.approx(40000)
    assert_float_equal(app.get_wallet(funded_wallet.id).balance, 10000 - 4000 + 2000)


def test_selling_more_than_held_is_rejected(app, funded_wallet):
    holding = _buy(app, funded_wallet.id, 0.1, 40000).value
    balance_before = app.get_wallet(funded_wallet.id).balance

    result = app.sell_crypto(
        wallet_id=funded_wallet.id,
        holding_id=holding.id,
        amount=0.2,
        price_per_unit=40000,
        currency="USD",
    )

    assert result.code == INSUFFICIENT_QUANTITY
    assert app.list_holdings()[0].amount == pytest.approx(0.1)
    assert app.get_wallet(funded_wallet.id).balance == pytest.approx(balance_before)


def test_selling_full_amount_removes_holding(app, funded_wallet):
    first = _buy(app, funded_wallet.id, 0.1, 40000).value
    _buy(app, funded_wallet.id, 0.1, 40000)

    result = app.sell_crypto(
        wallet_id=funded_wallet.id,
        holding_id=first.id,
        amount=0.2,
        price_per_unit=41000,
        currency="USD",
    )

    assert result.ok
    assert result.value is None
    assert app.list_holdings() == []
    assert app.verify_balances() == []


def test_sell_unknown_holding(app, funded_wallet):
    result = app.sell_crypto(
        wallet_id=funded_wallet.id, holding_id=77, amount=1, price_per_unit=1, currency="USD"
    )
    assert result.code == HOLDING_NOT_FOUND


def test_first_buy_uses_quoted_price(app, funded_wallet):
    holding = _buy(app, funded_wallet.id, 0.01, 40000).value
    assert holding.current_price == pytest.approx(60000)


def test_refresh_prices_respects_cache_ttl(app, funded_wallet, price_provider, clock):
    _buy(app, funded_wallet.id, 0.01, 40000)
    price_provider.set_price("BTC", 70000)

    app.refresh_crypto_prices()
    assert app.list_holdings()[0].current_price == pytest.approx(60000)

    clock.advance(301)
    app.refresh_crypto_prices()
    assert app.list_holdings()[0].current_price == pytest.approx(70000)


def test_refresh_keeps_last_price_when_unavailable(app, funded_wallet, price_provider, clock):
    _buy(app, funded_wallet.id, 1, 100, symbol="DOGE")
    clock.advance(600)

    result = app.refresh_crypto_prices()

    assert result.ok
    assert "DOGE" not in result.value
    assert app.list_holdings()[0].current_price == pytest.approx(100)


def test_portfolio_valuation_and_period_totals(app, funded_wallet):
    app.set_display_currency("USD")
    _buy(app, funded_wallet.id, 0.05, 40000)
    holding = app.list_holdings()[0]
    app.sell_crypto(
        wallet_id=funded_wallet.id,
        holding_id=holding.id,
        amount=0.01,
        price_per_unit=50000,
        currency="USD",
    )

    valuations = app.holding_valuations()
    assert valuations[0].cost_basis == pytest.approx(0.04 * 40000)
    assert valuations[0].market_value == pytest.approx(0.04 * 60000)
    assert app.crypto_portfolio_value() == pytest.approx(2400)

    totals = app.crypto_period_totals("currentMonth")
    assert totals["purchases"] == pytest.approx(2000)
    assert totals["sales"] == pytest.approx(500)

    flows = app.crypto_flow_summary("currentMonth")
    assert len(flows) == 1
    assert flows[0].buys == pytest.approx(2000)
    assert flows[0].sells == pytest.approx(500)
