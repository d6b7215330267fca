"""Pytest configuration and shared fixtures for Monifly tests.

Every test gets its own in-memory store, a fixed reference date and an
offline price table so results never depend on the wall clock or network.
"""

from __future__ import annotations

from datetime import date, datetime

import pytest

from monifly.config import TestConfig
from monifly.context import AppContext, create_app_context
from monifly.domain.context import LedgerContext
from monifly.infra.unit_of_work import UnitOfWork
from monifly.services.currency import CurrencyConverter, RateTable
from monifly.services.prices import CachedPriceService, StaticPriceProvider

REFERENCE_DATE = date(2024, 5, 15)

# Units of USD per one unit of the keyed currency
TEST_RATES = {
    "RUB_USD": 0.01,
    "EUR_USD": 1.25,
    "BTC_USD": 60000.0,
}


class FakeClock:
    """Monotonic clock the tests can move forward by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# =============================================================================
# Application Fixtures
# =============================================================================


@pytest.fixture
def config(tmp_path, monkeypatch) -> TestConfig:
    """Test configuration rooted in a temporary data directory."""
    monkeypatch.setenv("MONIFLY_DATA_DIR", str(tmp_path))
    return TestConfig(data_dir=tmp_path)


@pytest.fixture
def price_provider() -> StaticPriceProvider:
    return StaticPriceProvider({"BTC": 60000.0, "ETH": 3000.0}, currency="USD")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def app(config, price_provider, clock) -> AppContext:
    """Fully wired application context with a fixed reference date."""
    return create_app_context(
        config,
        price_provider=price_provider,
        rates=TEST_RATES,
        reference_date=REFERENCE_DATE,
        clock=clock,
    )


@pytest.fixture
def converter() -> CurrencyConverter:
    return CurrencyConverter(RateTable.from_mapping(TEST_RATES, pivot="USD"))


@pytest.fixture
def ledger_ctx(converter, price_provider, clock) -> LedgerContext:
    """Ledger context for calling service functions directly."""
    return LedgerContext(
        converter=converter,
        reference_date=REFERENCE_DATE,
        display_currency="USD",
        prices=CachedPriceService(price_provider, clock=clock),
    )


@pytest.fixture
def uow(app):
    """Open unit of work over the application's store; committed on teardown."""
    with UnitOfWork(app.engine) as unit:
        yield unit


# =============================================================================
# Factories
# =============================================================================


@pytest.fixture
def wallet_factory(app):
    """Factory creating wallets through the public facade."""

    def _create_wallet(
        name: str = "Main",
        currency: str = "USD",
        initial_balance: float = 0.0,
        **kwargs,
    ):
        result = app.add_wallet(
            name=name, currency=currency, initial_balance=initial_balance, **kwargs
        )
        assert result.ok, result.message
        return result.value

    return _create_wallet


@pytest.fixture
def transaction_factory(app):
    """Factory posting transactions through the public facade."""

    def _create_transaction(
        wallet_id: int,
        amount: float,
        type: str = "expense",
        category: str = "groceries",
        occurred_at: datetime | None = None,
        **kwargs,
    ):
        result = app.create_transaction(
            wallet_id=wallet_id,
            type=type,
            amount=amount,
            category=category,
            occurred_at=occurred_at or datetime(2024, 5, 10, 12, 0),
            **kwargs,
        )
        assert result.ok, result.message
        return result.value

    return _create_transaction


# =============================================================================
# Helper Utilities
# =============================================================================


def assert_float_equal(actual: float, expected: float, tolerance: float = 0.01):
    """Assert that two floats are equal within a tolerance.

    Args:
        actual: Actual value
        expected: Expected value
        tolerance: Maximum allowed difference (default 0.01 = 1 cent)

    Raises:
        AssertionError: If values differ by more than tolerance
    """
    assert (
        abs(actual - expected) < tolerance
    ), f"Expected {expected}, got {actual} (diff: {abs(actual - expected)})"
