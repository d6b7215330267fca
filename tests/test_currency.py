"""Tests for rate-table precomputation and currency conversion."""

from __future__ import annotations

import pytest

from monifly.services.currency import CurrencyConverter, RateTable, rate_key
from tests.conftest import TEST_RATES, assert_float_equal


def test_identity_conversion_is_exact():
    converter = CurrencyConverter(RateTable.from_mapping(TEST_RATES))
    for code in ("USD", "RUB", "EUR", "XYZ"):
        assert converter.convert(123.456, code, code) == 123.456
    assert converter.misses == []


def test_direct_rate_is_used():
    converter = CurrencyConverter(RateTable.from_mapping({"EUR_USD": 1.25}))
    assert converter.convert(100, "EUR", "USD") == pytest.approx(125.0)


def test_inverse_and_two_hop_rates_are_derived():
    table = RateTable.from_mapping(TEST_RATES, pivot="USD")

    assert table.get("USD_RUB") == pytest.approx(100.0)
    assert table.get("USD_EUR") == pytest.approx(0.8)
    # RUB -> USD -> EUR
    assert table.get("RUB_EUR") == pytest.approx(0.01 * 0.8)
    assert table.get("EUR_RUB") == pytest.approx(1.25 * 100)


def test_precompute_is_idempotent():
    table = RateTable.from_mapping(TEST_RATES)
    first = dict(table.rates)
    table.precompute()
    assert table.rates == first


def test_round_trip_with_direct_rate():
    converter = CurrencyConverter(RateTable.from_mapping(TEST_RATES))
    there = converter.convert(250.0, "EUR", "RUB")
    back = converter.convert(there, "RUB", "EUR")
    assert back == pytest.approx(250.0)


def test_rate_resolution_order_without_precompute():
    table = RateTable(pivot="USD", rates={"GBP_USD": 1.3, "USD_JPY": 150.0})
    converter = CurrencyConverter(table)

    assert converter.rate("GBP", "USD") == pytest.approx(1.3)
    assert converter.rate("USD", "GBP") == pytest.approx(1 / 1.3)
    assert converter.rate("GBP", "JPY") == pytest.approx(1.3 * 150.0)


def test_zero_inverse_rate_is_not_divided():
    table = RateTable(pivot="USD", rates={"ABC_USD": 0.0})
    converter = CurrencyConverter(table)
    assert converter.rate("USD", "ABC") is None


def test_missing_rate_falls_back_to_identity_and_is_recorded():
    converter = CurrencyConverter(RateTable.from_mapping(TEST_RATES))

    detail = converter.convert_detailed(50.0, "USD", "XYZ")

    assert detail.amount == 50.0
    assert detail.resolved is False
    assert converter.misses == [("USD", "XYZ")]

    converter.clear_misses()
    assert converter.misses == []


def test_update_rates_replaces_table():
    converter = CurrencyConverter(RateTable.from_mapping(TEST_RATES))
    converter.update_rates({"RUB_USD": 0.02})

    assert converter.convert(100, "RUB", "USD") == pytest.approx(2.0)
    # EUR is no longer known
    assert converter.convert(10, "EUR", "USD") == 10
    assert ("EUR", "USD") in converter.misses


def test_convert_many_sums_in_target_currency():
    converter = CurrencyConverter(RateTable.from_mapping(TEST_RATES))
    total = converter.convert_many([(100.0, "USD"), (1000.0, "RUB"), (8.0, "EUR")], "USD")
    assert_float_equal(total, 100.0 + 10.0 + 10.0)


def test_rate_key_upper_cases():
    assert rate_key("rub", "usd") == "RUB_USD"


def test_repeated_miss_is_recorded_once():
    converter = CurrencyConverter(RateTable.from_mapping(TEST_RATES))

    for _ in range(3):
        converter.convert(1.0, "usd", "XYZ")
    converter.convert(1.0, "XYZ", "USD")

    assert converter.misses == [("USD", "XYZ"), ("XYZ", "USD")]
