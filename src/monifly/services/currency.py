"""Currency conversion over a sparse, pivot-anchored rate table."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping

from ..logging_config import get_logger

logger = get_logger("services.currency")

# Units of USD per one unit of the keyed currency
DEFAULT_RATES: dict[str, float] = {
    "RUB_USD": 1 / 90,
    "UAH_USD": 1 / 40.5,
    "EUR_USD": 1.08,
    "GBP_USD": 1.27,
    "JPY_USD": 1 / 150,
    "CAD_USD": 0.73,
    "AUD_USD": 0.66,
    "CHF_USD": 1.1,
    "CNY_USD": 0.14,
    "INR_USD": 0.012,
    "PLN_USD": 0.25,
    "TRY_USD": 0.031,
    "KZT_USD": 0.0022,
    "BYN_USD": 0.31,
    "BTC_USD": 68000,
    "ETH_USD": 3800,
    "SOL_USD": 150,
    "ADA_USD": 0.45,
    "USD_USD": 1,
}


def rate_key(from_currency: str, to_currency: str) -> str:
    return f"{from_currency.upper()}_{to_currency.upper()}"


def _split_key(key: str) -> tuple[str, str]:
    source, _, target = key.partition("_")
    return source.upper(), target.upper()


@dataclass
class RateTable:
    """Sparse ``FROM_TO`` rate map anchored on one pivot currency.

    ``precompute`` fills in inverse-to-pivot rates and every two-hop pair
    reachable through the pivot. It only adds missing keys, so running it
    again on its own output yields the same table.
    """

    pivot: str = "USD"
    rates: dict[str, float] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, rates: Mapping[str, float], *, pivot: str = "USD") -> "RateTable":
        table = cls(pivot=pivot.upper(), rates={k.upper(): float(v) for k, v in rates.items()})
        table.precompute()
        return table

    def currencies(self) -> list[str]:
        codes: set[str] = {self.pivot}
        for key in self.rates:
            codes.update(_split_key(key))
        return sorted(codes)

    def precompute(self) -> None:
        pivot = self.pivot
        codes = self.currencies()

        for code in codes:
            if code == pivot:
                continue
            to_pivot = self.rates.get(rate_key(code, pivot))
            if to_pivot and rate_key(pivot, code) not in self.rates:
                self.rates[rate_key(pivot, code)] = 1 / to_pivot
            from_pivot = self.rates.get(rate_key(pivot, code))
            if from_pivot and rate_key(code, pivot) not in self.rates:
                self.rates[rate_key(code, pivot)] = 1 / from_pivot

        for source in codes:
            for target in codes:
                key = rate_key(source, target)
                if source == target:
                    self.rates[key] = 1.0
                    continue
                if key in self.rates:
                    continue
                to_pivot = self.rates.get(rate_key(source, pivot))
                from_pivot = self.rates.get(rate_key(pivot, target))
                if to_pivot is not None and from_pivot is not None:
                    self.rates[key] = to_pivot * from_pivot

    def get(self, key: str) -> float | None:
        return self.rates.get(key)


@dataclass(frozen=True)
class Conversion:
    amount: float
    rate: float
    resolved: bool


class CurrencyConverter:
    """Resolve exchange rates and convert amounts between currency codes.

    Lookups never raise: an unresolvable pair converts 1:1 and is recorded once in
    ``misses`` so callers and tests can observe the lossy fallback.
    """

    def __init__(self, table: RateTable | None = None) -> None:
        self.table = table or RateTable.from_mapping(DEFAULT_RATES)
        self.misses: list[tuple[str, str]] = []

    @property
    def pivot(self) -> str:
        return self.table.pivot

    def update_rates(self, rates: Mapping[str, float], *, pivot: str | None = None) -> None:
        self.table = RateTable.from_mapping(rates, pivot=pivot or self.table.pivot)
        logger.info(
            "Rate table updated",
            extra={"pivot": self.table.pivot, "pairs": len(self.table.rates)},
        )

    def rate(self, from_currency: str, to_currency: str) -> float | None:
        """Return the resolved rate or ``None`` when no path exists."""

        source = from_currency.upper()
        target = to_currency.upper()
        if source == target:
            return 1.0

        direct = self.table.get(rate_key(source, target))
        if direct is not None:
            return direct

        inverse = self.table.get(rate_key(target, source))
        if inverse:
            return 1 / inverse

        pivot = self.table.pivot
        to_pivot = self.table.get(rate_key(source, pivot))
        from_pivot = self.table.get(rate_key(pivot, target))
        if to_pivot is not None and from_pivot is not None:
            return to_pivot * from_pivot
        return None

    def convert_detailed(self, amount: float, from_currency: str, to_currency: str) -> Conversion:
        if from_currency == to_currency:
            return Conversion(amount=amount, rate=1.0, resolved=True)
        rate = self.rate(from_currency, to_currency)
        if rate is None:
            pair = (from_currency.upper(), to_currency.upper())
            if pair not in self.misses:
                self.misses.append(pair)
            logger.warning(
                "No conversion rate found, using 1:1",
                extra={"from_currency": pair[0], "to_currency": pair[1]},
            )
            return Conversion(amount=amount, rate=1.0, resolved=False)
        return Conversion(amount=amount * rate, rate=rate, resolved=True)

    def convert(self, amount: float, from_currency: str, to_currency: str) -> float:
        return self.convert_detailed(amount, from_currency, to_currency).amount

    def convert_many(
        self, items: Iterable[tuple[float, str]], to_currency: str
    ) -> float:
        """Sum ``(amount, currency)`` pairs in *to_currency*."""

        return sum(self.convert(amount, currency, to_currency) for amount, currency in items)

    def clear_misses(self) -> None:
        self.misses.clear()
