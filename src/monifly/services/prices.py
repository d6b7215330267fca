"""Price lookup collaborator with a per-symbol TTL cache."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Iterable, Mapping, Optional, Protocol

from ..logging_config import get_logger

logger = get_logger("services.prices")


class PriceUnavailable(Exception):
    """Raised by a provider that cannot quote a symbol right now."""

    def __init__(self, symbol: str, reason: str = "unavailable") -> None:
        super().__init__(f"Price for {symbol} {reason}")
        self.symbol = symbol


class PriceProvider(Protocol):
    """External quote source; prices are per unit in the provider's quote currency."""

    def get_price(self, symbol: str) -> Optional[float]:  # pragma: no cover - interface
        ...

    def get_prices(self, symbols: Iterable[str]) -> dict[str, float]:  # pragma: no cover - interface
        ...


class StaticPriceProvider:
    """Fixed price table used offline and in tests."""

    def __init__(self, prices: Optional[Mapping[str, float]] = None, *, currency: str = "USD"):
        self.prices = {k.upper(): float(v) for k, v in (prices or {}).items()}
        self.currency = currency
        self.calls = 0

    def set_price(self, symbol: str, price: float) -> None:
        self.prices[symbol.upper()] = float(price)

    def get_price(self, symbol: str) -> Optional[float]:
        self.calls += 1
        return self.prices.get(symbol.upper())

    def get_prices(self, symbols: Iterable[str]) -> dict[str, float]:
        self.calls += 1
        result: dict[str, float] = {}
        for symbol in symbols:
            price = self.prices.get(symbol.upper())
            if price is not None:
                result[symbol.upper()] = price
        return result


@dataclass
class _CacheEntry:
    price: float
    fetched_at: float


class CachedPriceService:
    """Wrap a provider with a short-lived per-symbol cache and graceful fallback."""

    def __init__(
        self,
        provider: PriceProvider,
        *,
        ttl_seconds: float = 300,
        clock: Callable[[], float] = time.monotonic,
        currency: str = "USD",
    ) -> None:
        self.provider = provider
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self.currency = getattr(provider, "currency", currency)
        self._cache: dict[str, _CacheEntry] = {}

    def _cached(self, symbol: str) -> Optional[float]:
        entry = self._cache.get(symbol)
        if entry is None:
            return None
        if self.clock() - entry.fetched_at >= self.ttl_seconds:
            return None
        return entry.price

    def get_price(self, symbol: str, fallback: Optional[float] = None) -> Optional[float]:
        """Return a fresh-enough quote or *fallback* when the provider has none."""

        key = symbol.upper()
        cached = self._cached(key)
        if cached is not None:
            return cached
        try:
            price = self.provider.get_price(key)
        except PriceUnavailable:
            price = None
        if price is None or price <= 0:
            logger.warning(
                "Price lookup failed, using last known price",
                extra={"symbol": key, "fallback": fallback},
            )
            return fallback
        self._cache[key] = _CacheEntry(price=float(price), fetched_at=self.clock())
        return float(price)

    def get_prices(
        self, symbols: Iterable[str], fallbacks: Optional[Mapping[str, float]] = None
    ) -> dict[str, float]:
        """Batch lookup; only symbols missing from the cache reach the provider."""

        fallbacks = {k.upper(): v for k, v in (fallbacks or {}).items()}
        wanted = [s.upper() for s in symbols]
        result: dict[str, float] = {}
        missing: list[str] = []
        for key in wanted:
            cached = self._cached(key)
            if cached is not None:
                result[key] = cached
            else:
                missing.append(key)

        if missing:
            try:
                fetched = self.provider.get_prices(missing)
            except PriceUnavailable:
                fetched = {}
            now = self.clock()
            for key in missing:
                price = fetched.get(key)
                if price is not None and price > 0:
                    self._cache[key] = _CacheEntry(price=float(price), fetched_at=now)
                    result[key] = float(price)
                elif key in fallbacks:
                    result[key] = fallbacks[key]
        return result

    def invalidate(self, symbol: Optional[str] = None) -> None:
        if symbol is None:
            self._cache.clear()
        else:
            self._cache.pop(symbol.upper(), None)
