"""Explicit calculation context passed into every ledger computation."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:  # pragma: no cover
    from ..services.currency import CurrencyConverter
    from ..services.prices import CachedPriceService


@dataclass(frozen=True)
class LedgerContext:
    """Rate table, reference date and display currency for one operation."""

    converter: "CurrencyConverter"
    reference_date: date
    display_currency: str
    prices: Optional["CachedPriceService"] = None

    def convert(self, amount: float, from_currency: str, to_currency: str) -> float:
        return self.converter.convert(amount, from_currency, to_currency)

    def to_display(self, amount: float, currency: str) -> float:
        return self.converter.convert(amount, currency, self.display_currency)

    def now(self) -> datetime:
        """Timestamp for postings created by the operation, anchored on the reference date."""

        current = datetime.now()
        if current.date() == self.reference_date:
            return current.replace(microsecond=0)
        return datetime.combine(self.reference_date, datetime.min.time())

    def with_display_currency(self, currency: str) -> "LedgerContext":
        return replace(self, display_currency=currency.upper())
