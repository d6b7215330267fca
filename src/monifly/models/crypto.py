"""Crypto holding model."""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel


class CryptoHolding(SQLModel, table=True):
    """One position per symbol carrying a rolling weighted-average cost."""

    __tablename__: ClassVar[str] = "crypto_holding"

    id: Optional[int] = Field(default=None, primary_key=True)
    symbol: str = Field(index=True, nullable=False, max_length=16, unique=True)
    name: str = Field(default="", max_length=64)
    amount: float = Field(nullable=False, default=0.0)
    purchase_price: float = Field(nullable=False, default=0.0)
    purchase_currency: str = Field(default="USD", max_length=3)
    current_price: float = Field(nullable=False, default=0.0)
    purchase_date: datetime = Field(default_factory=datetime.now, nullable=False)

    @property
    def cost_basis(self) -> float:
        return self.amount * self.purchase_price

    @property
    def market_value(self) -> float:
        return self.amount * self.current_price
