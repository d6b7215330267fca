"""Investment cases and their assets."""

from __future__ import annotations

from datetime import date
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel


class InvestmentCase(SQLModel, table=True):
    """A named multi-asset portfolio; value fields are derived from its assets."""

    __tablename__: ClassVar[str] = "investment_case"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False, max_length=128)
    description: Optional[str] = Field(default=None, max_length=255)
    currency: str = Field(default="USD", max_length=3)
    strategy: Optional[str] = Field(default=None, max_length=64)
    risk_level: Optional[str] = Field(default=None, max_length=16)
    start_date: date = Field(default_factory=date.today, nullable=False)

    # Derived from the asset list; recomputed on every asset mutation
    total_investment: float = Field(default=0.0, nullable=False)
    current_value: float = Field(default=0.0, nullable=False)
    profit: float = Field(default=0.0, nullable=False)
    return_percentage: float = Field(default=0.0, nullable=False)


class InvestmentAsset(SQLModel, table=True):
    """Single position inside an investment case."""

    __tablename__: ClassVar[str] = "investment_asset"

    id: Optional[int] = Field(default=None, primary_key=True)
    case_id: int = Field(foreign_key="investment_case.id", nullable=False, index=True)
    name: str = Field(nullable=False, max_length=128)
    type: str = Field(default="other", max_length=32)
    region: Optional[str] = Field(default=None, max_length=32)
    quantity: float = Field(nullable=False, default=0.0)
    purchase_price: float = Field(nullable=False, default=0.0)
    current_price: float = Field(nullable=False, default=0.0)
    currency: str = Field(default="USD", max_length=3)
    purchase_date: date = Field(default_factory=date.today, nullable=False)
    notes: Optional[str] = Field(default=None, max_length=255)

    @property
    def market_value(self) -> float:
        return self.quantity * self.current_price

    @property
    def invested(self) -> float:
        return self.quantity * self.purchase_price
