"""Recurring budget entries."""

from __future__ import annotations

from datetime import date
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel

ONCE = "once"
MONTHLY = "monthly"
BUDGET_FREQUENCIES = (ONCE, MONTHLY)


class BudgetEntry(SQLModel, table=True):
    """Planned income/expense or category spending cap with a repeat schedule."""

    __tablename__: ClassVar[str] = "budget_entry"

    id: Optional[int] = Field(default=None, primary_key=True)
    description: str = Field(default="", max_length=128)
    category: str = Field(default="other", nullable=False, max_length=64, index=True)
    amount: float = Field(nullable=False)
    currency: str = Field(default="USD", max_length=3)
    type: str = Field(default="expense", nullable=False, max_length=16)
    frequency: str = Field(default=MONTHLY, nullable=False, max_length=16)
    start_date: date = Field(nullable=False)
    day_of_month: Optional[int] = Field(default=None, ge=1, le=31)
    next_due_date: Optional[date] = Field(default=None, index=True)
    spent: float = Field(default=0.0, nullable=False)
    limit: Optional[float] = Field(default=None)
    is_active: bool = Field(default=True, nullable=False)
    wallet_id: Optional[int] = Field(default=None)
