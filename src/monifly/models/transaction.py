"""SQLModel definitions for ledger transactions."""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar, Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

INCOME = "income"
EXPENSE = "expense"
TRANSFER = "transfer"
TRANSACTION_TYPES = (INCOME, EXPENSE, TRANSFER)

TRANSFER_OUT = "out"
TRANSFER_IN = "in"


class Transaction(SQLModel, table=True):
    """A single ledger transaction, always stored in its wallet's currency."""

    __tablename__: ClassVar[str] = "transaction"

    id: Optional[int] = Field(default=None, primary_key=True)
    wallet_id: int = Field(foreign_key="wallet.id", nullable=False, index=True)
    type: str = Field(default=EXPENSE, nullable=False, max_length=16)
    category: str = Field(default="other", nullable=False, max_length=64, index=True)
    amount: float = Field(nullable=False, description="Unsigned amount in wallet currency")
    currency: str = Field(default="USD", max_length=3, description="ISO-4217 currency code")
    occurred_at: datetime = Field(nullable=False, index=True)
    description: str = Field(default="", max_length=255)
    tags: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    # Transfer legs carry a direction and point at their peer leg
    direction: Optional[str] = Field(default=None, max_length=8)
    transfer_peer_id: Optional[int] = Field(default=None)

    # Postings generated by the debt manager reference their debt
    debt_id: Optional[int] = Field(default=None, index=True)
